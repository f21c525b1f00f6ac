"""
Prompting layer shared by the wizard and the selectors.

Styling and the console live on a :class:`PromptTheme` that callers
create once and pass down, so nothing here touches global state.
"""

from dataclasses import dataclass, field
from typing import Optional, Protocol

import readchar
from rich.console import Console
from rich.prompt import Confirm, Prompt
from rich.text import Text


@dataclass
class PromptTheme:
    console: Console = field(default_factory=Console)
    accent: str = "cyan"
    muted: str = "bright_black"
    warning: str = "yellow"
    error: str = "red"
    question_marker: str = "⚙"
    pointer: str = "▶"

    def warn(self, message: str):
        self.console.print(Text(f"[WARN] {message}", style=self.warning))

    def fail(self, message: str):
        self.console.print(Text(message, style=self.error))

    def info(self, message: str):
        self.console.print(message, markup=False, highlight=False)


class Prompter(Protocol):
    theme: PromptTheme

    def ask(self, message: str, default: Optional[str] = None, help_text: str = "") -> str:
        ...

    def confirm(self, message: str, default: bool = True) -> bool:
        ...


class ConsolePrompter:
    """Line-based prompts using rich's Prompt and Confirm."""

    def __init__(self, theme: PromptTheme):
        self.theme = theme

    def ask(self, message: str, default: Optional[str] = None, help_text: str = "") -> str:
        if help_text:
            self.theme.console.print(Text(help_text.rstrip("\n"), style=self.theme.muted))
        label = Text.assemble((self.theme.question_marker, self.theme.accent), " ", message)
        if default is None:
            return Prompt.ask(label, console=self.theme.console, default="", show_default=False)
        return Prompt.ask(label, console=self.theme.console, default=default)

    def confirm(self, message: str, default: bool = True) -> bool:
        return Confirm.ask(message, console=self.theme.console, default=default)


def get_key() -> str:
    """Get a single keypress in a cross-platform way using readchar."""
    key = readchar.readkey()

    if key == readchar.key.UP:
        return 'up'
    if key == readchar.key.DOWN:
        return 'down'
    if key in (readchar.key.ENTER, readchar.key.CR, readchar.key.LF):
        return 'enter'
    if key == readchar.key.ESC:
        return 'escape'
    if key == readchar.key.TAB:
        return 'tab'
    if key == readchar.key.BACKSPACE:
        return 'backspace'
    if key == readchar.key.CTRL_C:
        raise KeyboardInterrupt

    return key
