# tests/conftest.py
from __future__ import annotations

import io
from typing import Optional

import pytest
from rich.console import Console

from sipgateio_cli.prompts import PromptTheme


class ScriptedPrompter:
    """Prompter that replays canned answers and records every prompt."""

    def __init__(self, theme: PromptTheme, answers=(), confirms=()):
        self.theme = theme
        self.answers = list(answers)
        self.confirms = list(confirms)
        self.asked: list[str] = []
        self.confirmed: list[str] = []

    def ask(self, message: str, default: Optional[str] = None, help_text: str = "") -> str:
        self.asked.append(message)
        return self.answers.pop(0)

    def confirm(self, message: str, default: bool = True) -> bool:
        self.confirmed.append(message)
        return self.confirms.pop(0)


def keys(*sequence: str):
    """Build a read_key callable that types the given keys in order."""
    pending = list(sequence)

    def read_key() -> str:
        return pending.pop(0)

    return read_key


@pytest.fixture
def theme() -> PromptTheme:
    return PromptTheme(console=Console(file=io.StringIO(), width=200, force_terminal=False, color_system=None))


def output_of(theme: PromptTheme) -> str:
    return theme.console.file.getvalue()


@pytest.fixture
def make_prompter(theme):
    def _make(answers=(), confirms=()):
        return ScriptedPrompter(theme, answers, confirms)

    return _make
