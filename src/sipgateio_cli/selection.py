"""
Fuzzy catalog selection and config-backed field resolution.

``CatalogSelector`` is a type-to-filter picker: each keystroke narrows
the entries to those whose key or description contains the query
(case-insensitive), arrow keys move the highlight, Enter picks.
``resolve_field`` accepts a configured value when it is valid and falls
back to the picker otherwise.
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable, Mapping, Optional, Sequence

import typer
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .columns import calculate_tabs
from .errors import ValidationError
from .prompts import PromptTheme, get_key

logger = logging.getLogger(__name__)

DESCRIPTION_LIMIT = 101
ELLIPSIS = "..."
PAGE_SIZE = 10
PARENT_DIR_PATTERN = re.compile(r"(^|/)\.\.($|/)")


@dataclass(frozen=True)
class CatalogEntry:
    key: str
    description: str = ""


@dataclass(frozen=True)
class Selection:
    key: str
    found: bool = True


def filter_entries(entries: Sequence[CatalogEntry], query: str) -> list[CatalogEntry]:
    needle = query.lower()
    return [
        entry for entry in entries
        if needle in entry.key.lower() or needle in entry.description.lower()
    ]


def truncate_description(description: str, limit: int = DESCRIPTION_LIMIT) -> str:
    if description in ("", "null"):
        return ""
    if len(description) > limit:
        return description[:limit] + ELLIPSIS
    return description


def render_entry(entry: CatalogEntry, tab_offset: int = 1) -> str:
    """Render ``key<tabs> - description`` for display in the picker."""
    description = truncate_description(entry.description)
    padding = "\t" * tab_offset
    return f"{entry.key}{padding} - {description}"


def strip_padding(rendered: str) -> str:
    """Recover the bare key from a rendered entry."""
    return rendered.split("\t", 1)[0].strip()


def has_parent_traversal(value: str) -> bool:
    return PARENT_DIR_PATTERN.search(value) is not None


class SelectorState:
    """Keyboard-driven state of one picker session, independent of the terminal."""

    def __init__(
        self,
        entries: Sequence[CatalogEntry],
        allow_new: bool = False,
        tab_offsets: Optional[Sequence[int]] = None,
    ):
        self.entries = list(entries)
        self.allow_new = allow_new
        self.query = ""
        self.index = 0
        self.error = ""
        if tab_offsets is None:
            tab_offsets = calculate_tabs([entry.key for entry in self.entries])
        self.tab_offsets = dict(zip((entry.key for entry in self.entries), tab_offsets))

    @property
    def matches(self) -> list[CatalogEntry]:
        return filter_entries(self.entries, self.query)

    @property
    def highlighted(self) -> Optional[CatalogEntry]:
        matches = self.matches
        if not matches:
            return None
        return matches[min(self.index, len(matches) - 1)]

    def rendered(self, entry: CatalogEntry) -> str:
        return render_entry(entry, self.tab_offsets.get(entry.key, 1))

    def _set_query(self, query: str):
        self.query = query
        self.index = 0
        self.error = ""

    def handle(self, key: str) -> Optional[Selection]:
        """Apply one key; return a Selection once the user submits."""
        matches = self.matches
        if key == "up":
            if matches:
                self.index = (self.index - 1) % len(matches)
        elif key == "down":
            if matches:
                self.index = (self.index + 1) % len(matches)
        elif key == "backspace":
            self._set_query(self.query[:-1])
        elif key == "tab":
            if self.highlighted is not None:
                self._set_query(self.highlighted.key)
        elif key == "enter":
            return self.submit()
        elif len(key) == 1 and key.isprintable():
            self._set_query(self.query + key)
        return None

    def submit(self) -> Optional[Selection]:
        if self.allow_new:
            answer = self.query.strip()
            if not answer:
                self.error = "Project name cannot be empty"
                return None
            return Selection(answer, found=any(entry.key == answer for entry in self.entries))

        highlighted = self.highlighted
        if highlighted is None:
            self.error = "No matching entry"
            return None
        return Selection(strip_padding(self.rendered(highlighted)), found=True)


class CatalogSelector:
    """Interactive fuzzy picker rendered with Rich Live."""

    def __init__(self, theme: PromptTheme, read_key: Callable[[], str] = get_key):
        self.theme = theme
        self.read_key = read_key

    def _panel(self, state: SelectorState, message: str) -> Panel:
        table = Table.grid(padding=(0, 2))
        table.add_column(style=self.theme.accent, justify="left", width=3)
        table.add_column(justify="left")

        query_line = Text.assemble(("> ", self.theme.accent), state.query)
        table.add_row("", query_line)

        matches = state.matches
        start = max(0, min(state.index - PAGE_SIZE + 1, len(matches) - PAGE_SIZE))
        for offset, entry in enumerate(matches[start:start + PAGE_SIZE]):
            position = start + offset
            key, _, rest = state.rendered(entry).partition(" - ")
            line = Text(key, style=self.theme.accent)
            if rest:
                line.append(f" - {rest}", style=self.theme.muted)
            pointer = self.theme.pointer if position == state.index else " "
            table.add_row(pointer, line)
        if not matches:
            table.add_row("", Text("(no matches)", style=self.theme.muted))

        if state.error:
            table.add_row("", Text(state.error, style=self.theme.error))
        table.add_row("", "")
        hint = "Type to filter, ↑/↓ to navigate, Enter to select, Esc to cancel"
        if state.allow_new:
            hint = "Type a name, Tab to complete, ↑/↓ to navigate, Enter to confirm, Esc to cancel"
        table.add_row("", Text(hint, style="dim"))

        return Panel(
            table,
            title=f"[bold]{message}[/bold]",
            border_style=self.theme.accent,
            padding=(1, 2),
        )

    def _cancel(self):
        self.theme.console.print(Text("\nSelection cancelled", style=self.theme.warning))
        raise typer.Exit(1)

    def select(
        self,
        entries: Sequence[CatalogEntry],
        message: str,
        allow_new: bool = False,
        tab_offsets: Optional[Sequence[int]] = None,
    ) -> Selection:
        state = SelectorState(entries, allow_new=allow_new, tab_offsets=tab_offsets)
        selection = None

        self.theme.console.print()
        with Live(self._panel(state, message), console=self.theme.console, transient=True, auto_refresh=False) as live:
            while selection is None:
                try:
                    key = self.read_key()
                except KeyboardInterrupt:
                    self._cancel()
                if key == "escape":
                    self._cancel()
                selection = state.handle(key)
                live.update(self._panel(state, message), refresh=True)

        logger.debug("Selected %s (found=%s)", selection.key, selection.found)
        return selection

    def choose_value(self, values: Sequence[str], message: str) -> str:
        entries = [CatalogEntry(value) for value in values if value]
        return self.select(entries, message).key


def validate_field(
    config: Mapping[str, str],
    key: str,
    valid_values: Sequence[str],
    path_like: bool = False,
) -> Optional[str]:
    """Return the configured value for ``key`` if it is acceptable.

    Returns None when nothing is configured and raises ValidationError
    when the value is not in ``valid_values`` or, for path-like fields,
    climbs out of its directory.
    """
    configured = config.get(key)
    candidate = configured.strip() if configured is not None else ""
    if not candidate:
        return None
    if candidate not in valid_values or (path_like and has_parent_traversal(candidate)):
        raise ValidationError(key, candidate)
    return candidate


def resolve_field(
    config: Mapping[str, str],
    key: str,
    valid_values: Sequence[str],
    choose: Callable[[Sequence[str]], str],
    theme: PromptTheme,
    path_like: bool = False,
) -> str:
    """Use ``config[key]`` when it is valid, otherwise let the user choose.

    An invalid value is reported as a warning and never aborts the run.
    """
    try:
        candidate = validate_field(config, key, valid_values, path_like=path_like)
    except ValidationError as e:
        logger.debug("Falling back to interactive selection: %s", e)
        theme.warn(str(e))
        return choose(valid_values)

    if candidate is None:
        return choose(valid_values)
    theme.info(f"Using {key}={candidate} from config file.")
    return candidate
