"""
Template parsing for ``.env.example`` style files.

Every assignment line becomes a :class:`Question`; the comment lines
directly above it become its help text.

    # Your sipgate token
    TOKEN_ID="token-abc"

yields ``Question(name="TOKEN_ID", default_value="token-abc", help_text="INFO: Your sipgate token \\n")``.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from functools import reduce
from typing import NamedTuple, Optional

from .errors import TemplateParseError

logger = logging.getLogger(__name__)

QUOTE_CHARS = {"'", '"'}


class LineKind(Enum):
    COMMENT = "comment"
    ASSIGNMENT = "assignment"
    BLANK = "blank"
    MALFORMED = "malformed"


@dataclass(frozen=True)
class Question:
    name: str
    prompt_text: str
    default_value: Optional[str]
    help_text: str = ""


class _ParseState(NamedTuple):
    help_text: str
    questions: tuple


def classify_line(line: str) -> LineKind:
    stripped = line.strip()
    if not stripped:
        return LineKind.BLANK
    if stripped.startswith("#"):
        return LineKind.COMMENT
    if "=" in stripped:
        return LineKind.ASSIGNMENT
    return LineKind.MALFORMED


def extract_value(raw: str) -> Optional[str]:
    """Return the first run of characters without quote marks, or None.

    ``raw`` is the text after ``=``. ``"hello world"`` gives
    ``hello world``; an empty or quotes-only value gives None.
    """
    text = raw.strip()
    start = None
    for index, char in enumerate(text):
        if char in QUOTE_CHARS:
            if start is not None:
                return text[start:index]
        elif start is None:
            start = index
    if start is None:
        return None
    return text[start:]


def split_assignment(line: str) -> tuple[str, Optional[str]]:
    """Split ``NAME=value`` at the first ``=`` into name and extracted value."""
    name, _, raw_value = line.partition("=")
    return name.strip(), extract_value(raw_value)


def _comment_body(line: str) -> str:
    stripped = line.strip()
    return stripped[stripped.index("#") + 1:].strip()


def _step(state: _ParseState, numbered_line: tuple[int, str]) -> _ParseState:
    line_number, line = numbered_line
    kind = classify_line(line)

    if kind is LineKind.BLANK:
        return state
    if kind is LineKind.COMMENT:
        return _ParseState(state.help_text + f"INFO: {_comment_body(line)} \n", state.questions)
    if kind is LineKind.MALFORMED:
        raise TemplateParseError(line_number, line)

    name, default_value = split_assignment(line)
    if not name:
        raise TemplateParseError(line_number, line)
    question = Question(
        name=name,
        prompt_text=f"{name} =",
        default_value=default_value,
        help_text=state.help_text,
    )
    return _ParseState("", state.questions + (question,))


def parse_template(text: str) -> list[Question]:
    """Turn template text into questions in template order."""
    final = reduce(_step, enumerate(text.splitlines(), start=1), _ParseState("", ()))
    logger.debug("Parsed %d question(s) from template", len(final.questions))
    return list(final.questions)
