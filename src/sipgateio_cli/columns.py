"""Tab padding so that catalog names line up in one column."""

from typing import Sequence

TAB_STOP_WIDTH = 8


def calculate_tabs(names: Sequence[str], tab_width: int = TAB_STOP_WIDTH) -> list[int]:
    """Return the number of tabs to append to each name.

    Every name padded with its tab count reaches the column of the longest
    name, using the fewest tab stops: ``(max_len - len) // tab_width + 1``.
    """
    if not names:
        return []
    max_len = max(len(name) for name in names)
    return [(max_len - len(name)) // tab_width + 1 for name in names]
