"""Text-region classification: fenced and inline code detection.

Link detection and backlink-section lookup both skip code. Fences are
tracked by a simple toggle: every line starting with three backticks or
three tildes flips the state, regardless of which marker opened the block.
"""

from __future__ import annotations

from collections.abc import Sequence

FENCE_MARKERS = ("```", "~~~")


def is_fence_delimiter(line: str) -> bool:
    """True if *line* opens or closes a fenced code block."""
    return line.startswith(FENCE_MARKERS)


def is_in_code_fence(lines: Sequence[str], line_number: int) -> bool:
    """Return the fence state after processing lines ``1..line_number``.

    The opening fence line itself counts as inside; the closing fence
    line counts as outside again.
    """
    inside = False
    for line in lines[: max(line_number, 0)]:
        if is_fence_delimiter(line):
            inside = not inside
    return inside


def is_in_inline_code(line: str, column: int) -> bool:
    """True if an odd number of backticks precede *column* (0-based).

    Escaped backticks are counted like any other.
    """
    return line[: max(column, 0)].count("`") % 2 == 1
