"""Link detection: markdown ``[text](target)`` and wiki ``[[target|text]]``.

Pure functions, no infrastructure dependencies. Consumed by the
synchronizer when a note changes and by the graph engine when a
workspace is scanned.
"""

from __future__ import annotations

import re
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from enum import StrEnum

from backlinkctl.domain.regions import is_fence_delimiter, is_in_inline_code

# [display](target): display excludes "]", target excludes ")".
MARKDOWN_LINK_PATTERN = re.compile(r"\[([^\]]+)\]\(([^)]+)\)")

# [[target]] or [[target|display]]: target excludes "]" and "|".
WIKI_LINK_PATTERN = re.compile(r"\[\[([^\]|]+)(?:\|([^\]]*))?\]\]")


class LinkDialect(StrEnum):
    """Supported link syntaxes."""

    MARKDOWN = "markdown"
    WIKI = "wiki"


@dataclass(frozen=True)
class Link:
    """A link detected on one line of a note.

    ``start``/``end`` cover the whole delimiter span, 0-based with an
    exclusive end. ``line`` is 1-based.
    """

    dialect: LinkDialect
    display: str
    target: str  # raw, as written (may carry #fragment, ?query, no extension)
    line: int
    start: int
    end: int


def _scan(
    pattern: re.Pattern[str],
    text: str,
    line_number: int,
    dialect: LinkDialect,
) -> Iterator[Link]:
    # finditer advances past every match, accepted or not.
    for match in pattern.finditer(text):
        if is_in_inline_code(text, match.start()):
            continue
        if dialect is LinkDialect.MARKDOWN:
            display, target = match.group(1), match.group(2)
        else:
            target = match.group(1)
            display = match.group(2) if match.group(2) is not None else target
        yield Link(
            dialect=dialect,
            display=display,
            target=target,
            line=line_number,
            start=match.start(),
            end=match.end(),
        )


def find_links_in_line(text: str, line_number: int) -> list[Link]:
    """Extract links from a single line, markdown links first.

    Does not apply fence tracking; callers decide whether the line is code.
    """
    links = list(_scan(MARKDOWN_LINK_PATTERN, text, line_number, LinkDialect.MARKDOWN))
    links.extend(_scan(WIKI_LINK_PATTERN, text, line_number, LinkDialect.WIKI))
    return links


def find_links(lines: Sequence[str]) -> list[Link]:
    """Extract every link from *lines*, skipping fenced code blocks.

    Matches starting inside inline code are dropped. Malformed link
    syntax simply fails to match. Returns an empty list for no links.
    """
    results: list[Link] = []
    in_fence = False
    for line_number, text in enumerate(lines, start=1):
        if is_fence_delimiter(text):
            in_fence = not in_fence
        if in_fence:
            continue
        results.extend(find_links_in_line(text, line_number))
    return results


def extract_link_targets(text: str) -> list[str]:
    """Return the raw targets of all links in *text*, both dialects.

    No code-region exclusion; intended for cheap change detection.
    """
    targets = [m.group(2) for m in MARKDOWN_LINK_PATTERN.finditer(text)]
    targets.extend(m.group(1) for m in WIKI_LINK_PATTERN.finditer(text))
    return targets
