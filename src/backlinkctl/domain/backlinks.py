"""Backlink section rules: formatting, detection, and insertion.

Pure functions over line lists. The synchronizer in
:mod:`backlinkctl.infrastructure.synchronizer` wraps these with file I/O.
"""

from __future__ import annotations

import os
import re
from collections.abc import Sequence
from dataclasses import dataclass

from backlinkctl.domain.links import LinkDialect
from backlinkctl.domain.paths import (
    NOTE_EXTENSION,
    note_stem,
    relative_link_path,
    strip_extension,
)
from backlinkctl.domain.regions import is_fence_delimiter

DEFAULT_HEADER = "## Backlinks"


@dataclass(frozen=True)
class BacklinkEntry:
    """One list item inside a note's backlinks section."""

    header: str
    line: str  # formatted list item, e.g. "- [a](a.md)"
    reference: str  # relative path back to the linking note


def format_backlink(dialect: LinkDialect | str, reference: str, display: str) -> str:
    """Render a backlink list item in *dialect*.

    Examples:
        >>> format_backlink("markdown", "../a.md", "a")
        '- [a](../a.md)'
        >>> format_backlink("wiki", "../a.md", "a")
        '- [[../a]]'
    """
    if LinkDialect(dialect) is LinkDialect.WIKI:
        return f"- [[{strip_extension(reference)}]]"
    return f"- [{display}]({reference})"


def build_entry(
    receiving_file: str | os.PathLike[str],
    originating_file: str | os.PathLike[str],
    *,
    dialect: LinkDialect | str = LinkDialect.MARKDOWN,
    header: str = DEFAULT_HEADER,
) -> BacklinkEntry:
    """Build the entry *receiving_file* should carry for *originating_file*."""
    reference = relative_link_path(receiving_file, originating_file)
    line = format_backlink(dialect, reference, note_stem(originating_file))
    return BacklinkEntry(header=header, line=line, reference=reference)


def contains_backlink(
    lines: Sequence[str],
    reference: str,
    extension: str = NOTE_EXTENSION,
) -> bool:
    """True if any line holds a link, in either dialect, whose target contains *reference*.

    Containment, not equality: decorated targets (``../x/a.md#top``) match,
    and so can unrelated files whose path contains the same substring.
    Every line is inspected, including fenced code.
    """
    markdown = re.compile(r"\[.*?\]\(.*?" + re.escape(reference) + r".*?\)")
    wiki = re.compile(r"\[\[.*?" + re.escape(strip_extension(reference, extension)) + r".*?\]\]")
    return any(markdown.search(line) or wiki.search(line) for line in lines)


def find_section(lines: Sequence[str], header: str) -> int | None:
    """Index (0-based) of the first exact *header* line outside fenced code."""
    in_fence = False
    for index, line in enumerate(lines):
        if is_fence_delimiter(line):
            in_fence = not in_fence
        if not in_fence and line == header:
            return index
    return None


def insert_backlink(lines: Sequence[str], header: str, entry_line: str) -> list[str]:
    """Return a copy of *lines* with *entry_line* placed right under *header*.

    A missing section is appended at the end of the note: a blank separator
    (only when the last line has text), the header, and a trailing blank.
    """
    result = list(lines)
    section = find_section(result, header)
    if section is None:
        if result and result[-1].strip():
            result.append("")
        result.append(header)
        result.append("")
        section = len(result) - 2
    result.insert(section + 1, entry_line)
    return result
