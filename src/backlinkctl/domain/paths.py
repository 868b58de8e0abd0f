"""Pure path rules: link target normalization and relative backlink paths.

Nothing here touches the filesystem. Existence checks live in
:mod:`backlinkctl.infrastructure.resolver`.
"""

from __future__ import annotations

import os
from pathlib import PurePath

NOTE_EXTENSION = ".md"


def ensure_extension(target: str, extension: str = NOTE_EXTENSION) -> str:
    """Append *extension* unless *target* already ends with it."""
    if target.endswith(extension):
        return target
    return target + extension


def strip_extension(target: str, extension: str = NOTE_EXTENSION) -> str:
    """Drop a trailing *extension* (wiki links are written without it)."""
    if target.endswith(extension):
        return target[: -len(extension)]
    return target


def normalize_target(raw: str | None, extension: str = NOTE_EXTENSION) -> str | None:
    """Turn a raw link target into a candidate file path string.

    Strips ``#fragment`` and ``?query`` suffixes, trims whitespace and
    applies the note extension. Returns None for empty targets.

    Examples:
        >>> normalize_target("note#intro?x=1")
        'note.md'
        >>> normalize_target("  ../b.md ")
        '../b.md'
        >>> normalize_target("#only-anchor") is None
        True
    """
    if not raw:
        return None
    target = raw.split("#", 1)[0]
    target = target.split("?", 1)[0]
    target = target.strip()
    if not target:
        return None
    return ensure_extension(target, extension)


def join_and_normalize(source_file: str | os.PathLike[str], target: str) -> str:
    """Join *target* to the directory of *source_file* and collapse ``.``/``..``."""
    base = os.path.dirname(os.fspath(source_file))
    return os.path.normpath(os.path.join(base, target))


def relative_link_path(
    receiving_file: str | os.PathLike[str],
    originating_file: str | os.PathLike[str],
) -> str:
    """Relative path a link inside *receiving_file* uses to reach *originating_file*.

    Longest common prefix of the two directories, one ``..`` per remaining
    receiving directory, then the descending directories and the file name.
    Files in the same directory get a bare file name (no ``./``).

    Examples:
        >>> relative_link_path("/w/notes/b.md", "/w/notes/a.md")
        'a.md'
        >>> relative_link_path("/w/notes/b.md", "/w/daily/a.md")
        '../daily/a.md'
    """
    receiving = PurePath(receiving_file)
    originating = PurePath(originating_file)
    from_parts = receiving.parent.parts
    to_parts = originating.parent.parts

    common = 0
    for left, right in zip(from_parts, to_parts, strict=False):
        if left != right:
            break
        common += 1

    segments = [".."] * (len(from_parts) - common)
    segments.extend(to_parts[common:])
    segments.append(originating.name)
    return "/".join(segments)


def is_under_root(path: str | os.PathLike[str], root: str | os.PathLike[str]) -> bool:
    """Plain string-prefix containment check against the workspace root.

    Not an ancestor-directory test: a sibling such as ``/notes-old`` passes
    for root ``/notes``, and symlinks are not followed.
    """
    return os.fspath(path).startswith(os.fspath(root))


def note_stem(path: str | os.PathLike[str]) -> str:
    """File name without its last extension, used as backlink display text."""
    return PurePath(path).stem
