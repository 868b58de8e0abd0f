"""Filesystem operations for note content.

INVARIANT: Files are truth. There is no index; every query re-reads the
notes it needs. Writes replace a whole file atomically (temp file in the
same directory, then rename) so a failed write never leaves a partial note.

Pure text rules live in :mod:`backlinkctl.domain`. This module handles the
actual file I/O and note discovery.
"""

from __future__ import annotations

import os
import tempfile
from collections.abc import Iterable, Sequence
from pathlib import Path

from backlinkctl.errors import FileAccessError

# Directories to skip when discovering notes.
DEFAULT_SKIP_DIRS = frozenset({".git", ".obsidian", ".trash", "node_modules"})


# ---------------------------------------------------------------------------
# Probes
# ---------------------------------------------------------------------------


def file_exists(path: Path) -> bool:
    """True if *path* is an existing regular file."""
    return path.is_file()


def is_directory(path: Path) -> bool:
    """True if *path* is an existing directory."""
    return path.is_dir()


def absolute_path(path: Path | str) -> Path:
    """Absolute, lexically normalized form of *path* (symlinks untouched)."""
    return Path(os.path.normpath(Path(path).absolute()))


def is_note(path: Path, extension: str = ".md") -> bool:
    """True if *path* carries the note extension."""
    return path.name.endswith(extension)


# ---------------------------------------------------------------------------
# File I/O
# ---------------------------------------------------------------------------


def read_lines(path: Path) -> list[str]:
    """Read a note as a list of lines without line terminators.

    Lines end at LF only. Form feeds and other Unicode line breaks stay
    part of their line, a CR before the LF is dropped, and a trailing
    newline does not produce an extra empty line.

    Raises:
        FileAccessError: The file is missing or unreadable.
    """
    if not file_exists(path):
        raise FileAccessError(path, "Cannot read file")
    try:
        with path.open(encoding="utf-8", newline="") as handle:
            text = handle.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise FileAccessError(path, "Cannot read file", cause=exc) from exc

    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line.removesuffix("\r") for line in lines]


def write_lines(path: Path, lines: Sequence[str]) -> None:
    """Replace *path* with *lines*, each terminated by a newline.

    The parent directory must already exist; nothing is created.

    Raises:
        FileAccessError: The directory is missing or the write failed.
    """
    directory = path.parent
    if not is_directory(directory):
        raise FileAccessError(directory, "Directory does not exist")

    content = "".join(f"{line}\n" for line in lines)
    try:
        fd, tmp_name = tempfile.mkstemp(dir=directory, prefix=f".{path.name}.", suffix=".tmp")
    except OSError as exc:
        raise FileAccessError(path, "Failed to write file", cause=exc) from exc
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
            handle.write(content)
        if path.exists():
            os.chmod(tmp_path, path.stat().st_mode & 0o7777)
        os.replace(tmp_path, path)
    except OSError as exc:
        tmp_path.unlink(missing_ok=True)
        raise FileAccessError(path, "Failed to write file", cause=exc) from exc


# ---------------------------------------------------------------------------
# Discovery
# ---------------------------------------------------------------------------


def find_note_files(
    root: Path,
    *,
    extension: str = ".md",
    skip_dirs: Iterable[str] = DEFAULT_SKIP_DIRS,
) -> list[Path]:
    """Discover every note under *root*, as absolute sorted paths.

    Skips files inside any directory named in *skip_dirs*.
    """
    skipped = frozenset(skip_dirs)
    root = absolute_path(root)
    if not root.is_dir():
        return []

    results: list[Path] = []
    for path in root.rglob(f"*{extension}"):
        if not path.is_file():
            continue
        if any(part in skipped for part in path.relative_to(root).parts[:-1]):
            continue
        results.append(path)

    return sorted(results)
