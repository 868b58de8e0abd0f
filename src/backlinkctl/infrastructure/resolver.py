"""PathResolver: turn raw link targets into existing note paths.

Normalization rules are pure and live in :mod:`backlinkctl.domain.paths`;
this class adds the existence check and the workspace-root rule.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from backlinkctl.domain.paths import (
    NOTE_EXTENSION,
    is_under_root,
    join_and_normalize,
    normalize_target,
    relative_link_path,
)
from backlinkctl.infrastructure.filesystem import file_exists

logger = logging.getLogger(__name__)


class PathResolver:
    """Resolve link targets relative to the linking note.

    Args:
        root: Workspace root used by :meth:`in_workspace`.
        extension: Note extension appended to bare targets.
    """

    def __init__(self, root: Path, *, extension: str = NOTE_EXTENSION) -> None:
        self._root = root
        self._extension = extension

    @property
    def root(self) -> Path:
        return self._root

    def resolve(self, source_file: Path | str | None, raw_target: str | None) -> Path | None:
        """Resolve *raw_target* as written in *source_file*.

        Returns the absolute, normalized path of an existing file, or None
        when the target is empty or points at nothing. ``#fragment`` and
        ``?query`` suffixes are ignored.
        """
        if not source_file or not raw_target:
            return None

        target = normalize_target(raw_target, self._extension)
        if target is None:
            return None

        if os.path.isabs(target):
            candidate = Path(os.path.normpath(target))
        else:
            source = Path(source_file).absolute()
            candidate = Path(join_and_normalize(source, target))

        if file_exists(candidate):
            return candidate
        logger.debug("Unresolved link target %r from %s", raw_target, source_file)
        return None

    def in_workspace(self, source_file: Path, target_file: Path) -> bool:
        """True if both files sit under the workspace root (string prefix)."""
        return is_under_root(source_file, self._root) and is_under_root(target_file, self._root)

    @staticmethod
    def backlink_target_path(receiving_file: Path, originating_file: Path) -> str:
        """Relative path a backlink inside *receiving_file* uses for *originating_file*."""
        return relative_link_path(receiving_file, originating_file)
