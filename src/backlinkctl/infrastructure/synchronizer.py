"""BacklinkSynchronizer: keep a reverse reference in every linked note.

Given a (target, source) pair where *source* links to *target*, make sure
*target* carries exactly one backlink entry pointing at *source* inside
the configured section, creating the section when absent.

INVARIANT: at most one entry per (target, source) pair. An existing
backlink in either dialect counts, so switching ``link_format`` never
produces duplicates.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import TYPE_CHECKING

from backlinkctl.domain.backlinks import (
    BacklinkEntry,
    build_entry,
    contains_backlink,
    insert_backlink,
)
from backlinkctl.domain.paths import NOTE_EXTENSION, relative_link_path
from backlinkctl.errors import FileAccessError
from backlinkctl.infrastructure.filesystem import read_lines, write_lines
from backlinkctl.output.notify import Level

if TYPE_CHECKING:
    from backlinkctl.config.models import BacklinksConfig
    from backlinkctl.output.notify import Notifier

logger = logging.getLogger(__name__)


class SyncStatus(StrEnum):
    """What :meth:`BacklinkSynchronizer.ensure` did."""

    INSERTED = "inserted"
    EXISTS = "exists"
    FAILED = "failed"


@dataclass(frozen=True)
class SyncOutcome:
    """Result of one ensure call."""

    status: SyncStatus
    target: Path
    source: Path
    entry: BacklinkEntry | None = None
    error: str | None = None

    @property
    def inserted(self) -> bool:
        return self.status is SyncStatus.INSERTED


class BacklinkSynchronizer:
    """Detect and insert backlinks according to a :class:`BacklinksConfig`."""

    def __init__(
        self,
        config: BacklinksConfig,
        notifier: Notifier,
        *,
        extension: str = NOTE_EXTENSION,
    ) -> None:
        self._config = config
        self._notifier = notifier
        self._extension = extension

    @property
    def config(self) -> BacklinksConfig:
        return self._config

    def has_backlink(self, target_file: Path, source_file: Path) -> bool:
        """True if *target_file* already links back to *source_file* in either dialect.

        An unreadable target counts as having no backlink.
        """
        try:
            lines = read_lines(target_file)
        except FileAccessError:
            return False
        reference = relative_link_path(target_file, source_file)
        return contains_backlink(lines, reference, self._extension)

    def ensure_backlink(self, target_file: Path, source_file: Path) -> bool:
        """Insert a backlink to *source_file* in *target_file* if missing.

        Returns True only when an entry was written.
        """
        return self.ensure(target_file, source_file).inserted

    def ensure(self, target_file: Path, source_file: Path) -> SyncOutcome:
        """Like :meth:`ensure_backlink` but reports why nothing changed."""
        if self.has_backlink(target_file, source_file):
            return SyncOutcome(SyncStatus.EXISTS, target_file, source_file)

        try:
            lines = read_lines(target_file)
        except FileAccessError as exc:
            return self._failed(target_file, source_file, f"Cannot read target file: {exc.path}")

        entry = build_entry(
            target_file,
            source_file,
            dialect=self._config.link_format,
            header=self._config.backlinks_header,
        )
        updated = insert_backlink(lines, entry.header, entry.line)

        try:
            write_lines(target_file, updated)
        except FileAccessError as exc:
            return self._failed(target_file, source_file, f"{exc.reason}: {exc.path}")

        logger.debug("Inserted backlink %r into %s", entry.line, target_file)
        self._notifier.notify(f"Added backlink in {target_file.name}")
        return SyncOutcome(SyncStatus.INSERTED, target_file, source_file, entry=entry)

    def _failed(self, target_file: Path, source_file: Path, message: str) -> SyncOutcome:
        logger.warning(message)
        self._notifier.notify(message, Level.ERROR)
        return SyncOutcome(SyncStatus.FAILED, target_file, source_file, error=message)
