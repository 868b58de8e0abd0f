"""Exception types raised below the service layer.

Services catch these at file granularity and turn them into warnings,
notifications, or a failed ServiceResult. Nothing crosses a corpus query.
"""

from __future__ import annotations

from pathlib import Path


class BacklinkError(Exception):
    """Base class for backlinkctl errors."""


class FileAccessError(BacklinkError):
    """A note could not be read or written."""

    def __init__(self, path: Path, reason: str, *, cause: BaseException | None = None) -> None:
        self.path = path
        self.reason = reason
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"{reason}: {path}{detail}")


class ScanCancelled(BacklinkError):
    """A workspace scan was cancelled between files."""

    def __init__(self, processed: int, total: int) -> None:
        self.processed = processed
        self.total = total
        super().__init__(f"Scan cancelled after {processed} of {total} files")
