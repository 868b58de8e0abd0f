"""File watcher feeding a :class:`WatchSession` from watchdog events."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from backlinkctl.errors import FileAccessError
from backlinkctl.infrastructure.filesystem import absolute_path, read_lines

if TYPE_CHECKING:
    from collections.abc import Iterable

    from backlinkctl.watch.session import WatchSession

logger = logging.getLogger(__name__)


class NoteEventHandler(FileSystemEventHandler):
    """Forward note events to the session; everything else is ignored."""

    def __init__(
        self,
        session: WatchSession,
        root: Path,
        *,
        extension: str = ".md",
        skip_dirs: Iterable[str] = (),
    ) -> None:
        super().__init__()
        self._session = session
        self._root = root
        self._extension = extension
        self._skip_dirs = frozenset(skip_dirs)

    def _note_path(self, raw: str | bytes) -> Path | None:
        path = absolute_path(raw.decode() if isinstance(raw, bytes) else raw)
        if not path.name.endswith(self._extension):
            return None
        try:
            parts = path.relative_to(self._root).parts[:-1]
        except ValueError:
            return None
        if any(part in self._skip_dirs for part in parts):
            return None
        return path

    def _changed(self, path: Path) -> None:
        try:
            lines = read_lines(path)
        except FileAccessError as exc:
            logger.debug("Ignoring event for unreadable note: %s", exc)
            return
        self._session.on_change(path, lines)

    def on_created(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        if (path := self._note_path(event.src_path)) is not None:
            self._session.on_open(path)
            self._changed(path)

    def on_modified(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        if (path := self._note_path(event.src_path)) is not None:
            self._changed(path)

    def on_deleted(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        if (path := self._note_path(event.src_path)) is not None:
            self._session.on_close(path)

    def on_moved(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        if (src := self._note_path(event.src_path)) is not None:
            self._session.on_close(src)
        dest_raw = getattr(event, "dest_path", None)
        if dest_raw and (dest := self._note_path(dest_raw)) is not None:
            self._changed(dest)


class FileWatcher:
    """Watch the workspace root recursively and drive a :class:`WatchSession`."""

    def __init__(
        self,
        session: WatchSession,
        root: Path,
        *,
        extension: str = ".md",
        skip_dirs: Iterable[str] = (),
    ) -> None:
        self._session = session
        self._root = absolute_path(root)
        self._handler = NoteEventHandler(
            session, self._root, extension=extension, skip_dirs=skip_dirs
        )
        self._observer: Observer | None = None  # type: ignore[valid-type]

    @property
    def handler(self) -> NoteEventHandler:
        return self._handler

    @property
    def is_running(self) -> bool:
        return self._observer is not None

    def start(self) -> None:
        if self._observer is not None:
            return
        if not self._root.is_dir():
            logger.warning("Workspace root does not exist: %s", self._root)
            return
        observer = Observer()
        observer.schedule(self._handler, str(self._root), recursive=True)
        observer.start()
        self._observer = observer
        logger.info("Watching %s", self._root)

    def stop(self) -> None:
        if self._observer is None:
            return
        self._observer.stop()
        self._observer.join(timeout=5.0)
        self._observer = None
        self._session.shutdown()
        logger.info("Stopped watching %s", self._root)

    def __enter__(self) -> FileWatcher:
        self.start()
        return self

    def __exit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        self.stop()
