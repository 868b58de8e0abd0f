"""Workspace: the repository injected into every service.

Owns the resolver, the synchronizer, the notification gate and the
optional plugin event bus for one workspace root. There is no database
and no cache: notes are re-read by every query.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from backlinkctl.infrastructure.filesystem import absolute_path, find_note_files, is_note
from backlinkctl.infrastructure.graph.engine import LinkGraph
from backlinkctl.infrastructure.resolver import PathResolver
from backlinkctl.infrastructure.synchronizer import BacklinkSynchronizer
from backlinkctl.output.notify import LogNotifier, NotificationGate

if TYPE_CHECKING:
    import threading
    from collections.abc import Sequence

    from backlinkctl.config.settings import BacklinkSettings
    from backlinkctl.output.notify import Notifier
    from backlinkctl.plugins.event_bus import EventBus

logger = logging.getLogger(__name__)


class Workspace:
    """Filesystem-backed view of a note corpus.

    Constructed once per CLI invocation (or watch session) from
    :class:`BacklinkSettings`. Services receive it via :class:`BaseService`.
    """

    def __init__(self, settings: BacklinkSettings, *, notifier: Notifier | None = None) -> None:
        self._settings = settings
        self._root = absolute_path(settings.root)
        self._extension = settings.scan.extension
        self._notifier = NotificationGate(
            notifier or LogNotifier(), enabled=settings.backlinks.notify
        )
        self._resolver = PathResolver(self._root, extension=self._extension)
        self._synchronizer = BacklinkSynchronizer(
            settings.backlinks, self._notifier, extension=self._extension
        )
        self._event_bus: EventBus | None = None

    @property
    def root(self) -> Path:
        """The workspace root directory (absolute, normalized)."""
        return self._root

    @property
    def settings(self) -> BacklinkSettings:
        return self._settings

    @property
    def resolver(self) -> PathResolver:
        return self._resolver

    @property
    def synchronizer(self) -> BacklinkSynchronizer:
        return self._synchronizer

    @property
    def notifier(self) -> NotificationGate:
        """Gated notification sink (honors the ``notify`` option)."""
        return self._notifier

    @property
    def event_bus(self) -> EventBus | None:
        """The plugin event bus (None if not initialized)."""
        return self._event_bus

    def init_event_bus(self, *, sync: bool = False) -> None:
        """Discover plugins and wire up the EventBus.

        Called by AppContext when the workspace is first accessed.
        """
        from backlinkctl.plugins.event_bus import EventBus
        from backlinkctl.plugins.manager import LOCAL_PLUGIN_DIR, PluginManager

        pm = PluginManager()
        names = pm.discover_and_load(local_dir=self._root / LOCAL_PLUGIN_DIR)
        if names:
            logger.debug("Loaded plugins: %s", ", ".join(names))
        self._event_bus = EventBus(pm, sync=sync)

    def close(self) -> None:
        """Flush pending plugin events."""
        if self._event_bus is not None:
            self._event_bus.shutdown()

    # ------------------------------------------------------------------
    # Corpus access
    # ------------------------------------------------------------------

    def path(self, raw: Path | str) -> Path:
        """Absolute, normalized path; relative paths are taken from the CWD."""
        return absolute_path(raw)

    def is_note(self, path: Path) -> bool:
        return is_note(path, self._extension)

    def find_notes(self) -> list[Path]:
        """Every note under the root, sorted, skipping ``scan.skip_dirs``."""
        return find_note_files(
            self._root,
            extension=self._extension,
            skip_dirs=self._settings.scan.skip_dirs,
        )

    def build_graph(
        self,
        files: Sequence[Path] | None = None,
        *,
        cancel: threading.Event | None = None,
    ) -> LinkGraph:
        """Parse *files* (default: every note) into a :class:`LinkGraph`."""
        corpus = list(files) if files is not None else self.find_notes()
        return LinkGraph.build(
            corpus,
            self._resolver,
            workers=self._settings.scan.workers,
            cancel=cancel,
        )
