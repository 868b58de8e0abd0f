"""WatchSession: translate editor or file events into backlink updates.

Inbound events:

- ``on_change(handle, lines, immediate=False)``: content changed. Debounced
  per handle (trailing edge); ``immediate=True`` (a save) bypasses it.
- ``on_open(handle)``: note opened; optionally reports its dead links.
- ``on_close(handle)``: note closed; forgets its observation.

A handle is the note's path. Only links whose raw target was not seen in
the previous observation of that handle are synchronized. Auto-creation
can be switched on and off at runtime; it starts from ``auto_create``.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from backlinkctl.domain.links import extract_link_targets, find_links
from backlinkctl.output.notify import Level
from backlinkctl.services.graph import GraphService
from backlinkctl.services.sync import SyncReport, SyncService
from backlinkctl.watch.debounce import Debouncer
from backlinkctl.watch.observations import ObservationCache, fingerprint

if TYPE_CHECKING:
    from backlinkctl.infrastructure.workspace import Workspace

logger = logging.getLogger(__name__)


class WatchSession:
    """Stateful event adapter over :class:`SyncService` and :class:`GraphService`."""

    def __init__(self, workspace: Workspace, *, debouncer: Debouncer | None = None) -> None:
        self._workspace = workspace
        self._config = workspace.settings.backlinks
        self._sync = SyncService(workspace)
        self._graph = GraphService(workspace)
        self._debouncer = debouncer or Debouncer(self._config.debounce_ms)
        self._cache = ObservationCache()
        self._lock = threading.Lock()
        self._initialized = False
        self._enabled = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def setup(self) -> None:
        """Arm the session. Events before this call are rejected."""
        self._enabled = self._config.auto_create
        self._initialized = True
        logger.debug(
            "Watch session ready (auto_create=%s, debounce=%dms)",
            self._enabled,
            self._debouncer.delay_ms,
        )

    def shutdown(self) -> None:
        """Cancel pending work and forget every observation."""
        self._debouncer.cancel_all()
        self._cache.clear()

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def cache(self) -> ObservationCache:
        return self._cache

    def enable(self) -> None:
        self._enabled = True
        self._workspace.notifier.notify("Backlink auto-creation enabled")

    def disable(self) -> None:
        self._enabled = False
        self._debouncer.cancel_all()
        self._workspace.notifier.notify("Backlink auto-creation disabled")

    def toggle(self) -> bool:
        """Flip auto-creation; returns the new state."""
        if self._enabled:
            self.disable()
        else:
            self.enable()
        return self._enabled

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def on_change(self, handle: Path, lines: Sequence[str], *, immediate: bool = False) -> None:
        """Content of *handle* changed to *lines*."""
        path = self._accept(handle)
        if path is None or not self._enabled:
            return
        if immediate:
            self._debouncer.cancel(path)
            self.process(path, lines)
        else:
            self._debouncer.call(path, self.process, path, list(lines))

    def on_open(self, handle: Path) -> int:
        """Report dead links of a newly opened note. Returns their count."""
        path = self._accept(handle)
        if path is None or not self._config.scan_on_open:
            return 0
        return self._graph.scan_open(path)

    def on_close(self, handle: Path) -> None:
        path = self._workspace.path(handle)
        self._debouncer.cancel(path)
        self._cache.drop(path)

    # ------------------------------------------------------------------
    # Processing
    # ------------------------------------------------------------------

    def process(self, handle: Path, lines: Sequence[str]) -> SyncReport | None:
        """Synchronize links added since the last observation of *handle*.

        Returns None when the content is unchanged or no new link appeared.
        """
        path = self._workspace.path(handle)
        digest = fingerprint(lines)
        with self._lock:
            previous = self._cache.get(path)
            if previous is not None and previous.is_current(digest):
                return None

            known = previous.known_targets if previous is not None else frozenset()
            if previous is not None:
                quick = frozenset(extract_link_targets("\n".join(lines)))
                if quick <= known:
                    self._cache.record(path, digest, known & quick)
                    return None

            links = find_links(lines)
            new_links = [link for link in links if link.target not in known]

            report = self._sync.sync_links(path, new_links) if new_links else None
            self._cache.record(path, digest, (link.target for link in links))

        if report is not None:
            logger.debug(
                "Processed %s: %d new link(s), %d backlink(s) added",
                path,
                len(new_links),
                len(report.inserted),
            )
        return report

    def _accept(self, handle: Path) -> Path | None:
        if not self._initialized:
            self._workspace.notifier.notify(
                "Watch session used before setup(); event ignored", Level.ERROR
            )
            return None
        path = self._workspace.path(handle)
        if not self._workspace.is_note(path):
            self._workspace.notifier.notify(f"Not a markdown file: {path.name}", Level.WARN)
            return None
        return path
