"""Pluggy hook specifications for backlinkctl lifecycle events.

Three events, dispatched through the :class:`~backlinkctl.plugins.event_bus.EventBus`
after the corresponding file change or query has finished.
"""

from __future__ import annotations

import pluggy

hookspec = pluggy.HookspecMarker("backlinkctl")
hookimpl = pluggy.HookimplMarker("backlinkctl")


class BacklinkctlHookSpec:
    """Hook specifications for the backlinkctl plugin system."""

    @hookspec
    def post_backlink(
        self,
        target_path: str,
        source_path: str,
        entry: str,
    ) -> None:
        """Called after a backlink entry was written into *target_path*."""

    @hookspec
    def post_sync(
        self,
        source_path: str,
        inserted: int,
        skipped: int,
    ) -> None:
        """Called after the links of one note have been synchronized."""

    @hookspec
    def post_scan(self, op: str, count: int) -> None:
        """Called after a workspace query (``orphans``, ``dead_links_all``, ...)."""
