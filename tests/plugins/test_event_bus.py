"""Tests for EventBus: in-process hook dispatch, sync or pooled."""

from __future__ import annotations

import threading
from typing import Any

import pluggy

from backlinkctl.plugins.event_bus import EventBus
from backlinkctl.plugins.manager import PluginManager

hookimpl = pluggy.HookimplMarker("backlinkctl")


# ---------------------------------------------------------------------------
# Fake plugins for testing
# ---------------------------------------------------------------------------


class RecordingPlugin:
    """Plugin that records all hook calls."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.threads: list[str] = []

    @hookimpl
    def post_backlink(self, target_path: str, source_path: str, entry: str) -> None:
        self.threads.append(threading.current_thread().name)
        self.calls.append(
            ("post_backlink", {"target_path": target_path, "source_path": source_path})
        )

    @hookimpl
    def post_sync(self, source_path: str, inserted: int, skipped: int) -> None:
        self.calls.append(("post_sync", {"inserted": inserted, "skipped": skipped}))


class FailingPlugin:
    @hookimpl
    def post_scan(self, op: str, count: int) -> None:
        raise ValueError("plugin bug")


def _bus(*plugins: object, sync: bool = True) -> EventBus:
    pm = PluginManager()
    for plugin in plugins:
        pm.register_plugin(plugin)
    return EventBus(pm, sync=sync)


_BACKLINK = {"target_path": "/w/b.md", "source_path": "/w/a.md", "entry": "- [a](a.md)"}


class TestSyncDispatch:
    def test_calls_in_caller_thread(self) -> None:
        plugin = RecordingPlugin()
        _bus(plugin).dispatch("post_backlink", _BACKLINK)
        assert plugin.calls == [
            ("post_backlink", {"target_path": "/w/b.md", "source_path": "/w/a.md"})
        ]
        assert plugin.threads == [threading.current_thread().name]

    def test_unknown_hook_ignored(self) -> None:
        bus = _bus(RecordingPlugin())
        bus.dispatch("post_nothing", {})
        assert bus.failures == []

    def test_failure_recorded_not_raised(self) -> None:
        bus = _bus(FailingPlugin())
        bus.dispatch("post_scan", {"op": "orphans", "count": 0})
        assert bus.failures == ["post_scan: plugin bug"]


class TestAsyncDispatch:
    def test_drain_waits(self) -> None:
        plugin = RecordingPlugin()
        bus = _bus(plugin, sync=False)
        bus.dispatch("post_backlink", _BACKLINK)
        bus.dispatch("post_sync", {"source_path": "/w/a.md", "inserted": 1, "skipped": 0})
        assert bus.drain() == 0
        assert {name for name, _ in plugin.calls} == {"post_backlink", "post_sync"}
        assert plugin.threads != [threading.current_thread().name]
        bus.shutdown()

    def test_drain_counts_failures(self) -> None:
        bus = _bus(FailingPlugin(), sync=False)
        bus.dispatch("post_scan", {"op": "orphans", "count": 0})
        bus.dispatch("post_scan", {"op": "dead_links_all", "count": 2})
        assert bus.drain() == 2
        bus.shutdown()

    def test_shutdown_is_repeatable(self) -> None:
        bus = _bus(RecordingPlugin(), sync=False)
        bus.shutdown()
        bus.shutdown()
