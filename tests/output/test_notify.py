"""Tests for notification sinks and the notify gate."""

from __future__ import annotations

from io import StringIO

from backlinkctl.output.notify import ConsoleNotifier, Level, LogNotifier, NotificationGate
from tests.conftest import RecordingNotifier


class TestConsoleNotifier:
    def test_prefixed_message(self) -> None:
        buf = StringIO()
        ConsoleNotifier(buf).notify("Added backlink in b.md")
        assert buf.getvalue() == "backlinkctl: Added backlink in b.md\n"

    def test_min_level_filters(self) -> None:
        buf = StringIO()
        sink = ConsoleNotifier(buf, min_level=Level.WARN)
        sink.notify("chatty")
        sink.notify("careful", Level.WARN)
        assert buf.getvalue() == "backlinkctl: careful\n"

    def test_brackets_not_markup(self) -> None:
        buf = StringIO()
        ConsoleNotifier(buf).notify("link [a] broken")
        assert "link [a] broken" in buf.getvalue()


class TestLogNotifier:
    def test_accepts_every_level(self) -> None:
        sink = LogNotifier()
        for level in Level:
            sink.notify("message", level)


class TestNotificationGate:
    def test_enabled_forwards(self) -> None:
        inner = RecordingNotifier()
        NotificationGate(inner).notify("hi", Level.WARN)
        assert inner.messages == [("hi", Level.WARN)]

    def test_disabled_keeps_errors(self) -> None:
        inner = RecordingNotifier()
        gate = NotificationGate(inner, enabled=False)
        gate.notify("hi")
        gate.notify("bad", Level.ERROR)
        assert inner.messages == [("bad", Level.ERROR)]

    def test_toggle_at_runtime(self) -> None:
        inner = RecordingNotifier()
        gate = NotificationGate(inner, enabled=False)
        gate.enabled = True
        gate.notify("hi")
        assert inner.texts == ["hi"]
