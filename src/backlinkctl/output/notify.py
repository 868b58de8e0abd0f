"""Notification sinks: human-readable status messages with a severity.

The core reports outcomes ("Added backlink in b.md", I/O failures, dead
link counts) through a :class:`Notifier`. The CLI plugs in a
:class:`ConsoleNotifier`; embedders can pass anything with a ``notify``
method. :class:`NotificationGate` applies the ``notify`` config option.
"""

from __future__ import annotations

import logging
from enum import IntEnum
from typing import TYPE_CHECKING, Protocol

import structlog
from rich.text import Text

from backlinkctl.output.console import create_stream_console

if TYPE_CHECKING:
    from typing import TextIO

PREFIX = "backlinkctl: "


class Level(IntEnum):
    """Notification severity, aligned with :mod:`logging` levels."""

    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARN = logging.WARNING
    ERROR = logging.ERROR


_LEVEL_STYLES: dict[Level, str] = {
    Level.DEBUG: "dim",
    Level.INFO: "bl.info",
    Level.WARN: "bl.warning",
    Level.ERROR: "bl.error",
}


class Notifier(Protocol):
    """Anything that can surface a status message."""

    def notify(self, message: str, level: Level = Level.INFO) -> None: ...


class LogNotifier:
    """Route notifications into structlog (``backlinkctl.notify`` logger)."""

    def __init__(self) -> None:
        self._log = structlog.get_logger("backlinkctl.notify")

    def notify(self, message: str, level: Level = Level.INFO) -> None:
        self._log.log(int(level), message)


class ConsoleNotifier:
    """Print notifications to stderr via Rich, prefixed with ``backlinkctl:``."""

    def __init__(self, file: TextIO | None = None, *, min_level: Level = Level.INFO) -> None:
        self._console = create_stream_console(file)
        self._min_level = min_level

    def notify(self, message: str, level: Level = Level.INFO) -> None:
        if level < self._min_level:
            return
        self._console.print(Text(PREFIX + message, style=_LEVEL_STYLES[level]))


class NotificationGate:
    """Apply the ``notify`` option in front of another sink.

    With notifications disabled only errors pass; everything is still
    logged at debug level so ``--verbose`` shows what was suppressed.
    """

    def __init__(self, sink: Notifier, *, enabled: bool = True) -> None:
        self._sink = sink
        self.enabled = enabled
        self._log = structlog.get_logger("backlinkctl.notify")

    def notify(self, message: str, level: Level = Level.INFO) -> None:
        if not self.enabled and level < Level.ERROR:
            self._log.debug("notification suppressed", message=message, level=level.name)
            return
        self._sink.notify(message, level)
