"""Trailing-edge debounce keyed by handle.

A newer call for the same handle cancels the pending one, so only the
last call inside the window runs. Calls for different handles are
independent.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Hashable
from typing import Any

logger = logging.getLogger(__name__)


class Debouncer:
    """Delay calls by *delay_ms*; zero runs them immediately."""

    def __init__(self, delay_ms: int) -> None:
        self._delay = max(delay_ms, 0) / 1000
        self._timers: dict[Hashable, threading.Timer] = {}
        self._lock = threading.Lock()

    @property
    def delay_ms(self) -> int:
        return int(self._delay * 1000)

    def call(self, key: Hashable, func: Callable[..., Any], *args: Any) -> None:
        """Schedule ``func(*args)`` for *key*, superseding any pending call."""
        if self._delay == 0:
            self.cancel(key)
            func(*args)
            return

        timer = threading.Timer(self._delay, self._fire, args=(key, func, args))
        timer.daemon = True
        with self._lock:
            previous = self._timers.pop(key, None)
            self._timers[key] = timer
        if previous is not None:
            previous.cancel()
        timer.start()

    def _fire(self, key: Hashable, func: Callable[..., Any], args: tuple[Any, ...]) -> None:
        with self._lock:
            current = self._timers.get(key)
            if current is not threading.current_thread():
                return
            del self._timers[key]
        try:
            func(*args)
        except Exception:
            logger.exception("Debounced call for %s failed", key)

    def pending(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._timers

    def cancel(self, key: Hashable) -> None:
        with self._lock:
            timer = self._timers.pop(key, None)
        if timer is not None:
            timer.cancel()

    def cancel_all(self) -> None:
        with self._lock:
            timers = list(self._timers.values())
            self._timers.clear()
        for timer in timers:
            timer.cancel()
