"""Per-handle record of the link targets last seen in a note.

Lets the watch session skip unchanged content and only synchronize links
that were added since the previous observation.
"""

from __future__ import annotations

import hashlib
import threading
import time
from collections.abc import Hashable, Iterable, Sequence
from dataclasses import dataclass, field


def fingerprint(lines: Sequence[str]) -> str:
    """SHA-256 of the newline-joined content."""
    return hashlib.sha256("\n".join(lines).encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class BufferObservation:
    fingerprint: str
    known_targets: frozenset[str] = frozenset()
    checked_at: float = field(default_factory=time.time)

    def is_current(self, digest: str) -> bool:
        return self.fingerprint == digest


class ObservationCache:
    """Thread-safe mapping of handle to its latest :class:`BufferObservation`."""

    def __init__(self) -> None:
        self._entries: dict[Hashable, BufferObservation] = {}
        self._lock = threading.Lock()

    def get(self, handle: Hashable) -> BufferObservation | None:
        with self._lock:
            return self._entries.get(handle)

    def record(self, handle: Hashable, digest: str, targets: Iterable[str]) -> BufferObservation:
        """Replace the observation for *handle*."""
        observation = BufferObservation(fingerprint=digest, known_targets=frozenset(targets))
        with self._lock:
            self._entries[handle] = observation
        return observation

    def drop(self, handle: Hashable) -> None:
        with self._lock:
            self._entries.pop(handle, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, handle: object) -> bool:
        with self._lock:
            return handle in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
