"""Timing spans for service calls.

``--verbose`` turns tracing on for the process. A ``@traced`` service method
then opens a root span, inner phases (graph build, link scan) open child
spans through :func:`trace_span`, and the finished tree lands in
``ServiceResult.meta["telemetry"]``. With tracing off every entry point
returns after one ContextVar lookup.
"""

from __future__ import annotations

import functools
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass, field
from typing import Any, ParamSpec, TypeVar

import structlog

from backlinkctl.services.result import ServiceResult

_enabled: ContextVar[bool] = ContextVar("backlinkctl_telemetry", default=False)
_current_span: ContextVar[Span | None] = ContextVar("backlinkctl_span", default=None)

_log = structlog.get_logger("backlinkctl.telemetry")


@dataclass
class Span:
    """One timed phase; children are the phases it opened."""

    name: str
    parent: Span | None = None
    children: list[Span] = field(default_factory=list)
    start_time: float = field(default_factory=time.perf_counter)
    end_time: float | None = None
    annotations: dict[str, Any] = field(default_factory=dict)

    @property
    def duration_ms(self) -> float:
        if self.end_time is None:
            return 0.0
        return (self.end_time - self.start_time) * 1000

    def end(self) -> None:
        if self.end_time is None:
            self.end_time = time.perf_counter()

    def annotate(self, key: str, value: Any) -> None:
        self.annotations[key] = value

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name, "duration_ms": round(self.duration_ms, 2)}
        if self.annotations:
            data["annotations"] = dict(self.annotations)
        if self.children:
            data["children"] = [child.to_dict() for child in self.children]
        return data


def _enter(span: Span) -> Token[Span | None]:
    if span.parent is not None:
        span.parent.children.append(span)
    return _current_span.set(span)


def _leave(span: Span, token: Token[Span | None]) -> None:
    span.end()
    _current_span.reset(token)


@contextmanager
def trace_span(name: str, **annotations: Any) -> Iterator[Span | None]:
    """Time a phase inside the active ``@traced`` call.

    Yields ``None`` when tracing is off or nothing is being traced, so
    callers guard annotations with ``if span:``.
    """
    parent = _current_span.get() if _enabled.get() else None
    if parent is None:
        yield None
        return

    span = Span(name=name, parent=parent, annotations=dict(annotations))
    token = _enter(span)
    try:
        yield span
    finally:
        _leave(span, token)


_P = ParamSpec("_P")
_R = TypeVar("_R")


def traced(func: Callable[_P, _R]) -> Callable[_P, _R]:  # noqa: UP047
    """Open a root span around a service method.

    A returned ServiceResult gets the span tree merged into its ``meta``;
    other return values pass through untouched.
    """

    @functools.wraps(func)
    def wrapper(*args: _P.args, **kwargs: _P.kwargs) -> _R:
        if not _enabled.get():
            return func(*args, **kwargs)

        root = Span(name=func.__qualname__)
        token = _enter(root)
        try:
            result = func(*args, **kwargs)
        except Exception:
            _leave(root, token)
            _log.debug("span.failed", span=root.name, duration_ms=round(root.duration_ms, 2))
            raise
        _leave(root, token)

        if not isinstance(result, ServiceResult):
            return result
        _log.debug(
            "span.complete",
            span=root.name,
            op=result.op,
            ok=result.ok,
            duration_ms=round(root.duration_ms, 2),
            phases=[child.name for child in root.children],
        )
        meta = {**(result.meta or {}), "telemetry": root.to_dict()}
        return result.model_copy(update={"meta": meta})  # type: ignore[return-value]

    return wrapper


def enable_telemetry() -> None:
    """Turn tracing on for the current context (``--verbose``)."""
    _enabled.set(True)


def disable_telemetry() -> None:
    _enabled.set(False)


def get_current_span() -> Span | None:
    """The innermost open span, or ``None`` when tracing is off."""
    return _current_span.get() if _enabled.get() else None
