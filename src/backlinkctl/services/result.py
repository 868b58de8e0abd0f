"""The value every service method returns.

Services never raise across the command boundary. A problem with one note
(unreadable, outside the workspace) becomes a string in ``warnings``; only
an operation that could not run at all comes back with ``ok=False`` and an
:class:`ServiceError`.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field


class ErrorCode(StrEnum):
    NOT_FOUND = "NOT_FOUND"
    NOT_MARKDOWN = "NOT_MARKDOWN"
    IO_ERROR = "IO_ERROR"
    CANCELLED = "CANCELLED"


class ServiceError(BaseModel):
    """Why an operation failed: a stable *code*, a readable *message*, and context."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Outcome of one operation.

    ``op`` names the operation (``sync``, ``backlinks``, ``dead_links_all``
    and so on) and selects the renderer. ``data`` is the op-specific payload;
    ``meta`` carries the telemetry tree in verbose mode.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None

    @classmethod
    def failure(
        cls,
        op: str,
        code: ErrorCode | str,
        message: str,
        *,
        detail: dict[str, Any] | None = None,
        warnings: list[str] | None = None,
    ) -> ServiceResult:
        error = ServiceError(code=str(code), message=message, detail=detail or {})
        return cls(ok=False, op=op, error=error, warnings=warnings or [])

    @property
    def error_code(self) -> str | None:
        return self.error.code if self.error else None
