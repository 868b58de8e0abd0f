"""BaseService: foundation for all backlinkctl services.

Every service receives a :class:`Workspace` at construction time. The
Workspace provides the resolver, the synchronizer, the notification sink
and the plugin event bus.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from backlinkctl.output.notify import Level
from backlinkctl.services.result import ErrorCode, ServiceResult

if TYPE_CHECKING:
    from backlinkctl.infrastructure.workspace import Workspace

logger = logging.getLogger(__name__)


class BaseService:
    """Base for service-layer classes.

    Usage::

        class SyncService(BaseService):
            def sync_file(self, path: Path) -> ServiceResult:
                source = self._workspace.path(path)
                ...
    """

    def __init__(self, workspace: Workspace) -> None:
        self._workspace = workspace

    def _notify(self, message: str, level: Level = Level.INFO) -> None:
        self._workspace.notifier.notify(message, level)

    def _require_note(self, op: str, path: Path) -> ServiceResult | None:
        """Return a failed result when *path* is not a readable note."""
        detail = {"path": str(path)}
        if not self._workspace.is_note(path):
            return ServiceResult.failure(
                op, ErrorCode.NOT_MARKDOWN, f"Not a markdown file: {path}", detail=detail
            )
        if not path.is_file():
            return ServiceResult.failure(
                op, ErrorCode.NOT_FOUND, f"File not found: {path}", detail=detail
            )
        return None

    def _dispatch_event(
        self,
        hook_name: str,
        payload: dict[str, Any],
        warnings: list[str],
    ) -> None:
        """Dispatch a lifecycle event. No-op if event bus not initialized.

        INVARIANT: Plugin failures are warnings, never errors.
        """
        bus = self._workspace.event_bus
        if bus is None:
            return
        try:
            bus.dispatch(hook_name, payload)
        except Exception:
            logger.debug("Event dispatch failed for %s", hook_name, exc_info=True)
            warnings.append(f"Event dispatch failed for {hook_name}")
