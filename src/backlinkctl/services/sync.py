"""SyncService: create the backlinks a note's links call for.

For every link in a note that resolves to an existing note (and, with
``workspace_only``, stays under the workspace root) the target receives a
backlink entry pointing at the linking note. Dead links are reported,
never created.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from backlinkctl.domain.links import Link, find_links
from backlinkctl.errors import FileAccessError, ScanCancelled
from backlinkctl.infrastructure.filesystem import read_lines
from backlinkctl.infrastructure.synchronizer import SyncOutcome, SyncStatus
from backlinkctl.services.base import BaseService
from backlinkctl.services.result import ErrorCode, ServiceResult
from backlinkctl.services.telemetry import trace_span, traced

if TYPE_CHECKING:
    import threading

logger = logging.getLogger(__name__)


@dataclass
class SyncReport:
    """What syncing the links of one note did."""

    source: Path
    links: int = 0
    inserted: list[SyncOutcome] = field(default_factory=list)
    existing: list[Path] = field(default_factory=list)
    failed: list[SyncOutcome] = field(default_factory=list)
    unresolved: list[str] = field(default_factory=list)
    outside: list[Path] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": str(self.source),
            "links": self.links,
            "inserted": [
                {"target": str(o.target), "entry": o.entry.line if o.entry else ""}
                for o in self.inserted
            ],
            "existing": [str(p) for p in self.existing],
            "failed": [{"target": str(o.target), "error": o.error} for o in self.failed],
            "unresolved": list(self.unresolved),
            "outside": [str(p) for p in self.outside],
        }


class SyncService(BaseService):
    """Backlink creation for single notes and the whole workspace."""

    def sync_links(self, source: Path, links: Iterable[Link]) -> SyncReport:
        """Ensure a backlink in every note that *links* (found in *source*) reach.

        Shared by :meth:`sync_file` and the watch session, which passes only
        links it has not seen before. Each target is handled once per call;
        a note never receives a backlink to itself.
        """
        ws = self._workspace
        workspace_only = ws.settings.backlinks.workspace_only
        report = SyncReport(source=source)
        seen: set[Path] = set()

        for link in links:
            report.links += 1
            target = ws.resolver.resolve(source, link.target)
            if target is None:
                report.unresolved.append(link.target)
                continue
            if target in seen or target == source:
                continue
            seen.add(target)
            if workspace_only and not ws.resolver.in_workspace(source, target):
                logger.debug("Skipping %s: outside workspace %s", target, ws.root)
                report.outside.append(target)
                continue

            outcome = ws.synchronizer.ensure(target, source)
            if outcome.status is SyncStatus.INSERTED:
                report.inserted.append(outcome)
                self._dispatch_event(
                    "post_backlink",
                    {
                        "target_path": str(target),
                        "source_path": str(source),
                        "entry": outcome.entry.line if outcome.entry else "",
                    },
                    report.warnings,
                )
            elif outcome.status is SyncStatus.EXISTS:
                report.existing.append(target)
            else:
                report.failed.append(outcome)
                report.warnings.append(outcome.error or f"Failed to update {target}")

        self._dispatch_event(
            "post_sync",
            {
                "source_path": str(source),
                "inserted": len(report.inserted),
                "skipped": len(report.existing) + len(report.outside),
            },
            report.warnings,
        )
        return report

    # ------------------------------------------------------------------
    # sync
    # ------------------------------------------------------------------

    @traced
    def sync_file(self, path: Path, lines: Sequence[str] | None = None) -> ServiceResult:
        """Create missing backlinks for the links in one note.

        *lines* overrides the on-disk content (unsaved editor buffers).
        A non-markdown path is skipped with a warning, not an error.
        """
        op = "sync"
        source = self._workspace.path(path)
        if not self._workspace.is_note(source):
            return ServiceResult(
                ok=True,
                op=op,
                data={"path": str(source), "skipped": True},
                warnings=[f"Not a markdown file: {source}"],
            )

        if lines is None:
            try:
                lines = read_lines(source)
            except FileAccessError as exc:
                return ServiceResult.failure(
                    op, ErrorCode.IO_ERROR, str(exc), detail={"path": str(source)}
                )

        with trace_span("find_links") as span:
            links = find_links(lines)
            if span:
                span.annotate("links", len(links))

        report = self.sync_links(source, links)
        return ServiceResult(ok=True, op=op, data=report.to_dict(), warnings=report.warnings)

    @traced
    def sync_all(self, *, cancel: threading.Event | None = None) -> ServiceResult:
        """Run :meth:`sync_file` over every note in the workspace."""
        op = "sync_all"
        files = self._workspace.find_notes()
        warnings: list[str] = []
        changes: list[dict[str, str]] = []
        failed = 0

        for index, source in enumerate(files):
            if cancel is not None and cancel.is_set():
                exc = ScanCancelled(index, len(files))
                return ServiceResult.failure(
                    op,
                    ErrorCode.CANCELLED,
                    str(exc),
                    detail={"processed": index, "total": len(files)},
                    warnings=warnings,
                )
            try:
                lines = read_lines(source)
            except FileAccessError as exc:
                logger.warning("Skipping unreadable note: %s", exc)
                warnings.append(str(exc))
                continue

            report = self.sync_links(source, find_links(lines))
            warnings.extend(report.warnings)
            failed += len(report.failed)
            changes.extend(
                {
                    "source": str(source),
                    "target": str(o.target),
                    "entry": o.entry.line if o.entry else "",
                }
                for o in report.inserted
            )

        self._dispatch_event("post_scan", {"op": op, "count": len(changes)}, warnings)
        return ServiceResult(
            ok=True,
            op=op,
            data={"files": len(files), "count": len(changes), "changes": changes, "failed": failed},
            warnings=warnings,
        )

    # ------------------------------------------------------------------
    # check
    # ------------------------------------------------------------------

    @traced
    def check_file(self, path: Path) -> ServiceResult:
        """Report links in *path* whose targets do not link back yet.

        Read-only. Unresolved links are left to the dead-link query.
        """
        op = "check"
        source = self._workspace.path(path)
        if (failure := self._require_note(op, source)) is not None:
            return failure

        try:
            lines = read_lines(source)
        except FileAccessError as exc:
            return ServiceResult.failure(
                op, ErrorCode.IO_ERROR, str(exc), detail={"path": str(source)}
            )

        ws = self._workspace
        workspace_only = ws.settings.backlinks.workspace_only
        missing: list[dict[str, Any]] = []
        checked: dict[Path, bool] = {}
        for link in find_links(lines):
            target = ws.resolver.resolve(source, link.target)
            if target is None or target == source:
                continue
            if workspace_only and not ws.resolver.in_workspace(source, target):
                continue
            if target not in checked:
                checked[target] = ws.synchronizer.has_backlink(target, source)
            if not checked[target]:
                missing.append(
                    {
                        "line": link.line,
                        "column": link.start + 1,
                        "display": link.display,
                        "target": link.target,
                        "resolved": str(target),
                    }
                )

        return ServiceResult(
            ok=True,
            op=op,
            data={"path": str(source), "count": len(missing), "missing": missing},
        )

    # ------------------------------------------------------------------
    # ensure
    # ------------------------------------------------------------------

    @traced
    def ensure(self, target: Path, source: Path) -> ServiceResult:
        """Ensure *target* carries a backlink to *source*, whether or not *source* links to it.

        The workspace rule does not apply; this is an explicit request.
        """
        op = "ensure"
        target_file = self._workspace.path(target)
        source_file = self._workspace.path(source)
        non_notes = [p for p in (target_file, source_file) if not self._workspace.is_note(p)]
        if non_notes:
            return ServiceResult(
                ok=True,
                op=op,
                data={"target": str(target_file), "source": str(source_file), "skipped": True},
                warnings=[f"Not a markdown file: {p}" for p in non_notes],
            )
        for path in (target_file, source_file):
            if (failure := self._require_note(op, path)) is not None:
                return failure

        outcome = self._workspace.synchronizer.ensure(target_file, source_file)
        data: dict[str, Any] = {
            "target": str(target_file),
            "source": str(source_file),
            "status": outcome.status.value,
        }
        if outcome.status is SyncStatus.FAILED:
            return ServiceResult.failure(
                op, ErrorCode.IO_ERROR, outcome.error or "Failed to update file", detail=data
            )

        warnings: list[str] = []
        if outcome.entry is not None:
            data["entry"] = outcome.entry.line
            self._dispatch_event(
                "post_backlink",
                {
                    "target_path": str(target_file),
                    "source_path": str(source_file),
                    "entry": outcome.entry.line,
                },
                warnings,
            )
        return ServiceResult(ok=True, op=op, data=data, warnings=warnings)
