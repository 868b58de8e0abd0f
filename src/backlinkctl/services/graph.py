"""GraphService: backlinks, orphans, and dead links across the workspace.

Each query builds one :class:`~backlinkctl.infrastructure.graph.engine.LinkGraph`
over the current note contents, so every note is read and parsed once per
query. Queries never modify files.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

from backlinkctl.errors import ScanCancelled
from backlinkctl.infrastructure.graph.engine import BacklinkRow, DeadLinkRow, LinkGraph
from backlinkctl.output.notify import Level
from backlinkctl.services.base import BaseService
from backlinkctl.services.result import ErrorCode, ServiceResult
from backlinkctl.services.telemetry import trace_span, traced

if TYPE_CHECKING:
    import threading
    from collections.abc import Sequence


def _backlink_item(row: BacklinkRow) -> dict[str, Any]:
    return {
        "source": str(row.source_file),
        "line": row.line_number,
        "display": row.display_text,
        "target": row.raw_target,
        "context": row.context,
    }


def _dead_link_item(row: DeadLinkRow, path: Path | None = None) -> dict[str, Any]:
    source = row.source_file or path
    return {
        "source": str(source) if source else None,
        "line": row.line_number,
        "display": row.display_text,
        "target": row.raw_target,
    }


class GraphService(BaseService):
    """Read-only queries over the derived link graph."""

    def _graph(
        self,
        op: str,
        *,
        files: Sequence[Path] | None = None,
        cancel: threading.Event | None,
    ) -> LinkGraph | ServiceResult:
        with trace_span("build_graph") as span:
            try:
                graph = self._workspace.build_graph(files, cancel=cancel)
            except ScanCancelled as exc:
                return ServiceResult.failure(
                    op,
                    ErrorCode.CANCELLED,
                    str(exc),
                    detail={"processed": exc.processed, "total": exc.total},
                )
            if span:
                span.annotate("nodes", graph.graph.number_of_nodes())
                span.annotate("edges", graph.graph.number_of_edges())
        return graph

    # ------------------------------------------------------------------
    # backlinks
    # ------------------------------------------------------------------

    @traced
    def backlinks(self, path: Path, *, cancel: threading.Event | None = None) -> ServiceResult:
        """Every link in another note that resolves to *path*."""
        op = "backlinks"
        target = self._workspace.path(path)
        if (failure := self._require_note(op, target)) is not None:
            return failure

        graph = self._graph(op, cancel=cancel)
        if isinstance(graph, ServiceResult):
            return graph

        items = [_backlink_item(row) for row in graph.backlinks_to(target)]
        return ServiceResult(
            ok=True,
            op=op,
            data={"path": str(target), "count": len(items), "items": items},
            warnings=list(graph.warnings),
        )

    # ------------------------------------------------------------------
    # orphans
    # ------------------------------------------------------------------

    @traced
    def orphans(self, *, cancel: threading.Event | None = None) -> ServiceResult:
        """Notes no other note links to."""
        op = "orphans"
        graph = self._graph(op, cancel=cancel)
        if isinstance(graph, ServiceResult):
            return graph

        items = [str(p) for p in graph.orphans()]
        warnings = list(graph.warnings)
        self._dispatch_event("post_scan", {"op": op, "count": len(items)}, warnings)
        return ServiceResult(
            ok=True,
            op=op,
            data={"count": len(items), "items": items},
            warnings=warnings,
        )

    # ------------------------------------------------------------------
    # dead links
    # ------------------------------------------------------------------

    @traced
    def dead_links(self, path: Path, *, cancel: threading.Event | None = None) -> ServiceResult:
        """Links in *path* whose targets resolve to nothing."""
        op = "dead_links"
        source = self._workspace.path(path)
        if (failure := self._require_note(op, source)) is not None:
            return failure

        graph = self._graph(op, files=[source], cancel=cancel)
        if isinstance(graph, ServiceResult):
            return graph

        items = [_dead_link_item(row, source) for row in graph.dead_links(source)]
        return ServiceResult(
            ok=True,
            op=op,
            data={"path": str(source), "count": len(items), "items": items},
            warnings=list(graph.warnings),
        )

    @traced
    def dead_links_all(self, *, cancel: threading.Event | None = None) -> ServiceResult:
        """Dead links across every note, ordered by file then line."""
        op = "dead_links_all"
        graph = self._graph(op, cancel=cancel)
        if isinstance(graph, ServiceResult):
            return graph

        items = [_dead_link_item(row) for row in graph.dead_links_all()]
        warnings = list(graph.warnings)
        self._dispatch_event("post_scan", {"op": op, "count": len(items)}, warnings)
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "count": len(items),
                "files": len({item["source"] for item in items}),
                "items": items,
            },
            warnings=warnings,
        )

    def scan_open(self, path: Path) -> int:
        """Count dead links in *path* and warn about them if ``scan_notify`` is on.

        Used when a note is opened; returns the dead-link count (0 on failure).
        """
        result = self.dead_links(path)
        if not result.ok:
            return 0
        count: int = result.data["count"]
        if count and self._workspace.settings.backlinks.scan_notify:
            self._notify(
                f"{Path(result.data['path']).name} has {count} dead link(s). "
                "Run `backlinkctl dead-links` to see them.",
                Level.WARN,
            )
        return count
