"""LinkGraph: per-query NetworkX graph derived from note contents.

Built once per query, never cached across queries. Each note is parsed
exactly once per build; resolved links become edges (one per occurrence)
and unresolved links stay on the source node as dead links.

Results are ordered by file path, then line number, regardless of how
many workers parsed the corpus.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, TypeAlias

import networkx as nx

from backlinkctl.domain.links import Link, find_links
from backlinkctl.errors import FileAccessError, ScanCancelled
from backlinkctl.infrastructure.filesystem import read_lines

if TYPE_CHECKING:
    from backlinkctl.infrastructure.resolver import PathResolver

logger = logging.getLogger(__name__)

_Graph: TypeAlias = nx.MultiDiGraph


@dataclass(frozen=True)
class BacklinkRow:
    """A link in ``source_file`` that resolves to the queried note."""

    source_file: Path
    line_number: int
    display_text: str
    raw_target: str
    context: str


@dataclass(frozen=True)
class DeadLinkRow:
    """A link whose target resolves to nothing."""

    raw_target: str
    line_number: int
    display_text: str
    source_file: Path | None = None


@dataclass
class _ParsedNote:
    path: Path
    lines: list[str] = field(default_factory=list)
    resolved: list[tuple[Link, Path]] = field(default_factory=list)
    dead: list[Link] = field(default_factory=list)
    error: str | None = None


def _parse_note(path: Path, resolver: PathResolver) -> _ParsedNote:
    parsed = _ParsedNote(path=path)
    try:
        parsed.lines = read_lines(path)
    except FileAccessError as exc:
        parsed.error = str(exc)
        return parsed
    for link in find_links(parsed.lines):
        target = resolver.resolve(path, link.target)
        if target is None:
            parsed.dead.append(link)
        else:
            parsed.resolved.append((link, target))
    return parsed


class LinkGraph:
    """Directed multigraph of notes; edges carry the link that produced them.

    Node attributes: ``corpus`` (part of the scanned set), ``dead`` (list of
    unresolved :class:`Link`), ``lines`` (note content, for context).
    Edge attributes: ``link``.
    """

    def __init__(self, graph: _Graph, warnings: list[str]) -> None:
        self._graph = graph
        self.warnings = warnings

    @property
    def graph(self) -> _Graph:
        return self._graph

    @classmethod
    def build(
        cls,
        files: Sequence[Path],
        resolver: PathResolver,
        *,
        workers: int = 1,
        cancel: threading.Event | None = None,
    ) -> LinkGraph:
        """Parse *files* and assemble the graph.

        Unreadable files are skipped with a warning. Raises
        :class:`ScanCancelled` if *cancel* is set between files.
        """
        g: _Graph = nx.MultiDiGraph()
        warnings: list[str] = []
        total = len(files)
        done = 0
        done_lock = threading.Lock()

        def parse(path: Path) -> _ParsedNote:
            nonlocal done
            if cancel is not None and cancel.is_set():
                raise ScanCancelled(done, total)
            parsed = _parse_note(path, resolver)
            with done_lock:
                done += 1
            return parsed

        if workers > 1 and total > 1:
            with ThreadPoolExecutor(max_workers=workers) as pool:
                try:
                    parsed_notes = list(pool.map(parse, files))
                except ScanCancelled as exc:
                    # Parses already running finish before the count is taken.
                    pool.shutdown(wait=True, cancel_futures=True)
                    raise ScanCancelled(done, total) from exc
        else:
            parsed_notes = []
            for index, path in enumerate(files):
                if cancel is not None and cancel.is_set():
                    raise ScanCancelled(index, total)
                parsed_notes.append(_parse_note(path, resolver))

        for parsed in parsed_notes:
            if parsed.error is not None:
                logger.warning("Skipping unreadable note: %s", parsed.error)
                warnings.append(parsed.error)
                continue
            g.add_node(parsed.path, corpus=True, dead=parsed.dead, lines=parsed.lines)

        for parsed in parsed_notes:
            if parsed.error is not None:
                continue
            for link, target in parsed.resolved:
                if target not in g:
                    g.add_node(target, corpus=False, dead=[], lines=[])
                g.add_edge(parsed.path, target, link=link)

        logger.debug(
            "Built link graph: %d nodes, %d edges", g.number_of_nodes(), g.number_of_edges()
        )
        return cls(g, warnings)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def backlinks_to(self, file: Path) -> list[BacklinkRow]:
        """Links in other corpus notes that resolve to *file*."""
        if file not in self._graph:
            return []
        rows: list[BacklinkRow] = []
        for source, _, data in self._graph.in_edges(file, data=True):
            if source == file:
                continue
            link: Link = data["link"]
            lines: list[str] = self._graph.nodes[source]["lines"]
            rows.append(
                BacklinkRow(
                    source_file=source,
                    line_number=link.line,
                    display_text=link.display,
                    raw_target=link.target,
                    context=lines[link.line - 1] if link.line <= len(lines) else "",
                )
            )
        return sorted(rows, key=lambda r: (str(r.source_file), r.line_number))

    def orphans(self) -> list[Path]:
        """Corpus notes that no other note links to. Self-links don't count."""
        result = [
            node
            for node, attrs in self._graph.nodes(data=True)
            if attrs["corpus"]
            and not any(source != node for source in self._graph.predecessors(node))
        ]
        return sorted(result, key=str)

    def dead_links(self, file: Path) -> list[DeadLinkRow]:
        """Unresolved links in *file*."""
        if file not in self._graph:
            return []
        return [
            DeadLinkRow(
                raw_target=link.target,
                line_number=link.line,
                display_text=link.display,
            )
            for link in sorted(self._graph.nodes[file]["dead"], key=lambda lk: lk.line)
        ]

    def dead_links_all(self) -> list[DeadLinkRow]:
        """Unresolved links across every corpus note, with ``source_file`` set."""
        rows = [
            DeadLinkRow(
                raw_target=link.target,
                line_number=link.line,
                display_text=link.display,
                source_file=node,
            )
            for node, attrs in self._graph.nodes(data=True)
            if attrs["corpus"]
            for link in attrs["dead"]
        ]
        return sorted(rows, key=lambda r: (str(r.source_file), r.line_number))
