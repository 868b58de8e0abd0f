"""Tests for LinkGraph construction and queries."""

from __future__ import annotations

import threading
from pathlib import Path

import pytest

from backlinkctl.errors import ScanCancelled
from backlinkctl.infrastructure.filesystem import find_note_files
from backlinkctl.infrastructure.graph import engine
from backlinkctl.infrastructure.graph.engine import LinkGraph
from backlinkctl.infrastructure.resolver import PathResolver
from tests.conftest import write_note


@pytest.fixture
def corpus(tmp_path: Path) -> Path:
    write_note(tmp_path, "a.md", "# A", "See [b](b.md) and [[c]].")
    write_note(tmp_path, "b.md", "# B", "Back to [Alpha](a.md#top)", "[gone](missing.md)")
    write_note(tmp_path, "c.md", "# C", "Self [c](c.md)")
    write_note(tmp_path, "sub/d.md", "Up: [[../a|Alpha]]", "```", "[x](nowhere.md)", "```")
    return tmp_path


def _build(root: Path, *, workers: int = 1) -> LinkGraph:
    return LinkGraph.build(find_note_files(root), PathResolver(root), workers=workers)


class TestBuild:
    def test_edges_one_per_link(self, corpus: Path) -> None:
        graph = _build(corpus).graph
        assert graph.number_of_edges(corpus / "a.md", corpus / "b.md") == 1
        assert graph.number_of_edges(corpus / "sub" / "d.md", corpus / "a.md") == 1

    def test_fenced_links_ignored(self, corpus: Path) -> None:
        graph = _build(corpus)
        assert graph.dead_links(corpus / "sub" / "d.md") == []

    def test_unreadable_note_warns(self, tmp_path: Path) -> None:
        good = write_note(tmp_path, "good.md", "ok")
        graph = LinkGraph.build([good, tmp_path / "ghost.md"], PathResolver(tmp_path))
        assert len(graph.warnings) == 1
        assert "ghost.md" in graph.warnings[0]
        assert graph.orphans() == [good]

    def test_cancelled_before_start(self, corpus: Path) -> None:
        cancel = threading.Event()
        cancel.set()
        with pytest.raises(ScanCancelled):
            LinkGraph.build(find_note_files(corpus), PathResolver(corpus), cancel=cancel)

    def test_cancelled_midway_sequential_counts_parsed(
        self, corpus: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        cancel = threading.Event()
        real_parse = engine._parse_note

        def parse_then_cancel(path: Path, resolver: PathResolver):
            cancel.set()
            return real_parse(path, resolver)

        monkeypatch.setattr(engine, "_parse_note", parse_then_cancel)
        with pytest.raises(ScanCancelled) as excinfo:
            LinkGraph.build(find_note_files(corpus), PathResolver(corpus), cancel=cancel)
        assert (excinfo.value.processed, excinfo.value.total) == (1, 4)

    def test_cancelled_midway_parallel_counts_parsed(
        self, corpus: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        cancel = threading.Event()
        real_parse = engine._parse_note

        def parse_then_cancel(path: Path, resolver: PathResolver):
            cancel.set()
            return real_parse(path, resolver)

        monkeypatch.setattr(engine, "_parse_note", parse_then_cancel)
        with pytest.raises(ScanCancelled) as excinfo:
            LinkGraph.build(
                find_note_files(corpus), PathResolver(corpus), workers=2, cancel=cancel
            )
        # Only the two files picked up first can start before the flag is seen.
        assert 1 <= excinfo.value.processed <= 2
        assert excinfo.value.total == 4

    def test_parallel_matches_sequential(self, corpus: Path) -> None:
        seq = _build(corpus)
        par = _build(corpus, workers=4)
        assert par.orphans() == seq.orphans()
        assert par.dead_links_all() == seq.dead_links_all()
        assert par.backlinks_to(corpus / "a.md") == seq.backlinks_to(corpus / "a.md")


class TestBacklinksTo:
    def test_rows_sorted_with_context(self, corpus: Path) -> None:
        rows = _build(corpus).backlinks_to(corpus / "a.md")
        assert [(r.source_file, r.line_number) for r in rows] == [
            (corpus / "b.md", 2),
            (corpus / "sub" / "d.md", 1),
        ]
        assert rows[0].display_text == "Alpha"
        assert rows[0].raw_target == "a.md#top"
        assert rows[0].context == "Back to [Alpha](a.md#top)"
        assert rows[1].display_text == "Alpha"

    def test_self_link_excluded(self, corpus: Path) -> None:
        rows = _build(corpus).backlinks_to(corpus / "c.md")
        assert [r.source_file for r in rows] == [corpus / "a.md"]

    def test_unknown_file(self, corpus: Path) -> None:
        assert _build(corpus).backlinks_to(corpus / "zzz.md") == []


class TestOrphans:
    def test_only_unlinked_notes(self, corpus: Path) -> None:
        assert _build(corpus).orphans() == [corpus / "sub" / "d.md"]

    def test_self_link_only_is_orphan(self, tmp_path: Path) -> None:
        lonely = write_note(tmp_path, "lonely.md", "[me](lonely.md)")
        assert _build(tmp_path).orphans() == [lonely]


class TestDeadLinks:
    def test_per_file(self, corpus: Path) -> None:
        rows = _build(corpus).dead_links(corpus / "b.md")
        assert len(rows) == 1
        assert rows[0].raw_target == "missing.md"
        assert rows[0].line_number == 3
        assert rows[0].display_text == "gone"
        assert rows[0].source_file is None

    def test_all_carries_source(self, tmp_path: Path) -> None:
        write_note(tmp_path, "z.md", "[one](nope1.md)")
        write_note(tmp_path, "a.md", "text", "[[nope2]]")
        rows = _build(tmp_path).dead_links_all()
        assert [(r.source_file.name, r.line_number, r.raw_target) for r in rows] == [
            ("a.md", 2, "nope2"),
            ("z.md", 1, "nope1.md"),
        ]

    def test_fragment_only_target_is_dead(self, tmp_path: Path) -> None:
        note = write_note(tmp_path, "a.md", "[top](#top)")
        assert [r.raw_target for r in _build(tmp_path).dead_links(note)] == ["#top"]
