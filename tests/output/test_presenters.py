"""Tests for result rows and list presenters."""

from __future__ import annotations

from pathlib import Path

from backlinkctl.output.presenters import (
    LIST_OPS,
    NO_BACKLINKS,
    PlainListPresenter,
    ResultRow,
    TablePresenter,
    rows_from_result,
)
from backlinkctl.services.result import ServiceResult


def _backlinks() -> ServiceResult:
    return ServiceResult(
        ok=True,
        op="backlinks",
        data={
            "path": "/w/b.md",
            "count": 1,
            "items": [
                {
                    "source": "/w/a.md",
                    "line": 3,
                    "display": "Bee",
                    "target": "b.md",
                    "context": "   See [Bee](b.md)  ",
                }
            ],
        },
    )


class TestRowsFromResult:
    def test_backlinks(self) -> None:
        assert rows_from_result(_backlinks()) == [
            ResultRow("/w/a.md", 3, 1, '[Bee] "See [Bee](b.md)"')
        ]

    def test_orphans(self) -> None:
        result = ServiceResult(ok=True, op="orphans", data={"count": 1, "items": ["/w/a.md"]})
        assert rows_from_result(result) == [ResultRow("/w/a.md", 1, 1, NO_BACKLINKS)]

    def test_dead_links(self) -> None:
        result = ServiceResult(
            ok=True,
            op="dead_links",
            data={
                "path": "/w/a.md",
                "items": [{"source": "/w/a.md", "line": 2, "display": "g", "target": "ghost.md"}],
            },
        )
        assert rows_from_result(result)[0].text == 'Dead link: "g" -> ghost.md'

    def test_check_uses_link_column(self) -> None:
        result = ServiceResult(
            ok=True,
            op="check",
            data={
                "path": "/w/a.md",
                "missing": [{"line": 1, "column": 7, "display": "B", "target": "b.md"}],
            },
        )
        assert rows_from_result(result) == [
            ResultRow("/w/a.md", 1, 7, 'Missing backlink: "B" -> b.md')
        ]

    def test_other_ops_and_failures_empty(self) -> None:
        assert rows_from_result(ServiceResult(ok=True, op="sync")) == []
        assert rows_from_result(ServiceResult.failure("orphans", "X", "y")) == []

    def test_list_ops(self) -> None:
        assert {"backlinks", "orphans", "dead_links", "dead_links_all", "check"} == LIST_OPS


class TestPlainListPresenter:
    def test_quickfix_lines(self) -> None:
        rows = rows_from_result(_backlinks())
        assert PlainListPresenter().present("x", rows) == '/w/a.md:3:1: [Bee] "See [Bee](b.md)"'

    def test_relative_to_base(self) -> None:
        rows = [ResultRow("/w/sub/a.md", 1, 1, NO_BACKLINKS)]
        output = PlainListPresenter(base=Path("/w")).present("x", rows)
        assert output == "sub/a.md:1:1: No backlinks found"

    def test_empty(self) -> None:
        assert PlainListPresenter().present("x", []) == ""


class TestTablePresenter:
    def test_table_contains_rows(self) -> None:
        output = TablePresenter(base=Path("/w"), width=120).present(
            "Backlinks", rows_from_result(_backlinks())
        )
        assert "Backlinks" in output
        assert "a.md" in output
        assert "[Bee]" in output

    def test_empty_notice(self) -> None:
        assert TablePresenter().present("Orphaned notes", []) == "Orphaned notes: nothing found"
