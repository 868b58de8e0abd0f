"""List presenters: show query results as navigable locations.

Query results are flattened into :class:`ResultRow` records (file, line,
column, text). A :class:`Presenter` turns rows into output: a rich table
for humans, or ``path:line:col: text`` lines that editors and ``grep``-style
tooling can jump through. The backend is chosen once, at the CLI boundary.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol

from rich.table import Table
from rich.text import Text

from backlinkctl.output.console import create_console, get_output

if TYPE_CHECKING:
    from collections.abc import Sequence

    from backlinkctl.services.result import ServiceResult

NO_BACKLINKS = "No backlinks found"


@dataclass(frozen=True)
class ResultRow:
    """One navigable location."""

    file: str
    line: int
    column: int
    text: str


def _display_path(path: str, base: Path | None) -> str:
    if base is None:
        return path
    try:
        return os.path.relpath(path, base)
    except ValueError:
        return path


def _backlink_rows(data: dict[str, Any]) -> list[ResultRow]:
    return [
        ResultRow(
            file=item["source"],
            line=item["line"],
            column=1,
            text=f'[{item["display"]}] "{item["context"].strip()}"',
        )
        for item in data.get("items", [])
    ]


def _orphan_rows(data: dict[str, Any]) -> list[ResultRow]:
    return [ResultRow(file=path, line=1, column=1, text=NO_BACKLINKS) for path in data["items"]]


def _dead_link_rows(data: dict[str, Any]) -> list[ResultRow]:
    return [
        ResultRow(
            file=item["source"] or data.get("path", ""),
            line=item["line"],
            column=1,
            text=f'Dead link: "{item["display"]}" -> {item["target"]}',
        )
        for item in data.get("items", [])
    ]


def _missing_rows(data: dict[str, Any]) -> list[ResultRow]:
    return [
        ResultRow(
            file=data["path"],
            line=item["line"],
            column=item.get("column", 1),
            text=f'Missing backlink: "{item["display"]}" -> {item["target"]}',
        )
        for item in data.get("missing", [])
    ]


_ROW_BUILDERS = {
    "backlinks": _backlink_rows,
    "orphans": _orphan_rows,
    "dead_links": _dead_link_rows,
    "dead_links_all": _dead_link_rows,
    "check": _missing_rows,
}

LIST_OPS = frozenset(_ROW_BUILDERS)


def rows_from_result(result: ServiceResult) -> list[ResultRow]:
    """Flatten a list-shaped result into rows. Other ops yield no rows."""
    builder = _ROW_BUILDERS.get(result.op)
    if builder is None or not result.ok:
        return []
    return builder(result.data)


class Presenter(Protocol):
    """Capability interface for showing a list of locations."""

    def present(self, title: str, rows: Sequence[ResultRow]) -> str: ...


class PlainListPresenter:
    """``path:line:col: text`` per row, paths relative to *base* when given."""

    def __init__(self, *, base: Path | None = None) -> None:
        self._base = base

    def present(self, title: str, rows: Sequence[ResultRow]) -> str:
        return "\n".join(
            f"{_display_path(row.file, self._base)}:{row.line}:{row.column}: {row.text}"
            for row in rows
        )


class TablePresenter:
    """Rich table with one row per location."""

    def __init__(self, *, base: Path | None = None, width: int | None = None) -> None:
        self._base = base
        self._width = width

    def build(self, title: str, rows: Sequence[ResultRow]) -> Table | Text:
        """The renderable for *rows*; a one-line notice when empty."""
        if not rows:
            return Text(f"{title}: nothing found", style="bl.info")

        table = Table(title=Text(title), show_header=True, pad_edge=False, expand=False)
        table.add_column("File", style="bl.path", no_wrap=True)
        table.add_column("Line", style="bl.line", justify="right")
        table.add_column("Text")
        for row in rows:
            table.add_row(
                Text(_display_path(row.file, self._base)), str(row.line), Text(row.text)
            )
        return table

    def present(self, title: str, rows: Sequence[ResultRow]) -> str:
        console = create_console(width=self._width)
        console.print(self.build(title, rows))
        return get_output(console).rstrip("\n")
