"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO).  The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json as _json
from pathlib import Path
from typing import TYPE_CHECKING, Any

from rich.text import Text

from backlinkctl.output.console import create_console, get_output
from backlinkctl.output.presenters import TablePresenter, rows_from_result

if TYPE_CHECKING:
    from rich.console import Console

    from backlinkctl.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False, base: Path | None = None) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    *base* shortens file paths in tables.
    """
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose, base=base)
        if verbose:
            _render_meta(console, result)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode.

    List results print one path per line; everything else prints the
    status line only.
    """
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} - {msg}"

    items = result.data.get("items")
    if items and isinstance(items, list):
        return "\n".join(_extract_path(item) for item in items)

    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _extract_path(item: Any) -> str:
    if isinstance(item, dict):
        source = item.get("source")
        return f"{source}:{item['line']}" if "line" in item else str(source)
    return str(item)


def _status_line(console: Console, result: ServiceResult) -> None:
    """Print the OK status line."""
    console.print(Text("OK", style="bl.ok"), Text(f"  {result.op}", style="bl.op"), sep="")


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="bl.key")
    if key in ("path", "target", "source", "root", "config_path"):
        v = Text(str(value), style="bl.path")
    elif key == "entry":
        v = Text(str(value), style="bl.display")
    else:
        v = Text(str(value))
    console.print(k, v, sep="")


def _change_line(console: Console, target: str, entry: str) -> None:
    console.print(Text("    + ", style="bl.ok"), Text(f"{target}: {entry}"), sep="")


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Print meta block including telemetry span tree (verbose only)."""
    if not result.meta:
        return

    console.print()
    console.print(Text("  meta:", style="dim"))
    for k, v in result.meta.items():
        if k == "telemetry":
            _render_telemetry_tree(console, v, indent=4)
        else:
            console.print(f"    {k}: {v}")


def _render_telemetry_tree(console: Console, span_data: dict[str, Any], indent: int = 4) -> None:
    """Render a hierarchical span tree with color-coded timing."""
    prefix = " " * indent
    duration = span_data.get("duration_ms", 0.0)
    if duration > 1000:
        style = "bold red"
    elif duration > 100:
        style = "yellow"
    else:
        style = "dim"

    line = f"{prefix}[{style}]{duration:>8.2f}ms[/{style}]  {span_data.get('name', '?')}"
    annotations = span_data.get("annotations") or {}
    if annotations:
        line += "  (" + ", ".join(f"{k}={v}" for k, v in annotations.items()) + ")"
    console.print(line)

    for child in span_data.get("children", []):
        _render_telemetry_tree(console, child, indent=indent + 4)


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    console.print(
        Text("ERROR", style="bl.error"),
        Text(f"  {result.op}", style="bl.op"),
        Text(" - "),
        Text(msg),
        sep="",
    )

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}")


# ── Mutation renderers ────────────────────────────────────────────────


def _render_skipped(result: ServiceResult, console: Console) -> None:
    _status_line(console, result)
    for key in ("path", "target", "source"):
        if key in result.data:
            _field(console, key, result.data[key])
    _field(console, "skipped", "not a markdown file")


def _render_sync(
    result: ServiceResult, console: Console, *, verbose: bool = False, base: Path | None = None
) -> None:
    if result.data.get("skipped"):
        _render_skipped(result, console)
        return

    d = result.data
    _status_line(console, result)
    _field(console, "path", d["path"])
    _field(console, "links", d["links"])
    _field(console, "inserted", len(d["inserted"]))
    for item in d["inserted"]:
        _change_line(console, item["target"], item["entry"])
    if d["existing"]:
        _field(console, "already linked back", len(d["existing"]))
    if d["unresolved"]:
        _field(console, "unresolved", ", ".join(d["unresolved"]))
    if d["outside"]:
        _field(console, "outside workspace", len(d["outside"]))


def _render_sync_all(
    result: ServiceResult, console: Console, *, verbose: bool = False, base: Path | None = None
) -> None:
    d = result.data
    _status_line(console, result)
    _field(console, "files", d["files"])
    _field(console, "inserted", d["count"])
    for change in d["changes"]:
        _change_line(console, change["target"], change["entry"])
    if d.get("failed"):
        _field(console, "failed", d["failed"])


def _render_ensure(
    result: ServiceResult, console: Console, *, verbose: bool = False, base: Path | None = None
) -> None:
    if result.data.get("skipped"):
        _render_skipped(result, console)
        return

    _status_line(console, result)
    for key in ("target", "source", "status", "entry"):
        if key in result.data:
            _field(console, key, result.data[key])


# ── Query renderers ───────────────────────────────────────────────────

_TITLES = {
    "backlinks": "Backlinks",
    "orphans": "Orphaned notes",
    "dead_links": "Dead links",
    "dead_links_all": "Dead links",
    "check": "Missing backlinks",
}


def _render_rows(
    result: ServiceResult, console: Console, *, verbose: bool = False, base: Path | None = None
) -> None:
    """Render list results (backlinks, orphans, dead links) as a table."""
    title = _TITLES.get(result.op, result.op)
    if "path" in result.data:
        title = f"{title}: {Path(result.data['path']).name}"
    console.print(TablePresenter(base=base).build(title, rows_from_result(result)))
    console.print(Text(f"{result.data.get('count', 0)} found", style="bl.key"))


def _render_check(
    result: ServiceResult, console: Console, *, verbose: bool = False, base: Path | None = None
) -> None:
    if result.data.get("count", 0) == 0:
        console.print("[bl.ok]OK[/bl.ok]  Every linked note links back.")
        return
    _render_rows(result, console, verbose=verbose, base=base)


def _render_config(
    result: ServiceResult, console: Console, *, verbose: bool = False, base: Path | None = None
) -> None:
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, dict):
            console.print(Text(f"  [{key}]", style="bl.op"))
            for sub_key, sub_value in value.items():
                _field(console, f"  {sub_key}", sub_value)
        else:
            _field(console, key, value)


def _render_generic(
    result: ServiceResult, console: Console, *, verbose: bool = False, base: Path | None = None
) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            _field(console, key, _json.dumps(value, separators=(",", ":")))
        else:
            _field(console, key, value)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    # Mutations
    "sync": _render_sync,
    "sync_all": _render_sync_all,
    "ensure": _render_ensure,
    # Queries
    "check": _render_check,
    "backlinks": _render_rows,
    "orphans": _render_rows,
    "dead_links": _render_rows,
    "dead_links_all": _render_rows,
    # Settings
    "config": _render_config,
}
