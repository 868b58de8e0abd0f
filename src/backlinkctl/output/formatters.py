"""Output mode dispatch.

The CLI renders ServiceResult for humans (Rich tables and status lines),
for editors (``--plain``: ``path:line:col: text`` location lists) or for
machines (``--json``). The formatter layer picks the mode.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from backlinkctl.output.presenters import LIST_OPS, PlainListPresenter, rows_from_result
from backlinkctl.output.renderers import render_quiet, render_result

if TYPE_CHECKING:
    from pathlib import Path

    from backlinkctl.services.result import ServiceResult


@dataclass(frozen=True)
class OutputSettings:
    """Output flags collected from the global CLI options."""

    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    plain: bool = False
    base: Path | None = None


def format_result(
    result: ServiceResult,
    *,
    settings: OutputSettings | None = None,
    json_output: bool = False,
) -> str:
    """Format a ServiceResult for display.

    Precedence: JSON, then quiet, then plain location lists (list ops
    only), then Rich. When *settings* is given the bare *json_output*
    keyword is ignored.
    """
    if settings is None:
        settings = OutputSettings(json_output=json_output)

    if settings.json_output:
        return result.model_dump_json(indent=2)
    if settings.quiet:
        return render_quiet(result)
    if settings.plain and result.ok and result.op in LIST_OPS:
        return PlainListPresenter(base=settings.base).present(result.op, rows_from_result(result))
    return render_result(result, verbose=settings.verbose, base=settings.base)
