"""Command: check: report links whose targets do not link back."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from backlinkctl.commands._base import BacklinkCommand
from backlinkctl.services.sync import SyncService

if TYPE_CHECKING:
    from backlinkctl.commands._context import AppContext


@click.command(
    cls=BacklinkCommand,
    examples="""\
  backlinkctl check notes/a.md
  backlinkctl --plain check notes/a.md
  backlinkctl --json check notes/a.md""",
)
@click.argument("file", type=click.Path(path_type=Path))
@click.pass_obj
def check(app: AppContext, file: Path) -> None:
    """List links in FILE whose targets are missing a backlink."""
    app.emit(SyncService(app.workspace).check_file(file))
