"""Commands: sync and ensure: write backlinks into notes."""

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
  backlinkctl sync notes/a.md
  backlinkctl sync notes/a.md notes/b.md
  backlinkctl sync --all
  backlinkctl --json sync --all""",
)
@click.argument("files", nargs=-1, type=click.Path(path_type=Path))
@click.option("--all", "all_notes", is_flag=True, help="Sync every note in the workspace.")
@click.pass_obj
def sync(app: AppContext, files: tuple[Path, ...], all_notes: bool) -> None:
    """Create missing backlinks for the links in FILES."""
    if all_notes == bool(files):
        raise click.UsageError("Pass one or more FILES, or --all.")

    svc = SyncService(app.workspace)
    if all_notes:
        app.emit(svc.sync_all())
        return
    app.emit_all(svc.sync_file(path) for path in files)


@click.command(
    cls=BacklinkCommand,
    examples="""\
  backlinkctl ensure notes/b.md notes/a.md
  backlinkctl --json ensure projects/x.md daily/2024-01-01.md""",
)
@click.argument("target", type=click.Path(path_type=Path))
@click.argument("source", type=click.Path(path_type=Path))
@click.pass_obj
def ensure(app: AppContext, target: Path, source: Path) -> None:
    """Ensure TARGET lists a backlink to SOURCE."""
    app.emit(SyncService(app.workspace).ensure(target, source))
