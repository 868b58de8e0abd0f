"""Commands: backlinks, orphans, dead-links: read-only link queries."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from backlinkctl.commands._base import BacklinkCommand
from backlinkctl.services.graph import GraphService

if TYPE_CHECKING:
    from backlinkctl.commands._context import AppContext


@click.command(
    cls=BacklinkCommand,
    examples="""\
  backlinkctl backlinks notes/b.md
  backlinkctl --plain backlinks notes/b.md
  backlinkctl -q backlinks notes/b.md""",
)
@click.argument("file", type=click.Path(path_type=Path))
@click.pass_obj
def backlinks(app: AppContext, file: Path) -> None:
    """List every note linking to FILE."""
    app.emit(GraphService(app.workspace).backlinks(file))


@click.command(
    cls=BacklinkCommand,
    examples="""\
  backlinkctl orphans
  backlinkctl -q orphans | xargs wc -l""",
)
@click.pass_obj
def orphans(app: AppContext) -> None:
    """List notes that no other note links to."""
    app.emit(GraphService(app.workspace).orphans())


@click.command(
    "dead-links",
    cls=BacklinkCommand,
    examples="""\
  backlinkctl dead-links notes/a.md
  backlinkctl dead-links --all
  backlinkctl --plain dead-links --all""",
)
@click.argument("file", required=False, type=click.Path(path_type=Path))
@click.option("--all", "all_notes", is_flag=True, help="Scan every note in the workspace.")
@click.pass_obj
def dead_links(app: AppContext, file: Path | None, all_notes: bool) -> None:
    """List links that point at missing notes (in FILE, or everywhere with --all)."""
    if all_notes == (file is not None):
        raise click.UsageError("Pass a FILE, or --all.")

    svc = GraphService(app.workspace)
    if file is None:
        app.emit(svc.dead_links_all())
    else:
        app.emit(svc.dead_links(file))
