"""Command: watch: keep backlinks current while notes change on disk."""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

import click

from backlinkctl.commands._base import BacklinkCommand
from backlinkctl.errors import FileAccessError
from backlinkctl.infrastructure.filesystem import read_lines
from backlinkctl.output.notify import Level
from backlinkctl.services.result import ServiceResult
from backlinkctl.watch.session import WatchSession
from backlinkctl.watch.watcher import FileWatcher

if TYPE_CHECKING:
    from backlinkctl.commands._context import AppContext


@click.command(
    cls=BacklinkCommand,
    examples="""\
  backlinkctl watch
  backlinkctl watch --no-scan
  backlinkctl --log-file watch.log -v watch
  backlinkctl watch --once""",
)
@click.option("--no-scan", is_flag=True, help="Skip the dead-link scan of existing notes.")
@click.option("--once", is_flag=True, help="Process every note once, then exit.")
@click.pass_obj
def watch(app: AppContext, no_scan: bool, once: bool) -> None:
    """Watch the workspace and add backlinks as links appear. Ctrl-C stops."""
    ws = app.workspace
    session = WatchSession(ws)
    session.setup()

    notes = ws.find_notes()
    dead = 0
    if not no_scan:
        dead = sum(session.on_open(path) for path in notes)

    if once:
        for path in notes:
            try:
                lines = read_lines(path)
            except FileAccessError as exc:
                ws.notifier.notify(str(exc), Level.ERROR)
                continue
            session.on_change(path, lines, immediate=True)
        session.shutdown()
        app.emit(
            ServiceResult(
                ok=True,
                op="watch",
                data={"root": str(ws.root), "notes": len(notes), "dead_links": dead},
            )
        )
        return

    stop = threading.Event()
    with FileWatcher(
        session,
        ws.root,
        extension=ws.settings.scan.extension,
        skip_dirs=ws.settings.scan.skip_dirs,
    ):
        click.echo(f"Watching {ws.root} (Ctrl-C to stop)", err=True)
        try:
            while not stop.wait(1.0):
                pass
        except KeyboardInterrupt:
            stop.set()
