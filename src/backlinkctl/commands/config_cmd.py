"""Command: config: show the effective configuration."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from backlinkctl.commands._base import BacklinkCommand
from backlinkctl.services.result import ServiceResult

if TYPE_CHECKING:
    from backlinkctl.commands._context import AppContext


@click.command(
    "config",
    cls=BacklinkCommand,
    examples="""\
  backlinkctl config
  backlinkctl --json config
  BACKLINKCTL_BACKLINKS__LINK_FORMAT=wiki backlinkctl config""",
)
@click.pass_obj
def config_cmd(app: AppContext) -> None:
    """Show the configuration in effect after TOML, env vars and flags."""
    app.emit(ServiceResult(ok=True, op="config", data=app.settings.effective()))
