"""Subcommand modules for backlinkctl.

Provides register_commands() which uses deferred imports to keep
``backlinkctl --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register every standalone command on the root CLI group."""
    from backlinkctl.commands.check import check
    from backlinkctl.commands.config_cmd import config_cmd
    from backlinkctl.commands.links import backlinks, dead_links, orphans
    from backlinkctl.commands.sync import ensure, sync
    from backlinkctl.commands.watch import watch

    cli.add_command(sync)
    cli.add_command(ensure)
    cli.add_command(check)
    cli.add_command(backlinks)
    cli.add_command(orphans)
    cli.add_command(dead_links)
    cli.add_command(watch)
    cli.add_command(config_cmd)
