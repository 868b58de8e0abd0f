"""Root CLI group for backlinkctl with global flags and command registration."""

from __future__ import annotations

from pathlib import Path

import click

from backlinkctl import __version__
from backlinkctl.commands import register_commands
from backlinkctl.commands._base import BacklinkGroup
from backlinkctl.commands._context import AppContext
from backlinkctl.config.settings import BacklinkSettings


@click.group(
    cls=BacklinkGroup,
    invoke_without_command=True,
    examples="""\
  backlinkctl sync --all
  backlinkctl --plain dead-links --all
  backlinkctl -r ~/notes backlinks ideas.md
  backlinkctl --json orphans""",
)
@click.version_option(version=__version__, prog_name="backlinkctl")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output.")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug info.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Also append JSON log lines to this file.",
)
@click.option("--plain", is_flag=True, help="List results as path:line:col: text.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.option(
    "-r",
    "--root",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Workspace root (default: directory of backlinkctl.toml, else CWD).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    log_file: Path | None,
    plain: bool,
    config_path: str | None,
    root: Path | None,
) -> None:
    """backlinkctl: keep markdown notes linked in both directions."""
    settings = BacklinkSettings.from_cli(
        config_path=config_path,
        root=root,
        json_output=json_output,
        quiet=quiet,
        verbose=verbose,
        log_json=log_json,
        log_file=log_file,
        plain=plain,
    )
    app = AppContext(settings)
    ctx.obj = app
    ctx.call_on_close(app.close)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
