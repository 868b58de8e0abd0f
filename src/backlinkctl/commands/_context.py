"""AppContext: shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``.  Provides lazy Workspace initialization and
centralized result emission (stdout/stderr routing + exit codes).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import click

from backlinkctl.output.formatters import OutputSettings, format_result
from backlinkctl.output.notify import ConsoleNotifier, Level

if TYPE_CHECKING:
    from collections.abc import Iterable

    from backlinkctl.config.settings import BacklinkSettings
    from backlinkctl.infrastructure.workspace import Workspace
    from backlinkctl.services.result import ServiceResult

logger = logging.getLogger(__name__)


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    The workspace is created on first use so ``--help`` and ``--version``
    never touch the filesystem or load plugins.
    """

    def __init__(self, settings: BacklinkSettings) -> None:
        self.settings = settings
        self._workspace: Workspace | None = None

        from backlinkctl.config.logging import configure_logging

        configure_logging(
            verbose=settings.verbose,
            log_json=settings.log_json,
            log_file=settings.log_file,
        )

        if settings.verbose:
            from backlinkctl.services.telemetry import enable_telemetry

            enable_telemetry()

    @property
    def workspace(self) -> Workspace:
        """The workspace instance (created lazily on first access)."""
        if self._workspace is None:
            from backlinkctl.infrastructure.workspace import Workspace

            min_level = Level.WARN if self.settings.quiet else Level.INFO
            notifier = ConsoleNotifier(min_level=min_level)
            self._workspace = Workspace(self.settings, notifier=notifier)
            self._workspace.init_event_bus(sync=True)
        return self._workspace

    def close(self) -> None:
        """Flush plugin events; registered with ``ctx.call_on_close``."""
        if self._workspace is not None:
            self._workspace.close()

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success (``result.ok``): writes to stdout, returns normally.
          Warnings are emitted to stderr so they don't pollute piped output.
        * Failure: writes to stderr, exits with code 1.
        """
        if not self._write(result):
            raise SystemExit(1)

    def emit_all(self, results: Iterable[ServiceResult]) -> None:
        """Emit every result of a per-file batch, then exit 1 if any failed.

        A failed file never stops the files after it.
        """
        failed = 0
        for result in results:
            if not self._write(result):
                failed += 1
        if failed:
            raise SystemExit(1)

    def _write(self, result: ServiceResult) -> bool:
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
            plain=self.settings.plain,
            base=self.settings.root,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            if output:
                click.echo(output)
            # In JSON mode, warnings are already in the serialized payload.
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            logger.info("%s failed: %s", result.op, result.error_code)
            click.echo(output, err=True)
        return result.ok
