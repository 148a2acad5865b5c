"""AppContext: shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``.  Provides lazy SettingsContext initialization and
centralized result emission (stdout/stderr routing + exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from optguard.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from optguard.config.settings import OptguardSettings
    from optguard.infrastructure.context import SettingsContext
    from optguard.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    Subcommands access it via ``@click.pass_obj``.  The settings context
    is lazily initialized on first use so ``--help`` and ``--version``
    never open the option store.
    """

    def __init__(self, settings: OptguardSettings) -> None:
        self.settings = settings
        self._ctx: SettingsContext | None = None

        from optguard.config.logging import configure_logging

        configure_logging(
            verbose=settings.verbose,
            quiet=settings.quiet,
            log_json=settings.log_json,
        )

        if settings.verbose:
            from optguard.services.telemetry import enable_telemetry

            enable_telemetry()

    @property
    def ctx(self) -> SettingsContext:
        """The settings context (created lazily on first access)."""
        if self._ctx is None:
            from optguard.infrastructure.context import SettingsContext

            self._ctx = SettingsContext(self.settings)
        return self._ctx

    def close(self) -> None:
        if self._ctx is not None:
            self._ctx.close()
            self._ctx = None

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success (``result.ok``): writes to stdout, returns normally.
          Warnings are emitted to stderr so they don't pollute piped output.
        * Failure: writes to stderr, exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            # In JSON mode, warnings are already in the serialized payload.
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
