"""AppContext: shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``. Provides lazy RuleService construction and centralized
result emission (stdout/stderr routing + exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from appvalidator.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from appvalidator.config.settings import AppSettings
    from appvalidator.services.result import ServiceResult
    from appvalidator.services.rules import RuleService


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    The rule service is built on first use so ``--help`` and ``--version``
    never trigger plugin discovery.
    """

    def __init__(self, settings: AppSettings) -> None:
        self.settings = settings
        self._service: RuleService | None = None

        from appvalidator.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    @property
    def service(self) -> RuleService:
        """The rule service (created lazily on first access)."""
        if self._service is None:
            from appvalidator.services.rules import RuleService

            self._service = RuleService.from_settings(self.settings)
        return self._service

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success (``result.ok``): writes to stdout, returns normally.
          Warnings go to stderr so they don't pollute piped output.
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
