"""appvalidator command line: global flags, settings and subcommands."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import click

from appvalidator import __version__
from appvalidator.commands import register_commands
from appvalidator.commands._context import AppContext
from appvalidator.config.settings import AppSettings

# Flags that become AppSettings fields of the same name
_SETTINGS_FLAGS = (
    click.option("--json", "json_output", is_flag=True, help="Print results as JSON."),
    click.option("-q", "--quiet", is_flag=True, help="One line per result."),
    click.option("-v", "--verbose", is_flag=True, help="Show details and debug logs."),
    click.option("--log-json", is_flag=True, help="Write logs to stderr as JSON lines."),
)


def settings_flags(func: Callable[..., Any]) -> Callable[..., Any]:
    for option in reversed(_SETTINGS_FLAGS):
        func = option(func)
    return func


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="appvalidator")
@settings_flags
@click.option(
    "-c",
    "--config",
    "config_path",
    default=None,
    help="Config file to use instead of appvalidator.toml discovery.",
)
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, **flags: bool) -> None:
    """Check values against max_without rules."""
    ctx.obj = AppContext(AppSettings.from_cli(config_path=config_path, **flags))
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
