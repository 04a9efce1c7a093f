"""Command: list registered rules."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from appvalidator.commands._base import AppCommand

if TYPE_CHECKING:
    from appvalidator.commands._context import AppContext


@click.command(
    cls=AppCommand,
    examples="""\
  appvalidator rules
  appvalidator -q rules
  appvalidator --json rules""",
)
@click.pass_obj
def rules(app: AppContext) -> None:
    """List the registered rules."""
    app.emit(app.service.list_rules())
