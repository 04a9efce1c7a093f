"""Command: evaluate max_without once against a JSON value."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from appvalidator.commands._base import AppCommand, decode_json
from appvalidator.services.rules import VALUE_KINDS

if TYPE_CHECKING:
    from appvalidator.commands._context import AppContext


@click.command(
    "eval",
    cls=AppCommand,
    examples="""\
  appvalidator eval "filters.name 10" --value 50 --parent '{"filters": {"name": "x"}}'
  appvalidator eval "10" --value 5 --kind uint
  appvalidator eval "1h30m" --value 7200000000000 --kind duration
  appvalidator eval "2024-01-01T00:00:00+00:00" --value '"2023-06-01T00:00:00+00:00"' \\
      --kind timestamp""",
)
@click.argument("param")
@click.option("--value", "value_json", required=True, help="Field value as JSON.")
@click.option(
    "--parent",
    "parent_json",
    default=None,
    help="JSON object dependency paths resolve against.",
)
@click.option(
    "--kind",
    type=click.Choice(VALUE_KINDS),
    default="auto",
    show_default=True,
    help="Treat the value as this kind instead of inferring it.",
)
@click.pass_obj
def eval_cmd(
    app: AppContext,
    param: str,
    value_json: str,
    parent_json: str | None,
    kind: str,
) -> None:
    """Evaluate ``max_without=PARAM`` for a single value."""
    value = decode_json(value_json, option="--value")
    parent = decode_json(parent_json, option="--parent") if parent_json is not None else None
    app.emit(app.service.evaluate(param, value, parent=parent, kind=kind))
