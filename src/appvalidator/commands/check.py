"""Command: validate a JSON document against per-field rules."""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING

import click

from appvalidator.commands._base import AppCommand
from appvalidator.engine.model import Rule

if TYPE_CHECKING:
    from appvalidator.commands._context import AppContext


def _parse_rule(value: str) -> tuple[str, Rule]:
    """Split ``FIELD=RULE[=PARAM]`` into the field name and its rule."""
    field_name, sep, rule_text = value.partition("=")
    name, _, param = rule_text.partition("=")
    if not sep or not field_name or not name:
        msg = f"expected FIELD=RULE[=PARAM], got {value!r}"
        raise click.BadParameter(msg, param_hint="--rule")
    return field_name, Rule(name, param)


@click.command(
    cls=AppCommand,
    examples="""\
  appvalidator check search.json --rule "limit=max_without=filters.name 1000"
  appvalidator check search.json --rule "limit=max_without=query 50" --rule "q=max_without=8"
  appvalidator --json check search.json --rule "page_size=max_without=100"
""",
)
@click.argument("document", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--rule",
    "rule_specs",
    multiple=True,
    required=True,
    help="FIELD=RULE[=PARAM] pair; repeat for several fields.",
)
@click.pass_obj
def check(app: AppContext, document: Path, rule_specs: tuple[str, ...]) -> None:
    """Validate top-level fields of a JSON DOCUMENT."""
    try:
        data = json.loads(document.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        msg = f"{document} is not valid JSON: {exc.msg}"
        raise click.ClickException(msg) from exc

    rules = dict(_parse_rule(spec) for spec in rule_specs)
    app.emit(app.service.check_document(data, rules))
