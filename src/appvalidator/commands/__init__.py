"""Subcommand modules for appvalidator.

Provides register_commands() which uses deferred imports to keep
``appvalidator --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register the standalone commands on the root CLI group."""
    from appvalidator.commands.check import check
    from appvalidator.commands.eval_cmd import eval_cmd
    from appvalidator.commands.rules import rules

    cli.add_command(rules)
    cli.add_command(eval_cmd)
    cli.add_command(check)
