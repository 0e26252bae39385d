"""Subcommand modules for formgate.

Provides register_commands(), which imports command modules lazily so
``formgate --help`` stays fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all standalone commands on the root CLI group."""
    from formgate.commands.check import check
    from formgate.commands.rules import rules
    from formgate.commands.submit import submit

    cli.add_command(rules)
    cli.add_command(check)
    cli.add_command(submit)
