"""Command: list available rule factories."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from formgate.commands._base import FormgateCommand

if TYPE_CHECKING:
    from formgate.commands._context import AppContext


@click.command(
    cls=FormgateCommand,
    examples="""\
  formgate rules
  formgate --json rules""",
)
@click.pass_obj
def rules(app: AppContext) -> None:
    """List the rule factories usable with ``-r RULE[:ARG]``."""
    from formgate.domain.rules import RULE_FACTORIES, describe_rule_factory, is_builtin_rule
    from formgate.engine.result import OperationResult

    # Loading plugins registers their factories.
    manager = app.plugin_manager
    entries = [
        {
            "name": name,
            "source": "builtin" if is_builtin_rule(name) else "plugin",
            "description": describe_rule_factory(name),
        }
        for name in sorted(RULE_FACTORIES)
    ]
    app.emit(
        OperationResult(
            ok=True,
            op="rules",
            data={"rules": entries},
            meta={"plugins": manager.list_plugin_names() if manager else []},
        )
    )
