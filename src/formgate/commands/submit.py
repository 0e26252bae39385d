"""Command: run the submission pipeline over a form built from the shell."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

import click

from formgate.commands._base import ASSIGNMENT, RULE, FormgateCommand, make_rule

if TYPE_CHECKING:
    from formgate.commands._context import AppContext
    from formgate.domain.rules import ValidationRule


def _collect_rules(
    assignments: tuple[tuple[str, str], ...],
) -> dict[str, list[ValidationRule]]:
    chains: dict[str, list[ValidationRule]] = {}
    for name, raw in assignments:
        spec = RULE.convert(raw, None, None)
        chains.setdefault(name, []).append(make_rule(spec))
    return chains


@click.command(
    cls=FormgateCommand,
    examples="""\
  formgate submit -f email=a@b.com -r email=required -r email=email
  formgate submit -f password=short -r password=min_length:8
  formgate submit -r name=required            # name left empty, gate refuses
  formgate submit -r name=required --no-validate
  formgate --json submit -f email=x -r email=email""",
)
@click.option(
    "-f",
    "--field",
    "fields",
    type=ASSIGNMENT,
    multiple=True,
    help="Field value as NAME=VALUE (repeatable).",
)
@click.option(
    "-r",
    "--rule",
    "rules",
    type=ASSIGNMENT,
    multiple=True,
    help="Field rule as NAME=RULE[:ARG] (repeatable, evaluated in order).",
)
@click.option("--no-validate", is_flag=True, help="Skip the validation gate.")
@click.pass_obj
def submit(
    app: AppContext,
    fields: tuple[tuple[str, str], ...],
    rules: tuple[tuple[str, str], ...],
    no_validate: bool,
) -> None:
    """Build a form, submit it with a no-op action, and report the outcome."""
    from formgate.domain.models import FieldConfig

    chains = _collect_rules(rules)
    values: dict[str, Any] = dict(fields)
    names = list(dict.fromkeys([*values, *chains]))
    if not names:
        raise click.UsageError("Give at least one --field or --rule.")

    options: dict[str, Any] = {"form_id": "submit"}
    if no_validate:
        options["validate_on_submit"] = False

    async def _run() -> Any:
        store = app.create_store(**options)
        for name in names:
            store.register_field(name, FieldConfig(rules=tuple(chains.get(name, ()))))
            if name in values:
                store.set_field_value(name, values[name])
        return await store.submit()

    app.emit(asyncio.run(_run()))
