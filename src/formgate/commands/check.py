"""Command: run a rule chain over a single value."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

import click

from formgate.commands._base import RULE, FormgateCommand, make_rule, parse_scalar

if TYPE_CHECKING:
    from formgate.commands._context import AppContext

FIELD_NAME = "value"


@click.command(
    cls=FormgateCommand,
    examples="""\
  formgate check "" -r required
  formgate check "not-an-email" -r required -r email
  formgate check short -r min_length:8
  formgate check 42 --number -r min_value:0 -r max_value:10
  formgate --json check 2024-01-31 -r 'pattern:^\\d{4}-\\d{2}-\\d{2}$'""",
)
@click.argument("value")
@click.option(
    "-r",
    "--rule",
    "rule_specs",
    type=RULE,
    multiple=True,
    required=True,
    help="Rule as RULE[:ARG]; repeat to build a chain (evaluated in order).",
)
@click.option("--number", is_flag=True, help="Parse VALUE as a number before validating.")
@click.pass_obj
def check(app: AppContext, value: str, rule_specs: tuple[Any, ...], number: bool) -> None:
    """Validate VALUE against a rule chain; exits 1 when it fails."""
    from formgate.config.logging import get_logger
    from formgate.domain.models import FieldConfig
    from formgate.engine.result import RULE_FAILED, OperationError, OperationResult

    chain = tuple(make_rule(spec) for spec in rule_specs)
    config = FieldConfig(rules=chain, transform=parse_scalar if number else None)
    log = get_logger(__name__, command="check")

    async def _run() -> tuple[bool, Any, str | None]:
        store = app.create_store(form_id="check")
        store.register_field(FIELD_NAME, config)
        store.set_field_value(FIELD_NAME, value)
        valid = await store.validate_field(FIELD_NAME)
        state = store.get_field_state(FIELD_NAME)
        assert state is not None
        return valid, state.value, state.error

    try:
        valid, checked, error = asyncio.run(_run())
    except (TypeError, ValueError) as exc:
        msg = f"Rule chain could not evaluate {value!r}: {exc}"
        raise click.ClickException(msg) from exc

    names = [rule.name for rule in chain]
    log.debug("rule_chain_evaluated", rules=names, valid=valid)

    if valid:
        app.emit(
            OperationResult(
                ok=True,
                op="check",
                data={"value": checked, "rules": names, "valid": True},
            )
        )
        return
    app.emit(
        OperationResult(
            ok=False,
            op="check",
            error=OperationError(
                code=RULE_FAILED,
                message=error or "Invalid",
                detail={"errors": {FIELD_NAME: error}, "rules": names},
            ),
        )
    )
