"""Click base classes and parameter types shared by formgate commands.

``--help`` stays short; ``--examples`` prints worked invocations and exits.
Rule arguments (``RULE[:ARG]``) are turned into :class:`ValidationRule`
objects through the same factory registry plugins extend.
"""

from __future__ import annotations

import re
from typing import Any

import click

from formgate.domain.rules import RULE_FACTORIES, ValidationRule, get_rule_factory


def _examples_callback(examples: str) -> Any:
    def show(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if not value or ctx.resilient_parsing:
            return
        click.echo(f"Examples for '{ctx.command_path}':\n")
        click.echo(examples)
        ctx.exit(0)

    return show


def attach_examples(cmd: click.Command, examples: str) -> None:
    """Give *cmd* an eager ``--examples`` flag that prints *examples*."""
    cmd.params.append(
        click.Option(
            ["--examples"],
            is_flag=True,
            expose_value=False,
            is_eager=True,
            callback=_examples_callback(examples),
            help="Show usage examples.",
        )
    )


class FormgateCommand(click.Command):
    """Command that accepts an ``examples=`` keyword."""

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            attach_examples(self, examples)


class FormgateGroup(click.Group):
    """Group whose subcommands default to :class:`FormgateCommand`."""

    command_class = FormgateCommand

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            attach_examples(self, examples)


class RuleSpec(click.ParamType):
    """``RULE[:ARG]`` — a rule factory name with an optional argument.

    The argument is parsed as int, then float, and kept as text otherwise.
    Converts to ``(name, args)``.
    """

    name = "rule"

    def convert(self, value: Any, param: click.Parameter | None, ctx: click.Context | None) -> Any:
        if isinstance(value, tuple):
            return value
        rule_name, sep, raw = str(value).partition(":")
        rule_name = rule_name.strip()
        if not rule_name:
            self.fail(f"{value!r} has no rule name", param, ctx)
        args: tuple[Any, ...] = (parse_scalar(raw),) if sep else ()
        return rule_name, args


class Assignment(click.ParamType):
    """``NAME=VALUE`` — converts to ``(name, value)``."""

    name = "name=value"

    def convert(self, value: Any, param: click.Parameter | None, ctx: click.Context | None) -> Any:
        if isinstance(value, tuple):
            return value
        key, sep, rest = str(value).partition("=")
        if not sep or not key.strip():
            self.fail(f"{value!r} is not of the form NAME=VALUE", param, ctx)
        return key.strip(), rest


def parse_scalar(raw: str) -> int | float | str:
    for cast in (int, float):
        try:
            return cast(raw)
        except ValueError:
            continue
    return raw


RULE = RuleSpec()
ASSIGNMENT = Assignment()


def make_rule(spec: tuple[str, tuple[Any, ...]]) -> ValidationRule:
    """Instantiate a parsed ``RULE[:ARG]`` through the rule factory registry.

    Raises:
        click.BadParameter: Unknown rule name or arguments the factory rejects.
    """
    rule_name, args = spec
    try:
        factory = get_rule_factory(rule_name)
    except KeyError:
        known = ", ".join(sorted(RULE_FACTORIES))
        msg = f"Unknown rule {rule_name!r} (known: {known})"
        raise click.BadParameter(msg, param_hint="'-r' / '--rule'") from None
    try:
        return factory(*args)
    except (TypeError, ValueError, re.error) as exc:
        msg = f"Cannot build rule {rule_name!r} from {args!r}: {exc}"
        raise click.BadParameter(msg, param_hint="'-r' / '--rule'") from exc
