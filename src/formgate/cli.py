"""Root CLI group for formgate with global flags and command registration."""

from __future__ import annotations

import click

from formgate import __version__
from formgate.commands import register_commands
from formgate.commands._base import FormgateGroup
from formgate.commands._context import AppContext
from formgate.config.settings import FormgateSettings


@click.group(
    cls=FormgateGroup,
    invoke_without_command=True,
    examples="""\
  formgate rules
  formgate check "a@b.com" -r required -r email
  formgate --json submit -f email=a@b.com -r email=required -r email=email""",
)
@click.version_option(version=__version__, prog_name="formgate")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output.")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug logging.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
) -> None:
    """formgate — probe form validation rules and submission from the shell."""
    ctx.ensure_object(dict)
    settings = FormgateSettings.from_cli(
        config_path=config_path,
        json_output=json_output,
        quiet=quiet,
        verbose=verbose,
        log_json=log_json,
    )
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
