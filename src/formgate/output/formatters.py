"""Rich/JSON output helpers.

The CLI renders an OperationResult for humans (Rich text and tables) or
machines (``--json``). Values are wrapped in :class:`rich.text.Text`, so
user input such as ``[a-z]+`` is never parsed as console markup.
"""

from __future__ import annotations

import json as _json
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from formgate.output.console import create_console, get_output

if TYPE_CHECKING:
    from rich.console import Console

    from formgate.engine.result import OperationResult


def _is_record_list(value: Any) -> bool:
    return (
        isinstance(value, list)
        and bool(value)
        and all(isinstance(item, dict) for item in value)
    )


def _render_records(console: Console, key: str, records: list[dict[str, Any]]) -> None:
    columns: list[str] = []
    for record in records:
        for column in record:
            if column not in columns:
                columns.append(column)
    table = Table(title=key, title_justify="left", show_edge=False, pad_edge=False)
    for column in columns:
        table.add_column(column)
    for record in records:
        table.add_row(*(Text(str(record.get(column, ""))) for column in columns))
    console.print(table)


def _render_mapping(
    console: Console, mapping: dict[str, Any], *, style: str, indent: int = 2
) -> None:
    for name, message in mapping.items():
        console.print(Text.assemble(" " * indent, (str(name), style), ": ", str(message)))


def _render_data(console: Console, data: dict[str, Any]) -> None:
    for key, value in data.items():
        if _is_record_list(value):
            _render_records(console, key, value)
        elif isinstance(value, dict):
            console.print(Text(f"  {key}:", style="fg.key"))
            _render_mapping(console, value, style="fg.field", indent=4)
        elif isinstance(value, list):
            rendered = _json.dumps(value, separators=(",", ":"), default=str)
            console.print(Text.assemble("  ", (key, "fg.key"), f": {rendered}"))
        else:
            console.print(Text.assemble("  ", (key, "fg.key"), f": {value}"))


def format_result(
    result: OperationResult,
    *,
    json_output: bool = False,
    quiet: bool = False,
    console: Console | None = None,
) -> str:
    """Format an OperationResult for display.

    Args:
        result: The result to format.
        json_output: Return JSON instead of human-readable text.
        quiet: Human mode only: print the status line without the payload.
        console: Render target (a fresh StringIO console when omitted).
    """
    if json_output:
        return result.model_dump_json(indent=2)

    out = console or create_console()
    if result.ok:
        out.print(Text.assemble(("OK", "fg.ok"), ": ", (result.op, "fg.op")))
        if result.data and not quiet:
            _render_data(out, result.data)
    else:
        message = result.error.message if result.error else "Unknown error"
        out.print(Text.assemble(("ERROR", "fg.error"), ": ", (result.op, "fg.op"), f" - {message}"))
        errors = result.error.detail.get("errors") if result.error else None
        if errors and not quiet:
            _render_mapping(out, errors, style="fg.field")
    return get_output(out).rstrip("\n")
