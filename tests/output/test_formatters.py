"""Tests for format_result."""

import json

from formgate.engine.result import OperationError, OperationResult
from formgate.output.console import create_console, get_output
from formgate.output.formatters import format_result


def _ok(op: str = "test", **data: object) -> OperationResult:
    return OperationResult(ok=True, op=op, data=dict(data))


def _err(op: str = "test", msg: str = "fail", **detail: object) -> OperationResult:
    return OperationResult(
        ok=False,
        op=op,
        error=OperationError(code="ERR", message=msg, detail=dict(detail)),
    )


class TestFormatResultJSON:
    def test_ok(self) -> None:
        data = json.loads(format_result(_ok("check", value="x"), json_output=True))
        assert data["ok"] is True
        assert data["op"] == "check"
        assert data["data"] == {"value": "x"}

    def test_error(self) -> None:
        data = json.loads(format_result(_err("submit", "Bad"), json_output=True))
        assert data["ok"] is False
        assert data["error"] == {"code": "ERR", "message": "Bad", "detail": {}}

    def test_cause_not_serialized(self) -> None:
        result = OperationResult(
            ok=False,
            op="submit",
            error=OperationError(code="SUBMIT_FAILED", message="x", cause=RuntimeError("x")),
        )
        data = json.loads(format_result(result, json_output=True))
        assert "cause" not in data["error"]

    def test_quiet_ignored_in_json(self) -> None:
        data = json.loads(format_result(_ok(value=1), json_output=True, quiet=True))
        assert data["data"] == {"value": 1}


class TestFormatResultHuman:
    def test_ok_with_scalars(self) -> None:
        output = format_result(_ok("check", value="a@b.com", valid=True))
        lines = output.splitlines()
        assert lines[0] == "OK: check"
        assert "  value: a@b.com" in lines
        assert "  valid: True" in lines

    def test_ok_with_list(self) -> None:
        output = format_result(_ok("check", rules=["required", "email"]))
        assert '  rules: ["required","email"]' in output

    def test_ok_with_mapping(self) -> None:
        output = format_result(_ok("submit", values={"email": "a@b.com"}))
        assert "  values:" in output
        assert "    email: a@b.com" in output

    def test_records_render_as_table(self) -> None:
        records = [
            {"name": "required", "source": "builtin"},
            {"name": "slug", "source": "plugin"},
        ]
        output = format_result(_ok("rules", rules=records))
        for token in ("name", "source", "required", "builtin", "slug", "plugin"):
            assert token in output

    def test_quiet_hides_payload(self) -> None:
        assert format_result(_ok("check", value="x"), quiet=True) == "OK: check"

    def test_error_lists_field_errors(self) -> None:
        output = format_result(_err("submit", "1 field(s) failed", errors={"email": "Bad"}))
        lines = output.splitlines()
        assert lines[0] == "ERROR: submit - 1 field(s) failed"
        assert "  email: Bad" in lines

    def test_error_quiet(self) -> None:
        output = format_result(_err("submit", "nope", errors={"a": "b"}), quiet=True)
        assert output == "ERROR: submit - nope"

    def test_markup_is_not_interpreted(self) -> None:
        output = format_result(_ok("check", value="[bold]x[/bold]"))
        assert "[bold]x[/bold]" in output

    def test_renders_into_given_console(self) -> None:
        console = create_console(no_color=True)
        output = format_result(_ok("rules"), console=console)
        assert output == "OK: rules"
        assert get_output(console).startswith("OK: rules")
