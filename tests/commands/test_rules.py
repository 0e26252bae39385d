"""Tests for the rules command."""

from __future__ import annotations

import json
from pathlib import Path

import pluggy
import pytest
from click.testing import CliRunner

from formgate.cli import cli
from formgate.domain.rules import ValidationRule, pattern
from formgate.plugins import hookimpl


def postcode(message: str = "Invalid postcode") -> ValidationRule:
    """Value must look like a postcode."""
    return pattern(r"^[A-Z0-9 ]{5,8}$", message)


class PostcodePlugin:
    @hookimpl
    def register_rule_factories(self) -> dict:
        return {"postcode": postcode}


class TestRulesCommand:
    def test_lists_builtins(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["rules"])
        assert result.exit_code == 0, result.output
        assert result.output.startswith("OK: rules")
        for name in ("required", "email", "min_length", "pattern", "max_value"):
            assert name in result.output

    def test_json(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "rules"])
        assert result.exit_code == 0
        payload = json.loads(result.output)
        assert payload["ok"] is True
        entries = {entry["name"]: entry for entry in payload["data"]["rules"]}
        assert entries["email"]["source"] == "builtin"
        assert entries["email"]["description"].startswith("Value must look like an email")
        assert payload["meta"] == {"plugins": []}

    def test_plugin_factories_listed(
        self, cli_runner: CliRunner, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def fake_load(self: pluggy.PluginManager, group: str, name: str | None = None) -> int:
            self.register(PostcodePlugin(), name="postcode")
            return 1

        monkeypatch.setattr(pluggy.PluginManager, "load_setuptools_entrypoints", fake_load)
        result = cli_runner.invoke(cli, ["--json", "rules"])
        payload = json.loads(result.output)
        entries = {entry["name"]: entry for entry in payload["data"]["rules"]}
        assert entries["postcode"]["source"] == "plugin"
        assert payload["meta"] == {"plugins": ["postcode"]}

    def test_plugins_disabled_by_config(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        (tmp_path / "formgate.toml").write_text("[plugins]\nenabled = false\n")
        result = cli_runner.invoke(cli, ["--json", "rules"])
        assert result.exit_code == 0
        assert json.loads(result.output)["meta"] == {"plugins": []}

