"""Tests for plugin registration, discovery and hook dispatch."""

from __future__ import annotations

import logging
from typing import Any

import pytest

from formgate.domain.rules import RULE_FACTORIES, ValidationRule, get_rule_factory, pattern
from formgate.plugins import hookimpl
from formgate.plugins.manager import ENTRY_POINT_GROUP, PluginManager


def slug(message: str = "Not a slug") -> ValidationRule:
    """Value must be a lowercase slug."""
    return pattern(r"^[a-z0-9-]+$", message)


class SlugRulesPlugin:
    @hookimpl
    def register_rule_factories(self) -> dict[str, Any]:
        return {"slug": slug}


class ResetCounter:
    def __init__(self) -> None:
        self.resets = 0

    @hookimpl
    def post_reset(self, form_id: str) -> None:
        self.resets += 1


class TestRegistration:
    def test_register_and_list(self) -> None:
        manager = PluginManager()
        plugin = ResetCounter()
        manager.register_plugin(plugin)
        assert "ResetCounter" in manager.list_plugin_names()
        assert plugin in manager.get_plugins()

    def test_register_with_name(self) -> None:
        manager = PluginManager()
        manager.register_plugin(ResetCounter(), name="counter")
        assert manager.list_plugin_names() == ["counter"]

    def test_unregister(self) -> None:
        manager = PluginManager()
        plugin = ResetCounter()
        manager.register_plugin(plugin)
        manager.unregister(plugin)
        assert manager.get_plugins() == []

    def test_rule_factories_wait_for_load(self) -> None:
        manager = PluginManager()
        manager.register_plugin(SlugRulesPlugin())
        assert "slug" not in RULE_FACTORIES


class TestDispatch:
    def test_dispatch_calls_plugins(self) -> None:
        manager = PluginManager()
        plugin = ResetCounter()
        manager.register_plugin(plugin)
        assert manager.dispatch("post_reset", form_id="f") is True
        assert plugin.resets == 1

    def test_unknown_hook_is_noop(self) -> None:
        assert PluginManager().dispatch("post_nothing", form_id="f") is True

    def test_failure_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        class Broken:
            @hookimpl
            def post_reset(self, form_id: str) -> None:
                raise RuntimeError("plugin crashed")

        manager = PluginManager()
        manager.register_plugin(Broken())
        with caplog.at_level(logging.WARNING, logger="formgate"):
            assert manager.dispatch("post_reset", form_id="f") is False
        assert "Hook post_reset failed" in caplog.text


class TestDiscovery:
    def test_entry_point_classes_instantiated(self, monkeypatch: pytest.MonkeyPatch) -> None:
        manager = PluginManager()
        groups: list[str] = []

        def fake_load(group: str) -> int:
            groups.append(group)
            manager._pm.register(SlugRulesPlugin, name="slug-rules")
            return 1

        monkeypatch.setattr(manager._pm, "load_setuptools_entrypoints", fake_load)
        names = manager.discover_and_load()

        assert groups == [ENTRY_POINT_GROUP]
        assert names == ["slug-rules"]
        assert manager.is_loaded
        assert isinstance(manager.get_plugins()[0], SlugRulesPlugin)
        assert get_rule_factory("slug") is slug

    def test_register_after_load_collects_factories(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        manager = PluginManager()
        monkeypatch.setattr(manager._pm, "load_setuptools_entrypoints", lambda group: 0)
        manager.discover_and_load()
        manager.register_plugin(SlugRulesPlugin())
        assert get_rule_factory("slug") is slug

    def test_bad_factories_skipped(
        self, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
    ) -> None:
        class Clashing:
            @hookimpl
            def register_rule_factories(self) -> dict[str, Any]:
                return {"email": slug, "slug": slug}

        class NotADict:
            @hookimpl
            def register_rule_factories(self) -> Any:
                return ["slug"]

        manager = PluginManager()
        monkeypatch.setattr(manager._pm, "load_setuptools_entrypoints", lambda group: 0)
        manager.register_plugin(Clashing())
        manager.register_plugin(NotADict())
        with caplog.at_level(logging.WARNING, logger="formgate"):
            manager.discover_and_load()

        assert get_rule_factory("slug") is slug
        assert RULE_FACTORIES["email"] is not slug
        assert "Skipping rule factory 'email'" in caplog.text
        assert "non-dict" in caplog.text
