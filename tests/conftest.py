"""Shared pytest fixtures and test helpers for formgate tests."""

from __future__ import annotations

import logging
import os
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from formgate.domain import rules as rules_module
from formgate.domain.models import FormState
from formgate.engine.store import FormStore


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def _isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Run every test from an empty directory with no formgate env overrides."""
    for key in list(os.environ):
        if key.startswith("FORMGATE_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture(autouse=True)
def _restore_logging() -> Generator[None]:
    """Undo handler and level changes made by CLI invocations."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    formgate_logger = logging.getLogger("formgate")
    formgate_level = formgate_logger.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    formgate_logger.setLevel(formgate_level)


@pytest.fixture(autouse=True)
def _restore_rule_factories() -> Generator[None]:
    """Drop rule factories registered by plugins during a test."""
    snapshot = dict(rules_module.RULE_FACTORIES)
    yield
    rules_module.RULE_FACTORIES.clear()
    rules_module.RULE_FACTORIES.update(snapshot)


@pytest.fixture
def store() -> FormStore:
    """A bare store with no fields and no plugins."""
    return FormStore(form_id="test-form")


class StateRecorder:
    """Subscriber that keeps every published snapshot."""

    def __init__(self) -> None:
        self.states: list[FormState] = []

    def __call__(self, state: FormState) -> None:
        self.states.append(state)

    @property
    def last(self) -> FormState:
        return self.states[-1]


@pytest.fixture
def recorder(store: FormStore) -> StateRecorder:
    """A :class:`StateRecorder` subscribed to ``store``."""
    rec = StateRecorder()
    store.subscribe(rec)
    return rec


class Event:
    """Minimal widget event: ``event.target.value`` plus prevent_default tracking."""

    class _Target:
        def __init__(self, value: Any) -> None:
            self.value = value

    def __init__(self, value: Any = None) -> None:
        self.target = Event._Target(value)
        self.default_prevented = False

    def prevent_default(self) -> None:
        self.default_prevented = True
