"""Tests for FieldConfig, FieldState and FormState."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from formgate.domain.lifecycle import SubmissionPhase
from formgate.domain.models import EMPTY_VALUE, FieldConfig, FieldState, FormState
from formgate.domain.rules import email, required


class TestFieldConfig:
    def test_defaults(self) -> None:
        config = FieldConfig()
        assert config.initial_value is None
        assert config.rules == ()
        assert config.validate_on_change is False
        assert config.validate_on_blur is False
        assert config.transform is None

    def test_rules_coerced_to_tuple(self) -> None:
        config = FieldConfig(rules=[required(), email()])
        assert isinstance(config.rules, tuple)
        assert [r.name for r in config.rules] == ["required", "email"]

    def test_unknown_keys_rejected(self) -> None:
        with pytest.raises(ValidationError):
            FieldConfig(validate_on_focus=True)  # type: ignore[call-arg]

    def test_transform(self) -> None:
        assert FieldConfig().apply_transform(" x ") == " x "
        assert FieldConfig(transform=str.strip).apply_transform(" x ") == "x"


class TestFieldState:
    def test_defaults(self) -> None:
        state = FieldState()
        assert state.value == EMPTY_VALUE
        assert state.touched is False
        assert state.dirty is False
        assert state.error is None
        assert state.validating is False

    def test_frozen(self) -> None:
        with pytest.raises(ValidationError):
            FieldState().touched = True  # type: ignore[misc]


class TestFormState:
    def test_defaults(self) -> None:
        state = FormState()
        assert state.fields == {}
        assert state.is_valid is True
        assert state.is_touched is False
        assert state.is_dirty is False
        assert state.phase is SubmissionPhase.IDLE

    def test_aggregates_are_ors(self) -> None:
        state = FormState(
            fields={
                "a": FieldState(touched=True),
                "b": FieldState(dirty=True),
                "c": FieldState(),
            }
        )
        assert state.is_touched is True
        assert state.is_dirty is True

    def test_errors_map(self) -> None:
        state = FormState(fields={"a": FieldState(error="bad"), "b": FieldState()})
        assert state.errors() == {"a": "bad"}

    def test_computed_fields_serialized(self) -> None:
        dumped = FormState(fields={"a": FieldState(touched=True)}).model_dump()
        assert dumped["is_touched"] is True
        assert dumped["is_dirty"] is False

    def test_phase(self) -> None:
        assert FormState(is_submitting=True).phase is SubmissionPhase.SUBMITTING
        assert FormState(is_submitted=True).phase is SubmissionPhase.SUBMITTED
