"""Tests for the per-field binding adapter."""

from __future__ import annotations

import pytest

from formgate.domain.rules import email, min_length, min_value, required
from formgate.engine.binding import FieldBinding, FieldView, extract_value
from formgate.engine.store import FormStore
from tests.conftest import Event


class TestExtractValue:
    def test_event_like(self) -> None:
        assert extract_value(Event("typed")) == "typed"

    def test_raw_value(self) -> None:
        assert extract_value("raw") == "raw"
        assert extract_value(42) == 42

    def test_target_without_value_passes_through(self) -> None:
        class Odd:
            target = object()

        odd = Odd()
        assert extract_value(odd) is odd


class TestAttachDetach:
    def test_attach_registers(self, store: FormStore) -> None:
        binding = FieldBinding(store, "email", initial_value="a@b.com", rules=[email()])
        assert binding.attached is False
        assert store.get_field_state("email") is None
        binding.attach()
        assert binding.attached is True
        assert store.get_field_state("email").value == "a@b.com"
        assert store.get_field_config("email").rules[0].name == "email"

    def test_detach_unregisters(self, store: FormStore) -> None:
        binding = store.field("email")
        binding.detach()
        binding.detach()
        assert binding.attached is False
        assert store.get_field_state("email") is None

    def test_context_manager(self, store: FormStore) -> None:
        with FieldBinding(store, "name") as binding:
            assert binding.attached
            assert "name" in store.field_names()
        assert "name" not in store.field_names()

    def test_remount_keeps_typed_value(self, store: FormStore) -> None:
        first = store.field("name")
        first.handle_change("Ann")
        store.field("name")
        assert first.value == "Ann"


class TestRenderState:
    def test_value_fallbacks(self, store: FormStore) -> None:
        binding = FieldBinding(store, "a", initial_value="seed")
        assert binding.value == "seed"
        assert FieldBinding(store, "b").value == ""

    def test_flags_before_attach(self, store: FormStore) -> None:
        binding = FieldBinding(store, "a")
        assert binding.error is None
        assert binding.touched is False
        assert binding.dirty is False
        assert binding.validating is False
        assert binding.show_error is False

    def test_show_error_requires_touched(self, store: FormStore) -> None:
        binding = store.field("a")
        store.set_field_error("a", "bad")
        assert binding.error == "bad"
        assert binding.show_error is False
        store.set_field_touched("a")
        assert binding.show_error is True

    def test_error_ids_unique_per_binding(self, store: FormStore) -> None:
        first = FieldBinding(store, "a")
        second = FieldBinding(store, "a")
        assert first.error_id.startswith("a-error-")
        assert first.error_id != second.error_id

    def test_snapshot(self, store: FormStore) -> None:
        binding = store.field("a", validate_on_blur=False)
        binding.handle_change("x")
        view = binding.snapshot()
        assert isinstance(view, FieldView)
        assert view.name == "a"
        assert view.value == "x"
        assert view.dirty is True
        assert view.show_error is False
        assert view.error_id == binding.error_id


class TestInputProps:
    def test_props_without_error(self, store: FormStore) -> None:
        binding = store.field("email", initial_value="a@b.com")
        props = binding.input_props()
        assert props["name"] == "email"
        assert props["value"] == "a@b.com"
        assert props["aria-invalid"] is False
        assert props["aria-describedby"] is None
        assert props["on_change"] == binding.handle_change
        assert props["on_blur"] == binding.handle_blur

    def test_props_with_visible_error(self, store: FormStore) -> None:
        binding = store.field("email", rules=[required()])
        binding.handle_blur()
        props = binding.input_props()
        assert props["aria-invalid"] is True
        assert props["aria-describedby"] == binding.error_id

    def test_handlers_drive_store(self, store: FormStore) -> None:
        binding = store.field("email", validate_on_blur=False)
        props = binding.input_props()
        props["on_change"](Event("typed@x.com"))
        props["on_blur"](Event())
        state = store.get_field_state("email")
        assert state.value == "typed@x.com"
        assert state.touched is True
        assert state.dirty is True


class TestEventHandlers:
    def test_blur_validates_by_default(self, store: FormStore) -> None:
        binding = store.field("password", rules=[min_length(8)])
        binding.handle_change("short")
        assert binding.error is None
        binding.handle_blur()
        assert binding.error == "Must be at least 8 characters"
        assert binding.show_error is True

    def test_transform_runs_on_change(self, store: FormStore) -> None:
        binding = store.field("code", transform=str.upper)
        binding.handle_change(Event("abc"))
        assert binding.value == "ABC"

    @pytest.mark.asyncio
    async def test_change_validation_on_loop(self, store: FormStore) -> None:
        binding = store.field("email", rules=[required(), email()], validate_on_change=True)
        binding.handle_change("not-an-email")
        await store.settle()
        assert binding.error == "Please enter a valid email"
        assert binding.show_error is False


    @pytest.mark.asyncio
    async def test_text_input_against_numeric_rule(self, store: FormStore) -> None:
        binding = store.field("age", rules=[min_value(18)])
        binding.handle_change(Event("12"))
        assert await store.validate_form() is False
        assert binding.error == "Must be at least 18"
        binding.handle_change(Event("20"))
        assert await store.validate_form() is True
        assert binding.error is None


class TestImperativeEscapes:
    def test_set_value_and_touched(self, store: FormStore) -> None:
        binding = store.field("a", validate_on_blur=False)
        binding.set_value("v")
        binding.set_touched()
        assert (binding.value, binding.touched) == ("v", True)
        binding.set_touched(False)
        assert binding.touched is False

    @pytest.mark.asyncio
    async def test_validate(self, store: FormStore) -> None:
        binding = store.field("email", rules=[required(), email()])
        assert await binding.validate() is False
        assert binding.error == "This field is required"
        binding.set_value("a@b.com")
        assert await binding.validate() is True
        assert binding.error is None
