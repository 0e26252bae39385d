"""Field binding adapter — the per-field contract UI widgets consume.

A binding is bound to one field name. Attaching registers the field,
detaching unregisters it. In between it turns primitive widget events
(change, blur) into store mutations and exposes render-ready state.

Errors are only shown once the user has interacted with the field:
``show_error`` is ``touched and error is not None``, so a field that
failed a submit-time validation before the user reached it stays quiet
until it is blurred.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

from formgate.domain.models import EMPTY_VALUE, FieldConfig, FieldState
from formgate.domain.rules import ValidationRule

if TYPE_CHECKING:
    from types import TracebackType

    from formgate.engine.store import FormStore


class FieldView(BaseModel):
    """Render-ready state of one bound field."""

    model_config = {"frozen": True}

    name: str
    value: Any
    error: str | None
    touched: bool
    dirty: bool
    validating: bool
    show_error: bool
    error_id: str


def extract_value(event_or_value: Any) -> Any:
    """Pull ``event.target.value`` out of an event-like object, else pass through."""
    target = getattr(event_or_value, "target", None)
    if target is not None and hasattr(target, "value"):
        return target.value
    return event_or_value


class FieldBinding:
    """Facade over :class:`FormStore` for a single field."""

    def __init__(
        self,
        store: FormStore,
        name: str,
        *,
        initial_value: Any = None,
        rules: Sequence[ValidationRule] = (),
        validate_on_change: bool = False,
        validate_on_blur: bool = True,
        transform: Callable[[Any], Any] | None = None,
    ) -> None:
        self._store = store
        self.name = name
        self.config = FieldConfig(
            initial_value=initial_value,
            rules=tuple(rules),
            validate_on_change=validate_on_change,
            validate_on_blur=validate_on_blur,
            transform=transform,
        )
        self.error_id = f"{name}-error-{uuid.uuid4().hex[:8]}"
        self._attached = False

    # ------------------------------------------------------------------
    # Mount / unmount
    # ------------------------------------------------------------------

    def attach(self) -> FieldBinding:
        """Register the field with the store (idempotent)."""
        self._store.register_field(self.name, self.config)
        self._attached = True
        return self

    def detach(self) -> None:
        """Unregister the field; its state is discarded."""
        if self._attached:
            self._store.unregister_field(self.name)
            self._attached = False

    @property
    def attached(self) -> bool:
        return self._attached

    def __enter__(self) -> FieldBinding:
        return self.attach()

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.detach()

    # ------------------------------------------------------------------
    # Render state
    # ------------------------------------------------------------------

    def _state(self) -> FieldState | None:
        return self._store.get_field_state(self.name)

    @property
    def value(self) -> Any:
        state = self._state()
        if state is not None and state.value is not None:
            return state.value
        if self.config.initial_value is not None:
            return self.config.initial_value
        return EMPTY_VALUE

    @property
    def error(self) -> str | None:
        state = self._state()
        return state.error if state is not None else None

    @property
    def touched(self) -> bool:
        state = self._state()
        return state.touched if state is not None else False

    @property
    def dirty(self) -> bool:
        state = self._state()
        return state.dirty if state is not None else False

    @property
    def validating(self) -> bool:
        state = self._state()
        return state.validating if state is not None else False

    @property
    def show_error(self) -> bool:
        state = self._state()
        return state is not None and state.touched and state.error is not None

    def snapshot(self) -> FieldView:
        """Everything a widget needs to render, read from one consistent state."""
        state = self._state() or FieldState(value=self.value)
        return FieldView(
            name=self.name,
            value=self.value,
            error=state.error,
            touched=state.touched,
            dirty=state.dirty,
            validating=state.validating,
            show_error=state.touched and state.error is not None,
            error_id=self.error_id,
        )

    def input_props(self) -> dict[str, Any]:
        """Props to spread onto an input widget."""
        show_error = self.show_error
        return {
            "name": self.name,
            "value": self.value,
            "on_change": self.handle_change,
            "on_blur": self.handle_blur,
            "aria-invalid": show_error,
            "aria-describedby": self.error_id if show_error else None,
        }

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    def handle_change(self, event_or_value: Any) -> None:
        """Change handler: accepts a widget event or a raw value."""
        self._store.set_field_value(self.name, extract_value(event_or_value))

    def handle_blur(self, event: Any = None) -> None:
        """Blur handler: marks the field touched."""
        self._store.set_field_touched(self.name, True)

    # ------------------------------------------------------------------
    # Imperative escapes
    # ------------------------------------------------------------------

    def set_value(self, value: Any) -> None:
        self._store.set_field_value(self.name, value)

    def set_touched(self, touched: bool = True) -> None:
        self._store.set_field_touched(self.name, touched)

    async def validate(self) -> bool:
        return await self._store.validate_field(self.name)
