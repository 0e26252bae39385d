"""Field and form models.

``FieldConfig`` is the tagged configuration a binding hands to the
registry; it is validated once, at registration. ``FieldState`` and
``FormState`` are immutable snapshots: every store mutation publishes a
new ``FormState`` rather than editing one in place, so a snapshot handed
to a subscriber never changes underneath it.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, Field, computed_field

from formgate.domain.lifecycle import SubmissionPhase, compute_phase
from formgate.domain.rules import ValidationRule

EMPTY_VALUE = ""


class FieldConfig(BaseModel):
    """Registration-time configuration for one field.

    Attributes:
        initial_value: Seed value. ``None`` means unset, so the form-level
            initial value (then ``""``) applies.
        rules: Ordered rule chain, evaluated fail-fast.
        validate_on_change: Validate after every ``set_field_value``.
        validate_on_blur: Validate when the field becomes touched.
        transform: Applied to raw values before they are stored.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    initial_value: Any = None
    rules: tuple[ValidationRule, ...] = ()
    validate_on_change: bool = False
    validate_on_blur: bool = False
    transform: Callable[[Any], Any] | None = None

    def apply_transform(self, value: Any) -> Any:
        """Run *value* through ``transform`` (identity when unset)."""
        if self.transform is None:
            return value
        return self.transform(value)


class FieldState(BaseModel):
    """Runtime status of one field."""

    model_config = {"frozen": True}

    value: Any = EMPTY_VALUE
    touched: bool = False
    dirty: bool = False
    error: str | None = None
    validating: bool = False


class FormState(BaseModel):
    """Snapshot of every field plus the aggregate form flags.

    ``is_touched`` and ``is_dirty`` are ORs over the field flags.
    ``is_valid`` is only authoritative right after a full form validation.
    """

    model_config = {"frozen": True}

    fields: dict[str, FieldState] = Field(default_factory=dict)
    is_submitting: bool = False
    is_valid: bool = True
    is_submitted: bool = False

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_touched(self) -> bool:
        return any(f.touched for f in self.fields.values())

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_dirty(self) -> bool:
        return any(f.dirty for f in self.fields.values())

    @property
    def phase(self) -> SubmissionPhase:
        return compute_phase(self.is_submitting, self.is_submitted)

    def errors(self) -> dict[str, str]:
        """Map of field name to current error, for fields that have one."""
        return {name: f.error for name, f in self.fields.items() if f.error is not None}
