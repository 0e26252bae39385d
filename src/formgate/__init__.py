"""formgate — headless form state and validation engine.

Tracks per-field value/touched/dirty/error/validating status, evaluates
ordered validation-rule chains, derives aggregate form status, and gates
a submission pipeline. UI widgets talk to it through :class:`FieldBinding`.
"""

from __future__ import annotations

__version__ = "0.1.0"

from formgate.domain.models import FieldConfig, FieldState, FormState
from formgate.domain.rules import (
    ValidationRule,
    custom,
    email,
    max_length,
    max_value,
    min_length,
    min_value,
    pattern,
    required,
)
from formgate.engine.binding import FieldBinding
from formgate.engine.result import OperationError, OperationResult
from formgate.engine.store import FormStore
from formgate.errors import FieldNotRegisteredError, FormError, InvalidFieldConfigError

__all__ = [
    "FieldBinding",
    "FieldConfig",
    "FieldNotRegisteredError",
    "FieldState",
    "FormError",
    "FormState",
    "FormStore",
    "InvalidFieldConfigError",
    "OperationError",
    "OperationResult",
    "ValidationRule",
    "__version__",
    "custom",
    "email",
    "max_length",
    "max_value",
    "min_length",
    "min_value",
    "pattern",
    "required",
]
