"""Exception hierarchy for formgate.

Only programming errors are raised. Rule failures, validation-gate
failures and submission failures are reported as values: on the field
state, through ``on_validation_error``, and on :class:`~formgate.engine.result.OperationResult`.
"""

from __future__ import annotations


class FormError(Exception):
    """Base class for all formgate errors."""


class FieldNotRegisteredError(FormError, KeyError):
    """A mutation targeted a field name that is not registered."""

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Field {self.name!r} is not registered"


class InvalidFieldConfigError(FormError, ValueError):
    """A field configuration failed validation at registration time."""

    def __init__(self, name: str, reason: str) -> None:
        super().__init__(f"Invalid config for field {name!r}: {reason}")
        self.name = name
        self.reason = reason


class InvalidTransitionError(FormError):
    """A submission phase change that the lifecycle does not allow."""

    def __init__(self, current: str, target: str) -> None:
        super().__init__(f"Cannot transition submission from {current!r} to {target!r}")
        self.current = current
        self.target = target
