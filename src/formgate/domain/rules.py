"""Validation rules — the predicate contract plus built-in rule factories.

A rule pairs a pure predicate with a fallback message. The predicate
returns ``True`` when the value is acceptable. Anything else is a failure:
a non-empty string becomes the error message, while ``False`` or ``""``
fall back to the rule's static ``message``. Predicates may also return an
awaitable resolving to one of those outcomes.

Empty values pass every built-in rule except :func:`required`, so rules
compose as ``[required(), email()]`` for required emails and ``[email()]``
for optional ones.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from typing import Any

from pydantic import BaseModel

DEFAULT_MESSAGE = "Invalid"

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class ValidationRule(BaseModel):
    """A single validation step for a field value.

    Attributes:
        predicate: ``value -> True | False | str`` (or an awaitable of it).
        message: Static message used when the predicate returns ``False``
            or an empty string.
        name: Identifier shown in logs and CLI output.
    """

    model_config = {"frozen": True}

    predicate: Callable[[Any], Any]
    message: str = DEFAULT_MESSAGE
    name: str = "custom"


# ---------------------------------------------------------------------------
# Built-in rule factories
# ---------------------------------------------------------------------------


def _is_empty(value: Any) -> bool:
    if isinstance(value, str):
        return not value.strip()
    return value is None or value == [] or value == ()


def _as_number(value: Any) -> float:
    """Coerce text input to a number; raises TypeError or ValueError."""
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            return float(text)
    return float(value)


def _length(value: Any) -> int:
    if hasattr(value, "__len__"):
        return len(value)
    return len(str(value))


def required(message: str = "This field is required") -> ValidationRule:
    """Value must be present: not None, not blank, not an empty collection."""

    def _check(value: Any) -> bool:
        if value is None:
            return False
        if isinstance(value, str):
            return len(value.strip()) > 0
        if isinstance(value, (list, tuple, set, frozenset, dict)):
            return len(value) > 0
        return True

    return ValidationRule(predicate=_check, message=message, name="required")


def email(message: str = "Please enter a valid email") -> ValidationRule:
    """Value must look like an email address (empty passes)."""

    def _check(value: Any) -> bool:
        if _is_empty(value):
            return True
        return EMAIL_PATTERN.match(str(value)) is not None

    return ValidationRule(predicate=_check, message=message, name="email")


def min_length(minimum: int, message: str | None = None) -> ValidationRule:
    """Value must have at least *minimum* characters (empty passes)."""

    def _check(value: Any) -> bool:
        return _is_empty(value) or _length(value) >= minimum

    return ValidationRule(
        predicate=_check,
        message=message or f"Must be at least {minimum} characters",
        name="min_length",
    )


def max_length(maximum: int, message: str | None = None) -> ValidationRule:
    """Value must have at most *maximum* characters (empty passes)."""

    def _check(value: Any) -> bool:
        return _is_empty(value) or _length(value) <= maximum

    return ValidationRule(
        predicate=_check,
        message=message or f"Must be no more than {maximum} characters",
        name="max_length",
    )


def pattern(regex: str | re.Pattern[str], message: str = "Invalid format") -> ValidationRule:
    """Value must match *regex* anywhere (empty passes)."""
    compiled = regex if isinstance(regex, re.Pattern) else re.compile(str(regex))

    def _check(value: Any) -> bool:
        return _is_empty(value) or compiled.search(str(value)) is not None

    return ValidationRule(predicate=_check, message=message, name="pattern")


def min_value(minimum: float, message: str | None = None) -> ValidationRule:
    """Numeric value must be at least *minimum* (empty passes)."""

    def _check(value: Any) -> bool:
        if _is_empty(value):
            return True
        try:
            return _as_number(value) >= minimum
        except (TypeError, ValueError):
            return False

    return ValidationRule(
        predicate=_check,
        message=message or f"Must be at least {minimum}",
        name="min_value",
    )


def max_value(maximum: float, message: str | None = None) -> ValidationRule:
    """Numeric value must be no more than *maximum* (empty passes)."""

    def _check(value: Any) -> bool:
        if _is_empty(value):
            return True
        try:
            return _as_number(value) <= maximum
        except (TypeError, ValueError):
            return False

    return ValidationRule(
        predicate=_check,
        message=message or f"Must be no more than {maximum}",
        name="max_value",
    )


def custom(
    predicate: Callable[[Any], Any],
    message: str = "Invalid value",
) -> ValidationRule:
    """Wrap an arbitrary predicate as a rule."""
    return ValidationRule(predicate=predicate, message=message, name="custom")


# ---------------------------------------------------------------------------
# Rule factory registry
# ---------------------------------------------------------------------------

RuleFactory = Callable[..., ValidationRule]

_BUILTIN_FACTORIES: dict[str, RuleFactory] = {
    "required": required,
    "email": email,
    "min_length": min_length,
    "max_length": max_length,
    "pattern": pattern,
    "min_value": min_value,
    "max_value": max_value,
}

RULE_FACTORIES: dict[str, RuleFactory] = dict(_BUILTIN_FACTORIES)


def get_rule_factory(name: str) -> RuleFactory:
    """Look up a rule factory by name.

    Raises:
        KeyError: If no factory is registered under *name*.
    """
    try:
        return RULE_FACTORIES[name]
    except KeyError:
        msg = f"No rule factory registered for {name!r}"
        raise KeyError(msg) from None


def register_rule_factory(name: str, factory: RuleFactory) -> None:
    """Register a named rule factory contributed by a plugin.

    Built-in names are reserved and cannot be overridden.
    """
    normalized_name = name.strip()
    if not normalized_name:
        msg = "Rule factory name must not be empty"
        raise ValueError(msg)

    if not callable(factory):
        msg = f"Rule factory {normalized_name!r} must be callable"
        raise TypeError(msg)

    if normalized_name in _BUILTIN_FACTORIES:
        msg = f"Rule factory {normalized_name!r} conflicts with a built-in rule"
        raise ValueError(msg)

    existing = RULE_FACTORIES.get(normalized_name)
    if existing is not None and existing is not factory:
        msg = f"Rule factory {normalized_name!r} is already registered"
        raise ValueError(msg)

    RULE_FACTORIES[normalized_name] = factory


def describe_rule_factory(name: str) -> str:
    """Return the first docstring line of a registered factory."""
    doc = get_rule_factory(name).__doc__ or ""
    return doc.strip().splitlines()[0] if doc.strip() else ""


def is_builtin_rule(name: str) -> bool:
    return name in _BUILTIN_FACTORIES
