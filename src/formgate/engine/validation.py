"""Validation engine — fail-fast evaluation of an ordered rule chain.

Rules run strictly in declaration order and evaluation stops at the first
failure, so a field reports at most one message no matter how many rules
it breaks. Predicates may return awaitables; the engine awaits them but
imposes no timeout. A predicate that raises propagates to the caller.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from formgate.domain.rules import ValidationRule

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RuleFailure:
    """First failing rule of a chain."""

    message: str
    rule: str
    index: int


def interpret(rule: ValidationRule, outcome: Any, *, index: int = 0) -> RuleFailure | None:
    """Map one predicate outcome onto pass (``None``) or a failure.

    Only ``True`` passes. A non-empty string is the message; ``False``,
    ``""`` and any other value use the rule's static message.
    """
    if outcome is True:
        return None
    if isinstance(outcome, str) and outcome:
        return RuleFailure(message=outcome, rule=rule.name, index=index)
    return RuleFailure(message=rule.message, rule=rule.name, index=index)


async def evaluate(rules: Iterable[ValidationRule], value: Any) -> RuleFailure | None:
    """Run *rules* against *value* and return the first failure, if any."""
    for index, rule in enumerate(rules):
        outcome = rule.predicate(value)
        if inspect.isawaitable(outcome):
            outcome = await outcome
        failure = interpret(rule, outcome, index=index)
        if failure is not None:
            logger.debug("Rule %s (#%d) failed: %s", rule.name, index, failure.message)
            return failure
    return None
