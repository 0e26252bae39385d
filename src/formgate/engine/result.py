"""OperationResult and OperationError — the result contract.

INVARIANT: Submission attempts and CLI commands report through
OperationResult; failures are values, never exceptions. A failed submit
action's exception rides along as ``error.cause`` (excluded from
serialization) so callers can re-raise or inspect it.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

VALIDATION_FAILED = "VALIDATION_FAILED"
SUBMIT_FAILED = "SUBMIT_FAILED"
ALREADY_SUBMITTING = "ALREADY_SUBMITTING"
RULE_FAILED = "RULE_FAILED"


class OperationError(BaseModel):
    """Structured error payload within an OperationResult."""

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)
    cause: BaseException | None = Field(default=None, exclude=True)


class OperationResult(BaseModel):
    """Return type for submission attempts and CLI operations.

    Attributes:
        ok: Whether the operation succeeded.
        op: Name of the operation (e.g. ``"submit"``).
        data: Operation-specific payload on success.
        warnings: Non-fatal issues encountered during the operation.
        error: Structured error if ``ok`` is False.
        meta: Optional metadata (timing, counts, etc.).
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: OperationError | None = None
    meta: dict[str, Any] | None = None
