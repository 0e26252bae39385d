"""Submission lifecycle — phases of a single submit attempt.

    idle -> submitting -> submitted
                       -> idle        (validation gate refused or action failed)
    submitted -> submitting           (resubmit)

The phase is never stored on its own; it is derived from the form's
``is_submitting`` / ``is_submitted`` flags so the two cannot disagree.
"""

from __future__ import annotations

from enum import StrEnum


class SubmissionPhase(StrEnum):
    """Where the form is in its submission lifecycle."""

    IDLE = "idle"
    SUBMITTING = "submitting"
    SUBMITTED = "submitted"


SUBMISSION_TRANSITIONS: dict[str, list[str]] = {
    "idle": ["submitting"],
    "submitting": ["submitted", "idle"],
    "submitted": ["submitting", "idle"],
}


def is_valid_transition(
    current: str,
    target: str,
    transitions: dict[str, list[str]] = SUBMISSION_TRANSITIONS,
) -> bool:
    """Check if transitioning from *current* to *target* is allowed."""
    allowed = transitions.get(current, [])
    return target in allowed


def compute_phase(is_submitting: bool, is_submitted: bool) -> SubmissionPhase:
    """Derive the submission phase from the form-level flags."""
    if is_submitting:
        return SubmissionPhase.SUBMITTING
    if is_submitted:
        return SubmissionPhase.SUBMITTED
    return SubmissionPhase.IDLE
