"""Built-in accessibility bridge.

Hands validation outcomes to the UI layer's accessibility helpers: a
live-region announcer that vocalizes failures and a focus manager that
moves keyboard focus to the first invalid field. formgate only defines
the two interfaces; the widget toolkit implements them.

Announcer and focus calls are wrapped so a failing helper never
interrupts form validation.
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

from formgate.config.models import A11yConfig
from formgate.plugins import hookimpl

logger = logging.getLogger(__name__)


@runtime_checkable
class LiveAnnouncer(Protocol):
    """ARIA live region owned by the surrounding UI."""

    def announce(self, message: str) -> None: ...


@runtime_checkable
class FocusManager(Protocol):
    """Moves keyboard focus to a field rendered by the UI."""

    def focus_field(self, form_id: str, name: str) -> None: ...


def first_invalid(errors: dict[str, str], field_order: list[str]) -> str | None:
    """First field in *field_order* that has an error."""
    for name in field_order:
        if name in errors:
            return name
    return None


class AccessibilityBridge:
    """Announces failed form validations and focuses the first invalid field."""

    def __init__(
        self,
        announcer: LiveAnnouncer | None = None,
        focus: FocusManager | None = None,
        config: A11yConfig | None = None,
    ) -> None:
        self._announcer = announcer
        self._focus = focus
        self._config = config or A11yConfig()

    @hookimpl
    def post_validate_form(
        self,
        form_id: str,
        valid: bool,
        errors: dict[str, str],
        field_order: list[str],
    ) -> None:
        """On failure, announce a summary and hand focus to the first bad field."""
        if valid or not errors:
            return
        target = first_invalid(errors, field_order)
        if self._config.announce and self._announcer is not None:
            message = self._config.summary_template.format(
                count=len(errors),
                first=errors[target] if target else "",
            )
            try:
                self._announcer.announce(message)
            except Exception:
                logger.warning("Live announcer failed for form %s", form_id, exc_info=True)
        if self._config.focus_first_invalid and self._focus is not None and target:
            try:
                self._focus.focus_field(form_id, target)
            except Exception:
                logger.warning("Focus hand-off failed for form %s", form_id, exc_info=True)

    @hookimpl
    def post_reset(self, form_id: str) -> None:
        """Clear any pending announcement once the form is reset."""
        if self._config.announce and self._announcer is not None:
            try:
                self._announcer.announce("")
            except Exception:
                logger.warning("Live announcer failed for form %s", form_id, exc_info=True)
