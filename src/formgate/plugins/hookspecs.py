"""Pluggy hook specifications for formgate.

Four observation hooks fire after form operations complete, and one
setup-time hook lets plugins contribute named rule factories.
Observation hooks run synchronously in the caller's thread.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from formgate.domain.rules import RuleFactory

hookspec = pluggy.HookspecMarker("formgate")


class FormgateHookSpec:
    """Hook specifications for the formgate plugin system."""

    @hookspec
    def post_field_validated(
        self,
        form_id: str,
        field: str,
        valid: bool,
        error: str | None,
    ) -> None:
        """Called after a field validation result is written."""

    @hookspec
    def post_validate_form(
        self,
        form_id: str,
        valid: bool,
        errors: dict[str, str],
        field_order: list[str],
    ) -> None:
        """Called after a full form validation pass."""

    @hookspec
    def post_submit(
        self,
        form_id: str,
        ok: bool,
        error_code: str | None,
    ) -> None:
        """Called after a submission attempt settles."""

    @hookspec
    def post_reset(self, form_id: str) -> None:
        """Called after the form is reset to its initial values."""

    @hookspec
    def register_rule_factories(self) -> dict[str, RuleFactory] | None:
        """Return named rule factories to add to the rule registry."""
