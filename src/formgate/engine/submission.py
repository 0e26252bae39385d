"""Submission controller — the validation-gated submit pipeline.

One attempt walks ``idle -> submitting -> submitted`` on success. It falls
back to ``idle`` when the validation gate refuses or the action fails.
Failures are values: the attempt returns an :class:`OperationResult` whose
error code says which step failed, and a failed action's exception is
passed to ``on_submit_error`` and carried as ``error.cause``.

Cancellation (``asyncio.CancelledError``) and other non-``Exception``
errors are not converted; flags are reset and the error propagates.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from formgate.domain.lifecycle import SubmissionPhase
from formgate.engine.result import (
    ALREADY_SUBMITTING,
    SUBMIT_FAILED,
    VALIDATION_FAILED,
    OperationError,
    OperationResult,
)
from formgate.errors import InvalidTransitionError

if TYPE_CHECKING:
    from formgate.engine.store import FormStore, SubmitErrorCallback

logger = logging.getLogger(__name__)

SubmitAction = Callable[[dict[str, Any]], Awaitable[None] | None]

OP_NAME = "submit"


def prevent_default(event: Any) -> None:
    """Call ``event.prevent_default()`` when the event offers it."""
    if event is None:
        return
    hook = getattr(event, "prevent_default", None)
    if callable(hook):
        hook()


class SubmissionController:
    """Runs submit attempts for one :class:`FormStore`."""

    def __init__(
        self,
        store: FormStore,
        *,
        validate_on_submit: bool = True,
        on_submit_error: SubmitErrorCallback | None = None,
    ) -> None:
        self._store = store
        self.validate_on_submit = validate_on_submit
        self._on_submit_error = on_submit_error

    def handle_submit(self, action: SubmitAction) -> Callable[..., Awaitable[OperationResult]]:
        """Return an ``async (event=None)`` handler that submits via *action*."""

        async def _handler(event: Any = None) -> OperationResult:
            return await self.run(action, event)

        return _handler

    async def run(self, action: SubmitAction, event: Any = None) -> OperationResult:
        """Execute one submission attempt."""
        prevent_default(event)
        store = self._store

        try:
            store.transition(SubmissionPhase.SUBMITTING)
        except InvalidTransitionError:
            logger.debug("Form %s is already submitting; attempt refused", store.form_id)
            return self._finish(
                OperationResult(
                    ok=False,
                    op=OP_NAME,
                    error=OperationError(
                        code=ALREADY_SUBMITTING,
                        message="A submission is already in progress",
                    ),
                )
            )

        try:
            if self.validate_on_submit and not await store.validate_form():
                self._back_to_idle()
                errors = store.state.errors()
                return self._finish(
                    OperationResult(
                        ok=False,
                        op=OP_NAME,
                        error=OperationError(
                            code=VALIDATION_FAILED,
                            message=f"{len(errors)} field(s) failed validation",
                            detail={"errors": errors},
                        ),
                    )
                )

            values = store.get_values()
            try:
                outcome = action(values)
                if inspect.isawaitable(outcome):
                    await outcome
            except Exception as exc:
                self._back_to_idle()
                logger.warning("Submit action for form %s failed: %s", store.form_id, exc)
                if self._on_submit_error is not None:
                    reported = self._on_submit_error(exc)
                    if inspect.isawaitable(reported):
                        await reported
                return self._finish(
                    OperationResult(
                        ok=False,
                        op=OP_NAME,
                        error=OperationError(
                            code=SUBMIT_FAILED,
                            message=str(exc) or type(exc).__name__,
                            detail={"exception": type(exc).__name__},
                            cause=exc,
                        ),
                    )
                )

            if store.state.phase is not SubmissionPhase.SUBMITTING:
                # reset_form() ran while the action was in flight
                return self._finish(
                    OperationResult(
                        ok=True,
                        op=OP_NAME,
                        data={"values": values},
                        warnings=["Form was reset during submission"],
                    )
                )
            store.transition(SubmissionPhase.SUBMITTED)
            return self._finish(OperationResult(ok=True, op=OP_NAME, data={"values": values}))
        except BaseException:
            self._back_to_idle()
            raise

    def _back_to_idle(self) -> None:
        # reset_form() may already have returned the form to idle
        if self._store.state.is_submitting:
            self._store.transition(SubmissionPhase.IDLE)

    def _finish(self, result: OperationResult) -> OperationResult:
        code = result.error.code if result.error is not None else None
        logger.debug("Form %s submit settled: ok=%s code=%s", self._store.form_id, result.ok, code)
        self._store.dispatch_hook(
            "post_submit",
            form_id=self._store.form_id,
            ok=result.ok,
            error_code=code,
        )
        return result
