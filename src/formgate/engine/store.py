"""Form state store — single source of truth for one form.

Every mutation runs under one re-entrant lock, updates the field registry
and form-level flags, then publishes a fresh immutable :class:`FormState`.
Subscribers are notified after the lock is released, in subscription
order, and always receive the snapshot that their mutation produced.

Validation writes are guarded by per-field generations (see
:mod:`formgate.engine.registry`): a result is only written if the field
still exists and no newer validation, reset, or reinitialization has
happened since it started. Late results are dropped, never written into
a slot that has moved on.

Fire-and-forget validations (``validate_on_change`` / ``validate_on_blur``)
are scheduled as tasks on the running event loop and tracked until they
finish; ``await store.settle()`` waits for them. Without a running loop
they complete inline before the mutating call returns.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import threading
import uuid
from collections.abc import Awaitable, Callable, Iterator, Mapping
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from formgate.domain.lifecycle import SubmissionPhase, is_valid_transition
from formgate.domain.models import FieldConfig, FieldState, FormState
from formgate.engine.registry import FieldRegistry
from formgate.engine.submission import SubmissionController, SubmitAction
from formgate.engine.validation import evaluate
from formgate.errors import FieldNotRegisteredError, InvalidTransitionError

if TYPE_CHECKING:
    from formgate.config.settings import FormgateSettings
    from formgate.engine.binding import FieldBinding
    from formgate.engine.result import OperationResult
    from formgate.plugins.manager import PluginManager

logger = logging.getLogger(__name__)

Listener = Callable[[FormState], None]
ValidationErrorCallback = Callable[[dict[str, str]], Awaitable[None] | None]
SubmitErrorCallback = Callable[[Exception], Awaitable[None] | None]


class FormStore:
    """Field registry, aggregate flags, validation, and submission for one form.

    Args:
        initial_values: Form-level seeds, used when a field's config has none.
        on_submit: Default action for :meth:`submit`.
        on_validation_error: Called with ``{name: message}`` when a full
            validation fails.
        on_submit_error: Called with the exception when a submit action fails.
        validate_on_submit: Gate submissions behind :meth:`validate_form`.
        plugin_manager: Receives ``post_*`` hook dispatches.
        form_id: Identifier passed to hooks (generated when omitted).
        binding_defaults: Default options for bindings created by :meth:`field`.
    """

    def __init__(
        self,
        initial_values: Mapping[str, Any] | None = None,
        *,
        on_submit: SubmitAction | None = None,
        on_validation_error: ValidationErrorCallback | None = None,
        on_submit_error: SubmitErrorCallback | None = None,
        validate_on_submit: bool = True,
        plugin_manager: PluginManager | None = None,
        form_id: str | None = None,
        binding_defaults: Mapping[str, Any] | None = None,
    ) -> None:
        self.form_id = form_id or f"form-{uuid.uuid4().hex[:8]}"
        self._binding_defaults = dict(binding_defaults or {})
        self._registry = FieldRegistry(initial_values)
        self._lock = threading.RLock()
        self._listeners: list[Listener] = []
        self._tasks: set[asyncio.Task[bool]] = set()
        self._plugins = plugin_manager
        self._on_submit = on_submit
        self._on_validation_error = on_validation_error

        self._is_submitting = False
        self._is_valid = True
        self._is_submitted = False
        self._state = FormState()

        self.submission = SubmissionController(
            self,
            validate_on_submit=validate_on_submit,
            on_submit_error=on_submit_error,
        )

    @classmethod
    def from_settings(cls, settings: FormgateSettings, **kwargs: Any) -> FormStore:
        """Build a store whose defaults come from the ``[form]`` config section."""
        form = settings.form
        kwargs.setdefault("validate_on_submit", form.validate_on_submit)
        kwargs.setdefault(
            "binding_defaults",
            {
                "validate_on_change": form.validate_on_change,
                "validate_on_blur": form.validate_on_blur,
            },
        )
        return cls(**kwargs)

    # ------------------------------------------------------------------
    # Snapshot + subscriptions
    # ------------------------------------------------------------------

    @property
    def state(self) -> FormState:
        """The most recently published form snapshot."""
        return self._state

    @property
    def initial_values(self) -> dict[str, Any]:
        return self._registry.initial_values

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call *listener* with every new snapshot. Returns an unsubscribe callable."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    # ------------------------------------------------------------------
    # Field lifecycle
    # ------------------------------------------------------------------

    def register_field(
        self,
        name: str,
        config: FieldConfig | Mapping[str, Any] | None = None,
    ) -> None:
        """Register *name*; an existing field keeps its state and gets the new config."""
        with self._mutate():
            self._registry.register(name, config)

    def reinitialize_field(
        self,
        name: str,
        config: FieldConfig | Mapping[str, Any] | None = None,
    ) -> None:
        """Register *name* with a fresh state, discarding any runtime state."""
        with self._mutate():
            self._registry.reinitialize(name, config)

    def unregister_field(self, name: str) -> None:
        """Remove *name*; pending validations for it are discarded."""
        with self._mutate():
            self._registry.unregister(name)

    def get_field_state(self, name: str) -> FieldState | None:
        """Current state of *name*, or None if it is not registered."""
        with self._lock:
            return self._registry.state(name)

    def get_field_config(self, name: str) -> FieldConfig | None:
        with self._lock:
            return self._registry.config(name)

    def field_names(self) -> list[str]:
        with self._lock:
            return self._registry.names()

    def field(self, name: str, **options: Any) -> FieldBinding:
        """Create and attach a :class:`FieldBinding` for *name*."""
        from formgate.engine.binding import FieldBinding

        binding = FieldBinding(self, name, **{**self._binding_defaults, **options})
        binding.attach()
        return binding

    # ------------------------------------------------------------------
    # Field mutations
    # ------------------------------------------------------------------

    def set_field_value(self, name: str, value: Any) -> None:
        """Store the transformed *value*, mark the field dirty, maybe validate."""
        with self._mutate():
            config = self._require_config(name)
            self._registry.update(name, value=config.apply_transform(value), dirty=True)
        if config.validate_on_change:
            self._schedule_validation(name)

    def set_field_touched(self, name: str, touched: bool = True) -> None:
        """Set the touched flag; becoming touched triggers blur validation."""
        with self._mutate():
            config = self._require_config(name)
            self._registry.update(name, touched=touched)
        if touched and config.validate_on_blur:
            self._schedule_validation(name)

    def set_field_error(self, name: str, error: str | None) -> None:
        """Override a field's error directly, bypassing its rules."""
        with self._mutate():
            self._require_config(name)
            self._registry.update(name, error=error)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    async def validate_field(self, name: str) -> bool:
        """Run *name*'s rules against its current value and record the outcome.

        A failure clears ``is_valid``; a pass never sets it, since other
        fields may still be invalid. Unknown fields and fields without
        rules count as valid and are left untouched.
        """
        with self._mutate() as publish:
            config = self._registry.config(name)
            state = self._registry.state(name)
            if config is None or state is None or not config.rules:
                publish.cancel()
                return True
            generation = self._registry.bump_generation(name)
            self._registry.update(name, validating=True)
            value = state.value

        try:
            failure = await evaluate(config.rules, value)
        except BaseException:
            with self._mutate() as publish:
                if self._registry.is_current(name, generation):
                    self._registry.update(name, validating=False)
                else:
                    publish.cancel()
            raise

        error = failure.message if failure is not None else None
        with self._mutate() as publish:
            if not self._registry.is_current(name, generation):
                publish.cancel()
                if name not in self._registry:
                    logger.debug("Dropped validation result for removed field %s", name)
                    return True
                logger.debug("Dropped superseded validation result for %s", name)
                return failure is None
            self._registry.update(name, error=error, validating=False)
            if failure is not None:
                self._is_valid = False

        self.dispatch_hook(
            "post_field_validated",
            form_id=self.form_id,
            field=name,
            valid=failure is None,
            error=error,
        )
        return failure is None

    async def validate_form(self) -> bool:
        """Validate every registered field concurrently; returns the AND of results."""
        names = self.field_names()
        results = await asyncio.gather(*(self.validate_field(name) for name in names))
        valid = all(results)

        with self._mutate():
            self._is_valid = valid
            errors = {
                name: state.error
                for name in names
                if (state := self._registry.state(name)) is not None and state.error is not None
            }
            order = self._registry.names()

        if not valid:
            logger.debug("Form %s failed validation: %s", self.form_id, sorted(errors))
            if self._on_validation_error is not None:
                outcome = self._on_validation_error(errors)
                if inspect.isawaitable(outcome):
                    await outcome

        self.dispatch_hook(
            "post_validate_form",
            form_id=self.form_id,
            valid=valid,
            errors=errors,
            field_order=order,
        )
        return valid

    def pending_validations(self) -> int:
        """Number of fire-and-forget validations still running."""
        return len(self._tasks)

    async def settle(self) -> None:
        """Wait until every scheduled fire-and-forget validation has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # ------------------------------------------------------------------
    # Whole-form operations
    # ------------------------------------------------------------------

    def reset_form(self) -> None:
        """Restore initial values, clear every field and form flag."""
        with self._mutate():
            for name in self._registry.names():
                self._registry.reset(name)
            self._is_submitting = False
            self._is_valid = True
            self._is_submitted = False
        self.dispatch_hook("post_reset", form_id=self.form_id)

    def get_values(self) -> dict[str, Any]:
        """Snapshot of current field values."""
        with self._lock:
            return {name: state.value for name, state in self._registry.snapshot().items()}

    def handle_submit(
        self, action: SubmitAction
    ) -> Callable[..., Awaitable[OperationResult]]:
        """Wrap *action* in the validation-gated submission pipeline."""
        return self.submission.handle_submit(action)

    async def submit(self, event: Any = None) -> OperationResult:
        """Submit with the ``on_submit`` action given at construction."""
        action = self._on_submit or _noop_action
        return await self.submission.run(action, event)

    def transition(self, target: SubmissionPhase) -> None:
        """Move the submission lifecycle to *target*.

        Raises:
            InvalidTransitionError: If the lifecycle forbids the move.
        """
        with self._mutate():
            current = self._state.phase
            if not is_valid_transition(current, target):
                raise InvalidTransitionError(current, target)
            self._is_submitting = target is SubmissionPhase.SUBMITTING
            if target is SubmissionPhase.SUBMITTED:
                self._is_submitted = True
            elif target is SubmissionPhase.IDLE:
                self._is_submitted = False
        logger.debug("Form %s submission %s -> %s", self.form_id, current, target)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    @contextmanager
    def _mutate(self) -> Iterator[_Publish]:
        """Hold the lock for a mutation, then publish and notify.

        The body may call ``publish.cancel()`` when it ended up changing
        nothing. Nothing is published if the body raises.
        """
        publish = _Publish()
        with self._lock:
            yield publish
            if not publish.cancelled:
                self._state = FormState(
                    fields=self._registry.snapshot(),
                    is_submitting=self._is_submitting,
                    is_valid=self._is_valid,
                    is_submitted=self._is_submitted,
                )
            snapshot = self._state
            listeners = list(self._listeners)
        if publish.cancelled:
            return
        for listener in listeners:
            try:
                listener(snapshot)
            except Exception:
                logger.warning("Form %s listener failed", self.form_id, exc_info=True)

    def _require_config(self, name: str) -> FieldConfig:
        config = self._registry.config(name)
        if config is None:
            raise FieldNotRegisteredError(name)
        return config

    def _schedule_validation(self, name: str) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            asyncio.run(self.validate_field(name))
            return
        task = loop.create_task(self.validate_field(name), name=f"formgate-validate-{name}")
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: asyncio.Task[bool]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                "Background validation %s failed",
                task.get_name(),
                exc_info=(type(exc), exc, exc.__traceback__),
            )

    def dispatch_hook(self, hook_name: str, **payload: Any) -> None:
        """Dispatch a hook. No-op without a plugin manager."""
        if self._plugins is None:
            return
        self._plugins.dispatch(hook_name, **payload)


class _Publish:
    """Handle a mutation body uses to skip publishing."""

    __slots__ = ("cancelled",)

    def __init__(self) -> None:
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


def _noop_action(values: dict[str, Any]) -> None:
    return None
