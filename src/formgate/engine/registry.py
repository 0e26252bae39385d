"""Field registry — authoritative name -> (config, state, generation) mapping.

Fields come and go as UI bindings attach and detach. ``register`` is
idempotent: registering a name that already exists swaps its config but
keeps the runtime state, so a widget that re-runs its mount logic does not
wipe what the user typed. ``reinitialize`` is the explicit reset path.

Every field also carries a validation generation drawn from one
registry-wide counter. A validation records the generation it started
under and may only write its result while that generation is current;
because the counter never repeats, a field that is removed and registered
again can never be hit by a result from its previous life.
"""

from __future__ import annotations

import itertools
import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from formgate.domain.models import EMPTY_VALUE, FieldConfig, FieldState
from formgate.errors import FieldNotRegisteredError, InvalidFieldConfigError

logger = logging.getLogger(__name__)


def coerce_config(name: str, config: FieldConfig | Mapping[str, Any] | None) -> FieldConfig:
    """Validate *config* into a :class:`FieldConfig`.

    Raises:
        InvalidFieldConfigError: If the mapping does not describe a valid config.
    """
    if config is None:
        return FieldConfig()
    if isinstance(config, FieldConfig):
        return config
    if not isinstance(config, Mapping):
        reason = f"expected FieldConfig or mapping, got {type(config).__name__}"
        raise InvalidFieldConfigError(name, reason)
    try:
        return FieldConfig.model_validate(dict(config))
    except ValidationError as exc:
        raise InvalidFieldConfigError(name, str(exc)) from exc


class FieldRegistry:
    """Field configs and states for a single form.

    Not synchronized on its own: :class:`~formgate.engine.store.FormStore`
    serializes all access through its lock.
    """

    def __init__(self, initial_values: Mapping[str, Any] | None = None) -> None:
        self._initial_values: dict[str, Any] = dict(initial_values or {})
        self._configs: dict[str, FieldConfig] = {}
        self._states: dict[str, FieldState] = {}
        self._generations: dict[str, int] = {}
        self._counter = itertools.count(1)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def register(
        self,
        name: str,
        config: FieldConfig | Mapping[str, Any] | None = None,
    ) -> FieldState:
        """Insert or update a field's config; state survives re-registration."""
        self._check_name(name)
        resolved = coerce_config(name, config)
        self._configs[name] = resolved
        existing = self._states.get(name)
        if existing is not None:
            logger.debug("Re-registered field %s (state preserved)", name)
            return existing
        state = FieldState(value=self.initial_value(name))
        self._states[name] = state
        self.bump_generation(name)
        logger.debug("Registered field %s", name)
        return state

    def reinitialize(
        self,
        name: str,
        config: FieldConfig | Mapping[str, Any] | None = None,
    ) -> FieldState:
        """Replace the config and recreate the state from the initial value."""
        self._check_name(name)
        self._configs[name] = coerce_config(name, config)
        state = FieldState(value=self.initial_value(name))
        self._states[name] = state
        self.bump_generation(name)
        logger.debug("Reinitialized field %s", name)
        return state

    def unregister(self, name: str) -> bool:
        """Remove a field entirely. Returns False if it was not registered."""
        if name not in self._states:
            return False
        del self._states[name]
        self._configs.pop(name, None)
        self._generations.pop(name, None)
        logger.debug("Unregistered field %s", name)
        return True

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def __contains__(self, name: object) -> bool:
        return name in self._states

    def __len__(self) -> int:
        return len(self._states)

    def names(self) -> list[str]:
        """Registered field names in registration order."""
        return list(self._states)

    def config(self, name: str) -> FieldConfig | None:
        return self._configs.get(name)

    def state(self, name: str) -> FieldState | None:
        return self._states.get(name)

    def snapshot(self) -> dict[str, FieldState]:
        """Shallow copy of all field states."""
        return dict(self._states)

    @property
    def initial_values(self) -> dict[str, Any]:
        return dict(self._initial_values)

    def initial_value(self, name: str) -> Any:
        """Resolve a field's seed: config value, then form-level value, then ``""``."""
        config = self._configs.get(name)
        if config is not None and config.initial_value is not None:
            return config.initial_value
        form_value = self._initial_values.get(name)
        if form_value is not None:
            return form_value
        return EMPTY_VALUE

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def update(self, name: str, **changes: Any) -> FieldState:
        """Replace a field's state with *changes* applied."""
        current = self._states.get(name)
        if current is None:
            raise FieldNotRegisteredError(name)
        updated = current.model_copy(update=changes)
        self._states[name] = updated
        return updated

    def reset(self, name: str) -> FieldState:
        """Restore one field to its pristine state and invalidate its validations."""
        if name not in self._states:
            raise FieldNotRegisteredError(name)
        state = FieldState(value=self.initial_value(name))
        self._states[name] = state
        self.bump_generation(name)
        return state

    # ------------------------------------------------------------------
    # Validation generations
    # ------------------------------------------------------------------

    def bump_generation(self, name: str) -> int:
        """Advance *name* to a fresh generation and return it."""
        generation = next(self._counter)
        self._generations[name] = generation
        return generation

    def generation(self, name: str) -> int | None:
        """Current generation, or None if the field is not registered."""
        return self._generations.get(name)

    def is_current(self, name: str, generation: int) -> bool:
        """Whether a result tagged with *generation* may still be written."""
        return name in self._states and self._generations.get(name) == generation

    @staticmethod
    def _check_name(name: str) -> None:
        if not isinstance(name, str) or not name.strip():
            raise InvalidFieldConfigError(str(name), "field name must be a non-empty string")
