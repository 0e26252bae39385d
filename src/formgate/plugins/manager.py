"""Plugin discovery, loading, and hook dispatch.

Discovery: entry_points (pip-installed) via pluggy setuptools entrypoints
under the ``formgate.plugins`` group, plus direct registration of plugin
instances (e.g. the accessibility bridge a UI layer wires up).
"""

from __future__ import annotations

import inspect
import logging
from typing import Any

import pluggy

from formgate.plugins.hookspecs import FormgateHookSpec

PROJECT_NAME = "formgate"
ENTRY_POINT_GROUP = "formgate.plugins"

logger = logging.getLogger(__name__)


class PluginManager:
    """Manages plugin discovery, loading, and hook dispatch.

    INVARIANT: Plugin failures are warnings, never errors. A broken plugin
    must not break the form operation that triggered its hook.
    """

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(FormgateHookSpec)
        self._loaded: bool = False

    def discover_and_load(self) -> list[str]:
        """Load entry-point plugins and collect their rule factories.

        Returns a list of loaded plugin names.
        """
        self._pm.load_setuptools_entrypoints(ENTRY_POINT_GROUP)
        self._normalize_plugin_instances()
        self._register_rule_factories()
        self._loaded = True
        return self.list_plugin_names()

    def register_plugin(self, plugin: object, name: str | None = None) -> None:
        """Register a plugin instance directly."""
        resolved_name = name or plugin.__class__.__name__
        self._pm.register(plugin, name=resolved_name)
        if self._loaded:
            self._register_plugin_rule_factories(plugin, resolved_name)
        logger.debug("Registered plugin: %s", resolved_name)

    def unregister(self, plugin: object) -> None:
        """Unregister a plugin instance."""
        self._pm.unregister(plugin)

    @property
    def is_loaded(self) -> bool:
        """Whether discover_and_load() has been called."""
        return self._loaded

    @property
    def hook(self) -> pluggy.HookRelay:
        """Access the hook relay for dispatching events."""
        return self._pm.hook

    def get_plugins(self) -> list[object]:
        """Return all registered plugins."""
        return list(self._pm.get_plugins())

    def list_plugin_names(self) -> list[str]:
        """Return names of all registered plugins."""
        return [self._pm.get_name(p) or p.__class__.__name__ for p in self._pm.get_plugins()]

    def dispatch(self, hook_name: str, **payload: Any) -> bool:
        """Call *hook_name* on every plugin. Returns False if any plugin failed."""
        hook_fn = getattr(self._pm.hook, hook_name, None)
        if hook_fn is None:
            return True
        try:
            hook_fn(**payload)
        except Exception:
            logger.warning("Hook %s failed", hook_name, exc_info=True)
            return False
        return True

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _normalize_plugin_instances(self) -> None:
        """Replace registered plugin classes with instantiated objects.

        Entry-point loading may register a plugin class directly. Hook dispatch
        against class objects leaves ``self`` unbound and fails at runtime.
        """
        for plugin in list(self._pm.get_plugins()):
            if not inspect.isclass(plugin):
                continue
            if not self._has_hook_impls(plugin):
                continue

            plugin_name = self._pm.get_name(plugin) or plugin.__name__
            self._pm.unregister(plugin)

            try:
                instance = plugin()
            except Exception:
                logger.warning(
                    "Failed to instantiate entry-point plugin %s",
                    plugin_name,
                    exc_info=True,
                )
                continue

            self._pm.register(instance, name=plugin_name)
            logger.debug("Instantiated entry-point plugin: %s", plugin_name)

    def _register_rule_factories(self) -> None:
        """Load plugin-provided rule factories into the rule registry."""
        for plugin in self._pm.get_plugins():
            plugin_name = self._pm.get_name(plugin) or plugin.__class__.__name__
            self._register_plugin_rule_factories(plugin, plugin_name)

    @staticmethod
    def _register_plugin_rule_factories(plugin: object, plugin_name: str) -> None:
        """Register rule factories exposed by a single plugin instance."""
        from formgate.domain.rules import register_rule_factory

        hook = getattr(plugin, "register_rule_factories", None)
        if hook is None:
            return

        try:
            factory_map = hook()
        except Exception:
            logger.warning(
                "Failed to collect rule factories from plugin %s",
                plugin_name,
                exc_info=True,
            )
            return

        if factory_map is None:
            return
        if not isinstance(factory_map, dict):
            logger.warning("Plugin %s returned non-dict rule factory registrations", plugin_name)
            return

        for rule_name, factory in factory_map.items():
            try:
                register_rule_factory(rule_name, factory)
            except (TypeError, ValueError):
                logger.warning(
                    "Skipping rule factory %r from plugin %s",
                    rule_name,
                    plugin_name,
                    exc_info=True,
                )

    @staticmethod
    def _has_hook_impls(cls: type) -> bool:
        """Check whether *cls* has any methods decorated with ``@hookimpl``.

        Pluggy's ``HookimplMarker("formgate")`` sets a ``formgate_impl``
        attribute on decorated methods.
        """
        for name in dir(cls):
            if name.startswith("_"):
                continue
            method = getattr(cls, name, None)
            if callable(method) and getattr(method, "formgate_impl", None):
                return True
        return False
