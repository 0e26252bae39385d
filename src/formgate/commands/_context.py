"""AppContext — shared Click context for all commands.

Created once by the root CLI group and handed to subcommands via
``@click.pass_obj``. Owns logging setup, the lazily loaded plugin
manager, store construction, and result emission (stdout/stderr routing
plus exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import click

from formgate.config.logging import configure_logging
from formgate.output.formatters import format_result

if TYPE_CHECKING:
    from formgate.config.settings import FormgateSettings
    from formgate.engine.result import OperationResult
    from formgate.engine.store import FormStore
    from formgate.plugins.manager import PluginManager


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    Plugins are discovered on first use, so ``--help`` and ``--version``
    never import entry points.
    """

    def __init__(self, settings: FormgateSettings) -> None:
        self.settings = settings
        self._plugin_manager: PluginManager | None = None
        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    @property
    def plugin_manager(self) -> PluginManager | None:
        """Loaded plugin manager, or None when ``[plugins] enabled = false``."""
        if not self.settings.plugins.enabled:
            return None
        if self._plugin_manager is None:
            from formgate.plugins.manager import PluginManager

            manager = PluginManager()
            manager.discover_and_load()
            self._plugin_manager = manager
        return self._plugin_manager

    def create_store(self, **kwargs: Any) -> FormStore:
        """Build a :class:`FormStore` configured from settings and plugins."""
        from formgate.engine.store import FormStore

        kwargs.setdefault("plugin_manager", self.plugin_manager)
        return FormStore.from_settings(self.settings, **kwargs)

    def emit(self, result: OperationResult) -> None:
        """Format and output an OperationResult with correct exit semantics.

        * Success: written to stdout. Warnings go to stderr in human mode
          so they don't pollute piped output.
        * Failure: written to stderr, exit code 1.
        """
        json_output = self.settings.json_output
        output = format_result(result, json_output=json_output, quiet=self.settings.quiet)
        if result.ok:
            if output:
                click.echo(output)
            if not json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
