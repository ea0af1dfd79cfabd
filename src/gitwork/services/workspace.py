"""Workspace — the single dependency injected into every service.

Ties together the resolved settings, the shell executor for the target
repository, the workflow registry (built-ins + config + plugins), the
diagnostic rule list, and the plugin event bus. Everything beyond the
settings is built lazily so ``--help`` never touches plugins or git.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from gitwork.domain.diagnostics import DEFAULT_RULES, DiagnosticRule
from gitwork.domain.registry import WorkflowRegistry
from gitwork.infrastructure.executor import ShellExecutor

if TYPE_CHECKING:
    from pathlib import Path

    from gitwork.config.settings import GitworkSettings
    from gitwork.plugins.event_bus import EventBus
    from gitwork.plugins.manager import PluginManager

logger = logging.getLogger(__name__)


class Workspace:
    """Per-invocation context over one repository.

    Setup problems (broken config workflows, failing plugins) never abort
    a command; they are collected in :attr:`warnings` and surfaced on the
    next ServiceResult.
    """

    def __init__(self, settings: GitworkSettings) -> None:
        self._settings = settings
        self._registry: WorkflowRegistry | None = None
        self._rules: tuple[DiagnosticRule, ...] | None = None
        self._plugins: PluginManager | None = None
        self._event_bus: EventBus | None = None
        self.warnings: list[str] = []

    @property
    def settings(self) -> GitworkSettings:
        """The resolved settings for this invocation."""
        return self._settings

    @property
    def root(self) -> Path:
        """The repository working directory commands run in."""
        return self._settings.repo_root

    def executor(self, *, dry_run: bool = False) -> ShellExecutor:
        """A ShellExecutor bound to :attr:`root` and the configured binaries."""
        return ShellExecutor(
            cwd=self.root,
            timeout=self._settings.git.timeout,
            binaries=self._settings.binaries,
            dry_run=dry_run,
        )

    @property
    def plugins(self) -> PluginManager | None:
        """Loaded plugin manager, or None when plugins are disabled."""
        if not self._settings.plugins.enabled:
            return None
        if self._plugins is None:
            from gitwork.plugins.manager import PluginManager

            pm = PluginManager()
            pm.discover_and_load(local_dir=self.root / self._settings.plugins.local_dir)
            self.warnings.extend(pm.warnings)
            pm.warnings.clear()
            self._plugins = pm
        return self._plugins

    @property
    def registry(self) -> WorkflowRegistry:
        """Workflow registry: built-ins, then config tables, then plugins."""
        if self._registry is None:
            registry = WorkflowRegistry.with_builtins()
            self.warnings.extend(registry.load_config(self._settings.workflows))
            pm = self.plugins
            if pm is not None:
                for plugin_name, workflows in pm.collect_workflows():
                    self.warnings.extend(registry.load_plugin_workflows(plugin_name, workflows))
                self.warnings.extend(pm.warnings)
                pm.warnings.clear()
            self._registry = registry
        return self._registry

    @property
    def rules(self) -> tuple[DiagnosticRule, ...]:
        """Built-in diagnostic rules followed by plugin-provided ones."""
        if self._rules is None:
            extra: list[DiagnosticRule] = []
            pm = self.plugins
            if pm is not None:
                extra = pm.collect_diagnostic_rules()
                self.warnings.extend(pm.warnings)
                pm.warnings.clear()
            self._rules = (*DEFAULT_RULES, *extra)
        return self._rules

    @property
    def event_bus(self) -> EventBus | None:
        """The plugin event bus (None if not initialized)."""
        return self._event_bus

    def init_event_bus(self, *, sync: bool = False) -> None:
        """Wire an EventBus to the plugin manager. No-op with plugins disabled."""
        pm = self.plugins
        if pm is None:
            return
        from gitwork.plugins.event_bus import EventBus

        self._event_bus = EventBus(pm, sync=sync)

    def take_warnings(self) -> list[str]:
        """Return and clear accumulated setup warnings."""
        warnings, self.warnings = self.warnings, []
        return warnings

    def close(self) -> list[str]:
        """Shut down the event bus. Returns late plugin failure messages."""
        if self._event_bus is None:
            return []
        failures = self._event_bus.drain()
        self._event_bus.shutdown()
        self._event_bus = None
        return failures
