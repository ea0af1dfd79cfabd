"""Plugin discovery and contribution collection.

Plugins come from two places:

* the ``gitwork.plugins`` entry-point group. An entry point may name a
  plugin object, a module, or a class (instantiated without arguments).
* ``*.py`` files in the repository's ``.gitwork/plugins/`` directory.
  Every class defined in such a file that implements a gitwork hook is
  instantiated and registered. Files starting with ``_`` are helpers.

A plugin that fails to load is left out and reported in :attr:`warnings`.
"""

from __future__ import annotations

import importlib.util
import inspect
import logging
import sys
from importlib.metadata import EntryPoint, entry_points
from pathlib import Path
from types import ModuleType
from typing import TYPE_CHECKING, Any

import pluggy

from gitwork.plugins.hookspecs import GitworkHookSpec

if TYPE_CHECKING:
    from gitwork.domain.diagnostics import DiagnosticRule

PROJECT_NAME = "gitwork"
ENTRY_POINT_GROUP = "gitwork.plugins"
LOCAL_MODULE_PREFIX = "gitwork_local_plugin_"

logger = logging.getLogger(__name__)


class PluginManager:
    """Loads gitwork plugins and collects what they contribute."""

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(GitworkHookSpec)
        self.warnings: list[str] = []

    def discover_and_load(self, *, local_dir: Path | None = None) -> None:
        """Register entry-point plugins, then single-file plugins in *local_dir*."""
        for ep in entry_points(group=ENTRY_POINT_GROUP):
            self._load_entry_point(ep)
        if local_dir is None or not local_dir.is_dir():
            return
        for path in sorted(local_dir.glob("*.py")):
            if not path.name.startswith("_"):
                self._load_local_file(path)

    def register_plugin(self, plugin: object, name: str | None = None) -> None:
        """Register a plugin instance directly."""
        resolved_name = name or plugin.__class__.__name__
        self._pm.register(plugin, name=resolved_name)
        logger.debug("Registered plugin: %s", resolved_name)

    @property
    def hook(self) -> pluggy.HookRelay:
        """Access the hook relay for dispatching events."""
        return self._pm.hook

    # ------------------------------------------------------------------
    # Contributions
    # ------------------------------------------------------------------

    def collect_workflows(self) -> list[tuple[str, list[Any]]]:
        """Return ``(plugin_name, workflows)`` for each contributing plugin."""
        return self._collect("register_workflows")

    def collect_diagnostic_rules(self) -> list[DiagnosticRule]:
        """Return plugin rules in registration order, skipping malformed entries."""
        from gitwork.domain.diagnostics import DiagnosticRule

        rules: list[DiagnosticRule] = []
        for plugin_name, items in self._collect("register_diagnostic_rules"):
            for item in items:
                if isinstance(item, DiagnosticRule):
                    rules.append(item)
                else:
                    self.warnings.append(
                        f"Plugin {plugin_name} returned a non-DiagnosticRule: {item!r}"
                    )
        return rules

    def _collect(self, hook_name: str) -> list[tuple[str, list[Any]]]:
        """Call *hook_name* on each plugin separately so one failure stays local."""
        collected: list[tuple[str, list[Any]]] = []
        for plugin_name, plugin in self._pm.list_name_plugin():
            impl = getattr(plugin, hook_name, None)
            if impl is None:
                continue
            try:
                items = impl()
            except Exception as exc:
                self._warn(f"Plugin {plugin_name} failed in {hook_name}: {exc}")
                continue
            if items is None:
                continue
            if not isinstance(items, (list, tuple)):
                self.warnings.append(f"Plugin {plugin_name} returned non-list from {hook_name}")
                continue
            collected.append((plugin_name, list(items)))
        return collected

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def _load_entry_point(self, ep: EntryPoint) -> None:
        if self._pm.get_plugin(ep.name) is not None or self._pm.is_blocked(ep.name):
            return
        try:
            target = ep.load()
            plugin = target() if inspect.isclass(target) else target
            self.register_plugin(plugin, name=ep.name)
        except Exception as exc:
            self._warn(f"Failed to load plugin {ep.name!r} ({ep.value}): {exc}")

    def _load_local_file(self, path: Path) -> None:
        module_name = f"{LOCAL_MODULE_PREFIX}{path.stem}"
        try:
            module = _import_file(module_name, path)
        except Exception as exc:
            self._warn(f"Failed to load local plugin {path.name}: {exc}")
            return
        for cls in self._hook_classes(module):
            try:
                self.register_plugin(cls(), name=f"{module_name}.{cls.__name__}")
            except Exception as exc:
                self._warn(f"Failed to instantiate plugin {cls.__name__}: {exc}")

    def _hook_classes(self, module: ModuleType) -> list[type]:
        """Classes defined in *module* (not imported into it) that implement a hook."""
        return [
            obj
            for _name, obj in inspect.getmembers(module, inspect.isclass)
            if obj.__module__ == module.__name__ and self._implements_hooks(obj)
        ]

    def _implements_hooks(self, obj: object) -> bool:
        """Whether *obj* carries at least one ``@hookimpl``-marked method."""
        return any(
            self._pm.parse_hookimpl_opts(obj, attr) is not None
            for attr in dir(obj)
            if not attr.startswith("_")
        )

    def _warn(self, message: str) -> None:
        logger.warning("%s", message, exc_info=True)
        self.warnings.append(message)


def _import_file(module_name: str, path: Path) -> ModuleType:
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise ImportError(f"cannot import {path}")
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception:
        sys.modules.pop(module_name, None)
        raise
    return module
