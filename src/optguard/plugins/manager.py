"""Plugin discovery and loading.

Discovery: entry_points (pip-installed) via pluggy setuptools entrypoints,
plus local directory discovery from ``.optguard/plugins/``.
Capabilities: custom rules, extra bindings, save/migrate lifecycle hooks.
"""

from __future__ import annotations

import importlib.util
import inspect
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any

import pluggy
from pydantic import ValidationError

from optguard.domain.rules import BaseRule, parse_rule
from optguard.plugins.hookspecs import OptguardHookSpec

if TYPE_CHECKING:
    from optguard.domain.registry import RuleRegistry

PROJECT_NAME = "optguard"
ENTRY_POINT_GROUP = "optguard.plugins"

logger = logging.getLogger(__name__)


class PluginManager:
    """Manages plugin discovery, loading, and hook dispatch."""

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(OptguardHookSpec)
        self._loaded: bool = False

    def discover_and_load(self, *, local_dir: Path | None = None) -> list[str]:
        """Discover plugins from entry points and an optional local directory.

        Uses pluggy's native setuptools entry_point discovery for the
        ``optguard.plugins`` group, then scans *local_dir* (typically
        ``.optguard/plugins/``) for single-file Python plugins.

        Returns a list of loaded plugin names.
        """
        self._pm.load_setuptools_entrypoints(ENTRY_POINT_GROUP)
        self._normalize_plugin_instances()
        if local_dir is not None:
            self._discover_local(local_dir)
        self._loaded = True
        return self.list_plugin_names()

    def register_plugin(self, plugin: object, name: str | None = None) -> None:
        """Register a plugin instance directly."""
        resolved_name = name or plugin.__class__.__name__
        self._pm.register(plugin, name=resolved_name)
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
        return [self._plugin_name(p) for p in self._pm.get_plugins()]

    # ------------------------------------------------------------------
    # Setup-time hooks
    # ------------------------------------------------------------------

    def collect_rules(self) -> dict[str, BaseRule]:
        """Gather named rules from every plugin's ``register_rules`` hook.

        A plugin that raises, returns a non-dict, or returns an invalid rule
        definition is skipped with a warning. Later plugins win on name
        clashes.
        """
        collected: dict[str, BaseRule] = {}
        for plugin in self._pm.get_plugins():
            hook = getattr(plugin, "register_rules", None)
            if hook is None:
                continue
            plugin_name = self._plugin_name(plugin)
            try:
                rule_map = hook()
            except Exception:
                logger.warning("Failed to collect rules from plugin %s", plugin_name, exc_info=True)
                continue

            if rule_map is None:
                continue
            if not isinstance(rule_map, dict):
                logger.warning("Plugin %s returned non-dict rule registrations", plugin_name)
                continue

            for rule_name, definition in rule_map.items():
                try:
                    collected[str(rule_name)] = parse_rule(definition)
                except (TypeError, ValueError, ValidationError):
                    logger.warning(
                        "Skipping rule %r from plugin %s",
                        rule_name,
                        plugin_name,
                        exc_info=True,
                    )
        return collected

    def apply_bindings(self, registry: RuleRegistry) -> list[str]:
        """Let each plugin bind option keys on *registry*.

        Returns the names of plugins whose ``register_bindings`` failed.
        """
        failed: list[str] = []
        for plugin in self._pm.get_plugins():
            hook = getattr(plugin, "register_bindings", None)
            if hook is None:
                continue
            plugin_name = self._plugin_name(plugin)
            try:
                hook(registry=registry)
            except Exception:
                logger.warning("Plugin %s failed to register bindings", plugin_name, exc_info=True)
                failed.append(plugin_name)
        return failed

    # ------------------------------------------------------------------
    # Local directory discovery
    # ------------------------------------------------------------------

    def _discover_local(self, local_dir: Path) -> None:
        """Scan *local_dir* for single-file Python plugins.

        Each ``*.py`` file (excluding ``_``-prefixed names) is loaded as a
        module. Classes inside the module that carry pluggy hookimpl-decorated
        methods are instantiated and registered.

        Errors are logged as warnings but never raised.
        """
        if not local_dir.is_dir():
            return

        for py_file in sorted(local_dir.glob("*.py")):
            if py_file.name.startswith("_"):
                continue
            module_name = f"optguard_local_plugin_{py_file.stem}"
            try:
                spec = importlib.util.spec_from_file_location(module_name, py_file)
                if spec is None or spec.loader is None:
                    logger.warning("Could not create module spec for %s", py_file)
                    continue
                module = importlib.util.module_from_spec(spec)
                sys.modules[module_name] = module
                spec.loader.exec_module(module)
            except Exception:
                logger.warning("Failed to load local plugin %s", py_file, exc_info=True)
                sys.modules.pop(module_name, None)
                continue

            for _attr_name, obj in inspect.getmembers(module, inspect.isclass):
                if obj.__module__ != module_name:
                    continue
                if not self._has_hook_impls(obj):
                    continue
                try:
                    instance = obj()
                    self.register_plugin(instance, name=f"{module_name}.{obj.__name__}")
                    logger.debug("Loaded local plugin %s from %s", obj.__name__, py_file)
                except Exception:
                    logger.warning(
                        "Failed to instantiate plugin class %s from %s",
                        obj.__name__,
                        py_file,
                        exc_info=True,
                    )

    def _normalize_plugin_instances(self) -> None:
        """Replace registered plugin classes with instantiated objects.

        Entry-point loading may register a plugin class directly, which
        leaves ``self`` unbound at dispatch time.
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

    def _plugin_name(self, plugin: Any) -> str:
        return self._pm.get_name(plugin) or plugin.__class__.__name__

    @staticmethod
    def _has_hook_impls(cls: type) -> bool:
        """Check whether *cls* has any methods decorated with ``@hookimpl``.

        Pluggy's ``HookimplMarker("optguard")`` sets an ``optguard_impl``
        attribute on decorated methods.
        """
        for name in dir(cls):
            if name.startswith("_"):
                continue
            method = getattr(cls, name, None)
            if callable(method) and getattr(method, "optguard_impl", None):
                return True
        return False
