"""SettingsContext: the single dependency injected into every service.

Owns the rule registry, the named rule library, the option store, the
defaults provider, the compatibility migrator and the plugin manager for
one process. Nothing here is global: two contexts never share registry state.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from optguard.domain.catalog import (
    COMPAT_STEPS,
    SITE_DEFAULTS,
    builtin_rules,
    register_site_options,
)
from optguard.domain.registry import RuleRegistry
from optguard.domain.rules import RuleLibrary
from optguard.infrastructure.database.engine import init_database
from optguard.infrastructure.defaults import MappingDefaults
from optguard.infrastructure.migrator import CompatibilityMigrator
from optguard.infrastructure.store import MemoryStore, SettingsStore, SqlStore

if TYPE_CHECKING:
    from optguard.config.settings import OptguardSettings
    from optguard.plugins.manager import PluginManager

logger = logging.getLogger(__name__)


class SettingsContext:
    """Registry, rules, store and plugins for one settings engine.

    Constructed once at CLI startup from :class:`OptguardSettings` and
    stored on the click context. Tests may pass *store* and
    *plugin_manager* to skip the SQLite file and plugin discovery.
    """

    def __init__(
        self,
        settings: OptguardSettings,
        *,
        store: SettingsStore | None = None,
        plugin_manager: PluginManager | None = None,
    ) -> None:
        self._settings = settings
        self._store = store if store is not None else self._open_store()
        self._plugins = plugin_manager
        self._registry = RuleRegistry()
        self._library: RuleLibrary | None = None
        self._migrator: CompatibilityMigrator | None = None
        self._defaults = MappingDefaults(SITE_DEFAULTS, settings.defaults)

    @property
    def settings(self) -> OptguardSettings:
        return self._settings

    @property
    def settings_field(self) -> str:
        """Name of the compound option holding the site settings bundle."""
        return self._settings.catalog.settings_field

    @property
    def store(self) -> SettingsStore:
        return self._store

    @property
    def defaults(self) -> MappingDefaults:
        return self._defaults

    @property
    def registry(self) -> RuleRegistry:
        """The rule registry, populated on first access."""
        self.ensure_registered()
        return self._registry

    @property
    def plugins(self) -> PluginManager:
        """The plugin manager, discovered and loaded on first access."""
        if self._plugins is None:
            self._plugins = self._load_plugins()
        return self._plugins

    @property
    def library(self) -> RuleLibrary:
        """Built-in rules plus those contributed by plugins."""
        if self._library is None:
            catalog = self._settings.catalog
            library = RuleLibrary(
                builtin_rules(
                    forced_post_types=tuple(catalog.forced_post_types),
                    sitemap_query_min=catalog.sitemap_query_min,
                    sitemap_query_max=catalog.sitemap_query_max,
                )
            )
            for name, rule in self.plugins.collect_rules().items():
                library.add(name, rule)
            self._library = library
        return self._library

    @property
    def migrator(self) -> CompatibilityMigrator:
        """Legacy-key migrator for the settings bundle, shared by every service."""
        if self._migrator is None:
            self._migrator = CompatibilityMigrator(
                self._store, COMPAT_STEPS, bundle_key=self.settings_field
            )
        return self._migrator

    def ensure_registered(self) -> bool:
        """Run the full registration pass unless it already ran."""
        ran = self._registry.build_once(self._populate)
        if ran:
            logger.debug("Registered %d option keys", len(self._registry))
        return ran

    def close(self) -> None:
        if isinstance(self._store, SqlStore):
            self._store.close()

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _populate(self, registry: RuleRegistry) -> None:
        register_site_options(registry, self.settings_field)
        self.plugins.apply_bindings(registry)

    def _open_store(self) -> SettingsStore:
        if self._settings.store.backend == "memory":
            return MemoryStore()
        return SqlStore(init_database(self._settings.db_path))

    def _load_plugins(self) -> PluginManager:
        from optguard.plugins.manager import PluginManager

        pm = PluginManager()
        if self._settings.plugins.enabled:
            names = pm.discover_and_load(local_dir=self._settings.local_plugin_dir)
            if names:
                logger.debug("Loaded plugins: %s", ", ".join(names))
        return pm
