"""Backward-compatibility migrator: keeps legacy option names in sync.

Runs after a successful commit of the settings bundle. The steps are pure
(:mod:`optguard.domain.compat`); this module reads the committed bundle,
writes back whatever changed, and guards against being re-entered while a
migration is already in progress.

One migrator exists per :class:`~optguard.infrastructure.context.SettingsContext`,
so the in-progress flag covers every service built on that context.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING

from optguard.domain.compat import derive_all

if TYPE_CHECKING:
    from optguard.domain.compat import CompatStep
    from optguard.infrastructure.store import SettingsStore

logger = logging.getLogger(__name__)

MigrateHook = Callable[[str, list[str], list[str]], None]


class CompatibilityMigrator:
    """Post-commit migration for one compound option."""

    def __init__(self, store: SettingsStore, steps: list[CompatStep], *, bundle_key: str) -> None:
        self._store = store
        self._steps = list(steps)
        self._bundle_key = bundle_key
        self._running = False

    @property
    def bundle_key(self) -> str:
        return self._bundle_key

    @property
    def running(self) -> bool:
        return self._running

    def migrate(self, warnings: list[str], notify: MigrateHook | None = None) -> list[str]:
        """Bring the legacy keys of the committed bundle up to date.

        Returns the keys whose value changed. Returns ``[]`` immediately
        when called while a migration is in progress. Failures are logged
        and appended to *warnings*; the primary commit is never undone.

        *notify* is called with ``(bundle_key, migrated_keys, warnings)``
        after a migration wrote something, while the in-progress flag is
        still set.
        """
        if self._running:
            logger.debug("Migration already in progress for %s", self._bundle_key)
            return []

        self._running = True
        try:
            return self._run(warnings, notify)
        except Exception:
            logger.warning("Compatibility migration failed for %s", self._bundle_key, exc_info=True)
            warnings.append(f"Compatibility migration failed for {self._bundle_key}")
            return []
        finally:
            self._running = False

    def _run(self, warnings: list[str], notify: MigrateHook | None) -> list[str]:
        stored = self._store.get_stored(self._bundle_key)
        if not isinstance(stored, Mapping):
            return []

        updates = derive_all(self._steps, stored)
        migrated = sorted(key for key, value in updates.items() if stored.get(key) != value)
        if not migrated:
            return []

        if not self._store.commit(self._bundle_key, {**stored, **updates}):
            warnings.append(f"Could not store migrated keys for {self._bundle_key}")
            return []

        logger.debug("Migrated %s: %s", self._bundle_key, ", ".join(migrated))
        if notify is not None:
            notify(self._bundle_key, migrated, warnings)
        return migrated
