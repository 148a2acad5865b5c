"""Pluggy hook specifications for optguard.

Two setup-time hooks let plugins contribute named rules and bind option
keys to them before the registry is frozen. Two lifecycle hooks fire
synchronously after a bundle save and after a compatibility migration.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pluggy

if TYPE_CHECKING:
    from optguard.domain.registry import RuleRegistry

hookspec = pluggy.HookspecMarker("optguard")
hookimpl = pluggy.HookimplMarker("optguard")


class OptguardHookSpec:
    """Hook specifications for the optguard plugin system."""

    @hookspec
    def register_rules(self) -> dict[str, Any] | None:
        """Return rule name -> rule (model or ``{"kind": ...}`` mapping)."""

    @hookspec
    def register_bindings(self, registry: RuleRegistry) -> None:
        """Bind option keys to rule names during the one-time registration pass."""

    @hookspec
    def post_save(self, bundle_key: str, changed_keys: list[str]) -> None:
        """Called after a bundle was sanitized and committed."""

    @hookspec
    def post_migrate(self, bundle_key: str, migrated_keys: list[str]) -> None:
        """Called after legacy option names were brought back in sync."""
