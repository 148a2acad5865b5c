"""Sanitization dispatcher: validates a submitted value against its bindings.

For a registered scalar key the bound rule sees the candidate and the
stored value. For a compound key every *registered* sub-key is validated;
sub-keys the registry does not know about pass through untouched, and a
registered sub-key missing from the submission is validated from ``""``.
Keys with no binding at all are returned as submitted.

When a save is being traced, the active span records how many registered
sub-keys were validated and which rule kinds ran.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from optguard.domain.registry import CompoundBinding, ScalarBinding
from optguard.services.telemetry import get_current_span

if TYPE_CHECKING:
    from optguard.domain.registry import RuleRegistry
    from optguard.domain.rules import RuleLibrary
    from optguard.infrastructure.defaults import DefaultsProvider
    from optguard.infrastructure.store import SettingsStore

logger = logging.getLogger(__name__)


class SanitizationDispatcher:
    """Applies registered rules to submitted option values.

    The dispatcher reads previous values from *store* but never writes;
    committing the result is the caller's job.
    """

    def __init__(
        self,
        registry: RuleRegistry,
        library: RuleLibrary,
        store: SettingsStore,
        defaults: DefaultsProvider,
    ) -> None:
        self._registry = registry
        self._library = library
        self._store = store
        self._defaults = defaults

    def sanitize(self, bundle_key: str, candidate: Any) -> Any:
        """Return the accepted value for *candidate* submitted under *bundle_key*."""
        binding = self._registry.lookup(bundle_key)
        if binding is None:
            return candidate

        previous = self._store.get_stored(bundle_key)
        kinds: set[str] = set()
        if isinstance(binding, ScalarBinding):
            accepted = self._apply(
                binding.rule,
                bundle_key,
                candidate,
                "" if previous is None else previous,
                kinds,
            )
            sub_keys = 0
        else:
            accepted = self._sanitize_compound(binding, candidate, previous, kinds)
            sub_keys = len(binding.rules)

        span = get_current_span()
        if span is not None:
            span.record_rules(sub_keys, kinds)
        return accepted

    def sanitize_bundle(self, bundle: Mapping[str, Any]) -> dict[str, Any]:
        """Sanitize every key of a multi-key submission."""
        return {key: self.sanitize(key, value) for key, value in bundle.items()}

    def _sanitize_compound(
        self,
        binding: CompoundBinding,
        candidate: Any,
        previous: Any,
        kinds: set[str],
    ) -> dict[str, Any]:
        stored = previous if isinstance(previous, Mapping) else {}
        if isinstance(candidate, Mapping):
            accepted = dict(candidate)
        else:
            if candidate not in (None, ""):
                logger.debug("Non-mapping value submitted for a compound option; treated as empty")
            accepted = {}

        for sub_key, rule_name in binding.rules.items():
            accepted[sub_key] = self._apply(
                rule_name,
                sub_key,
                accepted.get(sub_key, ""),
                stored.get(sub_key, ""),
                kinds,
            )
        return accepted

    def _apply(
        self,
        rule_name: str,
        default_key: str,
        candidate: Any,
        previous: Any,
        kinds: set[str],
    ) -> Any:
        rule = self._library.resolve(rule_name)
        kinds.add(str(getattr(rule, "kind", type(rule).__name__)))
        return rule.apply(candidate, previous, self._defaults.get_default(default_key))
