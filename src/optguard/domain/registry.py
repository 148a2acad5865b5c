"""Rule registry: binds option keys (and sub-keys) to rule names.

A key is either bound directly (:class:`ScalarBinding`) or through a
per-sub-key table (:class:`CompoundBinding`). Re-registering a pair
overwrites it; the last write wins.

The full registration pass runs through :meth:`RuleRegistry.build_once`,
which is guarded so repeat calls are no-ops. After the pass the registry
is treated as read-only for the rest of the process.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Sequence
from typing import Literal

from pydantic import BaseModel, Field


class ScalarBinding(BaseModel):
    """A key validated as a whole by one rule."""

    model_config = {"frozen": True}

    kind: Literal["scalar"] = "scalar"
    rule: str


class CompoundBinding(BaseModel):
    """A compound key whose registered sub-keys each have their own rule."""

    model_config = {"frozen": True}

    kind: Literal["compound"] = "compound"
    rules: dict[str, str] = Field(default_factory=dict)


Binding = ScalarBinding | CompoundBinding


class RuleRegistry:
    """Mapping from ``(bundle_key, sub_key | None)`` to a rule name."""

    def __init__(self) -> None:
        self._bindings: dict[str, str | dict[str, str]] = {}
        self._built = False
        self._lock = threading.Lock()

    def register(
        self,
        rule_name: str,
        bundle_key: str,
        sub_keys: str | Sequence[str] | None = None,
    ) -> None:
        """Bind *bundle_key* (or each of its *sub_keys*) to *rule_name*.

        *sub_keys* may be ``None`` (scalar option), a single sub-key, or an
        ordered sequence of sub-keys all bound to the same rule. Binding
        sub-keys on a key currently bound as a scalar replaces the scalar
        binding, and the reverse.
        """
        if sub_keys is None:
            self._bindings[bundle_key] = rule_name
            return

        keys = [sub_keys] if isinstance(sub_keys, str) else list(sub_keys)
        table = self._bindings.get(bundle_key)
        if not isinstance(table, dict):
            table = {}
            self._bindings[bundle_key] = table
        for sub_key in keys:
            table[sub_key] = rule_name

    def lookup(self, bundle_key: str) -> Binding | None:
        """Return the binding for *bundle_key*, or None when it is not governed."""
        bound = self._bindings.get(bundle_key)
        if bound is None:
            return None
        if isinstance(bound, dict):
            return CompoundBinding(rules=dict(bound))
        return ScalarBinding(rule=bound)

    def build_once(self, populate: Callable[[RuleRegistry], None]) -> bool:
        """Run the full registration pass *populate* unless it already ran.

        Returns True when the pass ran, False when it was skipped.
        """
        if self._built:
            return False
        with self._lock:
            if self._built:
                return False
            populate(self)
            self._built = True
        return True

    @property
    def is_built(self) -> bool:
        return self._built

    def entries(self) -> list[tuple[str, str | None, str]]:
        """All bindings as sorted ``(bundle_key, sub_key, rule_name)`` triples."""
        rows: list[tuple[str, str | None, str]] = []
        for bundle_key in sorted(self._bindings):
            bound = self._bindings[bundle_key]
            if isinstance(bound, dict):
                rows.extend((bundle_key, sub_key, bound[sub_key]) for sub_key in sorted(bound))
            else:
                rows.append((bundle_key, None, bound))
        return rows

    def snapshot(self) -> dict[str, str | dict[str, str]]:
        """Deep copy of the bindings, for comparisons and display."""
        return {
            key: dict(bound) if isinstance(bound, dict) else bound
            for key, bound in self._bindings.items()
        }

    def __contains__(self, bundle_key: object) -> bool:
        return bundle_key in self._bindings

    def __len__(self) -> int:
        return len(self._bindings)
