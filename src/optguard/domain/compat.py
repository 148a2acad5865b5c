"""Backward-compatibility steps between old and new option names.

Steps are pure: they take the committed bundle and return the values to
write back. The migrator service owns reading, committing and the
re-entrancy guard.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Literal

from pydantic import BaseModel

from optguard.domain.transforms import one_zero


class CopyKey(BaseModel):
    """Mirror *source* into *target*; without a source, *target* keeps its value."""

    model_config = {"frozen": True}

    kind: Literal["copy"] = "copy"
    source: str
    target: str

    def derive(self, bundle: Mapping[str, Any]) -> dict[str, Any]:
        if self.source in bundle:
            return {self.target: bundle[self.source]}
        return {self.target: bundle.get(self.target, "")}


class FlagFanout(BaseModel):
    """Copy one item's flag out of a compound flag set into its own key."""

    model_config = {"frozen": True}

    kind: Literal["fanout"] = "fanout"
    source: str
    item: str
    target: str

    def derive(self, bundle: Mapping[str, Any]) -> dict[str, Any]:
        flags = bundle.get(self.source)
        if not isinstance(flags, Mapping):
            return {self.target: 0}
        return {self.target: one_zero(flags.get(self.item, 0))}


CompatStep = CopyKey | FlagFanout


def derive_all(steps: list[CompatStep], bundle: Mapping[str, Any]) -> dict[str, Any]:
    """Apply *steps* in order, each seeing the values written by the ones before it."""
    working = dict(bundle)
    updates: dict[str, Any] = {}
    for step in steps:
        derived = step.derive(working)
        working.update(derived)
        updates.update(derived)
    return updates
