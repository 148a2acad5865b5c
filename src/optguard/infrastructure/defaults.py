"""Defaults provider: static fallbacks for rules when candidate and previous are empty."""

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class DefaultsProvider(Protocol):
    def get_default(self, key: str) -> Any:
        """Return the default for option *key* (``""`` when it has none)."""
        ...


class MappingDefaults:
    """Defaults held in a mapping, with sparse overrides layered on top."""

    def __init__(
        self,
        defaults: Mapping[str, Any],
        overrides: Mapping[str, Any] | None = None,
    ) -> None:
        self._values: dict[str, Any] = {**defaults, **(overrides or {})}

    def get_default(self, key: str) -> Any:
        return copy.deepcopy(self._values.get(key, ""))
