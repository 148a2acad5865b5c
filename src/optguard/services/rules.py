"""RulesService: read-only view of the registry and rule library."""

from __future__ import annotations

from typing import Any

from optguard.services.base import BaseService
from optguard.services.result import ServiceError, ServiceResult
from optguard.services.telemetry import traced


class RulesService(BaseService):
    """List registered option bindings and the rules behind them."""

    @traced
    def list_rules(self, bundle_key: str | None = None) -> ServiceResult:
        """Return every ``(option, sub-key, rule)`` binding, optionally for one option."""
        op = "list_rules"
        registry = self._ctx.registry
        library = self._ctx.library

        if bundle_key is not None and bundle_key not in registry:
            return ServiceResult(
                ok=False,
                op=op,
                error=ServiceError(
                    code="NOT_FOUND",
                    message=f"Option is not registered: {bundle_key}",
                    detail={"bundle_key": bundle_key},
                ),
            )

        warnings: list[str] = []
        entries: list[dict[str, Any]] = []
        unknown: set[str] = set()
        for key, sub_key, rule_name in registry.entries():
            if bundle_key is not None and key != bundle_key:
                continue
            if rule_name not in library:
                unknown.add(rule_name)
            entries.append(
                {
                    "bundle_key": key,
                    "sub_key": sub_key,
                    "rule": rule_name,
                    "kind": str(library.resolve(rule_name).kind),
                }
            )

        for rule_name in sorted(unknown):
            warnings.append(f"Rule {rule_name!r} is not defined; values pass through unchanged")

        return ServiceResult(
            ok=True,
            op=op,
            data={"entries": entries, "count": len(entries), "rules": library.names()},
            warnings=warnings,
        )
