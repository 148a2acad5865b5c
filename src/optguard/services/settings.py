"""SettingsService: the write path for option bundles.

A save reads the stored value, runs the dispatcher, commits once, then
runs the compatibility migrator, stamps the database version and fires
the ``post_save`` plugin hook. Nothing after the commit can fail the save;
problems there become warnings.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from optguard.domain.registry import CompoundBinding
from optguard.services.base import BaseService
from optguard.services.dispatcher import SanitizationDispatcher
from optguard.services.result import ServiceError, ServiceResult
from optguard.services.telemetry import trace_span, traced

if TYPE_CHECKING:
    from optguard.infrastructure.context import SettingsContext


def changed_keys(previous: Any, accepted: Any, bundle_key: str) -> list[str]:
    """Sub-keys whose value differs, or ``[bundle_key]`` for a changed scalar."""
    if isinstance(accepted, Mapping):
        before = previous if isinstance(previous, Mapping) else {}
        keys = set(before) | set(accepted)
        return sorted(k for k in keys if before.get(k) != accepted.get(k))
    return [bundle_key] if previous != accepted else []


class SettingsService(BaseService):
    """Sanitize, persist, read and reset option bundles."""

    @property
    def dispatcher(self) -> SanitizationDispatcher:
        self._ctx.ensure_registered()
        return SanitizationDispatcher(
            self._ctx.registry,
            self._ctx.library,
            self._ctx.store,
            self._ctx.defaults,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @traced
    def save(self, bundle_key: str | None, candidate: Any) -> ServiceResult:
        """Sanitize *candidate* and commit it under *bundle_key*.

        *bundle_key* defaults to the configured settings field.
        """
        op = "save_settings"
        key = bundle_key or self._ctx.settings_field
        warnings: list[str] = []

        with trace_span("sanitize") as span:
            accepted = self.dispatcher.sanitize(key, candidate)
            if span:
                span.annotate(bundle_key=key)

        return self._commit(op, key, accepted, warnings)

    @traced
    def preview(self, bundle_key: str | None, candidate: Any) -> ServiceResult:
        """Sanitize *candidate* without committing anything."""
        op = "preview_settings"
        key = bundle_key or self._ctx.settings_field
        with trace_span("sanitize") as span:
            accepted = self.dispatcher.sanitize(key, candidate)
            if span:
                span.annotate(bundle_key=key)
        previous = self._ctx.store.get_stored(key)
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "bundle_key": key,
                "registered": key in self._ctx.registry,
                "value": accepted,
                "changed_keys": changed_keys(previous, accepted, key),
            },
        )

    @traced
    def get(self, bundle_key: str | None = None) -> ServiceResult:
        op = "get_settings"
        key = bundle_key or self._ctx.settings_field
        value = self._ctx.store.get_stored(key)
        if value is None:
            return ServiceResult(
                ok=False,
                op=op,
                error=ServiceError(
                    code="NOT_FOUND",
                    message=f"No stored value for option: {key}",
                    detail={"bundle_key": key},
                ),
            )
        return ServiceResult(ok=True, op=op, data={"bundle_key": key, "value": value})

    @traced
    def reset(self, bundle_key: str | None = None) -> ServiceResult:
        """Commit the defaults of every registered (sub-)key of *bundle_key*."""
        op = "reset_settings"
        key = bundle_key or self._ctx.settings_field
        binding = self._ctx.registry.lookup(key)
        if binding is None:
            return ServiceResult(
                ok=False,
                op=op,
                error=ServiceError(
                    code="NOT_FOUND",
                    message=f"Option is not registered: {key}",
                    detail={"bundle_key": key},
                ),
            )

        defaults = self._ctx.defaults
        value: Any
        if isinstance(binding, CompoundBinding):
            value = {sub_key: defaults.get_default(sub_key) for sub_key in binding.rules}
        else:
            value = defaults.get_default(key)
        return self._commit(op, key, value, [])

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _commit(self, op: str, key: str, accepted: Any, warnings: list[str]) -> ServiceResult:
        store = self._ctx.store
        previous = store.get_stored(key)
        if not store.commit(key, accepted):
            return ServiceResult(
                ok=False,
                op=op,
                error=ServiceError(
                    code="COMMIT_FAILED",
                    message=f"Could not store option: {key}",
                    detail={"bundle_key": key},
                ),
                warnings=warnings,
            )

        changed = changed_keys(previous, accepted, key)
        migrated: list[str] = []

        with trace_span("post_commit"):
            if key == self._ctx.settings_field:
                if self._ctx.settings.migration.enabled:
                    migrated = self._ctx.migrator.migrate(warnings, self._on_migrated)
                self._stamp_db_version(warnings)
            self._dispatch_event(
                "post_save",
                {"bundle_key": key, "changed_keys": changed},
                warnings,
            )

        data: dict[str, Any] = {
            "bundle_key": key,
            "value": store.get_stored(key),
            "changed_keys": changed,
        }
        if migrated:
            data["migrated_keys"] = migrated
        return ServiceResult(ok=True, op=op, data=data, warnings=warnings)

    def _stamp_db_version(self, warnings: list[str]) -> None:
        catalog = self._ctx.settings.catalog
        store = self._ctx.store
        if store.get_stored(catalog.db_version_key) == catalog.db_version:
            return
        if not store.commit(catalog.db_version_key, catalog.db_version):
            warnings.append(f"Could not stamp database version {catalog.db_version}")

    def _on_migrated(self, bundle_key: str, migrated_keys: list[str], warnings: list[str]) -> None:
        self._dispatch_event(
            "post_migrate",
            {"bundle_key": bundle_key, "migrated_keys": migrated_keys},
            warnings,
        )
