"""ProfileService: per-user social profile fields.

Only the fields in :data:`~optguard.domain.catalog.PROFILE_RULES` are
accepted. A field is written only when it is present in the submission;
an empty sanitized value falls back to the per-user default.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from optguard.domain.catalog import PROFILE_META_PREFIX, PROFILE_RULES, USER_DEFAULTS
from optguard.services.base import BaseService
from optguard.services.result import ServiceError, ServiceResult
from optguard.services.telemetry import traced


def profile_key(user_id: int) -> str:
    """Store key holding the profile fields of *user_id*."""
    return f"{PROFILE_META_PREFIX}{user_id}"


def _parse_user_id(user_id: Any) -> int | None:
    if isinstance(user_id, bool):
        return None
    try:
        parsed = int(str(user_id).strip())
    except ValueError:
        return None
    return parsed if parsed > 0 else None


class ProfileService(BaseService):
    """Sanitize and persist the profile fields of a single user."""

    @traced
    def update(self, user_id: int | str, fields: Mapping[str, Any]) -> ServiceResult:
        op = "update_profile"
        uid = _parse_user_id(user_id)
        if uid is None:
            return ServiceResult(
                ok=False,
                op=op,
                error=ServiceError(
                    code="INVALID_INPUT",
                    message=f"User ID must be a positive integer, got {user_id!r}",
                ),
            )

        warnings: list[str] = []
        key = profile_key(uid)
        store = self._ctx.store
        library = self._ctx.library

        stored = store.get_stored(key)
        profile: dict[str, Any] = dict(stored) if isinstance(stored, Mapping) else {}
        updated: list[str] = []

        for field, candidate in fields.items():
            rule_name = PROFILE_RULES.get(field)
            if rule_name is None:
                warnings.append(f"Ignored unknown profile field: {field}")
                continue
            value = library.apply(rule_name, candidate, profile.get(field, ""))
            profile[field] = value or USER_DEFAULTS.get(field, "")
            updated.append(field)

        if not store.commit(key, profile):
            return ServiceResult(
                ok=False,
                op=op,
                error=ServiceError(
                    code="COMMIT_FAILED",
                    message=f"Could not store profile for user {uid}",
                    detail={"user_id": uid},
                ),
                warnings=warnings,
            )

        self._dispatch_event(
            "post_save",
            {"bundle_key": key, "changed_keys": sorted(updated)},
            warnings,
        )
        return ServiceResult(
            ok=True,
            op=op,
            data={"user_id": uid, "profile": profile, "updated": sorted(updated)},
            warnings=warnings,
        )

    @traced
    def get(self, user_id: int | str) -> ServiceResult:
        op = "get_profile"
        uid = _parse_user_id(user_id)
        if uid is None:
            return ServiceResult(
                ok=False,
                op=op,
                error=ServiceError(
                    code="INVALID_INPUT",
                    message=f"User ID must be a positive integer, got {user_id!r}",
                ),
            )
        stored = self._ctx.store.get_stored(profile_key(uid))
        profile = {**USER_DEFAULTS, **(stored if isinstance(stored, Mapping) else {})}
        return ServiceResult(ok=True, op=op, data={"user_id": uid, "profile": profile})
