"""BaseService: abstract foundation for all optguard services.

Every service receives a :class:`SettingsContext` at construction time.
The context provides the registry, rule library, option store, defaults
and plugin manager.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from optguard.infrastructure.context import SettingsContext

logger = logging.getLogger(__name__)


class BaseService:
    """Abstract base for all service-layer classes.

    Usage::

        class SettingsService(BaseService):
            def save(self, bundle_key: str, candidate: Any) -> ServiceResult:
                self._ctx.ensure_registered()
                ...
    """

    def __init__(self, ctx: SettingsContext) -> None:
        self._ctx = ctx

    def _dispatch_event(
        self,
        hook_name: str,
        payload: dict[str, Any],
        warnings: list[str],
    ) -> None:
        """Call a lifecycle hook on every registered plugin.

        INVARIANT: Plugin failures are warnings, never errors.
        """
        hook = getattr(self._ctx.plugins.hook, hook_name, None)
        if hook is None:
            return
        try:
            hook(**payload)
        except Exception:
            logger.debug("Event dispatch failed for %s", hook_name, exc_info=True)
            warnings.append(f"Event dispatch failed for {hook_name}")
