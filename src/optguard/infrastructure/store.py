"""Option persistence: the store the engine reads previous values from.

The sanitization engine only ever calls :meth:`SettingsStore.get_stored`;
the settings service commits the dispatcher's output through
:meth:`SettingsStore.commit`. Values are JSON-compatible scalars or
mappings of scalars.
"""

from __future__ import annotations

import copy
import json
import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from sqlalchemy import select
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.exc import SQLAlchemyError

from optguard.infrastructure.database.schema import options

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)


@runtime_checkable
class SettingsStore(Protocol):
    """Read/commit contract for option values."""

    def get_stored(self, key: str) -> Any:
        """Return the committed value for *key*, or None if never committed."""
        ...

    def commit(self, key: str, value: Any) -> bool:
        """Persist *value* under *key*. Returns False when the write failed."""
        ...


class MemoryStore:
    """Dict-backed store. Values are deep-copied in and out."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = copy.deepcopy(initial or {})

    def get_stored(self, key: str) -> Any:
        return copy.deepcopy(self._data.get(key))

    def commit(self, key: str, value: Any) -> bool:
        self._data[key] = copy.deepcopy(value)
        return True


class SqlStore:
    """SQLite-backed store using the ``options`` table.

    Each commit runs in its own ``engine.begin()`` transaction, so a value
    is either fully written or not at all.
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    @property
    def engine(self) -> Engine:
        return self._engine

    def get_stored(self, key: str) -> Any:
        with self._engine.connect() as conn:
            raw = conn.execute(select(options.c.value).where(options.c.name == key)).scalar()
        if raw is None:
            return None
        return json.loads(raw)

    def commit(self, key: str, value: Any) -> bool:
        try:
            payload = json.dumps(value, sort_keys=True)
        except (TypeError, ValueError):
            logger.warning("Option %s has a value that cannot be stored as JSON", key)
            return False

        modified = datetime.now(UTC).isoformat()
        stmt = insert(options).values(name=key, value=payload, modified=modified)
        stmt = stmt.on_conflict_do_update(
            index_elements=[options.c.name],
            set_={"value": stmt.excluded.value, "modified": stmt.excluded.modified},
        )
        try:
            with self._engine.begin() as conn:
                conn.execute(stmt)
        except SQLAlchemyError:
            logger.warning("Commit failed for option %s", key, exc_info=True)
            return False
        return True

    def close(self) -> None:
        self._engine.dispose()
