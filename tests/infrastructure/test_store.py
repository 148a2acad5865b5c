"""Tests for the option stores."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest
from sqlalchemy import select

from optguard.infrastructure.database.engine import init_database
from optguard.infrastructure.database.schema import options
from optguard.infrastructure.store import MemoryStore, SettingsStore, SqlStore


@pytest.fixture
def sql_store(tmp_path: Path) -> Iterator[SqlStore]:
    store = SqlStore(init_database(tmp_path / "opt.db"))
    try:
        yield store
    finally:
        store.close()


class TestMemoryStore:
    def test_missing_key_is_none(self) -> None:
        assert MemoryStore().get_stored("nope") is None

    def test_commit_then_get(self) -> None:
        store = MemoryStore()
        assert store.commit("blogname", "Example") is True
        assert store.get_stored("blogname") == "Example"

    def test_initial_values(self) -> None:
        store = MemoryStore({"a": 1})
        assert store.get_stored("a") == 1

    def test_values_are_copied_in(self) -> None:
        store = MemoryStore()
        value = {"title_location": "left"}
        store.commit("bundle", value)
        value["title_location"] = "right"
        assert store.get_stored("bundle") == {"title_location": "left"}

    def test_values_are_copied_out(self) -> None:
        store = MemoryStore({"bundle": {"x": 1}})
        store.get_stored("bundle")["x"] = 2
        assert store.get_stored("bundle") == {"x": 1}

    def test_satisfies_protocol(self) -> None:
        assert isinstance(MemoryStore(), SettingsStore)


class TestSqlStore:
    def test_missing_key_is_none(self, sql_store: SqlStore) -> None:
        assert sql_store.get_stored("nope") is None

    def test_scalar_round_trip(self, sql_store: SqlStore) -> None:
        assert sql_store.commit("version", "3101") is True
        assert sql_store.get_stored("version") == "3101"

    def test_compound_round_trip(self, sql_store: SqlStore) -> None:
        value = {"title_location": "left", "cache_sitemap": 1, "post_types": {"post": 1}}
        assert sql_store.commit("bundle", value) is True
        assert sql_store.get_stored("bundle") == value

    def test_commit_overwrites(self, sql_store: SqlStore) -> None:
        sql_store.commit("k", "one")
        sql_store.commit("k", "two")
        assert sql_store.get_stored("k") == "two"
        with sql_store.engine.connect() as conn:
            rows = conn.execute(select(options.c.name)).fetchall()
        assert len(rows) == 1

    def test_unserializable_value_rejected(self, sql_store: SqlStore) -> None:
        assert sql_store.commit("k", {"bad": object()}) is False
        assert sql_store.get_stored("k") is None

    def test_persists_across_engines(self, tmp_path: Path) -> None:
        db_path = tmp_path / "opt.db"
        first = SqlStore(init_database(db_path))
        first.commit("k", {"x": "y"})
        first.close()
        second = SqlStore(init_database(db_path))
        assert second.get_stored("k") == {"x": "y"}
        second.close()

    def test_satisfies_protocol(self, sql_store: SqlStore) -> None:
        assert isinstance(sql_store, SettingsStore)
