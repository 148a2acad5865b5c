"""Shared pytest fixtures for optguard tests."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest
from click.testing import CliRunner

from optguard.config.models import StoreConfig
from optguard.config.settings import OptguardSettings
from optguard.domain.catalog import DEFAULT_SETTINGS_FIELD
from optguard.infrastructure.context import SettingsContext
from optguard.infrastructure.store import MemoryStore
from optguard.plugins.manager import PluginManager
from optguard.services.telemetry import disable_telemetry


@pytest.fixture(autouse=True)
def _no_config_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's OPTGUARD_* environment out of the tests."""
    monkeypatch.delenv("OPTGUARD_CONFIG", raising=False)
    monkeypatch.delenv("OPTGUARD_STORE__BACKEND", raising=False)
    monkeypatch.delenv("OPTGUARD_STORE__PATH", raising=False)


@pytest.fixture(autouse=True)
def _telemetry_off() -> Iterator[None]:
    """Verbose CLI runs switch telemetry on for the whole context."""
    disable_telemetry()
    yield
    disable_telemetry()


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def settings_field() -> str:
    return DEFAULT_SETTINGS_FIELD


@pytest.fixture
def settings(tmp_path: Path) -> OptguardSettings:
    """Settings rooted at a temp dir, using the in-memory store."""
    return OptguardSettings.from_cli(
        project_root=tmp_path,
        store=StoreConfig(backend="memory"),
    )


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def plugin_manager() -> PluginManager:
    """A plugin manager with nothing discovered."""
    return PluginManager()


@pytest.fixture
def ctx(
    settings: OptguardSettings,
    store: MemoryStore,
    plugin_manager: PluginManager,
) -> Iterator[SettingsContext]:
    """Settings context over a memory store, with no plugins."""
    context = SettingsContext(settings, store=store, plugin_manager=plugin_manager)
    try:
        yield context
    finally:
        context.close()


@pytest.fixture
def _isolated_project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Change CWD to a temp project root so the CLI creates an isolated store.

    Use via ``@pytest.mark.usefixtures("_isolated_project")`` on command
    test classes.
    """
    root = logging.getLogger()
    handlers = root.handlers[:]
    monkeypatch.chdir(tmp_path)
    yield
    root.handlers = handlers
