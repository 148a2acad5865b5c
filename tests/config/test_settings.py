"""Tests for OptguardSettings: unified settings with TOML source."""

from pathlib import Path

import click
import pytest

from optguard.config.settings import OptguardSettings
from optguard.domain.catalog import DEFAULT_SETTINGS_FIELD


class TestOptguardSettingsDefaults:
    def test_all_defaults(self, tmp_path: Path) -> None:
        settings = OptguardSettings.from_cli(project_root=tmp_path)
        assert settings.project_root == tmp_path
        assert settings.config_path is None
        assert settings.json_output is False
        assert settings.quiet is False
        assert settings.verbose is False
        assert settings.store.backend == "sqlite"
        assert settings.catalog.settings_field == DEFAULT_SETTINGS_FIELD
        assert settings.migration.enabled is True
        assert settings.defaults == {}

    def test_frozen(self, tmp_path: Path) -> None:
        settings = OptguardSettings.from_cli(project_root=tmp_path)
        with pytest.raises(Exception):
            settings.quiet = True  # type: ignore[misc]

    def test_paths_resolve_against_root(self, tmp_path: Path) -> None:
        settings = OptguardSettings.from_cli(project_root=tmp_path)
        assert settings.db_path == tmp_path / ".optguard" / "optguard.db"
        assert settings.local_plugin_dir == tmp_path / ".optguard" / "plugins"

    def test_absolute_store_path_kept(self, tmp_path: Path) -> None:
        target = tmp_path / "elsewhere" / "opt.db"
        settings = OptguardSettings.from_cli(
            project_root=tmp_path,
            store={"path": str(target)},
        )
        assert settings.db_path == target


class TestTomlSource:
    def test_loads_sections(self, tmp_path: Path) -> None:
        (tmp_path / "optguard.toml").write_text(
            '[store]\nbackend = "memory"\n'
            '[catalog]\nsettings_field = "my-site"\nsitemap_query_max = 2000\n'
        )
        settings = OptguardSettings.from_cli(project_root=tmp_path)
        assert settings.store.backend == "memory"
        assert settings.catalog.settings_field == "my-site"
        assert settings.catalog.sitemap_query_max == 2000
        assert settings.catalog.sitemap_query_min == 1

    def test_defaults_table(self, tmp_path: Path) -> None:
        (tmp_path / "optguard.toml").write_text('[defaults]\ntitle_location = "right"\n')
        settings = OptguardSettings.from_cli(project_root=tmp_path)
        assert settings.defaults == {"title_location": "right"}

    def test_root_from_config_location(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "optguard.toml").write_text("")
        child = tmp_path / "sub"
        child.mkdir()
        monkeypatch.chdir(child)
        settings = OptguardSettings.from_cli()
        assert settings.project_root == tmp_path
        assert settings.config_path == tmp_path / "optguard.toml"

    def test_explicit_config_path(self, tmp_path: Path) -> None:
        custom = tmp_path / "custom" / "my.toml"
        custom.parent.mkdir(parents=True)
        custom.write_text("[migration]\nenabled = false\n")
        settings = OptguardSettings.from_cli(config_path=str(custom), project_root=tmp_path)
        assert settings.migration.enabled is False
        assert settings.config_path == custom

    def test_invalid_toml_raises_click_error(self, tmp_path: Path) -> None:
        (tmp_path / "optguard.toml").write_text("[store\n")
        with pytest.raises(click.ClickException, match="Invalid TOML"):
            OptguardSettings.from_cli(project_root=tmp_path)


class TestPriority:
    def test_env_overrides_toml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "optguard.toml").write_text('[catalog]\nsettings_field = "from-toml"\n')
        monkeypatch.setenv("OPTGUARD_CATALOG__SETTINGS_FIELD", "from-env")
        settings = OptguardSettings.from_cli(project_root=tmp_path)
        assert settings.catalog.settings_field == "from-env"

    def test_cli_flags_override_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OPTGUARD_VERBOSE", "false")
        settings = OptguardSettings.from_cli(project_root=tmp_path, verbose=True)
        assert settings.verbose is True
