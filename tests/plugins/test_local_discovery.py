"""Tests for local directory plugin discovery in PluginManager."""

from __future__ import annotations

from pathlib import Path

from optguard.plugins.manager import PluginManager

_RULE_PLUGIN_SRC = """\
import pluggy

hookimpl = pluggy.HookimplMarker("optguard")


class LocalRules:
    @hookimpl
    def register_rules(self):
        return {"local_slug": {"kind": "text", "steps": ["trim"]}}

    @hookimpl
    def register_bindings(self, registry):
        registry.register("local_slug", "slug_option")
"""

_SYNTAX_ERROR_SRC = """\
def broken(
"""

_NO_HOOKS_SRC = """\
class PlainClass:
    def hello(self) -> str:
        return "world"
"""


class TestLocalDiscovery:
    def test_discovers_local_plugin(self, tmp_path: Path) -> None:
        (tmp_path / "slugs.py").write_text(_RULE_PLUGIN_SRC, encoding="utf-8")
        pm = PluginManager()
        names = pm.discover_and_load(local_dir=tmp_path)
        assert "optguard_local_plugin_slugs.LocalRules" in names
        assert "local_slug" in pm.collect_rules()

    def test_skips_bad_plugin_gracefully(self, tmp_path: Path) -> None:
        (tmp_path / "broken.py").write_text(_SYNTAX_ERROR_SRC, encoding="utf-8")
        pm = PluginManager()
        names = pm.discover_and_load(local_dir=tmp_path)
        assert not any("broken" in n for n in names)

    def test_skips_classes_without_hooks(self, tmp_path: Path) -> None:
        (tmp_path / "plain.py").write_text(_NO_HOOKS_SRC, encoding="utf-8")
        pm = PluginManager()
        names = pm.discover_and_load(local_dir=tmp_path)
        assert not any("plain" in n for n in names)

    def test_skips_underscore_files(self, tmp_path: Path) -> None:
        (tmp_path / "_private.py").write_text(_RULE_PLUGIN_SRC, encoding="utf-8")
        pm = PluginManager()
        names = pm.discover_and_load(local_dir=tmp_path)
        assert not any("_private" in n for n in names)

    def test_missing_dir_is_fine(self, tmp_path: Path) -> None:
        pm = PluginManager()
        pm.discover_and_load(local_dir=tmp_path / "nope")
        assert pm.is_loaded is True
