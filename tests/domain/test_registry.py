"""Tests for RuleRegistry bindings and the one-time registration pass."""

import threading

from optguard.domain.catalog import register_site_options
from optguard.domain.registry import CompoundBinding, RuleRegistry, ScalarBinding


class TestRegister:
    def test_scalar(self) -> None:
        registry = RuleRegistry()
        registry.register("one_zero", "blog_public")
        assert registry.lookup("blog_public") == ScalarBinding(rule="one_zero")

    def test_single_sub_key(self) -> None:
        registry = RuleRegistry()
        registry.register("left_right", "site", "title_location")
        assert registry.lookup("site") == CompoundBinding(rules={"title_location": "left_right"})

    def test_sequence_of_sub_keys(self) -> None:
        registry = RuleRegistry()
        registry.register("one_zero", "site", ["og_tags", "twitter_tags"])
        binding = registry.lookup("site")
        assert isinstance(binding, CompoundBinding)
        assert binding.rules == {"og_tags": "one_zero", "twitter_tags": "one_zero"}

    def test_unregistered_lookup(self) -> None:
        assert RuleRegistry().lookup("missing") is None

    def test_last_write_wins(self) -> None:
        registry = RuleRegistry()
        registry.register("title", "site", "knowledge_name")
        registry.register("title_raw", "site", "knowledge_name")
        assert registry.lookup("site") == CompoundBinding(rules={"knowledge_name": "title_raw"})

    def test_sub_keys_replace_scalar_binding(self) -> None:
        registry = RuleRegistry()
        registry.register("absint", "site")
        registry.register("one_zero", "site", "og_tags")
        assert registry.lookup("site") == CompoundBinding(rules={"og_tags": "one_zero"})

    def test_scalar_replaces_compound_binding(self) -> None:
        registry = RuleRegistry()
        registry.register("one_zero", "site", "og_tags")
        registry.register("absint", "site")
        assert registry.lookup("site") == ScalarBinding(rule="absint")

    def test_lookup_returns_a_copy(self) -> None:
        registry = RuleRegistry()
        registry.register("one_zero", "site", "og_tags")
        binding = registry.lookup("site")
        assert isinstance(binding, CompoundBinding)
        binding.rules["og_tags"] = "tampered"
        assert registry.lookup("site") == CompoundBinding(rules={"og_tags": "one_zero"})


class TestBuildOnce:
    def test_runs_once(self) -> None:
        registry = RuleRegistry()
        calls: list[int] = []

        def populate(reg: RuleRegistry) -> None:
            calls.append(1)
            reg.register("one_zero", "site", "og_tags")

        assert registry.build_once(populate) is True
        assert registry.build_once(populate) is False
        assert calls == [1]
        assert registry.is_built

    def test_idempotent_full_pass(self) -> None:
        """Two passes leave the same registry as one."""
        once = RuleRegistry()
        once.build_once(register_site_options)
        twice = RuleRegistry()
        twice.build_once(register_site_options)
        twice.build_once(register_site_options)
        assert once.snapshot() == twice.snapshot()

    def test_repeated_registration_is_stable(self) -> None:
        """Re-running the raw pass (without the guard) overwrites identically."""
        registry = RuleRegistry()
        register_site_options(registry)
        first = registry.snapshot()
        register_site_options(registry)
        assert registry.snapshot() == first

    def test_concurrent_build(self) -> None:
        registry = RuleRegistry()
        calls: list[int] = []
        barrier = threading.Barrier(4)

        def populate(reg: RuleRegistry) -> None:
            calls.append(1)

        def worker() -> None:
            barrier.wait()
            registry.build_once(populate)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        assert calls == [1]


class TestIntrospection:
    def test_entries_sorted(self) -> None:
        registry = RuleRegistry()
        registry.register("one_zero", "site", ["twitter_tags", "og_tags"])
        registry.register("absint", "blog_public")
        assert registry.entries() == [
            ("blog_public", None, "absint"),
            ("site", "og_tags", "one_zero"),
            ("site", "twitter_tags", "one_zero"),
        ]

    def test_snapshot_is_detached(self) -> None:
        registry = RuleRegistry()
        registry.register("one_zero", "site", "og_tags")
        snap = registry.snapshot()
        snap["site"]["og_tags"] = "x"  # type: ignore[index]
        assert registry.snapshot() == {"site": {"og_tags": "one_zero"}}

    def test_contains_and_len(self) -> None:
        registry = RuleRegistry()
        registry.register("one_zero", "site", "og_tags")
        assert "site" in registry
        assert "other" not in registry
        assert len(registry) == 1
        assert registry.entries() == [("site", "og_tags", "one_zero")]
