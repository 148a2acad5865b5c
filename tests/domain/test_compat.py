"""Tests for backward-compatibility steps."""

from optguard.domain.compat import CopyKey, FlagFanout, derive_all


class TestCopyKey:
    STEP = CopyKey(source="title_separator", target="title_seperator")

    def test_copies_source(self) -> None:
        assert self.STEP.derive({"title_separator": "dash"}) == {"title_seperator": "dash"}

    def test_missing_source_keeps_target(self) -> None:
        assert self.STEP.derive({"title_seperator": "pipe"}) == {"title_seperator": "pipe"}

    def test_missing_both(self) -> None:
        assert self.STEP.derive({}) == {"title_seperator": ""}


class TestFlagFanout:
    STEP = FlagFanout(source="noindex_post_types", item="attachment", target="attachment_noindex")

    def test_truthy_flag(self) -> None:
        bundle = {"noindex_post_types": {"attachment": 1, "post": 0}}
        assert self.STEP.derive(bundle) == {"attachment_noindex": 1}

    def test_missing_item(self) -> None:
        assert self.STEP.derive({"noindex_post_types": {"post": 1}}) == {"attachment_noindex": 0}

    def test_non_mapping_source(self) -> None:
        assert self.STEP.derive({"noindex_post_types": ""}) == {"attachment_noindex": 0}


class TestDeriveAll:
    def test_steps_see_earlier_results(self) -> None:
        steps = [
            CopyKey(source="a", target="b"),
            CopyKey(source="b", target="c"),
        ]
        assert derive_all(steps, {"a": "x"}) == {"b": "x", "c": "x"}

    def test_input_not_mutated(self) -> None:
        bundle = {"title_separator": "dash"}
        derive_all([CopyKey(source="title_separator", target="title_seperator")], bundle)
        assert bundle == {"title_separator": "dash"}
