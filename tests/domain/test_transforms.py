"""Tests for the narrow text, URL and scalar transforms."""

import pytest

from optguard.domain import transforms as t


class TestFormSemantics:
    @pytest.mark.parametrize("value", [None, "", "0", 0, False, {}, []])
    def test_empty_values(self, value: object) -> None:
        assert t.is_empty(value) is True

    @pytest.mark.parametrize("value", ["1", "on", " ", 1, True, {"a": 1}])
    def test_non_empty_values(self, value: object) -> None:
        assert t.is_empty(value) is False

    def test_as_text_drops_containers(self) -> None:
        assert t.as_text({"a": 1}) == ""
        assert t.as_text(["a"]) == ""
        assert t.as_text(None) == ""

    def test_as_text_scalars(self) -> None:
        assert t.as_text(12) == "12"
        assert t.as_text(True) == "1"
        assert t.as_text(False) == ""


class TestTextTransforms:
    def test_single_line_joins_non_blank_lines(self) -> None:
        assert t.single_line("a\r\n\r\n  b  \n") == "a b"

    def test_single_line_handles_lone_cr(self) -> None:
        assert t.single_line("a\rb") == "a b"

    def test_single_line_drops_whitespace_only_lines(self) -> None:
        assert t.single_line("a\n   \n\tb") == "a b"

    def test_dupe_space(self) -> None:
        assert t.dupe_space("a   b \u00a0 c") == "a b c"

    def test_dupe_space_keeps_single_spaces(self) -> None:
        assert t.dupe_space("a b c") == "a b c"

    def test_nbsp_variants(self) -> None:
        assert t.nbsp("a&nbsp;b&#160;c\u00a0d") == "a b c d"

    def test_tabs(self) -> None:
        assert t.tabs("a\tb\t\tc") == "a b  c"

    def test_backslash_entities(self) -> None:
        assert t.backslash_entities("C:\\\\path") == "C:&#92;path"

    def test_strip_slashes_unescapes(self) -> None:
        assert t.strip_slashes("It\\'s") == "It's"

    def test_strip_tags(self) -> None:
        assert t.strip_tags("<b>bold</b> text<!-- note -->") == "bold text"

    def test_strip_tags_keeps_lone_angle_brackets(self) -> None:
        assert t.strip_tags("1 < 2 and 3 > 2") == "1 < 2 and 3 > 2"

    def test_strip_tags_removes_dangling_tag(self) -> None:
        assert t.strip_tags("text <script src=x") == "text "

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("<<b>script>x", "x"),
            ("<<i>b>Acme", "Acme"),
            ("<<<b>i>b>deep", "deep"),
        ],
    )
    def test_strip_tags_removes_reassembled_tags(self, value: str, expected: str) -> None:
        assert t.strip_tags(value) == expected

    def test_strip_html_space(self) -> None:
        assert t.strip_html_space("<meta content='x'> abc 123 ") == "abc123"

    def test_whitespace_round_trip(self) -> None:
        value = "a\r\n\r\nb\tc   d"
        assert t.dupe_space(t.tabs(t.single_line(value))) == "a b c d"


class TestUrlTransforms:
    def test_relative_url(self) -> None:
        assert t.relative_url("https://example.com/some/path") == "some/path"
        assert t.relative_url("//example.com/x") == "x"
        assert t.relative_url("/already/relative") == "already/relative"

    def test_strip_query(self) -> None:
        assert t.strip_query("https://example.com/a?b=c") == "https://example.com/a"

    def test_strip_query_keeps_query_only_url(self) -> None:
        assert t.strip_query("?a=b") == "?a=b"

    def test_normalize_prepends_scheme(self) -> None:
        assert t.normalize_url("example.com/page") == "http://example.com/page"

    def test_normalize_keeps_relative(self) -> None:
        assert t.normalize_url("/page") == "/page"

    def test_normalize_encodes_spaces(self) -> None:
        assert t.normalize_url("https://example.com/a b") == "https://example.com/a%20b"

    def test_normalize_drops_unsafe_characters(self) -> None:
        assert t.normalize_url('https://example.com/"a"<b>') == "https://example.com/ab"

    @pytest.mark.parametrize("url", ["javascript:alert(1)", "data:text/html,x", "vbscript:x"])
    def test_normalize_rejects_unsafe_schemes(self, url: str) -> None:
        assert t.normalize_url(url) == ""

    def test_normalize_empty(self) -> None:
        assert t.normalize_url("   ") == ""


class TestSocialTransforms:
    def test_handle_from_url(self) -> None:
        assert t.social_handle("https://twitter.com/example/") == "@example"

    def test_handle_adds_at(self) -> None:
        assert t.social_handle("example") == "@example"

    def test_handle_keeps_at(self) -> None:
        assert t.social_handle("@example") == "@example"

    def test_handle_removes_inner_whitespace(self) -> None:
        assert t.social_handle("ex ample") == "@example"

    def test_handle_empty(self) -> None:
        assert t.social_handle("") == ""

    def test_profile_url_numeric_id(self) -> None:
        result = t.profile_url("https://x.com/profile.php?id=123&ref=abc")
        assert result == "https://www.facebook.com/profile.php?id=123"

    def test_profile_url_negative_id_becomes_zero(self) -> None:
        result = t.profile_url("profile.php?id=-9")
        assert result == "https://www.facebook.com/profile.php?id=0"

    def test_profile_url_without_id_is_rejected(self) -> None:
        assert t.profile_url("https://facebook.com/profile.php?ref=abc") == ""

    def test_profile_url_named_page(self) -> None:
        result = t.profile_url("https://facebook.com/example/")
        assert result == "https://www.facebook.com/example"

    def test_profile_url_keeps_query(self) -> None:
        result = t.profile_url("https://facebook.com/example?lang=en")
        assert result == "https://www.facebook.com/example?lang=en"

    def test_profile_url_bare_name(self) -> None:
        assert t.profile_url("example") == "https://www.facebook.com/example"


class TestScalarCoercions:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [("42", 42), ("  7px", 7), ("-3", -3), ("abc", 0), (None, 0), (3.9, 3), (True, 1)],
    )
    def test_to_int(self, value: object, expected: int) -> None:
        assert t.to_int(value) == expected

    @pytest.mark.parametrize(("value", "expected"), [("12", 12), ("-5", 0), ("x", 0), (-1, 0)])
    def test_absint(self, value: object, expected: int) -> None:
        assert t.absint(value) == expected

    def test_one_zero(self) -> None:
        assert t.one_zero("on") == 1
        assert t.one_zero("0") == 0
        assert t.one_zero("") == 0
        assert t.one_zero(None) == 0

    def test_numeric_string(self) -> None:
        assert t.numeric_string("12abc") == "12"
        assert t.numeric_string("abc") == "0"

    @pytest.mark.parametrize(
        ("value", "expected"),
        [("#333", "333"), ("00cd98", "00cd98"), ("ABCDEF", "ABCDEF"), ("12345", ""), ("zzz", "")],
    )
    def test_color_hex(self, value: str, expected: str) -> None:
        assert t.color_hex(value) == expected

    def test_post_type_flags(self) -> None:
        flags = t.post_type_flags({"post": "1", "book": "", "page": "on"}, exclude=("page",))
        assert flags == {"post": 1, "book": 0}

    def test_post_type_flags_non_mapping(self) -> None:
        assert t.post_type_flags("post") == {}
