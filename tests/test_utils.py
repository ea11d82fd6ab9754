"""Tests for mux.screen.utils -- display width and text helpers."""

from __future__ import annotations

from mux.screen.utils import (
    grapheme_width,
    is_control_text,
    shared_prefix,
    truncate_to_width,
    visible_width,
)


class TestVisibleWidth:
    def test_ascii(self) -> None:
        assert visible_width("hello") == 5

    def test_empty(self) -> None:
        assert visible_width("") == 0

    def test_wide_characters(self) -> None:
        assert visible_width("日本") == 4

    def test_combining_mark_is_zero_width(self) -> None:
        assert visible_width("e\u0301") == 1

    def test_control_grapheme(self) -> None:
        assert grapheme_width("\x07") == 0


class TestTruncateToWidth:
    """truncate_to_width cuts on grapheme boundaries."""

    def test_fits(self) -> None:
        assert truncate_to_width("abc", 5) == "abc"

    def test_pad(self) -> None:
        assert truncate_to_width("abc", 5, pad=True) == "abc  "

    def test_cut(self) -> None:
        assert truncate_to_width("abcdef", 4) == "abcd"

    def test_ellipsis_counts_towards_width(self) -> None:
        assert truncate_to_width("abcdef", 4, ellipsis="...") == "a..."

    def test_wide_char_not_split(self) -> None:
        assert truncate_to_width("日本語", 3) == "日"

    def test_wide_char_padded(self) -> None:
        assert truncate_to_width("日本語", 3, pad=True) == "日 "

    def test_zero_width(self) -> None:
        assert truncate_to_width("abc", 0) == ""


class TestSharedPrefix:
    def test_common_prefix(self) -> None:
        assert shared_prefix(["/tmp/foo", "/tmp/foobar", "/tmp/fox"]) == "/tmp/fo"

    def test_single_value(self) -> None:
        assert shared_prefix(["abc"]) == "abc"

    def test_no_values(self) -> None:
        assert shared_prefix([]) == ""

    def test_nothing_shared(self) -> None:
        assert shared_prefix(["abc", "xyz"]) == ""


class TestIsControlText:
    def test_printable(self) -> None:
        assert not is_control_text("héllo")

    def test_escape_sequence(self) -> None:
        assert is_control_text("\x1b[A")

    def test_delete(self) -> None:
        assert is_control_text("\x7f")
