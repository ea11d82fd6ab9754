"""Tests for mux.screen.minibuffer -- status slots, flash and composition."""

from __future__ import annotations

from mux.screen.minibuffer import Minibuffer


class TestLineCount:
    """lines() counts flash, prompt and live slots, never below one."""

    def test_empty_is_one_line(self) -> None:
        assert Minibuffer().lines() == 1

    def test_two_status_lines(self) -> None:
        mb = Minibuffer()
        mb.put("a")
        mb.put("b")
        assert mb.lines() == 2

    def test_flash_and_prompt(self) -> None:
        mb = Minibuffer()
        mb.put("a")
        mb.set_flash("note")
        mb.set_prompt_active(True)
        assert mb.lines() == 3

    def test_empty_flash_still_counts(self) -> None:
        mb = Minibuffer()
        mb.set_flash("")
        mb.set_prompt_active(True)
        assert mb.lines() == 2

    def test_holes_are_not_counted(self) -> None:
        mb = Minibuffer()
        h0, _ = mb.put("a")
        mb.put("b")
        mb.remove(h0)
        assert mb.lines() == 1


class TestHandles:
    """Handles are stable; only trailing empty slots are released."""

    def test_handles_are_sequential(self) -> None:
        mb = Minibuffer()
        assert mb.put("a") == (0, True)
        assert mb.put("b") == (1, True)

    def test_update_in_place(self) -> None:
        mb = Minibuffer()
        h, _ = mb.put("a")
        assert mb.put("changed", h) == (h, False)
        assert mb.get(h) == "changed"
        assert mb.slots() == ["changed"]

    def test_clear_middle_leaves_hole(self) -> None:
        mb = Minibuffer()
        mb.put("a")
        h1, _ = mb.put("b")
        mb.put("c")
        mb.remove(h1)
        assert mb.slots() == ["a", None, "c"]

    def test_clear_last_trims_trailing_holes(self) -> None:
        mb = Minibuffer()
        mb.put("a")
        h1, _ = mb.put("b")
        h2, _ = mb.put("c")
        mb.remove(h1)
        mb.remove(h2)
        assert mb.slots() == ["a"]
        assert mb.put("d") == (1, True)

    def test_clear_everything(self) -> None:
        mb = Minibuffer()
        h0, _ = mb.put("a")
        h1, _ = mb.put("b")
        mb.remove(h0)
        assert mb.slots() == [None, "b"]
        mb.remove(h1)
        assert mb.slots() == []
        assert mb.put("again") == (0, True)

    def test_clear_unknown_handle_is_ignored(self) -> None:
        mb = Minibuffer()
        mb.put("a")
        mb.remove(7)
        assert mb.slots() == ["a"]

    def test_reusing_released_handle_is_new(self) -> None:
        mb = Minibuffer()
        h, _ = mb.put("a")
        mb.remove(h)
        assert mb.put("b", h) == (h, True)


class TestCompose:
    """compose() lists lines from the bottom row upward."""

    def test_empty(self) -> None:
        assert Minibuffer().compose() == [""]

    def test_order(self) -> None:
        mb = Minibuffer()
        mb.put("first")
        mb.put("second")
        mb.set_flash("flash")
        mb.set_prompt_active(True)
        assert mb.compose() == ["", "flash", "first", "second"]

    def test_skips_holes(self) -> None:
        mb = Minibuffer()
        h0, _ = mb.put("gone")
        mb.put("kept")
        mb.remove(h0)
        assert mb.compose() == ["kept"]

    def test_compose_matches_line_count(self) -> None:
        mb = Minibuffer()
        mb.put("a")
        mb.set_flash("b")
        assert len(mb.compose()) == mb.lines()

    def test_flash_property(self) -> None:
        mb = Minibuffer()
        mb.set_flash("x")
        assert mb.flash == "x"
        mb.set_flash(None)
        assert mb.flash is None
