"""Tests for filename completion."""

from __future__ import annotations

import getpass
import os

import pytest

from mux.screen.completion import (
    PasswdAccounts,
    completion_prefix_len,
    filename_completions,
    path_completions,
    twiddle_completions,
)


class FakeAccounts:
    """AccountDirectory with a fixed set of users."""

    def __init__(self, homes: dict[str, str], login: str = "alice") -> None:
        self.homes = homes
        self.login = login

    def current_login(self) -> str:
        return self.login

    def home_of(self, name: str) -> str | None:
        return self.homes.get(name)

    def names(self) -> list[str]:
        return sorted(self.homes)


@pytest.fixture
def accounts() -> FakeAccounts:
    return FakeAccounts({"alice": "/home/alice", "albert": "/home/albert", "bob": "/home/bob"})


@pytest.fixture
def tree(tmp_path):
    (tmp_path / "notes.txt").write_text("")
    (tmp_path / "novel.md").write_text("")
    (tmp_path / "nodes").mkdir()
    (tmp_path / "other").write_text("")
    return tmp_path


class TestTwiddle:
    """~name tokens complete against the account directory."""

    def test_known_account_expands(self, accounts: FakeAccounts) -> None:
        assert twiddle_completions("~bob/src", accounts) == [("/home/bob/src", "~bob")]

    def test_bare_tilde_is_current_login(self, accounts: FakeAccounts) -> None:
        assert twiddle_completions("~", accounts) == [("/home/alice", "~alice")]

    def test_partial_name_lists_matches(self, accounts: FakeAccounts) -> None:
        assert twiddle_completions("~al", accounts) == [
            ("~albert", "~albert"),
            ("~alice", "~alice"),
        ]

    def test_unknown_prefix(self, accounts: FakeAccounts) -> None:
        assert twiddle_completions("~zed", accounts) == []

    def test_no_tilde(self, accounts: FakeAccounts) -> None:
        assert twiddle_completions("/tmp", accounts) is None


class TestPasswdAccounts:
    def test_missing_login_is_empty(self, monkeypatch) -> None:
        def no_login() -> str:
            raise OSError("no username set in the environment")

        monkeypatch.setattr(getpass, "getuser", no_login)
        assert PasswdAccounts().current_login() == ""

    def test_bare_tilde_without_login_lists_accounts(self, monkeypatch) -> None:
        def no_login() -> str:
            raise KeyError("getpwuid(): uid not found")

        accounts = PasswdAccounts()
        monkeypatch.setattr(getpass, "getuser", no_login)
        monkeypatch.setattr(accounts, "home_of", lambda name: None)
        monkeypatch.setattr(accounts, "names", lambda: ["alice"])
        assert twiddle_completions("~", accounts) == [("~alice", "~alice")]


class TestPathCompletions:
    def test_prefix_listing(self, tree) -> None:
        result = path_completions(str(tree / "no"))
        assert result == [
            (str(tree / "nodes") + "/", "nodes/"),
            (str(tree / "notes.txt"), "notes.txt"),
            (str(tree / "novel.md"), "novel.md"),
        ]

    def test_directory_contents(self, tree) -> None:
        labels = [label for _, label in path_completions(str(tree) + os.sep)]
        assert labels == ["nodes/", "notes.txt", "novel.md", "other"]

    def test_no_match(self, tree) -> None:
        assert path_completions(str(tree / "zzz")) == []

    def test_glob_characters_are_literal(self, tmp_path) -> None:
        (tmp_path / "a[1]").write_text("")
        (tmp_path / "a1").write_text("")
        labels = [label for _, label in path_completions(str(tmp_path / "a["))]
        assert labels == ["a[1]"]


class TestFilenameCompletions:
    def test_twiddle_wins(self, accounts: FakeAccounts) -> None:
        assert filename_completions("~bob", accounts) == [("/home/bob", "~bob")]

    def test_falls_back_to_paths(self, tree, accounts: FakeAccounts) -> None:
        result = filename_completions(str(tree / "ot"), accounts)
        assert result == [(str(tree / "other"), "other")]


class TestPrefixLen:
    def test_basename_length(self) -> None:
        assert completion_prefix_len("/tmp/fo") == 2

    def test_trailing_slash(self) -> None:
        assert completion_prefix_len("/tmp/") == 0
