"""Filename completion for prompts.

``filename_completions`` is a completer for :class:`TextField`: given the
text typed so far it returns ``(full_value, short_label)`` pairs.  A
``~name`` token completes against local accounts; anything else is a plain
prefix listing of the filesystem with directories marked by a trailing
``/``.
"""

from __future__ import annotations

import getpass
import glob
import logging
import os
import pwd
import re
from typing import Protocol

from mux.screen.text_field import Completion

logger = logging.getLogger(__name__)

_TWIDDLE_RE = re.compile(r"(~([^\s/]*))")


class AccountDirectory(Protocol):
    """Source of local account names and their home directories."""

    def current_login(self) -> str: ...

    def home_of(self, name: str) -> str | None: ...

    def names(self) -> list[str]: ...


class PasswdAccounts:
    """``AccountDirectory`` backed by the system password database."""

    def __init__(self) -> None:
        self._names: list[str] | None = None

    def current_login(self) -> str:
        try:
            return getpass.getuser()
        except (OSError, KeyError):
            logger.debug("no login name for the current user", exc_info=True)
            return ""

    def home_of(self, name: str) -> str | None:
        try:
            return pwd.getpwnam(name).pw_dir
        except KeyError:
            return None

    def names(self) -> list[str]:
        if self._names is None:
            self._names = [entry.pw_name for entry in pwd.getpwall()]
        return self._names


_default_accounts: AccountDirectory | None = None


def get_accounts() -> AccountDirectory:
    global _default_accounts
    if _default_accounts is None:
        _default_accounts = PasswdAccounts()
    return _default_accounts


def twiddle_completions(text: str, accounts: AccountDirectory) -> list[Completion] | None:
    """Complete a ``~name`` token in *text*, or ``None`` if there is none.

    A known account expands to its home directory.  An unknown (partial)
    name completes to every account whose name starts with it.
    """
    match = _TWIDDLE_RE.search(text)
    if match is None:
        return None

    full, name = match.group(1), match.group(2)
    if not name:
        name = accounts.current_login()

    home = accounts.home_of(name)
    if home:
        return [(text.replace(full, home, 1), f"~{name}")]

    return [
        (text.replace(f"~{name}", f"~{user}", 1), f"~{user}")
        for user in accounts.names()
        if user.startswith(name)
    ]


def path_completions(text: str) -> list[Completion]:
    """List filesystem entries starting with *text*, sorted."""
    try:
        matches = sorted(glob.glob(glob.escape(text) + "*"))
    except OSError:
        logger.debug("cannot list %r", text, exc_info=True)
        return []

    completions: list[Completion] = []
    for path in matches:
        suffix = "/" if os.path.isdir(path) else ""
        completions.append((path + suffix, os.path.basename(path) + suffix))
    return completions


def filename_completions(
    text: str, accounts: AccountDirectory | None = None
) -> list[Completion]:
    """Completer used by :meth:`ScreenManager.ask_for_filenames`."""
    twiddled = twiddle_completions(text, accounts or get_accounts())
    if twiddled is not None:
        return twiddled
    return path_completions(text)


def completion_prefix_len(text: str) -> int:
    """Characters of each label already typed, for highlighting in the list."""
    if text.endswith("/"):
        return 0
    return len(os.path.basename(text))
