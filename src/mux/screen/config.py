"""Configuration for the screen manager."""

from __future__ import annotations

import os
from dataclasses import dataclass

from mux.screen.keys import KEY_CANCEL

ENV_PREFIX = "MUX_SCREEN_"


@dataclass
class ScreenConfig:
    """Tunables for polling, prompts and terminal logging."""

    # Seconds a single input poll waits before reporting "no key yet"
    poll_timeout: float = 1.0
    # Height of the completion list spawned by prompts
    completion_rows: int = 10
    # Raw key that aborts modal loops, prompts and confirmations
    cancel_key: str = KEY_CANCEL
    # Title given to the completion list buffer
    completion_title: str = "<completions>"
    # Title given to the file browser opened by ask_for_filenames
    file_browser_title: str = "file browser"
    # Show the terminal cursor at the insertion point while a prompt is open
    show_cursor_in_prompt: bool = True
    # When set, every byte written to the terminal is appended here
    write_log: str = ""

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> ScreenConfig:
        """Build a config, overriding defaults from ``MUX_SCREEN_*`` variables."""
        env = os.environ if environ is None else environ
        config = cls()

        timeout = env.get(f"{ENV_PREFIX}POLL_TIMEOUT")
        if timeout:
            config.poll_timeout = float(timeout)

        rows = env.get(f"{ENV_PREFIX}COMPLETION_ROWS")
        if rows:
            config.completion_rows = int(rows)

        config.write_log = env.get(f"{ENV_PREFIX}WRITE_LOG", "")
        return config
