"""TextField: the single-line input behind every prompt.

One field exists per prompt domain ("filename", "search"...) and is reused
across prompts, so each domain keeps its own history of accepted answers.
Tab drives completion through a caller-supplied completer, a function from
the current text to ``(full_value, short_label)`` pairs.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable

from mux.screen.input_buffer import is_paste, paste_content
from mux.screen.keybindings import KeybindingsManager, get_keybindings
from mux.screen.keys import KEY_CANCEL
from mux.screen.utils import (
    get_segmenter,
    is_control_text,
    shared_prefix,
    truncate_to_width,
    visible_width,
)

if TYPE_CHECKING:
    from mux.screen.colors import Colormap
    from mux.screen.terminal import Terminal

logger = logging.getLogger(__name__)

_segmenter = get_segmenter()

Completion = tuple[str, str]
Completer = Callable[[str], list[Completion]]


class TextField:
    """Editable line with history and tab completion."""

    def __init__(
        self,
        terminal: Terminal,
        colormap: Colormap | None = None,
        keybindings: KeybindingsManager | None = None,
        cancel_key: str = KEY_CANCEL,
    ) -> None:
        self._terminal = terminal
        self._colormap = colormap
        self._keybindings = keybindings
        self._cancel_key = cancel_key

        self.row = 0
        self.col = 0
        self.width = 0
        self.question = ""
        self.active = False

        self._text: str = ""
        self._cursor: int = 0
        self._result: str | None = None
        self._completer: Completer | None = None

        self.completions: list[Completion] = []
        self._new_completions = False
        self._roll_completions = False

        self.history: list[str] = []
        self._history_index: int | None = None
        self._draft: str = ""

    # -- lifecycle ----------------------------------------------------------

    def activate(
        self,
        question: str,
        default: str | None = None,
        completer: Completer | None = None,
        row: int | None = None,
        width: int | None = None,
    ) -> None:
        """Start a prompt on the last terminal row (or *row*)."""
        self.row = self._terminal.rows - 1 if row is None else row
        self.width = self._terminal.columns if width is None else width
        self.question = question
        self._text = default or ""
        self._cursor = len(self._text)
        self._result = None
        self._completer = completer
        self._history_index = None
        self._reset_completion_state()
        self.active = True

    def deactivate(self) -> None:
        self._reset_completion_state()
        self._completer = None
        self.active = False

    # -- state --------------------------------------------------------------

    @property
    def value(self) -> str | None:
        """The current text while active; afterwards the accepted answer.

        ``None`` once a prompt was cancelled.
        """
        return self._text if self.active else self._result

    @property
    def text(self) -> str:
        return self._text

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def new_completions(self) -> bool:
        return self._new_completions

    @property
    def roll_completions(self) -> bool:
        return self._roll_completions

    def _reset_completion_state(self) -> None:
        self.completions = []
        self._new_completions = False
        self._roll_completions = False

    def _set_text(self, text: str) -> None:
        self._text = text
        self._cursor = len(text)

    # -- input --------------------------------------------------------------

    def handle_input(self, key: str) -> bool:
        """Process one key.

        Returns ``False`` when the key ends the prompt (accept or cancel),
        ``True`` when it was consumed as an edit.
        """
        kb = self._keybindings or get_keybindings()

        if key == self._cancel_key:
            self._result = None
            self.active = False
            return False

        if kb.matches(key, "submit"):
            self._result = self._text
            self._remember(self._text)
            self.active = False
            return False

        if kb.matches(key, "complete"):
            self._complete()
            return True

        self._reset_completion_state()

        if is_paste(key):
            pasted = paste_content(key).replace("\r", "").replace("\n", "")
            self._insert(pasted)
            return True

        if kb.matches(key, "historyPrev"):
            self._history_prev()
        elif kb.matches(key, "historyNext"):
            self._history_next()
        elif kb.matches(key, "cursorLeft"):
            if self._cursor > 0:
                self._cursor -= self._grapheme_before()
        elif kb.matches(key, "cursorRight"):
            if self._cursor < len(self._text):
                self._cursor += self._grapheme_after()
        elif kb.matches(key, "cursorLineStart"):
            self._cursor = 0
        elif kb.matches(key, "cursorLineEnd"):
            self._cursor = len(self._text)
        elif kb.matches(key, "deleteCharBackward"):
            if self._cursor > 0:
                n = self._grapheme_before()
                self._text = self._text[: self._cursor - n] + self._text[self._cursor :]
                self._cursor -= n
        elif kb.matches(key, "deleteCharForward"):
            if self._cursor < len(self._text):
                n = self._grapheme_after()
                self._text = self._text[: self._cursor] + self._text[self._cursor + n :]
        elif kb.matches(key, "deleteWordBackward"):
            self._delete_word_backwards()
        elif kb.matches(key, "deleteToLineStart"):
            self._text = self._text[self._cursor :]
            self._cursor = 0
        elif kb.matches(key, "deleteToLineEnd"):
            self._text = self._text[: self._cursor]
        elif not is_control_text(key):
            self._insert(key)

        return True

    def _insert(self, text: str) -> None:
        self._text = self._text[: self._cursor] + text + self._text[self._cursor :]
        self._cursor += len(text)

    def _grapheme_before(self) -> int:
        graphemes = _segmenter.segment(self._text[: self._cursor])
        return len(graphemes[-1]) if graphemes else 1

    def _grapheme_after(self) -> int:
        graphemes = _segmenter.segment(self._text[self._cursor :])
        return len(graphemes[0]) if graphemes else 1

    def _delete_word_backwards(self) -> None:
        start = self._cursor
        while start > 0 and self._text[start - 1].isspace():
            start -= 1
        while start > 0 and not self._text[start - 1].isspace():
            start -= 1
        self._text = self._text[:start] + self._text[self._cursor :]
        self._cursor = start

    # -- completion ---------------------------------------------------------

    def _complete(self) -> None:
        if self._completer is None:
            return

        if self.completions:
            self._new_completions = False
            self._roll_completions = True
            return

        candidates = self._completer(self._text)
        logger.debug("%d completions for %r", len(candidates), self._text)
        if candidates:
            self._set_text(shared_prefix([full for full, _ in candidates]))
        if len(candidates) > 1:
            self.completions = list(candidates)
            self._new_completions = True
            self._roll_completions = False

    # -- history ------------------------------------------------------------

    def _remember(self, text: str) -> None:
        if text and (not self.history or self.history[-1] != text):
            self.history.append(text)

    def _history_prev(self) -> None:
        if not self.history:
            return
        if self._history_index is None:
            self._draft = self._text
            self._history_index = len(self.history) - 1
        elif self._history_index > 0:
            self._history_index -= 1
        self._set_text(self.history[self._history_index])

    def _history_next(self) -> None:
        if self._history_index is None:
            return
        self._history_index += 1
        if self._history_index >= len(self.history):
            self._history_index = None
            self._set_text(self._draft)
        else:
            self._set_text(self.history[self._history_index])

    # -- painting -----------------------------------------------------------

    def _scroll_start(self) -> int:
        available = self.width - visible_width(self.question) - 1
        if available <= 0 or self._cursor <= available:
            return 0
        return self._cursor - available

    def paint(self) -> None:
        """Paint the question and the visible part of the text."""
        if not self.active:
            return
        style = self._colormap.color_for("none") if self._colormap else ""
        visible = self._text[self._scroll_start() :]
        line = truncate_to_width(self.question + visible, self.width, pad=True)
        self._terminal.add_str(self.row, self.col, line, style)

    def cursor_column(self) -> int:
        start = self._scroll_start()
        return (
            self.col
            + visible_width(self.question)
            + visible_width(self._text[start : self._cursor])
        )

    def position_cursor(self) -> None:
        self._terminal.move_cursor(self.row, min(self.cursor_column(), max(0, self.width - 1)))
