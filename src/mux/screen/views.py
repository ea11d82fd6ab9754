"""Built-in views: the completion list, the file browser and a text pager."""

from __future__ import annotations

import logging
import os

from mux.screen.keybindings import KeybindingsManager, get_keybindings
from mux.screen.utils import visible_width
from mux.screen.view import BaseView

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# CompletionView
# ---------------------------------------------------------------------------


class CompletionView(BaseView):
    """Shows completion candidates in columns, one screenful at a time.

    :meth:`roll` advances to the next screenful, wrapping to the start.
    """

    name = "completions"

    def __init__(
        self,
        labels: list[str],
        header: str | None = None,
        prefix_len: int = 0,
    ) -> None:
        super().__init__()
        self.labels = list(labels)
        self.header = header
        self.prefix_len = prefix_len
        self.top = 0

    @property
    def status(self) -> str:
        return f"{len(self.labels)} completions"

    def _layout(self, width: int) -> list[list[str]]:
        if not self.labels:
            return []
        col_width = max(visible_width(label) for label in self.labels) + 2
        per_row = max(1, width // col_width)
        return [
            self.labels[i : i + per_row]
            for i in range(0, len(self.labels), per_row)
        ]

    def _page_rows(self) -> int:
        if self.buffer is None:
            return 1
        header_rows = 1 if self.header else 0
        return max(1, self.buffer.content_height - header_rows)

    def roll(self) -> None:
        rows = self._layout(self.buffer.content_width if self.buffer else 80)
        self.top += self._page_rows()
        if self.top >= len(rows):
            self.top = 0
        if self.buffer is not None:
            self.buffer.mark_dirty()

    def draw(self) -> None:
        buf = self.buffer
        if buf is None:
            return

        row = 0
        if self.header:
            buf.write(row, 0, self.header, color="completion_header")
            row += 1

        lines = self._layout(buf.content_width)
        col_width = max((visible_width(label) for label in self.labels), default=0) + 2
        for line in lines[self.top : self.top + self._page_rows()]:
            col = 0
            for label in line:
                buf.write(row, col, label[: self.prefix_len], color="completion", no_fill=True)
                buf.write(
                    row,
                    col + visible_width(label[: self.prefix_len]),
                    label[self.prefix_len :],
                    no_fill=True,
                )
                col += col_width
            buf.write(row, col, "")
            row += 1

        while row < buf.content_height:
            buf.write(row, 0, None)
            row += 1


# ---------------------------------------------------------------------------
# FileBrowserView
# ---------------------------------------------------------------------------


class FileBrowserView(BaseView):
    """Modal directory browser.

    Enter on a directory descends into it; enter on a file finishes with the
    marked files, or with that file alone when nothing is marked.  ``t``
    toggles the mark on the file under the cursor.
    """

    name = "file-browser"

    def __init__(
        self,
        directory: str | None = None,
        keybindings: KeybindingsManager | None = None,
    ) -> None:
        super().__init__()
        self.directory = os.path.abspath(directory or os.getcwd())
        self._keybindings = keybindings
        self.entries: list[str] = []
        self.cursor = 0
        self.top = 0
        self.marked: set[str] = set()
        self._done = False
        self._value: list[str] | None = None
        self._load()

    def _load(self) -> None:
        try:
            names = os.listdir(self.directory)
        except OSError:
            logger.debug("cannot list %s", self.directory, exc_info=True)
            names = []
        dirs = sorted(n + "/" for n in names if os.path.isdir(os.path.join(self.directory, n)))
        files = sorted(n for n in names if not os.path.isdir(os.path.join(self.directory, n)))
        self.entries = ["../"] + dirs + files
        self.cursor = 0
        self.top = 0

    @property
    def status(self) -> str:
        marked = f"  {len(self.marked)} marked" if self.marked else ""
        return f"{self.directory}{marked}"

    def done(self) -> bool:
        return self._done

    def value(self) -> list[str] | None:
        return self._value

    def _path(self, entry: str) -> str:
        return os.path.normpath(os.path.join(self.directory, entry.rstrip("/")))

    def _page_rows(self) -> int:
        return max(1, self.buffer.content_height - 1) if self.buffer else 1

    def handle_input(self, key: str) -> bool | None:
        kb = self._keybindings or get_keybindings()

        if kb.matches(key, "selectUp"):
            self.cursor = max(0, self.cursor - 1)
        elif kb.matches(key, "selectDown"):
            self.cursor = min(len(self.entries) - 1, self.cursor + 1)
        elif kb.matches(key, "selectPageUp"):
            self.cursor = max(0, self.cursor - self._page_rows())
        elif kb.matches(key, "selectPageDown"):
            self.cursor = min(len(self.entries) - 1, self.cursor + self._page_rows())
        elif kb.matches(key, "selectToggle"):
            entry = self.entries[self.cursor]
            if not entry.endswith("/"):
                self.marked ^= {self._path(entry)}
        elif kb.matches(key, "selectConfirm"):
            self._confirm()
        else:
            return False

        if self.cursor < self.top:
            self.top = self.cursor
        elif self.cursor >= self.top + self._page_rows():
            self.top = self.cursor - self._page_rows() + 1
        if self.buffer is not None:
            self.buffer.mark_dirty()
        return True

    def _confirm(self) -> None:
        entry = self.entries[self.cursor]
        path = self._path(entry)
        if entry.endswith("/"):
            self.directory = path
            self._load()
            return
        self._value = sorted(self.marked) if self.marked else [path]
        self._done = True

    def draw(self) -> None:
        buf = self.buffer
        if buf is None:
            return
        buf.write(0, 0, f"Browsing {self.directory}", color="completion_header")
        visible = self.entries[self.top : self.top + self._page_rows()]
        for i, entry in enumerate(visible):
            index = self.top + i
            if entry.endswith("/"):
                color = "directory"
            elif self._path(entry) in self.marked:
                color = "marked"
            else:
                color = "text"
            buf.write(i + 1, 0, f"  {entry}", color=color, highlight=index == self.cursor)
        for row in range(len(visible) + 1, buf.content_height):
            buf.write(row, 0, None)


# ---------------------------------------------------------------------------
# TextView
# ---------------------------------------------------------------------------


class TextView(BaseView):
    """Read-only, scrollable lines of text."""

    name = "text"

    def __init__(self, lines: list[str], name: str | None = None) -> None:
        super().__init__()
        self.lines = list(lines)
        self.top = 0
        if name is not None:
            self.name = name

    @property
    def status(self) -> str:
        return f"line {self.top + 1} of {len(self.lines)}" if self.lines else "empty"

    def handle_input(self, key: str) -> bool | None:
        kb = get_keybindings()
        if kb.matches(key, "selectDown"):
            self.top = min(max(0, len(self.lines) - 1), self.top + 1)
        elif kb.matches(key, "selectUp"):
            self.top = max(0, self.top - 1)
        else:
            return False
        if self.buffer is not None:
            self.buffer.mark_dirty()
        return True

    def draw(self) -> None:
        buf = self.buffer
        if buf is None:
            return
        for row in range(buf.content_height):
            index = self.top + row
            buf.write(row, 0, self.lines[index] if index < len(self.lines) else None)
