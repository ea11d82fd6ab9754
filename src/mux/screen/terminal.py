"""Terminal abstraction: a character grid with buffered, batched output.

Provides a ``Terminal`` protocol and a concrete ``ProcessTerminal`` that
drives ``sys.stdin``/``sys.stdout`` with ANSI escape sequences.  Painting
is two-phase: ``add_str`` writes into an in-memory grid, and ``flush``
emits every row that differs from what is on screen in one write.
"""

from __future__ import annotations

import logging
import os
import select
import sys
import termios
import tty
from typing import Protocol

from mux.screen.input_buffer import InputBuffer
from mux.screen.utils import get_segmenter, grapheme_width

logger = logging.getLogger(__name__)

_segmenter = get_segmenter()

# ---------------------------------------------------------------------------
# ANSI escape constants
# ---------------------------------------------------------------------------

_BRACKETED_PASTE_ENABLE = "\x1b[?2004h"
_BRACKETED_PASTE_DISABLE = "\x1b[?2004l"

_ALT_SCREEN_ENABLE = "\x1b[?1049h"
_ALT_SCREEN_DISABLE = "\x1b[?1049l"

_HIDE_CURSOR = "\x1b[?25l"
_SHOW_CURSOR = "\x1b[?25h"
_CLEAR_SCREEN = "\x1b[2J\x1b[H"
_RESET = "\x1b[0m"
_MOVE_FMT = "\x1b[{};{}H"

# A partial escape sequence is given this long to complete
_ESCAPE_TIMEOUT = 0.01

Cell = tuple[str, str]  # (grapheme, style); "" grapheme = wide-char tail

_BLANK: Cell = (" ", "")


# ---------------------------------------------------------------------------
# Terminal protocol
# ---------------------------------------------------------------------------


class Terminal(Protocol):
    """Interface for the character-grid terminal the screen manager paints on."""

    def start(self) -> None: ...

    def stop(self) -> None: ...

    @property
    def columns(self) -> int: ...

    @property
    def rows(self) -> int: ...

    def move_cursor(self, row: int, col: int) -> None: ...

    def show_cursor(self) -> None: ...

    def hide_cursor(self) -> None: ...

    def add_str(self, row: int, col: int, text: str, style: str = "") -> None: ...

    def touch_lines(self, start: int, count: int) -> None: ...

    def clear(self) -> None: ...

    def flush(self) -> None: ...

    def refresh(self) -> None: ...

    def read_key(self, timeout: float) -> str | None: ...

    def suspend(self) -> None: ...

    def resume(self) -> None: ...


# ---------------------------------------------------------------------------
# Grid
# ---------------------------------------------------------------------------


class Grid:
    """A rows x columns array of cells with clipped, width-aware writes."""

    def __init__(self, rows: int, columns: int) -> None:
        self.rows = rows
        self.columns = columns
        self.cells: list[list[Cell]] = [
            [_BLANK] * columns for _ in range(rows)
        ]

    def resize(self, rows: int, columns: int) -> None:
        if rows == self.rows and columns == self.columns:
            return
        cells: list[list[Cell]] = []
        for r in range(rows):
            old = self.cells[r] if r < self.rows else []
            row = old[:columns]
            row.extend([_BLANK] * (columns - len(row)))
            cells.append(row)
        self.rows, self.columns, self.cells = rows, columns, cells

    def put(self, row: int, col: int, text: str, style: str) -> None:
        """Paint *text* at (*row*, *col*), clipping at the right edge."""
        if row < 0 or row >= self.rows or col < 0:
            return
        line = self.cells[row]
        for g in _segmenter.segment(text):
            w = grapheme_width(g)
            if w == 0:
                continue
            if col + w > self.columns:
                break
            line[col] = (g, style)
            if w == 2:
                line[col + 1] = ("", style)
            col += w

    def clear(self) -> None:
        for r in range(self.rows):
            self.cells[r] = [_BLANK] * self.columns

    def row_text(self, row: int) -> str:
        return "".join(g for g, _ in self.cells[row])

    def render_row(self, row: int) -> str:
        """Return row *row* as text with SGR changes inlined."""
        out: list[str] = []
        current = None
        for g, style in self.cells[row]:
            if not g:
                continue
            if style != current:
                out.append(_RESET + style)
                current = style
            out.append(g)
        out.append(_RESET)
        return "".join(out)


# ---------------------------------------------------------------------------
# ProcessTerminal implementation
# ---------------------------------------------------------------------------


class ProcessTerminal:
    """Concrete terminal backed by ``sys.stdin``/``sys.stdout``.

    Manages raw mode via :mod:`tty` and :mod:`termios`, the alternate screen,
    bracketed paste, and cursor visibility.  Output is differential: only
    rows that changed (or were touched) since the last flush are written.
    """

    def __init__(self, write_log: str | None = None) -> None:
        self._original_termios: list | None = None
        self._input = InputBuffer()
        self._write_log_path: str = (
            write_log
            if write_log is not None
            else os.environ.get("MUX_SCREEN_WRITE_LOG", "")
        )
        self._grid = Grid(self.rows, self.columns)
        self._shown: list[str | None] = [None] * self._grid.rows
        self._touched: set[int] = set()
        self._cursor: tuple[int, int] | None = None
        self._started = False

    # -- properties ---------------------------------------------------------

    @property
    def columns(self) -> int:
        try:
            return os.get_terminal_size(sys.stdout.fileno()).columns
        except (ValueError, OSError):
            return 80

    @property
    def rows(self) -> int:
        try:
            return os.get_terminal_size(sys.stdout.fileno()).lines
        except (ValueError, OSError):
            return 24

    # -- start / stop -------------------------------------------------------

    def start(self) -> None:
        """Enter raw mode and the alternate screen."""
        fd = sys.stdin.fileno()
        self._original_termios = termios.tcgetattr(fd)
        tty.setraw(fd)
        self._raw_write(_ALT_SCREEN_ENABLE + _BRACKETED_PASTE_ENABLE + _HIDE_CURSOR)
        self._started = True
        self._invalidate()
        logger.debug("terminal started (%dx%d)", self.columns, self.rows)

    def stop(self) -> None:
        """Restore the terminal to the state it was in before :meth:`start`."""
        if not self._started:
            return
        self._raw_write(
            _RESET + _SHOW_CURSOR + _BRACKETED_PASTE_DISABLE + _ALT_SCREEN_DISABLE
        )
        self._restore_termios()
        self._input.clear()
        self._started = False
        logger.debug("terminal stopped")

    def suspend(self) -> None:
        """Hand the tty back to another process (the ``endwin`` step)."""
        self._raw_write(
            _RESET + _CLEAR_SCREEN + _SHOW_CURSOR + _BRACKETED_PASTE_DISABLE
            + _ALT_SCREEN_DISABLE
        )
        self._restore_termios()

    def resume(self) -> None:
        """Reclaim the tty after :meth:`suspend`; the next flush repaints all rows."""
        fd = sys.stdin.fileno()
        self._original_termios = termios.tcgetattr(fd)
        tty.setraw(fd)
        self._raw_write(_ALT_SCREEN_ENABLE + _BRACKETED_PASTE_ENABLE)
        self._invalidate()

    def _restore_termios(self) -> None:
        if self._original_termios is not None:
            termios.tcsetattr(
                sys.stdin.fileno(), termios.TCSADRAIN, self._original_termios
            )
            self._original_termios = None

    # -- painting -----------------------------------------------------------

    def _sync_size(self) -> None:
        rows, columns = self.rows, self.columns
        if rows != self._grid.rows or columns != self._grid.columns:
            self._grid.resize(rows, columns)
            self._invalidate()

    def _invalidate(self) -> None:
        self._shown = [None] * self._grid.rows

    def add_str(self, row: int, col: int, text: str, style: str = "") -> None:
        self._sync_size()
        self._grid.put(row, col, text, style)

    def touch_lines(self, start: int, count: int) -> None:
        """Force rows ``start .. start+count-1`` out on the next flush."""
        self._touched.update(range(max(0, start), start + count))

    def clear(self) -> None:
        """Blank the grid and the physical screen."""
        self._sync_size()
        self._grid.clear()
        self._raw_write(_RESET + _CLEAR_SCREEN)
        self._shown = [self._grid.render_row(r) for r in range(self._grid.rows)]

    def move_cursor(self, row: int, col: int) -> None:
        self._cursor = (row, col)
        self._raw_write(_MOVE_FMT.format(row + 1, col + 1))

    def hide_cursor(self) -> None:
        self._raw_write(_HIDE_CURSOR)

    def show_cursor(self) -> None:
        self._raw_write(_SHOW_CURSOR)

    def flush(self) -> None:
        """Emit all changed rows in one batched write."""
        self._sync_size()
        out: list[str] = []
        for r in range(self._grid.rows):
            rendered = self._grid.render_row(r)
            if rendered == self._shown[r] and r not in self._touched:
                continue
            out.append(_MOVE_FMT.format(r + 1, 1))
            out.append(rendered)
            self._shown[r] = rendered
        self._touched.clear()
        if not out:
            return
        if self._cursor is not None:
            out.append(_MOVE_FMT.format(self._cursor[0] + 1, self._cursor[1] + 1))
        self.write("".join(out))

    def refresh(self) -> None:
        """Flush, then push everything through to the tty immediately."""
        self.flush()
        try:
            sys.stdout.flush()
        except OSError:
            pass

    # -- input --------------------------------------------------------------

    def read_key(self, timeout: float) -> str | None:
        """Return the next complete key sequence, or ``None`` after *timeout*."""
        key = self._input.pop()
        if key is not None:
            return key

        if not self._wait_readable(timeout):
            return None
        self._read_chunk()

        # Give a partial escape sequence a moment to finish arriving
        while self._input.pending and not len(self._input):
            if not self._wait_readable(_ESCAPE_TIMEOUT):
                self._input.flush()
                break
            self._read_chunk()

        return self._input.pop()

    def _wait_readable(self, timeout: float) -> bool:
        try:
            readable, _, _ = select.select([sys.stdin], [], [], timeout)
        except InterruptedError:
            return False
        return bool(readable)

    def _read_chunk(self) -> None:
        try:
            raw = os.read(sys.stdin.fileno(), 4096)
        except OSError:
            return
        if raw:
            self._input.feed(raw.decode("utf-8", errors="replace"))

    # -- output -------------------------------------------------------------

    def write(self, data: str) -> None:
        """Write data to stdout and optionally to the write log."""
        self._raw_write(data)

        if self._write_log_path:
            try:
                with open(self._write_log_path, "a") as f:
                    f.write(data)
            except OSError:
                pass

    def _raw_write(self, data: str) -> None:
        try:
            sys.stdout.write(data)
            sys.stdout.flush()
        except OSError:
            pass
