"""Buffer: one view paired with its on-screen region and status line."""

from __future__ import annotations

from typing import TYPE_CHECKING

from mux.screen.utils import truncate_to_width, visible_width

if TYPE_CHECKING:
    from mux.screen.colors import Colormap
    from mux.screen.terminal import Terminal
    from mux.screen.view import View


class Buffer:
    """A stacked, full-screen rendering slot hosting one view.

    The last row of the region is the status line; the view owns the
    ``height - 1`` rows above it.  Painting goes into the terminal's grid
    and only reaches the screen when the compositor flushes.
    """

    def __init__(
        self,
        terminal: Terminal,
        colormap: Colormap,
        view: View,
        width: int,
        height: int,
        title: str = "",
        force_to_top: bool = False,
    ) -> None:
        self._terminal = terminal
        self._colormap = colormap
        self.view = view
        self.title = title
        self.force_to_top = force_to_top
        self.dirty: bool = True
        self.focused: bool = False
        self.x = 0
        self.y = 0
        self.width = max(0, width)
        self.height = max(1, height)

    def __repr__(self) -> str:
        return f"<Buffer {self.title!r} {self.width}x{self.height}>"

    @property
    def content_height(self) -> int:
        return self.height - 1

    @property
    def content_width(self) -> int:
        return self.width

    def resize(self, rows: int, cols: int) -> None:
        if cols == self.width and rows == self.height:
            return
        self.width = max(0, cols)
        self.height = max(1, rows)
        self.dirty = True
        self.view.resize(rows, cols)

    def mark_dirty(self) -> None:
        self.dirty = True

    def redraw(self) -> None:
        """Repaint the view only if dirty; the status line always."""
        if self.dirty:
            self.draw()
        self.draw_status()
        self.commit()

    def draw(self) -> None:
        self.view.draw()
        self.draw_status()
        self.commit()

    def commit(self) -> None:
        """Clear the dirty flag and queue this region for the next flush."""
        self.dirty = False
        self._terminal.touch_lines(self.y, self.height)

    def write(
        self,
        row: int,
        col: int,
        text: str | None,
        color: str | None = None,
        highlight: bool = False,
        no_fill: bool = False,
    ) -> None:
        """Paint one line of *text* at (*row*, *col*) inside this buffer.

        Text is cut at the right edge of the buffer.  Unless *no_fill* is
        set, the rest of the row is blanked so stale content disappears.
        ``None`` paints a blank line.
        """
        if col >= self.width or row >= self.height:
            return

        style = self._colormap.color_for(color, highlight)
        text = text or ""
        max_width = self.width - col
        clipped = truncate_to_width(text, max_width)
        self._terminal.add_str(self.y + row, self.x + col, clipped, style)

        used = visible_width(clipped)
        if used < max_width and not no_fill:
            self._terminal.add_str(
                self.y + row, self.x + col + used, " " * (max_width - used), style
            )

    def clear(self) -> None:
        self._terminal.clear()

    def draw_status(self) -> None:
        self.write(
            self.height - 1,
            0,
            f" [{self.view.name}] {self.title}   {self.view.status}",
            color="status",
        )

    def focus(self) -> None:
        self.focused = True
        self.dirty = True
        self.view.focus()

    def blur(self) -> None:
        self.focused = False
        self.dirty = True
        self.view.blur()
