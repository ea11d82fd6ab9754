"""ScreenManager: buffers, focus, minibuffer and prompts on one terminal.

The manager owns the buffer stack, the minibuffer and the terminal, and is
the only thing that paints.  Every compositor pass and every direct
terminal mutation happens under the paint lock.  Nested calls that already
hold it pass ``locked=True`` rather than re-acquiring.

Modal views and prompts run their own blocking input loops, nested inside
whatever loop called them.
"""

from __future__ import annotations

import logging
import os
import subprocess
import threading
from contextlib import contextmanager
from typing import Any, Callable, Iterator

from mux.screen.buffer import Buffer
from mux.screen.colors import Colormap
from mux.screen.completion import (
    AccountDirectory,
    completion_prefix_len,
    filename_completions,
)
from mux.screen.config import ScreenConfig
from mux.screen.keybindings import KeybindingsManager
from mux.screen.minibuffer import Minibuffer
from mux.screen.stack import BufferStack
from mux.screen.terminal import Terminal
from mux.screen.text_field import Completer, TextField
from mux.screen.utils import truncate_to_width, visible_width
from mux.screen.view import View, is_modal
from mux.screen.views import CompletionView, FileBrowserView

logger = logging.getLogger(__name__)


class ScreenManager:
    """Multiplexes buffers onto a terminal and drives prompts and dialogs.

    Create one per terminal at startup and hand it to whatever needs to
    spawn buffers or talk to the user.
    """

    def __init__(
        self,
        terminal: Terminal,
        config: ScreenConfig | None = None,
        colormap: Colormap | None = None,
        keybindings: KeybindingsManager | None = None,
        accounts: AccountDirectory | None = None,
        home_view_type: type | None = None,
    ) -> None:
        self.terminal = terminal
        self.config = config or ScreenConfig()
        self.colormap = colormap or Colormap()
        self.keybindings = keybindings
        self.accounts = accounts
        # Views of this type never block kill_all_buffers_safely
        self.home_view_type = home_view_type

        self._stack = BufferStack()
        self._minibuf = Minibuffer()
        self._lock = threading.Lock()
        self._textfields: dict[str, TextField] = {}
        self._active_field: TextField | None = None
        self._shelled = False
        self._asking = False

    # ------------------------------------------------------------------
    # Stack queries
    # ------------------------------------------------------------------

    @property
    def focus_buf(self) -> Buffer | None:
        return self._stack.focus_buf

    @property
    def buffers(self) -> list[tuple[str, Buffer]]:
        """``(title, buffer)`` pairs for every buffer on the stack."""
        return self._stack.items()

    @property
    def stack(self) -> list[Buffer]:
        """The buffers bottom first; the last one is visible."""
        return self._stack.as_list()

    @property
    def minibuffer(self) -> Minibuffer:
        return self._minibuf

    @property
    def shelled(self) -> bool:
        return self._shelled

    @property
    def asking(self) -> bool:
        return self._asking

    def exists(self, title: str) -> bool:
        return self._stack.exists(title)

    def get(self, title: str) -> Buffer | None:
        return self._stack.get(title)

    def __getitem__(self, title: str) -> Buffer | None:
        return self._stack.get(title)

    # ------------------------------------------------------------------
    # Focus and ordering
    # ------------------------------------------------------------------

    def focus_on(self, buf: Buffer) -> None:
        self._stack.focus_on(buf)

    def raise_to_front(self, buf: Buffer) -> None:
        self._stack.raise_to_front(buf)

    def roll_buffers(self) -> None:
        self._stack.roll()

    def roll_buffers_backwards(self) -> None:
        self._stack.roll_backwards()

    def handle_input(self, key: str) -> bool | None:
        """Route *key* to the focused buffer's view."""
        buf = self._stack.focus_buf
        if buf is None:
            return None
        return buf.view.handle_input(key)

    # ------------------------------------------------------------------
    # Spawning
    # ------------------------------------------------------------------

    def spawn(
        self,
        title: str,
        view: View,
        width: int | None = None,
        height: int | None = None,
        hidden: bool = False,
        force_to_top: bool = False,
    ) -> Buffer:
        """Create a buffer for *view* and put it on the stack.

        A taken title gets a ``" <2>"``, ``" <3>"``... suffix; the buffer
        carries the suffixed title.
        """
        realtitle = self._stack.unique_title(title)
        buf = Buffer(
            self.terminal,
            self.colormap,
            view,
            width if width is not None else self.terminal.columns,
            height if height is not None else self.terminal.rows - 1,
            title=realtitle,
            force_to_top=force_to_top,
        )
        view.buffer = buf
        self._stack.insert(buf, hidden=hidden)
        logger.debug("spawned %r (%s)%s", realtitle, view.name, " hidden" if hidden else "")
        return buf

    def spawn_unless_exists(
        self,
        title: str,
        provider: Callable[[], View],
        hidden: bool = False,
        **opts: Any,
    ) -> Buffer:
        """Return the buffer called *title*, spawning it if needed.

        *provider* builds the view and is only called when the buffer does
        not exist yet.
        """
        buf = self._stack.get(title)
        if buf is not None:
            if not hidden:
                self.raise_to_front(buf)
            return buf
        return self.spawn(title, provider(), hidden=hidden, **opts)

    def spawn_modal(self, title: str, view: Any, **opts: Any) -> Any:
        """Spawn *view* and run a nested input loop until it is done.

        The view must implement ``done()`` and ``value()``.  The cancel key
        ends the loop early.  The buffer is killed afterwards and the view's
        value returned.
        """
        if not is_modal(view):
            raise TypeError(f"{type(view).__name__} has no done()/value()")
        buf = self.spawn(title, view, **opts)
        try:
            self.draw_screen()
            while not view.done():
                key = self.terminal.read_key(self.config.poll_timeout)
                if key is None:
                    continue
                if key == self.config.cancel_key:
                    break
                view.handle_input(key)
                self.draw_screen()
                self.erase_flash()
        finally:
            if buf in self._stack:
                self.kill_buffer(buf)
        return view.value()

    # ------------------------------------------------------------------
    # Killing
    # ------------------------------------------------------------------

    def kill_buffer(self, buf: Buffer) -> None:
        """Run the view's cleanup and drop *buf* from the stack.

        Killing the last buffer leaves the stack empty; keeping a home
        buffer around is up to the caller.
        """
        if buf not in self._stack:
            raise ValueError(f"buffer not on stack: {buf!r}")
        buf.view.cleanup()
        self._stack.remove(buf)
        logger.debug("killed %r", buf.title)

    def kill_buffer_safely(self, buf: Buffer) -> bool:
        if not buf.view.killable():
            return False
        self.kill_buffer(buf)
        return True

    def kill_all_buffers_safely(self) -> bool:
        """Kill from the top down; stop at the first unkillable buffer."""
        while self._stack.top is not None:
            top = self._stack.top
            is_home = self.home_view_type is not None and isinstance(
                top.view, self.home_view_type
            )
            if not (is_home or top.view.killable()):
                return False
            self.kill_buffer(top)
        return True

    def kill_all_buffers(self) -> None:
        while self._stack.bottom is not None:
            self.kill_buffer(self._stack.bottom)

    # ------------------------------------------------------------------
    # Compositor
    # ------------------------------------------------------------------

    def minibuf_lines(self) -> int:
        return self._minibuf.lines()

    def draw_screen(
        self,
        refresh: bool = False,
        skip_minibuf: bool = False,
        locked: bool = False,
    ) -> None:
        """Paint the visible buffer and the minibuffer, then flush once.

        Only the top of the stack is drawn; it gets every row above the
        minibuffer.
        """
        if self._shelled:
            return

        if not locked:
            self._lock.acquire()
        try:
            buf = self._stack.top
            if buf is not None:
                buf.resize(
                    self.terminal.rows - self.minibuf_lines(), self.terminal.columns
                )
                if self._stack.dirty:
                    buf.draw()
                else:
                    buf.redraw()
            else:
                blank = truncate_to_width("", self.terminal.columns, pad=True)
                style = self.colormap.color_for("none")
                for row in range(self.terminal.rows - self.minibuf_lines()):
                    self.terminal.add_str(row, 0, blank, style)

            if not skip_minibuf:
                self.draw_minibuf(locked=True)
            if self._active_field is not None:
                self._active_field.paint()

            self._stack.dirty = False
            self.terminal.flush()
            if refresh:
                self.terminal.refresh()
        finally:
            if not locked:
                self._lock.release()

    def draw_minibuf(self, refresh: bool = False, locked: bool = False) -> None:
        lines = self._minibuf.compose()
        style = self.colormap.color_for("none")
        rows = self.terminal.rows
        cols = self.terminal.columns

        if not locked:
            self._lock.acquire()
        try:
            for i, text in enumerate(lines):
                # the prompt field owns the bottom row while asking
                if i == 0 and self._active_field is not None:
                    continue
                self.terminal.add_str(
                    rows - 1 - i, 0, truncate_to_width(text, cols, pad=True), style
                )
            if refresh:
                self.terminal.refresh()
        finally:
            if not locked:
                self._lock.release()

    def completely_redraw_screen(self) -> None:
        """Clear the physical screen and repaint everything."""
        if self._shelled:
            return
        with self._lock:
            self._stack.dirty = True
            self.terminal.clear()
            self.draw_screen(locked=True)

    def run(self, until: Callable[[], bool] | None = None) -> None:
        """Foreground loop: route keys to the focused view until *until()*."""
        self.draw_screen()
        while until is None or not until():
            key = self.terminal.read_key(self.config.poll_timeout)
            if key is None:
                continue
            self.handle_input(key)
            if self._stack.top is None:
                break
            self.draw_screen()
            self.erase_flash()

    # ------------------------------------------------------------------
    # Minibuffer messaging
    # ------------------------------------------------------------------

    def say(self, text: str, handle: int | None = None) -> int:
        """Show *text* as a status line and return its handle.

        Passing an existing *handle* replaces that line in place.  A new
        line changes the minibuffer height, so the whole screen is redrawn.
        """
        handle, is_new = self._minibuf.put(text, handle)
        if is_new:
            self.draw_screen(refresh=True)
        else:
            self.draw_minibuf(refresh=True)
        return handle

    @contextmanager
    def saying(self, text: str) -> Iterator[int]:
        """Show *text* for the duration of a ``with`` block."""
        handle = self.say(text)
        try:
            yield handle
        finally:
            self.clear(handle)

    def clear(self, handle: int) -> None:
        self._minibuf.remove(handle)
        self.draw_screen(refresh=True)

    def flash(self, text: str) -> None:
        self._minibuf.set_flash(text)
        self.draw_screen(refresh=True)

    def erase_flash(self) -> None:
        """Drop the flash; it disappears with the next redraw."""
        self._minibuf.set_flash(None)

    # ------------------------------------------------------------------
    # Prompts
    # ------------------------------------------------------------------

    def _textfield(self, domain: str) -> TextField:
        field = self._textfields.get(domain)
        if field is None:
            field = TextField(
                self.terminal,
                self.colormap,
                self.keybindings,
                cancel_key=self.config.cancel_key,
            )
            self._textfields[domain] = field
        return field

    def ask(
        self,
        domain: str,
        question: str,
        default: str | None = None,
        completer: Completer | None = None,
    ) -> str | None:
        """Read a line of text on the bottom row.

        Returns the accepted text, or ``None`` if the user cancelled.  Each
        *domain* keeps its own input history.
        """
        if self._asking:
            raise RuntimeError("a prompt is already active")
        self._asking = True
        logger.debug("ask[%s] %r", domain, question)

        field = self._textfield(domain)
        completion_buf: Buffer | None = None

        try:
            with self._lock:
                field.activate(question, default, completer)
                self._minibuf.set_prompt_active(True)
                self._active_field = field
                self._stack.dirty = True
                self.draw_screen(locked=True)
                if self.config.show_cursor_in_prompt:
                    self.terminal.show_cursor()
                field.position_cursor()
                self.terminal.refresh()

            while True:
                key = self.terminal.read_key(self.config.poll_timeout)
                if key is None:
                    continue
                if not field.handle_input(key):
                    break

                if field.new_completions:
                    if completion_buf is not None and completion_buf in self._stack:
                        self.kill_buffer(completion_buf)
                    view = CompletionView(
                        [short for _, short in field.completions],
                        header=f'Possible completions for "{field.text}": ',
                        prefix_len=completion_prefix_len(field.text),
                    )
                    completion_buf = self.spawn(
                        self.config.completion_title,
                        view,
                        height=self.config.completion_rows,
                    )
                    self.draw_screen(skip_minibuf=True)
                elif field.roll_completions and completion_buf is not None:
                    completion_buf.view.roll()
                    self.draw_screen(skip_minibuf=True)
                else:
                    self.draw_screen(skip_minibuf=True)

                with self._lock:
                    field.position_cursor()
                    self.terminal.refresh()
        finally:
            with self._lock:
                field.deactivate()
                self._active_field = None
                self.terminal.hide_cursor()
            if completion_buf is not None and completion_buf in self._stack:
                self.kill_buffer(completion_buf)
            self._minibuf.set_prompt_active(False)
            self._stack.dirty = True
            self._asking = False
            self.draw_screen()

        logger.debug("ask[%s] -> %r", domain, field.value)
        return field.value

    def ask_for_filenames(
        self, domain: str, question: str, default: str | None = None
    ) -> list[str]:
        """Ask for a path; an empty answer or a directory opens a file browser.

        Always returns a list of paths, empty when the user cancelled.
        """
        accounts = self.accounts
        answer = self.ask(
            domain,
            question,
            default,
            completer=lambda text: filename_completions(text, accounts),
        )
        if answer is None:
            return []

        if answer == "":
            result = self.spawn_modal(
                self.config.file_browser_title, FileBrowserView(keybindings=self.keybindings)
            )
        elif os.path.isdir(answer):
            result = self.spawn_modal(
                self.config.file_browser_title,
                FileBrowserView(answer, keybindings=self.keybindings),
            )
        else:
            result = [answer]
        return list(result or [])

    def ask_getch(self, question: str, accept: str | None = None) -> str | None:
        """Wait for a single key after flashing *question*.

        With *accept*, other keys are ignored.  Returns ``None`` on cancel.
        """
        accepted = set(accept) if accept is not None else None

        self.flash(question)
        with self._lock:
            self.terminal.show_cursor()
            self.terminal.move_cursor(self.terminal.rows - 1, visible_width(question) + 1)
            self.terminal.refresh()

        ret: str | None = None
        try:
            while True:
                key = self.terminal.read_key(self.config.poll_timeout)
                if key is None:
                    continue
                if key == self.config.cancel_key:
                    break
                if accepted is None or key in accepted:
                    ret = key
                    break
        finally:
            with self._lock:
                self.terminal.hide_cursor()
                self.erase_flash()
                self.draw_screen(locked=True)
        return ret

    def ask_yes_or_no(self, question: str) -> bool | None:
        """``True`` for y/Y, ``False`` for n/N, ``None`` if cancelled."""
        answer = self.ask_getch(question, "ynYN")
        if answer is None:
            return None
        return answer in ("y", "Y")

    # ------------------------------------------------------------------
    # Shelling out
    # ------------------------------------------------------------------

    def shell_out(self, command: str) -> None:
        """Run *command* on the real terminal and wait for it to finish."""
        self._shelled = True
        try:
            with self._lock:
                self.terminal.suspend()
                try:
                    result = subprocess.run(command, shell=True)
                except OSError:
                    logger.debug("shell_out %r failed", command, exc_info=True)
                else:
                    logger.debug("shell_out %r exited %d", command, result.returncode)
                finally:
                    self.terminal.resume()
                    self.terminal.hide_cursor()
        finally:
            self._shelled = False
        self.completely_redraw_screen()
