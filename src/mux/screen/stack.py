"""BufferStack: z-ordered buffers with unique titles and a single focus.

The stack is pure bookkeeping.  Creating buffers, running view cleanup and
repainting are the screen manager's job.
"""

from __future__ import annotations

import logging
from typing import Iterator

from mux.screen.buffer import Buffer

logger = logging.getLogger(__name__)


class BufferStack:
    """Ordered buffers (last = top, the visible one) plus a title index."""

    def __init__(self) -> None:
        self._buffers: list[Buffer] = []
        self._name_map: dict[str, Buffer] = {}
        self.focus_buf: Buffer | None = None
        self.dirty: bool = True

    # -- queries ------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._buffers)

    def __iter__(self) -> Iterator[Buffer]:
        return iter(list(self._buffers))

    def __contains__(self, buf: object) -> bool:
        return buf in self._buffers

    @property
    def top(self) -> Buffer | None:
        return self._buffers[-1] if self._buffers else None

    @property
    def bottom(self) -> Buffer | None:
        return self._buffers[0] if self._buffers else None

    def exists(self, title: str) -> bool:
        return title in self._name_map

    def get(self, title: str) -> Buffer | None:
        return self._name_map.get(title)

    def items(self) -> list[tuple[str, Buffer]]:
        return list(self._name_map.items())

    def unique_title(self, title: str) -> str:
        """Return *title*, or ``"title <2>"``, ``"title <3>"``... if taken."""
        if not isinstance(title, str):
            raise TypeError(f"title must be a string, not {type(title).__name__}")
        realtitle = title
        num = 2
        while realtitle in self._name_map:
            realtitle = f"{title} <{num}>"
            num += 1
        return realtitle

    def _check_member(self, buf: Buffer) -> None:
        if buf not in self._buffers:
            raise ValueError(f"buffer not on stack: {buf!r}")

    # -- mutation -----------------------------------------------------------

    def insert(self, buf: Buffer, hidden: bool = False) -> None:
        """Add *buf* at the bottom, then raise it unless *hidden*.

        A hidden buffer still takes focus when nothing else has it.
        """
        if not isinstance(buf.title, str):
            raise TypeError("title must be a string")
        if buf.title in self._name_map:
            raise ValueError(f"duplicate buffer name: {buf.title!r}")

        self._name_map[buf.title] = buf
        self._buffers.insert(0, buf)
        if hidden:
            if self.focus_buf is None:
                self.focus_on(buf)
        else:
            self.raise_to_front(buf)

    def remove(self, buf: Buffer) -> None:
        """Drop *buf* from the stack and raise whatever is left on top."""
        self._check_member(buf)
        self._buffers.remove(buf)
        del self._name_map[buf.title]
        if self.focus_buf is buf:
            self.focus_buf = None
        if self._buffers:
            self.raise_to_front(self._buffers[-1])
        self.dirty = True

    def focus_on(self, buf: Buffer) -> None:
        self._check_member(buf)
        if buf is self.focus_buf:
            return
        if self.focus_buf is not None:
            self.focus_buf.blur()
        self.focus_buf = buf
        buf.focus()

    def raise_to_front(self, buf: Buffer) -> None:
        """Make *buf* the visible buffer.

        When the current top is pinned with ``force_to_top``, *buf* lands
        directly beneath it instead and focus stays where it was.
        """
        self._check_member(buf)

        self._buffers.remove(buf)
        if self._buffers and self._buffers[-1].force_to_top:
            self._buffers.insert(len(self._buffers) - 1, buf)
        else:
            self._buffers.append(buf)
            self.focus_on(buf)
        self.dirty = True
        logger.debug("raised %r", buf.title)

    # force_to_top is reset when rolling so the user can always cycle past
    # a pinned buffer that was popped up programmatically.

    def roll(self) -> None:
        if not self._buffers:
            return
        self._buffers[-1].force_to_top = False
        self.raise_to_front(self._buffers[0])

    def roll_backwards(self) -> None:
        if len(self._buffers) < 2:
            return
        self._buffers[-1].force_to_top = False
        self.raise_to_front(self._buffers[-2])

    def as_list(self) -> list[Buffer]:
        """Snapshot of the stack, bottom first."""
        return list(self._buffers)
