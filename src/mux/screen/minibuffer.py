"""Minibuffer: composes the status region at the bottom of the screen.

Three independent sources feed it: a transient flash message, a placeholder
row reserved for an active prompt, and persistent status lines addressed by
stable integer handles.  Handles are never renumbered, so a message opened
earlier keeps its handle while later ones come and go; only empty slots at
the high end are released for reuse.
"""

from __future__ import annotations

import threading


class Minibuffer:
    """Thread-safe state behind the minibuffer region.

    All reads and writes of the flash, the prompt flag and the status slots
    happen under one lock, so :meth:`compose` and :meth:`lines` never see a
    half-updated snapshot.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._flash: str | None = None
        self._prompt_active: bool = False
        self._slots: dict[int, str | None] = {}
        self._next_handle: int = 0

    # -- flash --------------------------------------------------------------

    @property
    def flash(self) -> str | None:
        with self._lock:
            return self._flash

    def set_flash(self, text: str | None) -> None:
        with self._lock:
            self._flash = text

    # -- prompt -------------------------------------------------------------

    @property
    def prompt_active(self) -> bool:
        with self._lock:
            return self._prompt_active

    def set_prompt_active(self, active: bool) -> None:
        with self._lock:
            self._prompt_active = active

    # -- status slots -------------------------------------------------------

    def put(self, text: str, handle: int | None = None) -> tuple[int, bool]:
        """Store *text* in a slot.

        Without *handle* the next free slot is allocated.  Returns
        ``(handle, is_new)``.
        """
        with self._lock:
            is_new = handle is None or self._slots.get(handle) is None
            if handle is None:
                handle = self._next_handle
            self._slots[handle] = text
            if handle >= self._next_handle:
                self._next_handle = handle + 1
            return handle, is_new

    def remove(self, handle: int) -> None:
        """Empty slot *handle*; if it was the highest, release trailing holes."""
        with self._lock:
            if handle not in self._slots:
                return
            self._slots[handle] = None
            if handle != self._next_handle - 1:
                return
            while self._next_handle > 0 and self._slots.get(self._next_handle - 1) is None:
                self._next_handle -= 1
                self._slots.pop(self._next_handle, None)

    def slots(self) -> list[str | None]:
        """All slots in handle order, holes included."""
        with self._lock:
            return [self._slots.get(i) for i in range(self._next_handle)]

    def get(self, handle: int) -> str | None:
        with self._lock:
            return self._slots.get(handle)

    # -- composition --------------------------------------------------------

    def lines(self) -> int:
        """Number of terminal rows the minibuffer occupies (at least one)."""
        with self._lock:
            count = 1 if self._flash is not None else 0
            count += 1 if self._prompt_active else 0
            count += sum(1 for text in self._slots.values() if text is not None)
            return max(count, 1)

    def compose(self) -> list[str]:
        """Lines to paint, ordered from the bottom terminal row upward.

        The prompt placeholder (painted over by the prompt field) comes
        first, then the flash, then the status lines in handle order.  An
        empty minibuffer is one blank line.
        """
        with self._lock:
            lines: list[str] = []
            if self._prompt_active:
                lines.append("")
            if self._flash is not None:
                lines.append(self._flash)
            lines.extend(
                self._slots[h]  # type: ignore[misc]
                for h in sorted(self._slots)
                if self._slots[h] is not None
            )
            if not lines:
                lines.append("")
            return lines
