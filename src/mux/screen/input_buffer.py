"""InputBuffer splits raw terminal input into complete key sequences.

Reads from the terminal arrive in arbitrary chunks: one read may carry
several keys, or only the first half of an escape sequence.  The buffer
accumulates chunks and hands out one complete sequence at a time, so that a
partial ``ESC [`` is never mistaken for a lone escape key.  Bracketed pastes
are delivered as a single sequence, still wrapped in their paste markers.
"""

from __future__ import annotations

import re
from collections import deque

ESC = "\x1b"
BRACKETED_PASTE_START = "\x1b[200~"
BRACKETED_PASTE_END = "\x1b[201~"

_SGR_MOUSE_RE = re.compile(r"^<\d+;\d+;\d+[Mm]$")


def _is_complete_sequence(data: str) -> str:
    """Classify *data* as ``'complete'``, ``'incomplete'`` or ``'not-escape'``."""
    if not data.startswith(ESC):
        return "not-escape"

    if len(data) == 1:
        return "incomplete"

    after_esc = data[1:]

    if after_esc.startswith("["):
        if after_esc.startswith("[M"):
            return "complete" if len(data) >= 6 else "incomplete"
        return _is_complete_csi_sequence(data)

    if after_esc.startswith("]"):
        if data.endswith(f"{ESC}\\") or data.endswith("\x07"):
            return "complete"
        return "incomplete"

    if after_esc.startswith(("P", "_")):
        return "complete" if data.endswith(f"{ESC}\\") else "incomplete"

    if after_esc.startswith("O"):
        return "complete" if len(after_esc) >= 2 else "incomplete"

    # Meta key: ESC followed by a single character
    return "complete"


def _is_complete_csi_sequence(data: str) -> str:
    if len(data) < 3:
        return "incomplete"

    payload = data[2:]
    last_char = payload[-1]

    if 0x40 <= ord(last_char) <= 0x7E:
        if payload.startswith("<") and not _SGR_MOUSE_RE.match(payload):
            return "incomplete"
        return "complete"

    return "incomplete"


def split_sequences(buffer: str) -> tuple[list[str], str]:
    """Split *buffer* into complete sequences.

    Returns ``(sequences, remainder)`` where *remainder* is a trailing
    escape sequence that still needs more input.
    """
    sequences: list[str] = []
    pos = 0

    while pos < len(buffer):
        remaining = buffer[pos:]

        if not remaining.startswith(ESC):
            sequences.append(remaining[0])
            pos += 1
            continue

        seq_end = 1
        while seq_end <= len(remaining):
            candidate = remaining[:seq_end]
            if _is_complete_sequence(candidate) == "incomplete":
                seq_end += 1
                continue
            sequences.append(candidate)
            pos += seq_end
            break
        else:
            return sequences, remaining

    return sequences, ""


class InputBuffer:
    """Queue of complete key sequences fed from raw terminal reads."""

    def __init__(self) -> None:
        self._buffer: str = ""
        self._paste_mode: bool = False
        self._paste_buffer: str = ""
        self._ready: deque[str] = deque()

    def feed(self, data: str) -> None:
        """Add a chunk of raw input."""
        if self._paste_mode:
            self._paste_buffer += data
            self._finish_paste()
            return

        self._buffer += data

        start_index = self._buffer.find(BRACKETED_PASTE_START)
        if start_index != -1:
            sequences, _ = split_sequences(self._buffer[:start_index])
            self._ready.extend(sequences)
            self._paste_mode = True
            self._paste_buffer = self._buffer[
                start_index + len(BRACKETED_PASTE_START) :
            ]
            self._buffer = ""
            self._finish_paste()
            return

        sequences, self._buffer = split_sequences(self._buffer)
        self._ready.extend(sequences)

    def _finish_paste(self) -> None:
        end_index = self._paste_buffer.find(BRACKETED_PASTE_END)
        if end_index == -1:
            return

        content = self._paste_buffer[:end_index]
        remaining = self._paste_buffer[end_index + len(BRACKETED_PASTE_END) :]
        self._paste_mode = False
        self._paste_buffer = ""
        self._ready.append(BRACKETED_PASTE_START + content + BRACKETED_PASTE_END)

        if remaining:
            self.feed(remaining)

    def pop(self) -> str | None:
        """Return the next complete sequence, or ``None`` when none is ready."""
        return self._ready.popleft() if self._ready else None

    def flush(self) -> None:
        """Treat a stalled partial sequence as complete input."""
        if self._buffer:
            self._ready.append(self._buffer)
            self._buffer = ""

    @property
    def pending(self) -> str:
        """Partial input waiting for the rest of its sequence."""
        return self._buffer

    def __len__(self) -> int:
        return len(self._ready)

    def clear(self) -> None:
        self._buffer = ""
        self._paste_mode = False
        self._paste_buffer = ""
        self._ready.clear()


def is_paste(data: str) -> bool:
    """``True`` if *data* is a bracketed paste delivered by :class:`InputBuffer`."""
    return data.startswith(BRACKETED_PASTE_START) and data.endswith(
        BRACKETED_PASTE_END
    )


def paste_content(data: str) -> str:
    """Strip the bracketed-paste markers from *data*."""
    return data[len(BRACKETED_PASTE_START) : -len(BRACKETED_PASTE_END)]
