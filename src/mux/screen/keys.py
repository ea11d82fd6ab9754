"""Keyboard input matching for legacy terminal sequences.

Keys travel through the screen layer as the raw strings the terminal sends
(``"\\x07"`` for ctrl+g, ``"\\x1b[A"`` for the up arrow...).  ``matches_key``
checks such a string against a readable key identifier like ``"ctrl+g"`` or
``"alt+backspace"``, and ``parse_key`` goes the other way.
"""

from __future__ import annotations

KeyId = str


# ---------------------------------------------------------------------------
# Key helper object
# ---------------------------------------------------------------------------


class Key:
    """Named key constants and modifier combinators."""

    escape = "escape"
    enter = "enter"
    tab = "tab"
    space = "space"
    backspace = "backspace"
    delete = "delete"
    home = "home"
    end = "end"
    page_up = "pageUp"
    page_down = "pageDown"
    up = "up"
    down = "down"
    left = "left"
    right = "right"

    @staticmethod
    def ctrl(key: str) -> str:
        return f"ctrl+{key}"

    @staticmethod
    def alt(key: str) -> str:
        return f"alt+{key}"

    @staticmethod
    def shift(key: str) -> str:
        return f"shift+{key}"


# ---------------------------------------------------------------------------
# Raw sequences
# ---------------------------------------------------------------------------

KEY_CANCEL = "\x07"  # ctrl+g
KEY_ENTER = "\r"
KEY_TAB = "\t"

LEGACY_SEQUENCES: dict[str, tuple[str, ...]] = {
    "escape": ("\x1b",),
    "enter": ("\r", "\n"),
    "tab": ("\t",),
    "space": (" ",),
    "backspace": ("\x7f", "\x08"),
    "delete": ("\x1b[3~",),
    "insert": ("\x1b[2~",),
    "home": ("\x1b[H", "\x1bOH", "\x1b[1~", "\x1b[7~"),
    "end": ("\x1b[F", "\x1bOF", "\x1b[4~", "\x1b[8~"),
    "pageUp": ("\x1b[5~",),
    "pageDown": ("\x1b[6~",),
    "up": ("\x1b[A", "\x1bOA"),
    "down": ("\x1b[B", "\x1bOB"),
    "right": ("\x1b[C", "\x1bOC"),
    "left": ("\x1b[D", "\x1bOD"),
    "f1": ("\x1bOP", "\x1b[11~"),
    "f2": ("\x1bOQ", "\x1b[12~"),
    "f3": ("\x1bOR", "\x1b[13~"),
    "f4": ("\x1bOS", "\x1b[14~"),
}

# xterm-style modified cursor keys: ESC [ 1 ; <mod> <final>
_ARROW_FINALS: dict[str, str] = {
    "up": "A",
    "down": "B",
    "right": "C",
    "left": "D",
    "home": "H",
    "end": "F",
}

MODIFIERS: dict[str, int] = {
    "shift": 1,
    "alt": 2,
    "ctrl": 4,
}

_CTRL_SYMBOLS: dict[str, str] = {
    "[": "\x1b",
    "\\": "\x1c",
    "]": "\x1d",
    "^": "\x1e",
    "_": "\x1f",
    "-": "\x1f",
    "@": "\x00",
}


def raw_ctrl_char(key: str) -> str | None:
    """Return the control character for *key*, e.g. ``"\\x01"`` for ``"a"``."""
    if len(key) != 1:
        return None
    code = ord(key.lower())
    if ord("a") <= code <= ord("z"):
        return chr(code & 0x1F)
    return _CTRL_SYMBOLS.get(key)


def parse_key_id(key_id: str) -> tuple[int, str] | None:
    """Split ``"ctrl+shift+a"`` into ``(modifier_bits, "a")``.

    A literal ``"+"`` key is written as ``"ctrl++"``.
    """
    if not key_id:
        return None

    if key_id.endswith("++"):
        prefix, key = key_id[:-2], "+"
        parts = prefix.split("+") if prefix else []
    else:
        *parts, key = key_id.split("+")

    modifiers = 0
    for part in parts:
        bit = MODIFIERS.get(part.lower())
        if bit is None:
            return None
        modifiers |= bit
    return modifiers, key


# ---------------------------------------------------------------------------
# matches_key
# ---------------------------------------------------------------------------


def matches_key(data: str, key_id: KeyId) -> bool:
    """Return ``True`` if raw terminal input *data* is the key *key_id*."""
    parsed = parse_key_id(key_id)
    if parsed is None:
        return False

    mod, key = parsed
    has_ctrl = bool(mod & MODIFIERS["ctrl"])
    has_shift = bool(mod & MODIFIERS["shift"])
    has_alt = bool(mod & MODIFIERS["alt"])

    if key == "esc":
        key = "escape"
    elif key == "return":
        key = "enter"

    if key in LEGACY_SEQUENCES:
        plain = LEGACY_SEQUENCES[key]
        if not mod:
            return data in plain

        if key in _ARROW_FINALS:
            # ESC[1;<1 + bits><final>
            expected = f"\x1b[1;{mod + 1}{_ARROW_FINALS[key]}"
            if data == expected:
                return True

        if has_alt and not has_ctrl and not has_shift:
            if key == "escape":
                return data == "\x1b\x1b"
            return any(data == "\x1b" + seq for seq in plain)

        if key == "tab" and has_shift and not has_ctrl and not has_alt:
            return data == "\x1b[Z"
        if key == "backspace" and has_ctrl and not has_shift and not has_alt:
            return data == "\x08"
        if key == "space" and has_ctrl and not has_shift and not has_alt:
            return data == "\x00"
        return False

    return _match_char_key(data, key, has_ctrl, has_shift, has_alt)


def _match_char_key(
    data: str, key: str, has_ctrl: bool, has_shift: bool, has_alt: bool
) -> bool:
    """Match printable keys, optionally combined with ctrl and/or alt."""
    if len(key) != 1:
        return False

    if has_ctrl:
        ctrl = raw_ctrl_char(key)
        if ctrl is None:
            return False
        return data == ("\x1b" + ctrl if has_alt else ctrl)

    char = key.upper() if has_shift else key
    if has_alt:
        return data == "\x1b" + char
    return data == char


# ---------------------------------------------------------------------------
# parse_key
# ---------------------------------------------------------------------------

_REVERSE_SEQUENCES: dict[str, str] = {
    seq: name
    for name, seqs in LEGACY_SEQUENCES.items()
    for seq in seqs
    if name != "space"
}


def parse_key(data: str) -> KeyId | None:
    """Return a key identifier for raw input, or ``None`` if unrecognised."""
    if not data:
        return None

    name = _REVERSE_SEQUENCES.get(data)
    if name is not None:
        return name

    if data == " ":
        return "space"
    if data == "\x1b[Z":
        return "shift+tab"

    if data.startswith("\x1b[1;") and len(data) == 6:
        try:
            bits = int(data[4]) - 1
        except ValueError:
            return None
        for key, final in _ARROW_FINALS.items():
            if data[5] == final:
                mods = [m for m in ("ctrl", "alt", "shift") if bits & MODIFIERS[m]]
                return "+".join(mods + [key])
        return None

    if len(data) == 2 and data[0] == "\x1b":
        inner = parse_key(data[1])
        return f"alt+{inner}" if inner else None

    if len(data) == 1:
        code = ord(data)
        if 1 <= code <= 26:
            return f"ctrl+{chr(code + 96)}"
        if code == 0:
            return "ctrl+space"
        if data.isprintable():
            return data

    return None
