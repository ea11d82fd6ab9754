"""Keybindings for the prompt field and the built-in list views."""

from __future__ import annotations

from typing import Literal

from mux.screen.keys import KeyId, matches_key

FieldAction = Literal[
    # Cursor movement
    "cursorLeft",
    "cursorRight",
    "cursorLineStart",
    "cursorLineEnd",
    # Deletion
    "deleteCharBackward",
    "deleteCharForward",
    "deleteWordBackward",
    "deleteToLineStart",
    "deleteToLineEnd",
    # Session control
    "submit",
    "complete",
    # History
    "historyPrev",
    "historyNext",
    # List views
    "selectUp",
    "selectDown",
    "selectPageUp",
    "selectPageDown",
    "selectConfirm",
    "selectToggle",
]

KeybindingsConfig = dict[FieldAction, KeyId | list[KeyId]]

DEFAULT_KEYBINDINGS: dict[FieldAction, KeyId | list[KeyId]] = {
    "cursorLeft": ["left", "ctrl+b"],
    "cursorRight": ["right", "ctrl+f"],
    "cursorLineStart": ["home", "ctrl+a"],
    "cursorLineEnd": ["end", "ctrl+e"],
    "deleteCharBackward": "backspace",
    "deleteCharForward": ["delete", "ctrl+d"],
    "deleteWordBackward": ["ctrl+w", "alt+backspace"],
    "deleteToLineStart": "ctrl+u",
    "deleteToLineEnd": "ctrl+k",
    "submit": "enter",
    "complete": "tab",
    "historyPrev": ["up", "ctrl+p"],
    "historyNext": ["down", "ctrl+n"],
    "selectUp": ["up", "k"],
    "selectDown": ["down", "j"],
    "selectPageUp": "pageUp",
    "selectPageDown": ["pageDown", "space"],
    "selectConfirm": "enter",
    "selectToggle": "t",
}


class KeybindingsManager:
    """Maps actions to the keys that trigger them."""

    def __init__(self, config: KeybindingsConfig | None = None) -> None:
        self._action_to_keys: dict[FieldAction, list[KeyId]] = {}
        self._build_maps(config or {})

    def _build_maps(self, config: KeybindingsConfig) -> None:
        self._action_to_keys.clear()

        for action, keys in DEFAULT_KEYBINDINGS.items():
            key_array = keys if isinstance(keys, list) else [keys]
            self._action_to_keys[action] = list(key_array)

        for action, keys in config.items():
            key_array = keys if isinstance(keys, list) else [keys]
            self._action_to_keys[action] = list(key_array)

    def matches(self, data: str, action: FieldAction) -> bool:
        """Check if input matches a specific action."""
        return any(matches_key(data, key) for key in self._action_to_keys.get(action, []))

    def get_keys(self, action: FieldAction) -> list[KeyId]:
        return self._action_to_keys.get(action, [])

    def set_config(self, config: KeybindingsConfig) -> None:
        self._build_maps(config)


_global_keybindings: KeybindingsManager | None = None


def get_keybindings() -> KeybindingsManager:
    global _global_keybindings
    if _global_keybindings is None:
        _global_keybindings = KeybindingsManager()
    return _global_keybindings


def set_keybindings(manager: KeybindingsManager) -> None:
    global _global_keybindings
    _global_keybindings = manager
