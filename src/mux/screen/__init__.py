"""mux-screen: buffer stack, minibuffer and prompts for terminal applications."""

# Buffers and the stack
from mux.screen.buffer import Buffer
from mux.screen.stack import BufferStack

# Colors
from mux.screen.colors import ColorSpec, Colormap

# Filename completion
from mux.screen.completion import (
    AccountDirectory,
    PasswdAccounts,
    filename_completions,
)

# Configuration
from mux.screen.config import ScreenConfig

# Keybindings
from mux.screen.keybindings import (
    DEFAULT_KEYBINDINGS,
    FieldAction,
    KeybindingsManager,
    get_keybindings,
    set_keybindings,
)

# Keyboard input handling
from mux.screen.keys import KEY_CANCEL, KEY_ENTER, KEY_TAB, Key, KeyId, matches_key, parse_key

# Screen manager
from mux.screen.manager import ScreenManager

# Minibuffer
from mux.screen.minibuffer import Minibuffer

# Terminal interface and implementation
from mux.screen.terminal import ProcessTerminal, Terminal

# Prompt input line
from mux.screen.text_field import Completer, Completion, TextField

# Utilities
from mux.screen.utils import truncate_to_width, visible_width

# Views
from mux.screen.view import BaseView, ModalView, View, is_modal
from mux.screen.views import CompletionView, FileBrowserView, TextView

__all__ = [
    # Buffers
    "Buffer",
    "BufferStack",
    # Colors
    "ColorSpec",
    "Colormap",
    # Completion
    "AccountDirectory",
    "PasswdAccounts",
    "filename_completions",
    # Config
    "ScreenConfig",
    # Keybindings
    "DEFAULT_KEYBINDINGS",
    "FieldAction",
    "KeybindingsManager",
    "get_keybindings",
    "set_keybindings",
    # Keys
    "KEY_CANCEL",
    "KEY_ENTER",
    "KEY_TAB",
    "Key",
    "KeyId",
    "matches_key",
    "parse_key",
    # Manager
    "ScreenManager",
    # Minibuffer
    "Minibuffer",
    # Terminal
    "ProcessTerminal",
    "Terminal",
    # Text field
    "Completer",
    "Completion",
    "TextField",
    # Utilities
    "truncate_to_width",
    "visible_width",
    # Views
    "BaseView",
    "ModalView",
    "View",
    "is_modal",
    "CompletionView",
    "FileBrowserView",
    "TextView",
]
