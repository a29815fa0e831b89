"""cm-tui: editable string-list widget for terminal UIs."""

# Components (re-exported from components package)
from cm.tui.components import (
    EditField,
    Editing,
    ItemList,
    Navigate,
    StringList,
    StringListState,
)

# UI context
from cm.tui.context import UIContext

# Keybindings
from cm.tui.keybindings import (
    DEFAULT_KEYBINDINGS,
    Action,
    KeybindingsConfig,
    KeybindingsManager,
    get_keybindings,
    load_keybindings_config,
    set_keybindings,
)

# Keyboard input handling
from cm.tui.keys import (
    KeyId,
    KeyIdError,
    KeyStroke,
    parse_input,
    parse_key_id,
    parse_key_stroke,
    split_complete_input,
    split_input,
)

# Input buffering
from cm.tui.input_buffer import InputBuffer

# Cell grid
from cm.tui.screen import BOLD, PLAIN, REVERSE, Rect, RowRect, Screen

# Terminal interface and implementations
from cm.tui.terminal import ProcessTerminal, Terminal

# Driver
from cm.tui.tui import TUI

# Utilities
from cm.tui.utils import truncate_to_width, visible_width

__all__ = [
    # Components
    "EditField",
    "Editing",
    "ItemList",
    "Navigate",
    "StringList",
    "StringListState",
    # Context
    "UIContext",
    # Keybindings
    "DEFAULT_KEYBINDINGS",
    "Action",
    "KeybindingsConfig",
    "KeybindingsManager",
    "get_keybindings",
    "load_keybindings_config",
    "set_keybindings",
    # Keys
    "KeyId",
    "KeyIdError",
    "KeyStroke",
    "parse_input",
    "parse_key_id",
    "parse_key_stroke",
    "split_complete_input",
    "split_input",
    # Input buffering
    "InputBuffer",
    # Screen
    "BOLD",
    "PLAIN",
    "REVERSE",
    "Rect",
    "RowRect",
    "Screen",
    # Terminal
    "ProcessTerminal",
    "Terminal",
    # Driver
    "TUI",
    # Utilities
    "truncate_to_width",
    "visible_width",
]
