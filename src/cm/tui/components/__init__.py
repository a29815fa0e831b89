"""TUI components."""

from cm.tui.components.edit_field import EditField
from cm.tui.components.item_list import ItemList
from cm.tui.components.string_list import (
    Editing,
    Navigate,
    StringList,
    StringListState,
)

__all__ = [
    "EditField",
    "Editing",
    "ItemList",
    "Navigate",
    "StringList",
    "StringListState",
]
