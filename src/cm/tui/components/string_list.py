"""StringList component - an editable list of strings.

Combines an :class:`~cm.tui.components.item_list.ItemList` with an
:class:`~cm.tui.components.edit_field.EditField` behind a two-state modal
machine:

* :class:`Navigate` - keys go to the global dispatcher, then to the list
  commands (insert, duplicate, start editing), then to the item list.
* :class:`Editing` - confirm and abort end the session, every other key
  goes to the edit field.

While editing, the edit field is drawn over the cursor row and the terminal
cursor is published to the :class:`~cm.tui.context.UIContext`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Union

from cm.tui.components.edit_field import EditField
from cm.tui.components.item_list import ItemList
from cm.tui.context import UIContext
from cm.tui.keybindings import Action, KeybindingsManager, get_keybindings
from cm.tui.keys import KeyStroke
from cm.tui.screen import Rect, Screen

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Navigate:
    """Browsing the list."""


@dataclass(frozen=True)
class Editing:
    """Editing the cursor row.

    ``is_new`` marks a row inserted for this session, which cancelling
    removes. ``restore_row`` is the list cursor when the session began.
    """

    is_new: bool
    restore_row: int


StringListState = Union[Navigate, Editing]

# A step in the key routing chain: returns True when it consumed the key
KeyConsumer = Callable[[KeyStroke, UIContext], bool]


class StringList:
    """Editable, reorderable list of strings."""

    def __init__(
        self,
        items: list[str] | None = None,
        keybindings: KeybindingsManager | None = None,
    ) -> None:
        self.state: StringListState = Navigate()
        self.list = ItemList(items, keybindings=keybindings)
        self.editor = EditField(keybindings=keybindings)
        self._keybindings = keybindings

        self._navigate_chain: tuple[KeyConsumer, ...] = (
            self._try_global,
            self._try_command,
            self._try_list,
        )
        self._editing_chain: tuple[KeyConsumer, ...] = (
            self._try_edit_command,
            self._try_editor,
        )

    @property
    def keybindings(self) -> KeybindingsManager:
        return self._keybindings or get_keybindings()

    @property
    def is_editing(self) -> bool:
        return isinstance(self.state, Editing)

    def current_item(self) -> str | None:
        return self.list.current_item()

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render(self, screen: Screen, rect: Rect, focused: bool, context: UIContext) -> None:
        self.list.render(screen, rect, focused)
        if isinstance(self.state, Editing):
            row = self.list.row_rect_for_cursor(rect)
            self.editor.render(screen, row)
            context.cursor_row = row.y
            if row.width > 0:
                context.cursor_col = row.x + self.editor.cursor_offset % row.width
            else:
                context.cursor_col = row.x

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def duplicate_after(self) -> None:
        if isinstance(self.state, Navigate):
            self.list.duplicate_after()

    def duplicate_before(self) -> None:
        if isinstance(self.state, Navigate):
            self.list.duplicate_before()

    def insert_after(self, context: UIContext) -> None:
        if isinstance(self.state, Navigate):
            self._begin_new_entry(self.list.insert_after_current, context)

    def insert_before(self, context: UIContext) -> None:
        if isinstance(self.state, Navigate):
            self._begin_new_entry(self.list.insert_before_current, context)

    def _begin_new_entry(self, insert: Callable[[str], None], context: UIContext) -> None:
        self.state = Editing(is_new=True, restore_row=self.list.cursor_row)
        insert("")
        self.editor.buffer = ""
        self.editor.cursor_offset = 0
        context.cursor_visible = True
        logger.debug("Editing new entry at row %d", self.list.cursor_row)

    def start_editing(self, context: UIContext) -> None:
        if not isinstance(self.state, Navigate):
            return
        item = self.list.current_item()
        if item is None:
            return
        self.editor.buffer = item
        self.editor.cursor_offset = len(item)
        self.state = Editing(is_new=False, restore_row=self.list.cursor_row)
        context.cursor_visible = True
        logger.debug("Editing row %d", self.list.cursor_row)

    def accept_editing(self, context: UIContext) -> None:
        if isinstance(self.state, Editing):
            self.state = Navigate()
            self.list.replace_current(self.editor.buffer)
            context.cursor_visible = False
            logger.debug("Accepted edit of row %d", self.list.cursor_row)

    def cancel_editing(self, context: UIContext) -> None:
        state = self.state
        if isinstance(state, Editing):
            self.state = Navigate()
            if state.is_new:
                self.list.delete_current()
                self.list.cursor_row = state.restore_row
            context.cursor_visible = False
            logger.debug("Cancelled edit, cursor at row %d", self.list.cursor_row)

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def handle_key(self, stroke: KeyStroke, context: UIContext) -> bool:
        """Route *stroke* through the chain for the current state.

        Returns whether any step consumed it.
        """
        chain = self._editing_chain if self.is_editing else self._navigate_chain
        return any(consume(stroke, context) for consume in chain)

    def _try_global(self, stroke: KeyStroke, context: UIContext) -> bool:
        return context.handle_key(stroke)

    def _try_command(self, stroke: KeyStroke, context: UIContext) -> bool:
        commands: tuple[tuple[Action, Callable[[], None]], ...] = (
            ("duplicateAfter", self.duplicate_after),
            ("duplicateBefore", self.duplicate_before),
            ("insertAfter", lambda: self.insert_after(context)),
            ("insertBefore", lambda: self.insert_before(context)),
            ("startEdit", lambda: self.start_editing(context)),
        )
        kb = self.keybindings
        for action, command in commands:
            if kb.matches(stroke, action):
                command()
                return True
        return False

    def _try_list(self, stroke: KeyStroke, context: UIContext) -> bool:
        return self.list.handle_key(stroke)

    def _try_edit_command(self, stroke: KeyStroke, context: UIContext) -> bool:
        kb = self.keybindings
        if kb.matches(stroke, "confirm"):
            self.accept_editing(context)
            return True
        if kb.matches(stroke, "abort"):
            self.cancel_editing(context)
            return True
        return False

    def _try_editor(self, stroke: KeyStroke, context: UIContext) -> bool:
        return self.editor.handle_key(stroke)
