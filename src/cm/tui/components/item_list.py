"""ItemList component - ordered strings with a cursor row."""

from __future__ import annotations

from cm.tui.keybindings import KeybindingsManager, get_keybindings
from cm.tui.keys import KeyStroke
from cm.tui.screen import BOLD, PLAIN, REVERSE, Rect, RowRect, Screen
from cm.tui.utils import truncate_to_width


class ItemList:
    """Ordered list of strings with keyboard navigation and reordering.

    ``items`` and ``cursor_row`` are plain attributes. ``cursor_row`` is 0
    for an empty list and otherwise indexes an existing item.
    """

    def __init__(
        self,
        items: list[str] | None = None,
        keybindings: KeybindingsManager | None = None,
    ) -> None:
        self.items: list[str] = list(items) if items else []
        self.cursor_row: int = 0
        self._keybindings = keybindings
        # Height of the last rendered region, used for paging
        self._page_height: int = 1

    @property
    def keybindings(self) -> KeybindingsManager:
        return self._keybindings or get_keybindings()

    def current_item(self) -> str | None:
        if 0 <= self.cursor_row < len(self.items):
            return self.items[self.cursor_row]
        return None

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def duplicate_after(self) -> None:
        """Insert a copy of the current item below it and select the copy."""
        item = self.current_item()
        if item is not None:
            self.items.insert(self.cursor_row + 1, item)
            self.cursor_row += 1

    def duplicate_before(self) -> None:
        """Insert a copy of the current item above it and select the copy."""
        item = self.current_item()
        if item is not None:
            self.items.insert(self.cursor_row, item)

    def insert_after_current(self, text: str) -> None:
        if self.items:
            self.items.insert(self.cursor_row + 1, text)
            self.cursor_row += 1
        else:
            self.items.append(text)
            self.cursor_row = 0

    def insert_before_current(self, text: str) -> None:
        self.items.insert(self.cursor_row, text)

    def replace_current(self, text: str) -> None:
        if self.current_item() is not None:
            self.items[self.cursor_row] = text

    def delete_current(self) -> None:
        if self.current_item() is None:
            return
        del self.items[self.cursor_row]
        self.cursor_row = max(0, min(self.cursor_row, len(self.items) - 1))

    def move_current_up(self) -> None:
        row = self.cursor_row
        if 0 < row < len(self.items):
            self.items[row - 1], self.items[row] = self.items[row], self.items[row - 1]
            self.cursor_row -= 1

    def move_current_down(self) -> None:
        row = self.cursor_row
        if 0 <= row < len(self.items) - 1:
            self.items[row + 1], self.items[row] = self.items[row], self.items[row + 1]
            self.cursor_row += 1

    def _select(self, row: int) -> None:
        self.cursor_row = max(0, min(row, len(self.items) - 1))

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _scroll_top(self, height: int) -> int:
        """First visible row for a region *height* rows tall."""
        return max(0, min(self.cursor_row - height // 2, len(self.items) - height))

    def row_rect_for_cursor(self, rect: Rect) -> RowRect:
        """Screen row occupied by the cursor item when rendered into *rect*."""
        top = self._scroll_top(rect.height) if rect.height > 0 else 0
        return RowRect(rect.x, rect.y + self.cursor_row - top, rect.width)

    def render(self, screen: Screen, rect: Rect, focused: bool) -> None:
        screen.fill(rect)
        if rect.height <= 0 or rect.width <= 0:
            return
        self._page_height = rect.height

        top = self._scroll_top(rect.height)
        end = min(top + rect.height, len(self.items))
        for i in range(top, end):
            text = truncate_to_width(self.items[i], rect.width)
            y = rect.y + i - top
            if i == self.cursor_row:
                style = REVERSE if focused else BOLD
                screen.fill(Rect(rect.x, y, rect.width, 1), style=style)
                screen.put_text(rect.x, y, text, rect.width, style)
            else:
                screen.put_text(rect.x, y, text, rect.width, PLAIN)

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def handle_key(self, stroke: KeyStroke) -> bool:
        kb = self.keybindings

        if kb.matches(stroke, "cursorUp"):
            self._select(self.cursor_row - 1)
        elif kb.matches(stroke, "cursorDown"):
            self._select(self.cursor_row + 1)
        elif kb.matches(stroke, "cursorTop"):
            self._select(0)
        elif kb.matches(stroke, "cursorBottom"):
            self._select(len(self.items) - 1)
        elif kb.matches(stroke, "pageUp"):
            self._select(self.cursor_row - max(1, self._page_height))
        elif kb.matches(stroke, "pageDown"):
            self._select(self.cursor_row + max(1, self._page_height))
        elif kb.matches(stroke, "moveItemUp"):
            self.move_current_up()
        elif kb.matches(stroke, "moveItemDown"):
            self.move_current_down()
        elif kb.matches(stroke, "deleteItem"):
            self.delete_current()
        else:
            return False
        return True
