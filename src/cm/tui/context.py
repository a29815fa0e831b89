"""Process-wide UI state shared between the driver and focused widgets."""

from __future__ import annotations

from typing import Callable

from cm.tui.keybindings import KeybindingsManager, get_keybindings
from cm.tui.keys import KeyId, KeyStroke, parse_key_id


class UIContext:
    """Terminal cursor state and the global key dispatcher.

    The focused widget writes ``cursor_row``/``cursor_col``/``cursor_visible``
    while rendering or changing state; the driver reads them after each
    frame to place the hardware cursor. Keys that a widget does not claim
    for itself can be offered to :meth:`handle_key` first.
    """

    def __init__(self, keybindings: KeybindingsManager | None = None) -> None:
        self.cursor_row: int = 0
        self.cursor_col: int = 0
        self.cursor_visible: bool = False
        self.quit_requested: bool = False

        self._keybindings = keybindings
        self._handlers: dict[KeyStroke, Callable[[], None]] = {}

    @property
    def keybindings(self) -> KeybindingsManager:
        return self._keybindings or get_keybindings()

    def bind(self, key_id: KeyId, callback: Callable[[], None]) -> None:
        """Register *callback* as the global handler for *key_id*."""
        self._handlers[parse_key_id(key_id)] = callback

    def unbind(self, key_id: KeyId) -> None:
        """Remove the global handler for *key_id* (no-op if absent)."""
        self._handlers.pop(parse_key_id(key_id), None)

    def handle_key(self, stroke: KeyStroke) -> bool:
        """Offer *stroke* to the global handlers; return whether it was consumed."""
        if self.keybindings.matches(stroke, "quit"):
            self.quit_requested = True
            return True

        handler = self._handlers.get(stroke)
        if handler is not None:
            handler()
            return True

        return False
