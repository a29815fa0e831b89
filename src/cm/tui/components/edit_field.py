"""EditField component - single-line text editing inside a list row."""

from __future__ import annotations

from cm.tui.keybindings import KeybindingsManager, get_keybindings
from cm.tui.keys import KeyStroke
from cm.tui.screen import PLAIN, Rect, RowRect, Screen
from cm.tui.utils import get_segmenter, is_punctuation_char, is_whitespace_char

_segmenter = get_segmenter()


class EditField:
    """Single-line text field.

    ``buffer`` holds the text and ``cursor_offset`` the insertion point as
    an index into it. Both are plain attributes so the owning widget can
    load and reset them directly.
    """

    def __init__(self, keybindings: KeybindingsManager | None = None) -> None:
        self.buffer: str = ""
        self.cursor_offset: int = 0
        self._keybindings = keybindings

    @property
    def keybindings(self) -> KeybindingsManager:
        return self._keybindings or get_keybindings()

    def handle_key(self, stroke: KeyStroke) -> bool:
        kb = self.keybindings

        if kb.matches(stroke, "deleteCharBackward"):
            self._handle_backspace()
            return True

        if kb.matches(stroke, "deleteCharForward"):
            self._handle_forward_delete()
            return True

        if kb.matches(stroke, "deleteWordBackward"):
            self._delete_word_backwards()
            return True

        if kb.matches(stroke, "deleteToLineStart"):
            self.buffer = self.buffer[self.cursor_offset :]
            self.cursor_offset = 0
            return True

        if kb.matches(stroke, "deleteToLineEnd"):
            self.buffer = self.buffer[: self.cursor_offset]
            return True

        if kb.matches(stroke, "cursorLeft"):
            if self.cursor_offset > 0:
                graphemes = _segmenter.segment(self.buffer[: self.cursor_offset])
                self.cursor_offset -= len(graphemes[-1]) if graphemes else 1
            return True

        if kb.matches(stroke, "cursorRight"):
            if self.cursor_offset < len(self.buffer):
                graphemes = _segmenter.segment(self.buffer[self.cursor_offset :])
                self.cursor_offset += len(graphemes[0]) if graphemes else 1
            return True

        if kb.matches(stroke, "cursorLineStart"):
            self.cursor_offset = 0
            return True

        if kb.matches(stroke, "cursorLineEnd"):
            self.cursor_offset = len(self.buffer)
            return True

        if kb.matches(stroke, "cursorWordLeft"):
            self._move_word_backwards()
            return True

        if kb.matches(stroke, "cursorWordRight"):
            self._move_word_forwards()
            return True

        # Regular character input
        if stroke.is_printable:
            self._insert_text(stroke.key)
            return True

        return False

    def _insert_text(self, text: str) -> None:
        self.buffer = (
            self.buffer[: self.cursor_offset] + text + self.buffer[self.cursor_offset :]
        )
        self.cursor_offset += len(text)

    def _handle_backspace(self) -> None:
        if self.cursor_offset > 0:
            graphemes = _segmenter.segment(self.buffer[: self.cursor_offset])
            gl = len(graphemes[-1]) if graphemes else 1
            self.buffer = (
                self.buffer[: self.cursor_offset - gl] + self.buffer[self.cursor_offset :]
            )
            self.cursor_offset -= gl

    def _handle_forward_delete(self) -> None:
        if self.cursor_offset < len(self.buffer):
            graphemes = _segmenter.segment(self.buffer[self.cursor_offset :])
            gl = len(graphemes[0]) if graphemes else 1
            self.buffer = (
                self.buffer[: self.cursor_offset] + self.buffer[self.cursor_offset + gl :]
            )

    def _delete_word_backwards(self) -> None:
        if self.cursor_offset == 0:
            return
        old_cursor = self.cursor_offset
        self._move_word_backwards()
        self.buffer = self.buffer[: self.cursor_offset] + self.buffer[old_cursor:]

    def _move_word_backwards(self) -> None:
        graphemes = _segmenter.segment(self.buffer[: self.cursor_offset])

        # Skip trailing whitespace
        while graphemes and is_whitespace_char(graphemes[-1]):
            self.cursor_offset -= len(graphemes.pop())

        if graphemes:
            if is_punctuation_char(graphemes[-1]):
                while graphemes and is_punctuation_char(graphemes[-1]):
                    self.cursor_offset -= len(graphemes.pop())
            else:
                while (
                    graphemes
                    and not is_whitespace_char(graphemes[-1])
                    and not is_punctuation_char(graphemes[-1])
                ):
                    self.cursor_offset -= len(graphemes.pop())

    def _move_word_forwards(self) -> None:
        graphemes = _segmenter.segment(self.buffer[self.cursor_offset :])
        idx = 0

        # Skip leading whitespace
        while idx < len(graphemes) and is_whitespace_char(graphemes[idx]):
            self.cursor_offset += len(graphemes[idx])
            idx += 1

        if idx < len(graphemes):
            if is_punctuation_char(graphemes[idx]):
                while idx < len(graphemes) and is_punctuation_char(graphemes[idx]):
                    self.cursor_offset += len(graphemes[idx])
                    idx += 1
            else:
                while (
                    idx < len(graphemes)
                    and not is_whitespace_char(graphemes[idx])
                    and not is_punctuation_char(graphemes[idx])
                ):
                    self.cursor_offset += len(graphemes[idx])
                    idx += 1

    def render(self, screen: Screen, row: RowRect) -> None:
        """Draw the page of the buffer that contains the cursor onto *row*.

        The page starts at ``(cursor_offset // row.width) * row.width`` so
        the cursor sits at column ``cursor_offset % row.width``.
        """
        if row.width <= 0:
            return
        screen.fill(Rect(row.x, row.y, row.width, 1))
        start = (self.cursor_offset // row.width) * row.width
        screen.put_text(row.x, row.y, self.buffer[start : start + row.width], row.width, PLAIN)
