"""Cell grid that components paint into during a frame.

A :class:`Screen` is a fixed ``width x height`` grid of cells. Components
receive a :class:`Rect` inside it and write text with :meth:`Screen.put_text`;
the :class:`~cm.tui.tui.TUI` driver turns the grid into terminal lines with
:meth:`Screen.lines`.
"""

from __future__ import annotations

from dataclasses import dataclass

import grapheme

from cm.tui.utils import grapheme_width

# SGR prefixes for the styles components may use
PLAIN = ""
REVERSE = "\x1b[7m"
BOLD = "\x1b[1m"

_RESET = "\x1b[0m"

# Second cell of a two-column grapheme
_CONTINUATION = ""


@dataclass(frozen=True)
class Rect:
    """A rectangular region of the screen, in cells."""

    x: int
    y: int
    width: int
    height: int


@dataclass(frozen=True)
class RowRect:
    """A single row of a :class:`Rect`: origin and width."""

    x: int
    y: int
    width: int


class Screen:
    """Fixed-size grid of ``(text, style)`` cells."""

    def __init__(self, width: int, height: int) -> None:
        self.width = max(0, width)
        self.height = max(0, height)
        self._cells: list[list[tuple[str, str]]] = [
            [(" ", PLAIN)] * self.width for _ in range(self.height)
        ]

    @property
    def rect(self) -> Rect:
        return Rect(0, 0, self.width, self.height)

    def fill(self, rect: Rect, char: str = " ", style: str = PLAIN) -> None:
        """Set every cell of *rect* (clipped to the grid) to *char*."""
        for y in range(max(0, rect.y), min(self.height, rect.y + rect.height)):
            for x in range(max(0, rect.x), min(self.width, rect.x + rect.width)):
                self._set(x, y, char, style)

    def put_text(
        self,
        x: int,
        y: int,
        text: str,
        max_width: int | None = None,
        style: str = PLAIN,
    ) -> int:
        """Write *text* starting at ``(x, y)`` and return the columns used.

        Writing stops at *max_width* columns or the right edge of the grid.
        A two-column grapheme that would be cut in half is drawn as a
        single space instead.
        """
        if not 0 <= y < self.height:
            return 0
        limit = self.width if max_width is None else min(self.width, x + max_width)

        col = x
        for g in grapheme.graphemes(text):
            w = grapheme_width(g)
            if w == 0:
                continue
            if col >= limit:
                break
            if col + w > limit:
                if col >= 0:
                    self._set(col, y, " ", style)
                col += 1
                break
            if col >= 0:
                self._set(col, y, g, style)
                if w == 2:
                    self._set(col + 1, y, _CONTINUATION, style)
            col += w
        return max(0, col - x)

    def row_text(self, y: int) -> str:
        """Return row *y* as plain text without styles."""
        return "".join(text for text, _ in self._cells[y])

    def style_at(self, x: int, y: int) -> str:
        return self._cells[y][x][1]

    def lines(self) -> list[str]:
        """Render every row as a terminal line with SGR style runs."""
        out: list[str] = []
        for row in self._cells:
            parts: list[str] = []
            current = PLAIN
            for text, style in row:
                if style != current:
                    if current != PLAIN:
                        parts.append(_RESET)
                    parts.append(style)
                    current = style
                parts.append(text)
            if current != PLAIN:
                parts.append(_RESET)
            out.append("".join(parts))
        return out

    def _set(self, x: int, y: int, text: str, style: str) -> None:
        row = self._cells[y]
        # Overwriting half of a wide grapheme blanks the other half
        if row[x][0] == _CONTINUATION and x > 0:
            row[x - 1] = (" ", row[x - 1][1])
        if x + 1 < self.width and row[x + 1][0] == _CONTINUATION:
            row[x + 1] = (" ", row[x + 1][1])
        row[x] = (text, style)
