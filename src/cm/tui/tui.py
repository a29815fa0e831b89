"""Full-screen TUI driver.

Provides the ``Widget`` protocol and the ``TUI`` class that decodes terminal
input into keystrokes for the root widget, paints the widget into a
``Screen`` every frame, writes only the lines that changed, and places the
hardware cursor where the ``UIContext`` says it belongs.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Protocol

from cm.tui.context import UIContext
from cm.tui.input_buffer import InputBuffer
from cm.tui.keys import KeyStroke, parse_key_stroke
from cm.tui.screen import Rect, Screen
from cm.tui.terminal import (
    CLEAR_SCREEN,
    HIDE_CURSOR,
    SHOW_CURSOR,
    move_to_sequence,
)

if TYPE_CHECKING:
    from cm.tui.terminal import Terminal

logger = logging.getLogger(__name__)

__all__ = ["Widget", "TUI"]


class Widget(Protocol):
    """A keyboard-driven component that paints into a screen region."""

    def render(
        self, screen: Screen, rect: Rect, focused: bool, context: UIContext
    ) -> None:
        ...

    def handle_key(self, stroke: KeyStroke, context: UIContext) -> bool:
        ...


class TUI:
    """Main TUI controller: input dispatch, rendering, cursor management."""

    def __init__(
        self,
        terminal: Terminal,
        root: Widget,
        context: UIContext | None = None,
    ) -> None:
        self.terminal: Terminal = terminal
        self.root: Widget = root
        self.context: UIContext = context or UIContext()

        # Previous frame (for differential updates)
        self._previous_lines: list[str] = []
        self._previous_size: tuple[int, int] = (0, 0)

        # Escape sequences split across reads wait here
        self._input = InputBuffer(self._on_input_timeout)

        self._render_requested: bool = False
        self._full_redraw_count: int = 0
        self._stopped: bool = True
        self._done: asyncio.Event | None = None

    @property
    def full_redraws(self) -> int:
        """Number of full (non-differential) redraws performed."""
        return self._full_redraw_count

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start the terminal and schedule the first frame."""
        self._stopped = False
        self._previous_lines = []
        self._input.clear()
        self._previous_size = (0, 0)
        self.terminal.start(self.handle_input, self._on_resize)
        logger.debug("TUI started")
        self.request_render()

    def stop(self) -> None:
        """Stop rendering and restore the terminal."""
        if self._stopped:
            return
        self._stopped = True
        self._input.clear()
        self.terminal.stop()
        logger.debug("TUI stopped")

    async def run(self) -> None:
        """Run until the context requests quit; the terminal is always restored."""
        self._done = asyncio.Event()
        self.context.quit_requested = False
        try:
            self.start()
            await self._done.wait()
        finally:
            self.stop()
            self._done = None

    # ------------------------------------------------------------------
    # Input handling
    # ------------------------------------------------------------------

    def handle_input(self, data: str) -> None:
        """Decode *data* and dispatch each keystroke to the root widget.

        An escape sequence cut off at the end of *data* is held back until
        the next read completes it.
        """
        if self._stopped:
            return
        self._dispatch(self._input.process(data))

    def flush_input(self) -> None:
        """Dispatch input held back for an unfinished escape sequence."""
        if not self._stopped:
            self._dispatch(self._input.flush())

    def _on_input_timeout(self, sequences: list[str]) -> None:
        if not self._stopped:
            self._dispatch(sequences)

    def _dispatch(self, sequences: list[str]) -> None:
        if not sequences:
            return

        for sequence in sequences:
            stroke = parse_key_stroke(sequence)
            if stroke is None:
                logger.debug("Ignoring unrecognised input %r", sequence)
                continue
            self.root.handle_key(stroke, self.context)
            if self.context.quit_requested:
                if self._done is not None:
                    self._done.set()
                return

        self.request_render()

    def _on_resize(self) -> None:
        logger.debug(
            "Terminal resized to %dx%d", self.terminal.columns, self.terminal.rows
        )
        self.request_render()

    # ------------------------------------------------------------------
    # Render scheduling
    # ------------------------------------------------------------------

    def request_render(self) -> None:
        """Schedule a render on the next event-loop tick.

        Multiple calls coalesce into a single render pass. Without a
        running loop the frame is rendered immediately.
        """
        if self._render_requested:
            return
        self._render_requested = True
        try:
            loop = asyncio.get_running_loop()
            loop.call_soon(self._do_render_tick)
        except RuntimeError:
            self._do_render_tick()

    def _do_render_tick(self) -> None:
        self._render_requested = False
        if self._stopped:
            return
        self.do_render()

    # ------------------------------------------------------------------
    # Main render
    # ------------------------------------------------------------------

    def do_render(self) -> None:
        """Paint one frame.

        1.  Renders the root widget into a screen the size of the terminal.
        2.  Writes every line after a resize (or on the first frame),
            otherwise only the lines that differ from the previous frame.
        3.  Shows the hardware cursor at the context's cursor cell when
            ``cursor_visible`` is set, and leaves it hidden otherwise.
        """
        if self._stopped:
            return

        width: int = self.terminal.columns
        height: int = self.terminal.rows
        if width <= 0 or height <= 0:
            return

        screen = Screen(width, height)
        self.root.render(screen, screen.rect, True, self.context)
        lines = screen.lines()

        out: list[str] = [HIDE_CURSOR]

        force_full = (width, height) != self._previous_size
        if force_full:
            self._full_redraw_count += 1
            out.append(CLEAR_SCREEN)

        previous = self._previous_lines
        for i, line in enumerate(lines):
            if force_full or i >= len(previous) or line != previous[i]:
                out.append(move_to_sequence(i, 0))
                out.append(line)

        self._previous_lines = lines
        self._previous_size = (width, height)

        if self.context.cursor_visible:
            row = max(0, min(self.context.cursor_row, height - 1))
            col = max(0, min(self.context.cursor_col, width - 1))
            out.append(move_to_sequence(row, col))
            out.append(SHOW_CURSOR)

        self.terminal.write("".join(out))
