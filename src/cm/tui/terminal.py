"""Terminal abstraction for raw-mode tty interaction.

Provides a ``Terminal`` protocol and a concrete ``ProcessTerminal`` that
puts a tty into raw mode, switches to the alternate screen, reads input
through the running asyncio loop and reports SIGWINCH resizes. Also
exports the escape sequences the driver batches into each frame.
"""

from __future__ import annotations

import asyncio
import codecs
import logging
import os
import signal
import sys
import termios
import tty
from typing import Any, Callable, Protocol, TextIO

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# ANSI escape constants
# ---------------------------------------------------------------------------

ALT_SCREEN_ENABLE = "\x1b[?1049h"
ALT_SCREEN_DISABLE = "\x1b[?1049l"

HIDE_CURSOR = "\x1b[?25l"
SHOW_CURSOR = "\x1b[?25h"
CLEAR_SCREEN = "\x1b[2J\x1b[H"

WRITE_LOG_ENV_VAR = "CM_TUI_WRITE_LOG"

_FALLBACK_SIZE = (80, 24)
_READ_SIZE = 4096


def move_to_sequence(row: int, col: int) -> str:
    """Escape sequence moving the cursor to 0-based ``(row, col)``."""
    return f"\x1b[{row + 1};{col + 1}H"


# ---------------------------------------------------------------------------
# Terminal protocol
# ---------------------------------------------------------------------------


class Terminal(Protocol):
    """Interface for terminal I/O operations."""

    def start(
        self,
        on_input: Callable[[str], None],
        on_resize: Callable[[], None],
    ) -> None: ...

    def stop(self) -> None: ...

    def write(self, data: str) -> None: ...

    @property
    def columns(self) -> int: ...

    @property
    def rows(self) -> int: ...


# ---------------------------------------------------------------------------
# ProcessTerminal implementation
# ---------------------------------------------------------------------------


class ProcessTerminal:
    """Terminal backed by a tty file descriptor and an output stream.

    Input is read from *input_fd* (stdin by default) and frames are
    written to *output* (stdout by default). :meth:`start` must be called
    from inside a running event loop, which it uses to watch the input
    descriptor. Bytes are decoded incrementally, so a UTF-8 character split
    across two reads arrives whole.

    :meth:`stop` undoes whatever :meth:`start` managed to do, so it is safe
    to call after a failed start.
    """

    def __init__(self, input_fd: int | None = None, output: TextIO | None = None) -> None:
        self._input_fd = input_fd
        self._output = output
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

        self._on_input: Callable[[str], None] | None = None
        self._on_resize: Callable[[], None] | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._saved_termios: list[Any] | None = None
        self._prev_sigwinch: Any = None
        self._write_log_path: str = os.environ.get(WRITE_LOG_ENV_VAR, "")

    @property
    def input_fd(self) -> int:
        return sys.stdin.fileno() if self._input_fd is None else self._input_fd

    @property
    def output(self) -> TextIO:
        return self._output if self._output is not None else sys.stdout

    # -- size ---------------------------------------------------------------

    @property
    def columns(self) -> int:
        return self._size()[0]

    @property
    def rows(self) -> int:
        return self._size()[1]

    def _size(self) -> tuple[int, int]:
        try:
            size = os.get_terminal_size(self.output.fileno())
        except (ValueError, OSError):
            return _FALLBACK_SIZE
        return size.columns, size.lines

    # -- start / stop -------------------------------------------------------

    def start(
        self,
        on_input: Callable[[str], None],
        on_resize: Callable[[], None],
    ) -> None:
        """Enter raw mode and the alternate screen, and watch for input."""
        loop = asyncio.get_running_loop()
        fd = self.input_fd

        self._on_input = on_input
        self._on_resize = on_resize

        self._saved_termios = termios.tcgetattr(fd)
        tty.setraw(fd)
        self._raw_write(ALT_SCREEN_ENABLE)

        self._prev_sigwinch = signal.getsignal(signal.SIGWINCH) or signal.SIG_DFL
        signal.signal(signal.SIGWINCH, self._on_sigwinch)

        loop.add_reader(fd, self._on_readable)
        self._loop = loop
        logger.debug("Terminal started on fd %d", fd)

    def stop(self) -> None:
        """Restore the tty and remove the input watch and resize handler."""
        fd = self.input_fd

        if self._loop is not None:
            self._loop.remove_reader(fd)
            self._loop = None

        if self._prev_sigwinch is not None:
            signal.signal(signal.SIGWINCH, self._prev_sigwinch)
            self._prev_sigwinch = None

        if self._saved_termios is not None:
            self._raw_write(SHOW_CURSOR + ALT_SCREEN_DISABLE)
            termios.tcsetattr(fd, termios.TCSADRAIN, self._saved_termios)
            self._saved_termios = None

        self._decoder.reset()
        self._on_input = None
        self._on_resize = None
        logger.debug("Terminal stopped")

    # -- write --------------------------------------------------------------

    def write(self, data: str) -> None:
        """Write a frame to the output, and to the write log when enabled."""
        self._raw_write(data)

        if self._write_log_path:
            try:
                with open(self._write_log_path, "a", encoding="utf-8") as f:
                    f.write(data)
            except OSError:
                pass

    # -- private ------------------------------------------------------------

    def _on_readable(self) -> None:
        fd = self.input_fd
        try:
            raw = os.read(fd, _READ_SIZE)
        except OSError:
            return

        if not raw:
            # End of input: stop watching so the loop does not spin
            if self._loop is not None:
                self._loop.remove_reader(fd)
            logger.debug("End of input on fd %d", fd)
            return

        text = self._decoder.decode(raw)
        if text and self._on_input is not None:
            self._on_input(text)

    def _on_sigwinch(self, signum: int, frame: object) -> None:
        if self._on_resize is not None:
            self._on_resize()

    def _raw_write(self, data: str) -> None:
        try:
            self.output.write(data)
            self.output.flush()
        except OSError:
            pass
