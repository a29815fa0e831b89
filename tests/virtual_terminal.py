"""Virtual terminal for testing -- implements the Terminal protocol in-memory.

This module provides a ``VirtualTerminal`` class that satisfies the
``cm.tui.terminal.Terminal`` protocol without performing any real I/O.
All output is captured in a buffer for assertions.
"""

from __future__ import annotations

from typing import Callable


class VirtualTerminal:
    """In-memory terminal that records all writes for test inspection.

    Parameters
    ----------
    rows:
        Number of terminal rows (height).
    columns:
        Number of terminal columns (width).
    """

    def __init__(self, rows: int = 24, columns: int = 80) -> None:
        self._rows = rows
        self._columns = columns
        self._buffer: list[str] = []
        self._started = False
        self._input_handler: Callable[[str], None] | None = None
        self._resize_handler: Callable[[], None] | None = None

    # -- Terminal protocol: properties --------------------------------------

    @property
    def rows(self) -> int:
        return self._rows

    @property
    def columns(self) -> int:
        return self._columns

    # -- Terminal protocol: lifecycle ---------------------------------------

    def start(
        self,
        on_input: Callable[[str], None],
        on_resize: Callable[[], None],
    ) -> None:
        self._input_handler = on_input
        self._resize_handler = on_resize
        self._started = True

    def stop(self) -> None:
        self._started = False
        self._input_handler = None
        self._resize_handler = None

    # -- Terminal protocol: output ------------------------------------------

    def write(self, data: str) -> None:
        """Append *data* to the internal buffer."""
        self._buffer.append(data)

    # -- Test helpers -------------------------------------------------------

    @property
    def started(self) -> bool:
        return self._started

    @property
    def output(self) -> str:
        """Return everything written to the terminal as a single string."""
        return "".join(self._buffer)

    @property
    def last_write(self) -> str:
        """Return the most recent write, or ``""`` if nothing was written."""
        return self._buffer[-1] if self._buffer else ""

    @property
    def write_count(self) -> int:
        """Return the number of individual ``write`` calls made."""
        return len(self._buffer)

    def clear_buffer(self) -> None:
        """Discard all recorded output."""
        self._buffer.clear()

    def simulate_input(self, data: str) -> None:
        """Feed *data* into the registered input handler.

        Raises ``RuntimeError`` if no input handler has been registered
        (i.e. ``start`` was not called).
        """
        if self._input_handler is None:
            raise RuntimeError(
                "No input handler registered -- call start() first"
            )
        self._input_handler(data)

    def simulate_resize(self, rows: int | None = None, columns: int | None = None) -> None:
        """Change terminal dimensions and fire the resize callback.

        If *rows* or *columns* is ``None`` the corresponding dimension
        is left unchanged.
        """
        if rows is not None:
            self._rows = rows
        if columns is not None:
            self._columns = columns
        if self._resize_handler is not None:
            self._resize_handler()
