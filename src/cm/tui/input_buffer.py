"""InputBuffer holds back escape sequences that are split across reads.

A terminal read can end in the middle of an escape sequence: ``ESC [``
arrives in one chunk and ``D`` in the next. Decoding each chunk on its own
turns the tail into a typed key. The buffer keeps an unfinished trailing
sequence until the next read completes it.

A lone ``ESC`` is ambiguous, since it is both the escape key and the start
of a sequence. When an event loop is running, whatever is still pending
after a short timeout is flushed as-is, so a single ``ESC`` press becomes
the escape key. Without a running loop the pending text waits for the
next read or an explicit :meth:`InputBuffer.flush`.
"""

from __future__ import annotations

import asyncio
from typing import Callable

from cm.tui.keys import split_complete_input, split_input

# Seconds to wait for the rest of an escape sequence
ESC_TIMEOUT = 0.01


class InputBuffer:
    """Buffers raw input and returns complete key-press sequences."""

    def __init__(
        self,
        on_timeout: Callable[[list[str]], None] | None = None,
        *,
        timeout: float = ESC_TIMEOUT,
    ) -> None:
        self._buffer: str = ""
        self._timeout: float = timeout
        self._timeout_handle: asyncio.TimerHandle | None = None
        self._on_timeout = on_timeout

    @property
    def pending(self) -> str:
        """Input held back waiting for the rest of an escape sequence."""
        return self._buffer

    def process(self, data: str) -> list[str]:
        """Feed *data* and return the sequences it completes."""
        self._cancel_timeout()

        sequences, self._buffer = split_complete_input(self._buffer + data)

        if self._buffer and self._on_timeout is not None:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                # No loop: the next read or flush() releases it
                return sequences
            self._timeout_handle = loop.call_later(self._timeout, self._flush_timeout)

        return sequences

    def flush(self) -> list[str]:
        """Release pending input as-is, a lone ``ESC`` being the escape key."""
        self._cancel_timeout()
        if not self._buffer:
            return []
        sequences = split_input(self._buffer)
        self._buffer = ""
        return sequences

    def clear(self) -> None:
        self._cancel_timeout()
        self._buffer = ""

    def _flush_timeout(self) -> None:
        self._timeout_handle = None
        sequences = self.flush()
        if sequences and self._on_timeout is not None:
            self._on_timeout(sequences)

    def _cancel_timeout(self) -> None:
        if self._timeout_handle is not None:
            self._timeout_handle.cancel()
            self._timeout_handle = None
