"""Non-blocking word and line reader over an input byte queue."""

from __future__ import annotations

from collections import deque
from enum import Enum


class ReadResult(Enum):
    EOW = "eow"
    EOL = "eol"
    FIFO = "fifo"
    OVERRUN = "overrun"


class Reader:
    """Split fed text into words or lines without blocking.

    ``word`` and ``line`` return a ``(ReadResult, token)`` pair; the token is
    empty unless the result is EOW or EOL.
    """

    def __init__(self, size: int = 256) -> None:
        self._size = size
        self._input: deque[str] = deque()
        self._buffer: list[str] = []
        self._space = 0

    def feed(self, data: str | bytes) -> None:
        """Queue data to be read."""
        if isinstance(data, (bytes, bytearray)):
            data = data.decode("latin-1")
        self._input.extend(data)

    def available(self) -> int:
        """Return the number of characters waiting to be read."""
        return len(self._input)

    def word(self) -> tuple[ReadResult, str]:
        return self._read(line=False)

    def line(self) -> tuple[ReadResult, str]:
        return self._read(line=True)

    def reset(self) -> None:
        """Discard any partly read token."""
        self._buffer.clear()
        self._space = 0

    def _take(self) -> str:
        token = "".join(self._buffer)
        self.reset()
        return token

    def _read(self, line: bool) -> tuple[ReadResult, str]:
        while self._input:
            ch = self._input[0]
            if ch in "\r\n":
                self._input.popleft()
                if not self._buffer:
                    continue
                if line and self._space:
                    del self._buffer[-self._space:]
                return ReadResult.EOL, self._take()
            if ch in " \t":
                self._input.popleft()
                self._space += 1
                if line and self._buffer:
                    if not self._append(ch):
                        return ReadResult.OVERRUN, ""
                continue
            if not line and self._buffer and self._space:
                return ReadResult.EOW, self._take()
            self._input.popleft()
            if not self._append(ch):
                return ReadResult.OVERRUN, ""
            self._space = 0
        return ReadResult.FIFO, ""

    def _append(self, ch: str) -> bool:
        if len(self._buffer) >= self._size - 1:
            self.reset()
            return False
        self._buffer.append(ch)
        return True