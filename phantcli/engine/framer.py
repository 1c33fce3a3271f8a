"""Splits the inbound byte stream into newline-terminated lines."""

from __future__ import annotations

from ..common.constants import INBOUND_TERMINATOR


class LineFramer:
    """Accumulates chunks of any size and yields complete lines in order.

    An unterminated suffix is kept until a later chunk completes it. An
    empty chunk means the peer closed the stream; `fail()` records an I/O
    error. Either way the framer is ended and produces no more lines.
    """

    def __init__(self, encoding: str = "utf-8") -> None:
        self.encoding = encoding
        self._buffer = bytearray()
        self.ended = False
        self.end_reason: str | None = None

    @property
    def pending(self) -> bytes:
        """Bytes received but not yet terminated by a newline."""
        return bytes(self._buffer)

    def feed(self, chunk: bytes) -> list[str]:
        """Add a chunk read from the stream and return the lines it completes."""
        if self.ended:
            return []
        if not chunk:
            self._end("end of stream")
            return []

        self._buffer.extend(chunk)
        lines: list[str] = []
        while True:
            idx = self._buffer.find(INBOUND_TERMINATOR)
            if idx < 0:
                break
            raw = bytes(self._buffer[:idx])
            del self._buffer[: idx + 1]
            lines.append(raw.decode(self.encoding, errors="replace"))
        return lines

    def fail(self, exc: BaseException) -> None:
        """Record a read error; the connection is over."""
        self._end(f"read error: {exc}")

    def _end(self, reason: str) -> None:
        if not self.ended:
            self.ended = True
            self.end_reason = reason
