"""In-memory log buffer shown in the terminal's log pane."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from datetime import datetime


@dataclass
class LogEntry:
    timestamp: datetime
    level: str
    name: str
    message: str

    def format(self) -> str:
        return f"{self.timestamp:%H:%M:%S} {self.level[0]} {self.name}: {self.message}"


class LogBuffer(logging.Handler):
    """Logging handler keeping the most recent records for display.

    Writing to stderr would tear up the full-screen UI, so the client routes
    its log here and draws the tail on demand.
    """

    def __init__(self, maxlen: int = 200) -> None:
        super().__init__()
        self._entries: deque[LogEntry] = deque(maxlen=maxlen)

    def emit(self, record: logging.LogRecord) -> None:
        self._entries.append(
            LogEntry(
                timestamp=datetime.fromtimestamp(record.created),
                level=record.levelname,
                name=record.name,
                message=record.getMessage(),
            )
        )

    def tail(self, count: int) -> list[LogEntry]:
        """Most recent `count` entries, oldest first."""
        if count <= 0:
            return []
        return list(self._entries)[-count:]

    def __len__(self) -> int:
        return len(self._entries)
