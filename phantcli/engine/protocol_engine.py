"""Protocol engine: framer, dispatcher and encoder around one Session.

The engine does no I/O. The caller hands it whatever it reads from the
socket, writes out whatever `take_outbound()` returns, and forwards user
intents to `encoder`. UI events go to the `on_event` callback, or are
queued for `drain_events()` when no callback is given.
"""

from __future__ import annotations

import logging
from collections import deque

from .dispatcher import PacketDispatcher
from .encoder import ResponseEncoder
from .events import ConnectionEnded, EventCallback, UIEvent
from .framer import LineFramer
from .handlers import HandlerContext
from .state import Session
from .types import EngineConfig, Verdict

logger = logging.getLogger(__name__)


class ProtocolEngine:
    def __init__(
        self,
        cookie: int = 0,
        config: EngineConfig | None = None,
        on_event: EventCallback | None = None,
    ) -> None:
        self.config = config or EngineConfig()
        self.session = Session(cookie=cookie)
        self._on_event = on_event
        self._events: deque[UIEvent] = deque()
        self._outbound = bytearray()
        self.ended = False
        self.end_reason: str | None = None

        self.ctx = HandlerContext(
            session=self.session,
            config=self.config,
            emit=self._emit,
            send=self._send,
        )
        self.framer = LineFramer()
        self.dispatcher = PacketDispatcher(self.ctx)
        self.encoder = ResponseEncoder(self.ctx)

    def receive(self, chunk: bytes) -> None:
        """Process bytes read from the server. An empty chunk is end of stream."""
        for line in self.framer.feed(chunk):
            if self.feed_line(line) is Verdict.FATAL:
                return
        if self.framer.ended and self.framer.end_reason:
            self._emit(ConnectionEnded(self.framer.end_reason))

    def feed_line(self, line: str) -> Verdict:
        """Process one already-framed inbound line."""
        if self.ended:
            return Verdict.FATAL
        return self.dispatcher.feed_line(line)

    def connection_lost(self, exc: BaseException | None = None) -> None:
        """The transport failed or closed underneath us."""
        if exc is None:
            self.receive(b"")
            return
        self.framer.fail(exc)
        self._emit(ConnectionEnded(self.framer.end_reason or str(exc)))

    def take_outbound(self) -> bytes:
        """Return and clear everything queued for the server."""
        data = bytes(self._outbound)
        self._outbound.clear()
        return data

    def drain_events(self) -> list[UIEvent]:
        events = list(self._events)
        self._events.clear()
        return events

    def _send(self, data: bytes) -> None:
        if self.ended:
            logger.debug(f"Dropping outbound {data!r} after connection ended")
            return
        self._outbound.extend(data)

    def _emit(self, event: UIEvent) -> None:
        if isinstance(event, ConnectionEnded):
            if self.ended:
                return
            self.ended = True
            self.end_reason = event.reason
            self.ctx.ended = True
            logger.info(f"Connection ended: {event.reason}")
            self.session.teardown()
        if self._on_event is not None:
            self._on_event(event)
        else:
            self._events.append(event)
