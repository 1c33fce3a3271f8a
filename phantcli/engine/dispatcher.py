"""Routes inbound lines to packet handlers.

A line either starts a new packet (when no handler is active, the line is
the packet code) or is payload for the active handler. The server never
interleaves packets, so one packet always runs to completion before the
next header is read.
"""

from __future__ import annotations

import logging
from typing import Mapping

from ..common.protocol import PacketType, is_valid_packet_code, parse_packet_code
from .events import ConnectionEnded
from .handlers import HANDLERS, HandlerContext, PacketHandler
from .state import Continuation, Session
from .types import Verdict

logger = logging.getLogger(__name__)


class PacketDispatcher:
    def __init__(
        self,
        ctx: HandlerContext,
        handlers: Mapping[PacketType, PacketHandler] = HANDLERS,
    ) -> None:
        self.ctx = ctx
        self.handlers = handlers
        self.failed = False

    @property
    def session(self) -> Session:
        return self.ctx.session

    @property
    def active_packet(self) -> PacketType | None:
        """Packet whose payload is being read, or None while dispatching."""
        cont = self.ctx.session.continuation
        return cont.packet if cont else None

    def feed_line(self, line: str) -> Verdict:
        """Process one inbound line to completion."""
        if self.failed:
            logger.debug(f"Ignoring line after fatal error: {line!r}")
            return Verdict.FATAL

        cont = self.ctx.session.continuation
        if cont is None:
            return self._start_packet(line)

        handler = self.handlers[cont.packet]
        verdict = handler.feed(self.ctx, line)
        if verdict is Verdict.DONE:
            self.ctx.session.continuation = None
        return verdict

    def _start_packet(self, line: str) -> Verdict:
        code = parse_packet_code(line)
        if code is None or code == 0:
            return self._fail(f"unexpected line {line!r}")
        if not is_valid_packet_code(code):
            return self._fail(f"bad packet number {code}")
        try:
            packet = PacketType(code)
        except ValueError:
            return self._fail(f"no handler for packet {code}")
        handler = self.handlers.get(packet)
        if handler is None:
            return self._fail(f"no handler for packet {code}")

        logger.debug(f"Packet {packet.name} ({code})")
        self.ctx.session.continuation = Continuation(packet)
        verdict = handler.reset(self.ctx)
        if verdict is Verdict.DONE:
            self.ctx.session.continuation = None
        return verdict

    def _fail(self, reason: str) -> Verdict:
        logger.error(f"Protocol violation: {reason}")
        self.failed = True
        self.ctx.session.continuation = None
        self.ctx.emit(ConnectionEnded(reason))
        return Verdict.FATAL
