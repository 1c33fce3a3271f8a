"""Helpers for driving the engine line by line."""

from __future__ import annotations

from phantcli.common.protocol import PacketType
from phantcli.engine.events import UIEvent
from phantcli.engine.protocol_engine import ProtocolEngine
from phantcli.engine.types import Verdict

FIXED_TIME = 1700000000.0


def feed(engine: ProtocolEngine, *lines: str) -> list[Verdict]:
    """Feed already-framed lines, returning one verdict per line."""
    return [engine.feed_line(line) for line in lines]


def packet(engine: ProtocolEngine, code: PacketType, *payload: str) -> list[Verdict]:
    """Feed a packet header followed by its payload lines."""
    return feed(engine, str(int(code)), *payload)


def events_of(engine: ProtocolEngine, kind: type) -> list[UIEvent]:
    """Drain the engine's events and keep those of one type."""
    return [e for e in engine.drain_events() if isinstance(e, kind)]
