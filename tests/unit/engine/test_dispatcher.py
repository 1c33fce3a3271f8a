"""Tests for packet dispatch and the continuation state machine."""

from __future__ import annotations

import pytest

from phantcli.common.protocol import PacketType
from phantcli.engine.events import ConnectionEnded, TextLine
from phantcli.engine.handlers import HANDLERS, PLAYER_INFO_LABELS
from phantcli.engine.protocol_engine import ProtocolEngine
from phantcli.engine.types import Verdict

from helpers import events_of, feed, packet


class TestFatalDispatch:
    """Lines that cannot start a packet end the session."""

    @pytest.mark.parametrize(
        "line", ["0", "hello", "", "11 12", "-3", "64", "99", "1_1", "\u0663", "+ 11"]
    )
    def test_bad_header_is_fatal(self, engine: ProtocolEngine, line: str) -> None:
        assert feed(engine, line) == [Verdict.FATAL]
        ended = events_of(engine, ConnectionEnded)
        assert len(ended) == 1
        assert engine.ended

    def test_unregistered_code_is_fatal(self, engine: ProtocolEngine) -> None:
        assert PacketType.DIALOG not in HANDLERS
        assert packet(engine, PacketType.DIALOG) == [Verdict.FATAL]
        (ended,) = events_of(engine, ConnectionEnded)
        assert "27" in ended.reason

    def test_unassigned_code_in_range_is_fatal(self, engine: ProtocolEngine) -> None:
        assert feed(engine, "12") == [Verdict.FATAL]

    def test_nothing_processed_after_fatal(self, engine: ProtocolEngine) -> None:
        feed(engine, "0")
        engine.drain_events()
        assert packet(engine, PacketType.WRITE_LINE, "late") == [
            Verdict.FATAL,
            Verdict.FATAL,
        ]
        assert engine.drain_events() == []


class TestContinuation:
    """The active handler consumes payload lines until it is done."""

    def test_zero_payload_packet_is_done_immediately(self, engine: ProtocolEngine) -> None:
        assert packet(engine, PacketType.CLEAR) == [Verdict.DONE]
        assert engine.session.dispatching

    def test_payload_is_not_parsed_as_header(self, engine: ProtocolEngine) -> None:
        """A payload line that looks like a code is still payload."""
        verdicts = packet(engine, PacketType.WRITE_LINE, "4")
        assert verdicts == [Verdict.WANT_MORE, Verdict.DONE]
        assert events_of(engine, TextLine) == [TextLine("4")]
        assert engine.take_outbound() == b""

    def test_back_to_dispatch_after_done(self, engine: ProtocolEngine) -> None:
        packet(engine, PacketType.WRITE_LINE, "one")
        packet(engine, PacketType.WRITE_LINE, "two")
        assert events_of(engine, TextLine) == [TextLine("one"), TextLine("two")]

    def test_line_index_stays_below_expected(self, engine: ProtocolEngine) -> None:
        feed(engine, str(int(PacketType.BUTTONS)))
        for i in range(7):
            cont = engine.session.continuation
            assert cont is not None
            assert cont.packet is PacketType.BUTTONS
            assert cont.line_index == i
            assert cont.line_index < cont.expected_lines
            feed(engine, f"label {i}")
        assert feed(engine, "") == [Verdict.DONE]
        assert engine.session.continuation is None

    def test_active_packet(self, engine: ProtocolEngine) -> None:
        assert engine.dispatcher.active_packet is None
        feed(engine, str(int(PacketType.LOCATION)), "3")
        assert engine.dispatcher.active_packet is PacketType.LOCATION

    def test_player_info_waits_for_every_label(self, engine: ProtocolEngine) -> None:
        values = [str(i) for i in range(len(PLAYER_INFO_LABELS))]
        verdicts = packet(engine, PacketType.PLAYER_INFO, *values[:-1])
        assert verdicts[-1] is Verdict.WANT_MORE
        assert all(v is Verdict.WANT_MORE for v in verdicts)
        assert engine.session.continuation is not None
        assert feed(engine, values[-1]) == [Verdict.DONE]


class TestHandlerTable:
    def test_table_is_read_only(self) -> None:
        with pytest.raises(TypeError):
            HANDLERS[PacketType.DIALOG] = HANDLERS[PacketType.CLEAR]  # type: ignore[index]

    def test_buttons_variants_share_a_handler(self) -> None:
        assert HANDLERS[PacketType.BUTTONS] is HANDLERS[PacketType.FULL_BUTTONS]

    def test_every_stat_packet_has_a_handler(self) -> None:
        for code in range(PacketType.NAME, PacketType.EXP + 1):
            assert PacketType(code) in HANDLERS
