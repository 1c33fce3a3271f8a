"""Tests for the wire protocol vocabulary and line encoding."""

from __future__ import annotations

from hypothesis import given, settings
from hypothesis import strategies as st

from phantcli.common.protocol import (
    ClientPacket,
    PacketType,
    encode_header,
    encode_line,
    encode_response,
    is_valid_packet_code,
    parse_packet_code,
)


class TestEncoding:
    """Tests for outbound line encoding."""

    def test_line_is_nul_terminated(self) -> None:
        assert encode_line("hello") == b"hello\x00"

    def test_empty_line_is_just_nul(self) -> None:
        assert encode_line("") == b"\x00"

    def test_response_has_no_delimiter(self) -> None:
        """Header 1 and payload "3" produce "13" plus NUL."""
        assert encode_response("3") == b"13\x00"

    def test_response_with_text_payload(self) -> None:
        assert encode_response("1004") == b"11004\x00"

    def test_header_lines(self) -> None:
        assert encode_header(ClientPacket.CANCEL) == b"2\x00"
        assert encode_header(ClientPacket.PONG) == b"3\x00"
        assert encode_header(ClientPacket.CHAT) == b"4\x00"
        assert encode_header(ClientPacket.PONG2) == b"8\x00"

    def test_outbound_headers_are_single_digits(self) -> None:
        """Responses are only unambiguous while every header is one digit."""
        for header in ClientPacket:
            assert 0 < header.value < 10

    @given(st.text(alphabet="abc xyz-0123", max_size=50))
    @settings(max_examples=50)
    def test_single_terminator(self, text: str) -> None:
        data = encode_line(text)
        assert data.endswith(b"\x00")
        assert data.count(b"\x00") == 1


class TestPacketCodes:
    """Tests for inbound packet header parsing."""

    def test_codes_match_protocol(self) -> None:
        assert PacketType.HANDSHAKE == 2
        assert PacketType.BUTTONS == 20
        assert PacketType.PLAYER_INFO == 33
        assert PacketType.TIMED_PING == 58
        assert PacketType.EXP == 63

    def test_examine_shares_connection_detail_code(self) -> None:
        assert PacketType.EXAMINE is PacketType.CONNECTION_DETAIL
        assert PacketType(34) is PacketType.EXAMINE

    def test_parse_plain_integer(self) -> None:
        assert parse_packet_code("20") == 20

    def test_parse_tolerates_surrounding_whitespace(self) -> None:
        assert parse_packet_code(" 41\r") == 41

    def test_parse_rejects_text(self) -> None:
        assert parse_packet_code("hello") is None

    def test_parse_rejects_empty(self) -> None:
        assert parse_packet_code("") is None

    def test_parse_rejects_two_tokens(self) -> None:
        assert parse_packet_code("20 21") is None

    def test_parse_rejects_underscores(self) -> None:
        assert parse_packet_code("1_1") is None

    def test_parse_rejects_non_ascii_digits(self) -> None:
        assert parse_packet_code("\u0663") is None

    def test_parse_keeps_sign(self) -> None:
        assert parse_packet_code("-3") == -3

    def test_valid_range(self) -> None:
        assert not is_valid_packet_code(0)
        assert not is_valid_packet_code(-4)
        assert is_valid_packet_code(1)
        assert is_valid_packet_code(63)
        assert not is_valid_packet_code(64)
