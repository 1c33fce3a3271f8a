"""Wire protocol vocabulary: packet codes and outbound line encoding.

Inbound lines are newline terminated. Outbound lines are terminated by a
single NUL byte, and the NUL is part of what gets written.

A response line is the response header code immediately followed by the
payload, with no delimiter in between (header 1 + payload "3" -> b"13\\0").
This is only unambiguous because every outbound header is a single digit.
"""

from __future__ import annotations

import re
from enum import IntEnum

from .constants import MAX_PACKET_CODE, OUTBOUND_TERMINATOR

# Optional sign and ASCII digits, nothing else
INTEGER_TOKEN = re.compile(r"[+-]?[0-9]+", re.ASCII)


class PacketType(IntEnum):
    """Server -> client packet header codes."""

    HANDSHAKE = 2
    CLOSE_CONNECTION = 3
    PING = 4
    ADD_PLAYER = 5
    REMOVE_PLAYER = 6
    SHUTDOWN = 7
    ERROR = 8

    CLEAR = 10
    WRITE_LINE = 11

    BUTTONS = 20
    FULL_BUTTONS = 21
    STRING_DIALOG = 22
    COORDINATES_DIALOG = 23
    PLAYER_DIALOG = 24
    PASSWORD_DIALOG = 25
    SCOREBOARD_DIALOG = 26
    DIALOG = 27

    CHAT = 30
    ACTIVATE_CHAT = 31
    DEACTIVATE_CHAT = 32
    PLAYER_INFO = 33
    CONNECTION_DETAIL = 34
    # Examine results arrive on the connection detail code
    EXAMINE = 34

    NAME = 40
    LOCATION = 41
    ENERGY = 42
    STRENGTH = 43
    SPEED = 44
    SHIELD = 45
    SWORD = 46
    QUICKSILVER = 47
    MANA = 48
    LEVEL = 49
    GOLD = 50
    GEMS = 51
    CLOAK = 52
    BLESSING = 53
    CROWN = 54
    PALANTIR = 55
    RING = 56
    VIRGIN = 57
    TIMED_PING = 58
    AMULETS = 59
    CHARMS = 60
    TOKENS = 61
    STAFF = 62
    EXP = 63


class ClientPacket(IntEnum):
    """Client -> server packet header codes."""

    RESPONSE = 1
    CANCEL = 2
    PONG = 3
    CHAT = 4
    EXAMINE = 5
    ERROR = 6
    SCOREBOARD = 7
    PONG2 = 8
    PING_REQUEST = 9


def encode_line(text: str) -> bytes:
    """Encode one outbound line, NUL terminator included."""
    return text.encode("utf-8") + OUTBOUND_TERMINATOR


def encode_header(packet: ClientPacket) -> bytes:
    """Encode a bare packet header line (e.g. CANCEL, PONG)."""
    return encode_line(str(int(packet)))


def encode_response(payload: str) -> bytes:
    """Encode a RESPONSE line: header digit, payload, NUL."""
    return encode_line(f"{int(ClientPacket.RESPONSE)}{payload}")


def parse_packet_code(line: str) -> int | None:
    """Parse a dispatch line as a packet code.

    Returns None unless the line is exactly one integer token.
    """
    token = line.strip()
    if not token or len(token.split()) != 1:
        return None
    if not INTEGER_TOKEN.fullmatch(token):
        return None
    return int(token)


def is_valid_packet_code(code: int) -> bool:
    """Check that a code is inside the protocol's packet range."""
    return 0 < code < MAX_PACKET_CODE
