"""Type definitions shared by the protocol engine."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable

from ..common.constants import BUILD_ID
from ..common.protocol import PacketType


class Verdict(Enum):
    """Outcome of feeding one line to a handler or to the dispatcher."""

    WANT_MORE = auto()
    DONE = auto()
    # Only produced by the dispatcher; the session cannot continue
    FATAL = auto()


class DialogMode(Enum):
    """Which interactive prompt, if any, is waiting for the user."""

    NONE = auto()
    BUTTONS = auto()
    FULL_BUTTONS = auto()
    STRING = auto()
    COORDINATES = auto()
    PLAYER = auto()
    PASSWORD = auto()

    @property
    def is_buttons(self) -> bool:
        return self in (DialogMode.BUTTONS, DialogMode.FULL_BUTTONS)

    @property
    def is_text(self) -> bool:
        """Dialogs answered with free text."""
        return self in (DialogMode.STRING, DialogMode.PLAYER, DialogMode.PASSWORD)

    @property
    def masked(self) -> bool:
        """Input should be echoed as '*' by the UI."""
        return self is DialogMode.PASSWORD


# Packet that opens each dialog mode
DIALOG_MODE_BY_PACKET: dict[PacketType, DialogMode] = {
    PacketType.BUTTONS: DialogMode.BUTTONS,
    PacketType.FULL_BUTTONS: DialogMode.FULL_BUTTONS,
    PacketType.STRING_DIALOG: DialogMode.STRING,
    PacketType.COORDINATES_DIALOG: DialogMode.COORDINATES,
    PacketType.PLAYER_DIALOG: DialogMode.PLAYER,
    PacketType.PASSWORD_DIALOG: DialogMode.PASSWORD,
}


class IntentResult(Enum):
    """Outcome of a user intent handed to the response encoder."""

    SENT = auto()
    REJECTED = auto()  # not legal in the current dialog mode
    INVALID = auto()  # legal, but the input failed validation


class Compass(Enum):
    """Movement answers of a full buttons dialog, with their response codes."""

    NORTHWEST = 8
    NORTH = 9
    NORTHEAST = 10
    WEST = 11
    REST = 12
    EAST = 13
    SOUTHWEST = 14
    SOUTH = 15
    SOUTHEAST = 16

    @property
    def code(self) -> int:
        return self.value


@dataclass
class EngineConfig:
    """Configuration for a ProtocolEngine."""

    # Phantasia 5 build: 2 mana values, extra "Staff" info label, BETA preamble
    phantasia5: bool = False
    build_id: str = BUILD_ID
    # Only used to timestamp the handshake
    clock: Callable[[], float] = field(default=time.time)

    @property
    def mana_values(self) -> int:
        return 2 if self.phantasia5 else 1
