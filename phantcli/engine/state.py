"""Session state mutated by the packet handlers.

Nothing in here talks to the network or the UI; the handlers and the
response encoder read and write these containers.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Iterator

from ..common.constants import BUTTON_SLOTS
from ..common.protocol import PacketType
from .types import DialogMode


@dataclass
class RosterEntry:
    """Another player currently visible in the session."""

    name: str
    role: str | None = None


class Roster:
    """Ordered mirror of the players the server has announced."""

    def __init__(self) -> None:
        self._entries: deque[RosterEntry] = deque()

    def append(self, name: str) -> RosterEntry:
        entry = RosterEntry(name)
        self._entries.append(entry)
        return entry

    def attach_role(self, role: str) -> None:
        """Set the role of the most recently appended entry."""
        if self._entries:
            self._entries[-1].role = role

    def remove(self, name: str) -> bool:
        """Remove the first entry named exactly `name`. Absent names are ignored."""
        for entry in self._entries:
            if entry.name == name:
                self._entries.remove(entry)
                return True
        return False

    def names(self) -> tuple[str, ...]:
        return tuple(e.name for e in self._entries)

    def clear(self) -> None:
        self._entries.clear()

    def __iter__(self) -> Iterator[RosterEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


@dataclass
class PlayerStats:
    """The local player's stat record, as last reported by the server."""

    name: str | None = None
    location: str | None = None
    x: int = 0
    y: int = 0
    # current, potential, drain (drain only meaningful when positive)
    energy: list[int] = field(default_factory=lambda: [0, 0, 0])
    strength: list[int] = field(default_factory=lambda: [0, 0])  # current, potential
    speed: list[int] = field(default_factory=lambda: [0, 0])  # current, potential
    mana: list[int] = field(default_factory=lambda: [0, 0])
    shield: int = 0
    sword: int = 0
    quicksilver: int = 0
    level: int = 0
    gold: int = 0
    gems: int = 0
    amulets: int = 0
    charms: int = 0
    tokens: int = 0
    experience: int = 0
    cloak: bool = False
    blessing: bool = False
    crown: bool = False
    palantir: bool = False
    ring: bool = False
    virgin: bool = False
    staff: bool = False

    @property
    def position(self) -> tuple[int, int]:
        return (self.x, self.y)


@dataclass
class Continuation:
    """The handler currently consuming payload lines.

    `line_index` counts payload lines already consumed; `expected_lines` is
    how many the packet needs in total, which some handlers only learn from
    a count line. `scratch` holds a small handler-local value.
    """

    packet: PacketType
    line_index: int = 0
    expected_lines: int = 0
    scratch: int = 0

    @property
    def remaining(self) -> int:
        return self.expected_lines - self.line_index


@dataclass
class Session:
    """All state for one connection."""

    cookie: int = 0
    dialog_mode: DialogMode = DialogMode.NONE
    # None means the next line is a packet header
    continuation: Continuation | None = None
    buttons: list[str | None] = field(default_factory=lambda: [None] * BUTTON_SLOTS)
    class_dialog: bool = False
    selected_class: int = 0
    player: PlayerStats = field(default_factory=PlayerStats)
    roster: Roster = field(default_factory=Roster)
    special_text: list[str] = field(default_factory=list)
    special_text_complete: bool = False
    chat_active: bool = False
    closed: bool = False

    @property
    def dispatching(self) -> bool:
        return self.continuation is None

    def clear_buttons(self) -> None:
        for i in range(BUTTON_SLOTS):
            self.buttons[i] = None
        self.class_dialog = False

    def populated_buttons(self) -> list[tuple[int, str]]:
        return [(i, label) for i, label in enumerate(self.buttons) if label is not None]

    def is_more_prompt(self) -> bool:
        """Only slot 0 is populated: a "--more--" style prompt."""
        return self.buttons[0] is not None and all(
            label is None for label in self.buttons[1:]
        )

    def end_dialog(self) -> None:
        self.dialog_mode = DialogMode.NONE

    def finish_special_text(self) -> None:
        """Mark the accumulated block as whole; it can now be taken."""
        self.special_text_complete = True

    def take_special_text(self) -> tuple[str, ...]:
        """Return a finished block and clear it in one step.

        A block still being accumulated is left alone and () is returned.
        """
        if not self.special_text_complete:
            return ()
        lines = tuple(self.special_text)
        self.special_text.clear()
        self.special_text_complete = False
        return lines

    def teardown(self) -> None:
        self.continuation = None
        self.roster.clear()
        self.clear_buttons()
        self.special_text.clear()
        self.special_text_complete = False
        self.end_dialog()
