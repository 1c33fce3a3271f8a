"""Terminal UI rendering with blessed.

Keeps the view-side state built from engine events (message lines, the open
dialog, stats, chat, paged special text) and draws it.
"""

from __future__ import annotations

from collections import deque
from typing import Any

from blessed import Terminal

from ..common.protocol import PacketType
from ..engine.events import (
    ChatMessage,
    ChatToggled,
    ClearText,
    ConnectionEnded,
    DialogReady,
    PromptReady,
    RosterChanged,
    ServerError,
    ShutdownRequested,
    SpecialTextBlock,
    StatChanged,
    TextLine,
    UIEvent,
    ValidationError,
)
from ..engine.types import DialogMode
from .log_buffer import LogBuffer

MSG_ROWS = 6
CHAT_ROWS = 8
LOG_ROWS = 6

STAT_LABELS: dict[PacketType, str] = {
    PacketType.ENERGY: "Energy",
    PacketType.STRENGTH: "Strength",
    PacketType.SPEED: "Speed",
    PacketType.SHIELD: "Shield",
    PacketType.SWORD: "Sword",
    PacketType.QUICKSILVER: "Quicksilver",
    PacketType.MANA: "Mana",
    PacketType.LEVEL: "Level",
    PacketType.GOLD: "Gold",
    PacketType.GEMS: "Gems",
    PacketType.CLOAK: "Cloak",
    PacketType.BLESSING: "Blessing",
    PacketType.CROWN: "Crowns",
    PacketType.PALANTIR: "Palantir",
    PacketType.RING: "Ring",
    PacketType.VIRGIN: "Virgin",
    PacketType.AMULETS: "Amulets",
    PacketType.CHARMS: "Charms",
    PacketType.TOKENS: "Tokens",
    PacketType.STAFF: "Staff",
    PacketType.EXP: "Experience",
}


def format_stat(stat: PacketType, value: Any) -> str:
    """Render a raw stat value the way the stat panel shows it."""
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, tuple):
        if stat == PacketType.ENERGY and len(value) == 3 and value[2] > 0:
            return f"{value[0]} ({value[1]}) {value[2]}"
        if len(value) >= 2:
            return f"{value[0]} ({value[1]})"
        return str(value[0])
    return str(value)


class TerminalUI:
    def __init__(self, terminal: Terminal, log_buffer: LogBuffer | None = None):
        self.term = terminal
        self.log_buffer = log_buffer
        self.messages: deque[str] = deque(maxlen=MSG_ROWS)
        self.chat_lines: deque[str] = deque(maxlen=CHAT_ROWS)
        self.stats: dict[PacketType, str] = {}
        self.player_name: str | None = None
        self.location: tuple[str | None, int, int] | None = None
        self.roster: tuple[str, ...] = ()
        self.dialog: DialogReady | None = None
        self.prompt: PromptReady | None = None
        self.pager: deque[str] = deque()
        self.input_buffer = ""
        self.chat_input = ""
        self.chat_enabled = False
        self.chat_mode = False
        self.show_logs = False
        self.status = ""

    @property
    def paging(self) -> bool:
        return bool(self.pager)

    def handle_event(self, event: UIEvent) -> None:
        """Update the view from an engine event."""
        if isinstance(event, TextLine):
            self.messages.append(event.text)
        elif isinstance(event, ClearText):
            self.messages.clear()
        elif isinstance(event, DialogReady):
            self.dialog = event
            self.prompt = None
        elif isinstance(event, PromptReady):
            self.prompt = event
            self.dialog = None
            self.input_buffer = ""
            self.messages.append(event.text)
        elif isinstance(event, SpecialTextBlock):
            self.pager.extend(event.lines)
        elif isinstance(event, StatChanged):
            self._update_stat(event)
        elif isinstance(event, ChatToggled):
            self.chat_enabled = event.active
            if not event.active:
                self.chat_mode = False
        elif isinstance(event, ChatMessage):
            self.chat_lines.append(event.text)
        elif isinstance(event, ValidationError):
            self.messages.append(event.message)
        elif isinstance(event, RosterChanged):
            self.roster = event.names
        elif isinstance(event, ShutdownRequested):
            self.messages.append(event.message)
        elif isinstance(event, ServerError):
            self.status = f"Server error: {event.message}"
        elif isinstance(event, ConnectionEnded):
            self.status = f"Disconnected: {event.reason}"

    def _update_stat(self, event: StatChanged) -> None:
        if event.stat == PacketType.NAME:
            self.player_name = event.value
        elif event.stat == PacketType.LOCATION:
            self.location = event.value
        elif event.stat in STAT_LABELS:
            self.stats[event.stat] = format_stat(event.stat, event.value)

    def close_dialog(self) -> None:
        self.dialog = None
        self.prompt = None
        self.input_buffer = ""

    def next_page(self) -> None:
        for _ in range(MSG_ROWS):
            if not self.pager:
                break
            self.pager.popleft()

    def render(self, dialog_mode: DialogMode) -> None:
        """Render the whole screen."""
        term = self.term
        output = [term.home + term.clear]

        output.append(term.bold(self._location_line()))
        output.append("")
        if self.pager:
            output.extend(list(self.pager)[:MSG_ROWS])
            output.append(term.reverse("--more--"))
        else:
            output.extend(self.messages)
            if self.prompt and dialog_mode is not DialogMode.NONE:
                shown = "*" * len(self.input_buffer) if dialog_mode.masked else self.input_buffer
                output.append(f"> {shown}")
            output.append(self._dialog_line(dialog_mode))

        output.append("")
        output.extend(self._stat_rows(term.width or 80))

        if self.chat_enabled:
            output.append("")
            output.append(term.underline("Chat") + (" (typing)" if self.chat_mode else ""))
            output.extend(self.chat_lines)
            if self.chat_mode:
                output.append(f": {self.chat_input}")

        if self.show_logs and self.log_buffer is not None:
            output.append("")
            output.append(term.underline("Log"))
            output.extend(e.format() for e in self.log_buffer.tail(LOG_ROWS))

        if self.status:
            output.append("")
            output.append(term.red(self.status))

        print("\n".join(output), end="", flush=True)

    def _location_line(self) -> str:
        if not self.player_name or not self.location or not self.location[0]:
            return ""
        place, x, y = self.location
        return f"{self.player_name} is in {place} ({y}, {x})"

    def _dialog_line(self, dialog_mode: DialogMode) -> str:
        if self.dialog is None or not dialog_mode.is_buttons:
            return ""
        if self.dialog.more_prompt:
            return f"--{self.dialog.slots[0][1]}--"
        options = " ".join(f"{i + 1}={label}" for i, label in self.dialog.slots)
        return f"{options} > "

    def _stat_rows(self, width: int) -> list[str]:
        cells = [
            f"{label:<15}{self.stats[stat]:<24}"
            for stat, label in STAT_LABELS.items()
            if stat in self.stats
        ]
        per_row = max(width // 40, 1)
        return ["".join(cells[i : i + per_row]) for i in range(0, len(cells), per_row)]

    def cleanup(self) -> None:
        """Restore terminal state."""
        print(self.term.normal + self.term.clear, end="")
