"""Per-packet continuation handlers.

Every handler follows the same two-phase contract:

    reset(ctx)        called once when the packet header arrives, with no
                      payload. Decides how many payload lines the packet
                      carries and returns WANT_MORE, or DONE if none.
    feed(ctx, line)   called once per payload line. Returns WANT_MORE until
                      the packet's last line, then DONE.

Handlers are stateless; everything they accumulate lives in the Session and
in the active Continuation, so the table below can be shared and is never
mutated.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Mapping

from ..common.constants import (
    BUTTON_SLOTS,
    CLASS_DIALOG_MARKER,
    CLASS_FIGHTER,
    FIGHTER_MIN_SPEED,
    FIGHTER_MIN_STRENGTH,
    PHANT5_PREAMBLE,
    REROLL_LABEL,
)
from ..common.crypto import handshake_token
from ..common.protocol import ClientPacket, PacketType, encode_header, encode_response
from .events import (
    ChatMessage,
    ChatToggled,
    ClearText,
    ConnectionEnded,
    DialogReady,
    EventCallback,
    PromptReady,
    RosterChanged,
    ServerError,
    ShutdownRequested,
    SpecialTextBlock,
    StatChanged,
    TextLine,
)
from .state import Continuation, Session
from .types import DIALOG_MODE_BY_PACKET, EngineConfig, Verdict

logger = logging.getLogger(__name__)
# Error packets are the server's own error log
server_logger = logging.getLogger("phantcli.server")

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")

SHUTDOWN_MESSAGE = "The game is shutting down. Press any key to exit.."

PLAYER_INFO_LABELS: tuple[str, ...] = (
    "Title",
    "Location",
    "Account",
    "Network",
    "Channel",
    "Level",
    "Experience",
    "Next level",
    "Energy",
    "Max energy",
    "Shield",
    "Strength",
    "Max strength",
    "Sword",
    "Quickness",
    "Max quickness",
    "Quicksilver",
    "Brains",
    "Magic level",
    "Mana",
    "Gender",
    "Poison",
    "Sin",
    "Lives",
    "Gold",
    "Gems",
    "Holy water",
    "Amulets",
    "Charms",
    "Crowns",
    "Virgin",
    "Blessing",
    "Palantir",
    "Ring",
    "Cloaked",
    "Blind",
    "Age",
    "Degenerated",
    "Time played",
    "Date loaded",
    "Date created",
)
# Phantasia 5 reports the staff between "Ring" and "Cloaked"
PHANT5_PLAYER_INFO_LABELS: tuple[str, ...] = (
    PLAYER_INFO_LABELS[: PLAYER_INFO_LABELS.index("Ring") + 1]
    + ("Staff",)
    + PLAYER_INFO_LABELS[PLAYER_INFO_LABELS.index("Ring") + 1 :]
)


def player_info_labels(config: EngineConfig) -> tuple[str, ...]:
    return PHANT5_PLAYER_INFO_LABELS if config.phantasia5 else PLAYER_INFO_LABELS


def atoi(text: str) -> int:
    """Parse a leading integer the way the server's C clients do; 0 if none."""
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


@dataclass
class HandlerContext:
    """What a handler may touch while processing a line."""

    session: Session
    config: EngineConfig
    emit: EventCallback
    send: Callable[[bytes], None]
    # Set by the engine once the connection is over
    ended: bool = False

    @property
    def continuation(self) -> Continuation:
        assert self.session.continuation is not None
        return self.session.continuation

    @property
    def packet(self) -> PacketType:
        return self.continuation.packet

    def respond(self, payload: str) -> None:
        self.send(encode_response(payload))

    def flush_special_text(self) -> None:
        self.session.finish_special_text()
        self.emit(SpecialTextBlock(self.session.take_special_text()))


class PacketHandler:
    """Base continuation: fixed payload length, one consume call per line."""

    payload_lines = 0

    def expected_lines(self, ctx: HandlerContext) -> int:
        return self.payload_lines

    def on_reset(self, ctx: HandlerContext) -> None:
        pass

    def consume(self, ctx: HandlerContext, line: str, index: int) -> None:
        pass

    def complete(self, ctx: HandlerContext) -> None:
        pass

    def reset(self, ctx: HandlerContext) -> Verdict:
        cont = ctx.continuation
        cont.line_index = 0
        cont.expected_lines = self.expected_lines(ctx)
        self.on_reset(ctx)
        if cont.expected_lines <= 0:
            self.complete(ctx)
            return Verdict.DONE
        return Verdict.WANT_MORE

    def feed(self, ctx: HandlerContext, line: str) -> Verdict:
        cont = ctx.continuation
        self.consume(ctx, line, cont.line_index)
        cont.line_index += 1
        if cont.line_index >= cont.expected_lines:
            self.complete(ctx)
            return Verdict.DONE
        return Verdict.WANT_MORE


# --- connection and keepalive ---


class HandshakeHandler(PacketHandler):
    def complete(self, ctx: HandlerContext) -> None:
        if ctx.config.phantasia5:
            for line in PHANT5_PREAMBLE:
                ctx.respond(line)
        ctx.respond(ctx.config.build_id)
        ctx.respond(str(ctx.session.cookie))
        ctx.respond(handshake_token(ctx.session.cookie))
        ctx.respond(str(int(ctx.config.clock())))
        logger.info("Handshake answered")


class CloseHandler(PacketHandler):
    def complete(self, ctx: HandlerContext) -> None:
        ctx.session.closed = True
        ctx.emit(ConnectionEnded("closed by server"))


@dataclass(frozen=True)
class PingHandler(PacketHandler):
    """Answer a liveness probe."""

    reply: ClientPacket
    resets_dialog: bool

    def complete(self, ctx: HandlerContext) -> None:
        ctx.send(encode_header(self.reply))
        if self.resets_dialog:
            # A ping means any open dialog on our side is stale
            ctx.session.end_dialog()


# --- roster ---


class AddPlayerHandler(PacketHandler):
    payload_lines = 2

    def consume(self, ctx: HandlerContext, line: str, index: int) -> None:
        if index == 0:
            ctx.session.roster.append(line)
        else:
            ctx.session.roster.attach_role(line)

    def complete(self, ctx: HandlerContext) -> None:
        ctx.emit(RosterChanged(ctx.session.roster.names()))


class RemovePlayerHandler(PacketHandler):
    payload_lines = 1

    def consume(self, ctx: HandlerContext, line: str, index: int) -> None:
        ctx.continuation.scratch = int(ctx.session.roster.remove(line))

    def complete(self, ctx: HandlerContext) -> None:
        if ctx.continuation.scratch:
            ctx.emit(RosterChanged(ctx.session.roster.names()))


# --- server notices and message area ---


class ShutdownHandler(PacketHandler):
    def complete(self, ctx: HandlerContext) -> None:
        ctx.emit(ShutdownRequested(SHUTDOWN_MESSAGE))


class ErrorHandler(PacketHandler):
    payload_lines = 1

    def consume(self, ctx: HandlerContext, line: str, index: int) -> None:
        server_logger.error(f"ERROR: {line}")
        ctx.emit(ServerError(line))


class ClearHandler(PacketHandler):
    def complete(self, ctx: HandlerContext) -> None:
        ctx.emit(ClearText())


class WriteLineHandler(PacketHandler):
    payload_lines = 1

    def consume(self, ctx: HandlerContext, line: str, index: int) -> None:
        ctx.emit(TextLine(line))


# --- dialogs ---


def _should_reroll(session: Session) -> bool:
    """Fighters reroll automatically until speed and strength are good enough."""
    if session.buttons[0] != REROLL_LABEL:
        return False
    if session.selected_class != CLASS_FIGHTER:
        return False
    player = session.player
    return player.speed[0] < FIGHTER_MIN_SPEED or player.strength[0] < FIGHTER_MIN_STRENGTH


class ButtonsHandler(PacketHandler):
    payload_lines = BUTTON_SLOTS

    def on_reset(self, ctx: HandlerContext) -> None:
        ctx.session.clear_buttons()
        ctx.session.dialog_mode = DIALOG_MODE_BY_PACKET[ctx.packet]

    def consume(self, ctx: HandlerContext, line: str, index: int) -> None:
        if line:
            ctx.session.buttons[index] = line

    def complete(self, ctx: HandlerContext) -> None:
        session = ctx.session
        session.class_dialog = session.buttons[0] == CLASS_DIALOG_MARKER
        more_prompt = session.is_more_prompt()
        if not more_prompt and _should_reroll(session):
            logger.info(
                f"Rerolling: speed {session.player.speed[0]}, "
                f"strength {session.player.strength[0]}"
            )
            ctx.respond("0")
            session.end_dialog()
            return
        ctx.emit(
            DialogReady(
                mode=session.dialog_mode,
                slots=tuple(session.populated_buttons()),
                more_prompt=more_prompt,
                class_dialog=session.class_dialog,
            )
        )


class PromptDialogHandler(PacketHandler):
    """String, coordinates, player and password dialogs: one prompt line."""

    payload_lines = 1

    def consume(self, ctx: HandlerContext, line: str, index: int) -> None:
        mode = DIALOG_MODE_BY_PACKET[ctx.packet]
        ctx.session.dialog_mode = mode
        ctx.emit(PromptReady(mode, line))


# --- special text blocks ---


class ScoreboardHandler(PacketHandler):
    """A discarded line, a count line, then that many text lines."""

    payload_lines = 2  # extended by the count line

    def consume(self, ctx: HandlerContext, line: str, index: int) -> None:
        if index == 0:
            return
        if index == 1:
            ctx.continuation.scratch = max(atoi(line), 0)
            ctx.continuation.expected_lines = ctx.continuation.scratch + 2
            return
        ctx.session.special_text.append(line)

    def complete(self, ctx: HandlerContext) -> None:
        ctx.flush_special_text()


class ExamineHandler(PacketHandler):
    """A count line, then that many text lines."""

    payload_lines = 1  # extended by the count line

    def consume(self, ctx: HandlerContext, line: str, index: int) -> None:
        if index == 0:
            ctx.continuation.scratch = max(atoi(line), 0)
            ctx.continuation.expected_lines = ctx.continuation.scratch + 1
            return
        ctx.session.special_text.append(line)

    def complete(self, ctx: HandlerContext) -> None:
        ctx.flush_special_text()


class PlayerInfoHandler(PacketHandler):
    """One value line per label of the player info table."""

    def expected_lines(self, ctx: HandlerContext) -> int:
        return len(player_info_labels(ctx.config))

    def consume(self, ctx: HandlerContext, line: str, index: int) -> None:
        label = player_info_labels(ctx.config)[index]
        ctx.session.special_text.append(f"{label}: {line}")

    def complete(self, ctx: HandlerContext) -> None:
        ctx.flush_special_text()


# --- chat ---


class ChatHandler(PacketHandler):
    payload_lines = 1

    def consume(self, ctx: HandlerContext, line: str, index: int) -> None:
        ctx.emit(ChatMessage(line))


@dataclass(frozen=True)
class ChatSwitchHandler(PacketHandler):
    active: bool

    def complete(self, ctx: HandlerContext) -> None:
        ctx.session.chat_active = self.active
        ctx.emit(ChatToggled(self.active))


# --- player stats ---


class NameHandler(PacketHandler):
    payload_lines = 1

    def consume(self, ctx: HandlerContext, line: str, index: int) -> None:
        ctx.session.player.name = line or None

    def complete(self, ctx: HandlerContext) -> None:
        ctx.emit(StatChanged(ctx.packet, ctx.session.player.name))


class LocationHandler(PacketHandler):
    """y, x, then the location name."""

    payload_lines = 3

    def consume(self, ctx: HandlerContext, line: str, index: int) -> None:
        player = ctx.session.player
        if index == 0:
            player.y = atoi(line)
        elif index == 1:
            player.x = atoi(line)
        else:
            player.location = line

    def complete(self, ctx: HandlerContext) -> None:
        player = ctx.session.player
        ctx.emit(StatChanged(ctx.packet, (player.location, player.x, player.y)))


@dataclass(frozen=True)
class IntArrayHandler(PacketHandler):
    """A fixed number of integer lines filling a stat array in order.

    A count of 0 means the mana array, whose length depends on the build.
    """

    attr: str
    count: int = 0

    def expected_lines(self, ctx: HandlerContext) -> int:
        return self.count or ctx.config.mana_values

    def consume(self, ctx: HandlerContext, line: str, index: int) -> None:
        getattr(ctx.session.player, self.attr)[index] = atoi(line)

    def complete(self, ctx: HandlerContext) -> None:
        values = getattr(ctx.session.player, self.attr)
        ctx.emit(StatChanged(ctx.packet, tuple(values[: self.expected_lines(ctx)])))


@dataclass(frozen=True)
class IntValueHandler(PacketHandler):
    attr: str
    payload_lines: int = 1

    def consume(self, ctx: HandlerContext, line: str, index: int) -> None:
        setattr(ctx.session.player, self.attr, atoi(line))

    def complete(self, ctx: HandlerContext) -> None:
        ctx.emit(StatChanged(ctx.packet, getattr(ctx.session.player, self.attr)))


@dataclass(frozen=True)
class BoolValueHandler(PacketHandler):
    """A literal "Yes" or "No". Anything else leaves the flag alone."""

    attr: str
    payload_lines: int = 1

    def consume(self, ctx: HandlerContext, line: str, index: int) -> None:
        if line == "Yes":
            setattr(ctx.session.player, self.attr, True)
        elif line == "No":
            setattr(ctx.session.player, self.attr, False)
        else:
            logger.warning(
                f"Unexpected value {line!r} for {self.attr}, packet {ctx.packet.value}"
            )

    def complete(self, ctx: HandlerContext) -> None:
        ctx.emit(StatChanged(ctx.packet, getattr(ctx.session.player, self.attr)))


def _build_handlers() -> Mapping[PacketType, PacketHandler]:
    buttons = ButtonsHandler()
    prompt = PromptDialogHandler()
    table: dict[PacketType, PacketHandler] = {
        PacketType.HANDSHAKE: HandshakeHandler(),
        PacketType.CLOSE_CONNECTION: CloseHandler(),
        PacketType.PING: PingHandler(ClientPacket.PONG, resets_dialog=True),
        PacketType.TIMED_PING: PingHandler(ClientPacket.PONG2, resets_dialog=False),
        PacketType.ADD_PLAYER: AddPlayerHandler(),
        PacketType.REMOVE_PLAYER: RemovePlayerHandler(),
        PacketType.SHUTDOWN: ShutdownHandler(),
        PacketType.ERROR: ErrorHandler(),
        PacketType.CLEAR: ClearHandler(),
        PacketType.WRITE_LINE: WriteLineHandler(),
        PacketType.BUTTONS: buttons,
        PacketType.FULL_BUTTONS: buttons,
        PacketType.STRING_DIALOG: prompt,
        PacketType.COORDINATES_DIALOG: prompt,
        PacketType.PLAYER_DIALOG: prompt,
        PacketType.PASSWORD_DIALOG: prompt,
        PacketType.SCOREBOARD_DIALOG: ScoreboardHandler(),
        PacketType.EXAMINE: ExamineHandler(),
        PacketType.CHAT: ChatHandler(),
        PacketType.ACTIVATE_CHAT: ChatSwitchHandler(active=True),
        PacketType.DEACTIVATE_CHAT: ChatSwitchHandler(active=False),
        PacketType.PLAYER_INFO: PlayerInfoHandler(),
        PacketType.NAME: NameHandler(),
        PacketType.LOCATION: LocationHandler(),
        PacketType.ENERGY: IntArrayHandler("energy", 3),
        PacketType.STRENGTH: IntArrayHandler("strength", 2),
        PacketType.SPEED: IntArrayHandler("speed", 2),
        PacketType.MANA: IntArrayHandler("mana"),
        PacketType.SHIELD: IntValueHandler("shield"),
        PacketType.SWORD: IntValueHandler("sword"),
        PacketType.QUICKSILVER: IntValueHandler("quicksilver"),
        PacketType.LEVEL: IntValueHandler("level"),
        PacketType.GOLD: IntValueHandler("gold"),
        PacketType.GEMS: IntValueHandler("gems"),
        PacketType.AMULETS: IntValueHandler("amulets"),
        PacketType.CHARMS: IntValueHandler("charms"),
        PacketType.TOKENS: IntValueHandler("tokens"),
        PacketType.EXP: IntValueHandler("experience"),
        PacketType.CLOAK: BoolValueHandler("cloak"),
        PacketType.BLESSING: BoolValueHandler("blessing"),
        PacketType.CROWN: BoolValueHandler("crown"),
        PacketType.PALANTIR: BoolValueHandler("palantir"),
        PacketType.RING: BoolValueHandler("ring"),
        PacketType.VIRGIN: BoolValueHandler("virgin"),
        PacketType.STAFF: BoolValueHandler("staff"),
    }
    return MappingProxyType(table)


# Packet code -> handler. DIALOG has no handler and is fatal on receipt.
HANDLERS: Mapping[PacketType, PacketHandler] = _build_handlers()
