"""Turns user intents into outbound protocol lines.

Every intent is checked against the open dialog before anything is written;
an intent that does not fit is rejected without touching the wire.
"""

from __future__ import annotations

import logging

from ..common.constants import BUTTON_SLOTS
from ..common.protocol import INTEGER_TOKEN, ClientPacket, encode_header, encode_line
from .events import ValidationError
from .handlers import HandlerContext
from .types import Compass, DialogMode, IntentResult

logger = logging.getLogger(__name__)

COORDINATES_HINT = "Must enter x y coordinates"


def parse_coordinates(text: str) -> tuple[int, int] | None:
    """Parse "x y" into two integers, or None if it isn't exactly that."""
    parts = text.split()
    if len(parts) != 2 or not all(INTEGER_TOKEN.fullmatch(p) for p in parts):
        return None
    return int(parts[0]), int(parts[1])


class ResponseEncoder:
    def __init__(self, ctx: HandlerContext) -> None:
        self.ctx = ctx

    @property
    def dialog_mode(self) -> DialogMode:
        return self.ctx.session.dialog_mode

    def _closed(self, intent: str) -> bool:
        """True once the connection has ended; nothing more can be sent."""
        if self.ctx.ended:
            logger.debug(f"{intent} ignored, connection has ended")
        return self.ctx.ended

    def _reject(self, intent: str) -> IntentResult:
        logger.debug(f"{intent} not allowed in dialog mode {self.dialog_mode.name}")
        return IntentResult.REJECTED

    def choose_button(self, index: int) -> IntentResult:
        """Answer a buttons dialog with the zero-based slot index."""
        session = self.ctx.session
        if self._closed("choose_button"):
            return IntentResult.REJECTED
        if not self.dialog_mode.is_buttons:
            return self._reject("choose_button")
        if not 0 <= index < BUTTON_SLOTS or session.buttons[index] is None:
            return self._reject(f"choose_button({index})")

        self.ctx.respond(str(index))
        if session.class_dialog:
            session.selected_class = index + 1
            logger.info(f"Selected class {session.selected_class}: {session.buttons[index]}")
        session.end_dialog()
        return IntentResult.SENT

    def confirm(self) -> IntentResult:
        """Acknowledge a single-option "more" prompt."""
        if self._closed("confirm"):
            return IntentResult.REJECTED
        if not self.dialog_mode.is_buttons or not self.ctx.session.is_more_prompt():
            return self._reject("confirm")
        self.ctx.respond("0")
        self.ctx.session.end_dialog()
        return IntentResult.SENT

    def choose_direction(self, direction: Compass) -> IntentResult:
        """Answer a full buttons dialog with a compass move."""
        if self._closed("choose_direction"):
            return IntentResult.REJECTED
        if self.dialog_mode is not DialogMode.FULL_BUTTONS:
            return self._reject("choose_direction")
        self.ctx.respond(str(direction.code))
        self.ctx.session.end_dialog()
        return IntentResult.SENT

    def submit_text(self, text: str) -> IntentResult:
        if self._closed("submit_text"):
            return IntentResult.REJECTED
        if not self.dialog_mode.is_text:
            return self._reject("submit_text")
        self.ctx.respond(text)
        self.ctx.session.end_dialog()
        return IntentResult.SENT

    def submit_coordinates(self, text: str) -> IntentResult:
        """Send "x y" as two responses. Bad input leaves the dialog open."""
        if self._closed("submit_coordinates"):
            return IntentResult.REJECTED
        if self.dialog_mode is not DialogMode.COORDINATES:
            return self._reject("submit_coordinates")
        coords = parse_coordinates(text)
        if coords is None:
            self.ctx.emit(ValidationError(COORDINATES_HINT))
            return IntentResult.INVALID
        x, y = coords
        self.ctx.respond(str(x))
        self.ctx.respond(str(y))
        self.ctx.session.end_dialog()
        return IntentResult.SENT

    def cancel(self) -> IntentResult:
        if self._closed("cancel"):
            return IntentResult.REJECTED
        if self.dialog_mode is DialogMode.NONE:
            return self._reject("cancel")
        self.ctx.send(encode_header(ClientPacket.CANCEL))
        self.ctx.session.end_dialog()
        return IntentResult.SENT

    def send_chat(self, text: str) -> IntentResult:
        if self._closed("send_chat"):
            return IntentResult.REJECTED
        if not text:
            return self._reject("send_chat")
        self.ctx.send(encode_header(ClientPacket.CHAT))
        self.ctx.send(encode_line(text))
        return IntentResult.SENT
