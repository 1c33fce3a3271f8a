"""Main game client handling network and UI."""

from __future__ import annotations

import asyncio
import logging
import warnings
from asyncio import StreamReader, StreamWriter
from typing import Any

from blessed import Terminal
from blessed.keyboard import Keystroke

from ..common.constants import CONNECT_TIMEOUT, READ_CHUNK_SIZE
from ..engine.events import ConnectionEnded, ShutdownRequested, UIEvent
from ..engine.protocol_engine import ProtocolEngine
from ..engine.types import Compass, DialogMode, EngineConfig
from .log_buffer import LogBuffer
from .terminal_ui import TerminalUI

_logger = logging.getLogger(__name__)

COMPASS_KEYS: dict[str, Compass] = {
    "y": Compass.NORTHWEST,
    "k": Compass.NORTH,
    "u": Compass.NORTHEAST,
    "h": Compass.WEST,
    ".": Compass.REST,
    " ": Compass.REST,
    "l": Compass.EAST,
    "b": Compass.SOUTHWEST,
    "j": Compass.SOUTH,
    "n": Compass.SOUTHEAST,
}

COORDINATE_CHARS = set("0123456789- ")


def _asyncio_exception_handler(
    loop: asyncio.AbstractEventLoop, context: dict[str, Any]
) -> None:
    """Log unhandled task exceptions instead of printing over the UI."""
    exception = context.get("exception")
    message = context.get("message", "Unhandled exception in asyncio task")
    if exception:
        _logger.error(f"{message}: {exception}", exc_info=exception)
    else:
        _logger.error(message)


class GameClient:
    def __init__(
        self,
        host: str,
        port: int,
        cookie: int,
        config: EngineConfig | None = None,
        log_buffer: LogBuffer | None = None,
    ) -> None:
        self.host = host
        self.port = port
        self.engine = ProtocolEngine(cookie, config, on_event=self._on_event)
        self.reader: StreamReader | None = None
        self.writer: StreamWriter | None = None
        self.running = False
        self._shutdown_pending = False
        self._needs_render = True
        self.term: Any = Terminal()
        self.ui = TerminalUI(self.term, log_buffer)

    async def connect(self) -> bool:
        """Open the TCP connection. The server speaks first (handshake)."""
        print(f"Connecting to {self.host}:{self.port}...")
        try:
            self.reader, self.writer = await asyncio.wait_for(
                asyncio.open_connection(self.host, self.port),
                timeout=CONNECT_TIMEOUT,
            )
        except asyncio.TimeoutError:
            print(f"Connection timed out after {CONNECT_TIMEOUT:.0f}s")
            return False
        except ConnectionRefusedError:
            print(f"Connection refused by {self.host}:{self.port}")
            return False
        except OSError as e:
            print(f"Failed to connect: {e}")
            return False
        _logger.info(f"Connected to {self.host}:{self.port}")
        return True

    async def run(self) -> None:
        """Main client loop."""
        self.running = True
        loop = asyncio.get_running_loop()
        loop.set_exception_handler(_asyncio_exception_handler)
        logging.captureWarnings(True)
        warnings.filterwarnings("always")

        receiver_task = asyncio.create_task(self._receive_messages())
        try:
            with self.term.fullscreen(), self.term.cbreak(), self.term.hidden_cursor():
                while self.running:
                    while True:
                        key = self.term.inkey(timeout=0)
                        if not key:
                            break
                        self._handle_input(key)
                    await self._flush()
                    if self._needs_render:
                        self.ui.render(self.engine.session.dialog_mode)
                        self._needs_render = False
                    await asyncio.sleep(0.05)
        finally:
            self.running = False
            receiver_task.cancel()
            try:
                await receiver_task
            except asyncio.CancelledError:
                pass
            if self.writer:
                self.writer.close()
                try:
                    await self.writer.wait_closed()
                except (ConnectionResetError, BrokenPipeError, OSError):
                    pass  # Connection may already be gone
            self.ui.cleanup()
            if self.engine.end_reason:
                print(f"Connection ended: {self.engine.end_reason}")

    async def _receive_messages(self) -> None:
        """Feed everything the server sends into the engine."""
        assert self.reader is not None
        try:
            while self.running and not self.engine.ended:
                data = await self.reader.read(READ_CHUNK_SIZE)
                self.engine.receive(data)
                await self._flush()
        except (ConnectionResetError, BrokenPipeError, OSError) as e:
            self.engine.connection_lost(e)

    async def _flush(self) -> None:
        """Write queued outbound lines to the server."""
        data = self.engine.take_outbound()
        if not data or self.writer is None:
            return
        try:
            self.writer.write(data)
            await self.writer.drain()
        except (ConnectionResetError, BrokenPipeError, OSError) as e:
            self.engine.connection_lost(e)

    def _on_event(self, event: UIEvent) -> None:
        self.ui.handle_event(event)
        if isinstance(event, ShutdownRequested):
            self._shutdown_pending = True
        elif isinstance(event, ConnectionEnded) and not self._shutdown_pending:
            self.running = False
        self._needs_render = True

    def _handle_input(self, key: Keystroke) -> None:
        self._needs_render = True
        if self._shutdown_pending:
            self.running = False
            return
        if str(key) == "\t":
            # Chat mode is local only; no wire effect
            if self.ui.chat_enabled:
                self.ui.chat_mode = not self.ui.chat_mode
            return
        if key.code == self.term.KEY_F1:
            self.ui.show_logs = not self.ui.show_logs
            return
        if self.ui.chat_mode:
            self._handle_chat_key(key)
        elif self.ui.paging:
            self.ui.next_page()
        else:
            self._handle_dialog_key(key)

    def _handle_chat_key(self, key: Keystroke) -> None:
        if _is_enter(key):
            self.engine.encoder.send_chat(self.ui.chat_input)
            self.ui.chat_input = ""
        elif _is_backspace(key):
            self.ui.chat_input = self.ui.chat_input[:-1]
        elif not key.is_sequence and key.isprintable():
            self.ui.chat_input += str(key)

    def _handle_dialog_key(self, key: Keystroke) -> None:
        encoder = self.engine.encoder
        mode = self.engine.session.dialog_mode
        ch = str(key)

        if key.code == self.term.KEY_ESCAPE or ch == "\x1b":
            encoder.cancel()
            self.ui.close_dialog()
            return

        if mode.is_buttons:
            if mode is DialogMode.FULL_BUTTONS and ch in COMPASS_KEYS:
                encoder.choose_direction(COMPASS_KEYS[ch])
            elif ch and ch in "12345678":
                encoder.choose_button(int(ch) - 1)
            elif ch == " ":
                encoder.confirm()
            if self.engine.session.dialog_mode is DialogMode.NONE:
                self.ui.close_dialog()
            return

        if mode is DialogMode.COORDINATES and not (
            ch in COORDINATE_CHARS or _is_enter(key) or _is_backspace(key)
        ):
            return

        if mode is DialogMode.COORDINATES or mode.is_text:
            if _is_enter(key):
                text = self.ui.input_buffer
                self.ui.messages.append("*" * len(text) if mode.masked else text)
                if mode is DialogMode.COORDINATES:
                    encoder.submit_coordinates(text)
                else:
                    encoder.submit_text(text)
                self.ui.input_buffer = ""
                if self.engine.session.dialog_mode is DialogMode.NONE:
                    self.ui.close_dialog()
            elif _is_backspace(key):
                self.ui.input_buffer = self.ui.input_buffer[:-1]
            elif not key.is_sequence and ch.isprintable():
                self.ui.input_buffer += ch


def _is_enter(key: Keystroke) -> bool:
    return str(key) in ("\n", "\r") or key.name == "KEY_ENTER"


def _is_backspace(key: Keystroke) -> bool:
    return str(key) in ("\x7f", "\b") or key.name in ("KEY_BACKSPACE", "KEY_DELETE")
