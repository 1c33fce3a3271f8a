"""Client entry point."""

import argparse
import asyncio
import logging
import os

from ..common.constants import DEFAULT_HOST, DEFAULT_PORT
from ..engine.types import EngineConfig
from .game_client import GameClient
from .identity import load_or_create_cookie
from .log_buffer import LogBuffer

DEBUG_ENV = "PHANTCLI_DEBUG"
DEBUG_LOG = "debug.log"


def setup_logging(log_file: str | None, log_buffer: LogBuffer) -> None:
    """Configure logging with in-memory buffer and optional file output.

    Setting PHANTCLI_DEBUG logs everything, including every packet, and
    writes debug.log when no --log file was given.
    """
    debug = bool(os.environ.get(DEBUG_ENV))
    root = logging.getLogger()
    root.setLevel(logging.DEBUG if debug else logging.INFO)

    # Always add the in-memory buffer for TUI display
    log_buffer.setLevel(logging.DEBUG)
    root.addHandler(log_buffer)

    if not log_file and debug:
        log_file = DEBUG_LOG
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
        )
        root.addHandler(file_handler)


def main() -> None:
    parser = argparse.ArgumentParser(description="Phantasia text client")
    parser.add_argument("--host", default=DEFAULT_HOST, help="Server host")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help="Server port")
    parser.add_argument(
        "--phant5",
        action="store_true",
        help="Speak the Phantasia 5 variant of the protocol",
    )
    parser.add_argument(
        "--log", help="Log file path (in addition to in-memory log buffer)"
    )
    args = parser.parse_args()

    log_buffer = LogBuffer(maxlen=200)
    setup_logging(args.log, log_buffer)

    client = GameClient(
        args.host,
        args.port,
        cookie=load_or_create_cookie(),
        config=EngineConfig(phantasia5=args.phant5),
        log_buffer=log_buffer,
    )

    async def run_client() -> None:
        if await client.connect():
            await client.run()
        else:
            print("Failed to connect to server")

    try:
        asyncio.run(run_client())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
