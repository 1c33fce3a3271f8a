"""Per-installation cookie used for the handshake token."""

from __future__ import annotations

import logging
import random
from pathlib import Path

logger = logging.getLogger(__name__)


def default_cookie_path() -> Path:
    return Path.home() / ".local" / "share" / "phantcli" / "cookie"


def load_or_create_cookie(path: Path | None = None) -> int:
    """Load the stored cookie, or create and store a new random one.

    Returns 0 (the anonymous cookie) when there is no home directory. If the
    new cookie cannot be written it is still returned, for this session only.
    """
    if path is None:
        try:
            path = default_cookie_path()
        except RuntimeError:
            # No home directory to keep a cookie in
            return 0

    if path.exists():
        try:
            cookie = int(path.read_text().split()[0])
            if cookie:
                return cookie
        except (OSError, ValueError, IndexError):
            logger.warning(f"Ignoring unreadable cookie file {path}")

    cookie = random.randint(1, 2**31 - 1)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(f"{cookie}\n")
    except OSError as e:
        logger.warning(f"Could not store cookie in {path}: {e}")
    return cookie
