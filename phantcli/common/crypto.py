"""Handshake continuity token.

The token carries no secret. It only lets the server recognise a returning
installation, and must match the reference client bit for bit.
"""

from __future__ import annotations

import hashlib

from .constants import TOKEN_SALT


def handshake_token(cookie: int) -> str:
    """Return the token sent after the cookie during the handshake.

    A zero cookie yields the literal "0"; otherwise the lowercase hex MD5
    digest of "Impressive<cookie>".
    """
    if cookie == 0:
        return "0"
    return hashlib.md5(f"{TOKEN_SALT}{cookie}".encode("ascii")).hexdigest()
