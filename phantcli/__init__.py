"""Client protocol engine for Phantasia text game servers.

Example usage:

    from phantcli import ProtocolEngine

    engine = ProtocolEngine(cookie=12345)
    engine.receive(sock.recv(1024))
    sock.sendall(engine.take_outbound())
    for event in engine.drain_events():
        ...
"""

from .engine import (
    Compass,
    DialogMode,
    EngineConfig,
    IntentResult,
    ProtocolEngine,
    Session,
    Verdict,
)

__version__ = "0.1.0"

__all__ = [
    "ProtocolEngine",
    "EngineConfig",
    "Session",
    "DialogMode",
    "IntentResult",
    "Compass",
    "Verdict",
]
