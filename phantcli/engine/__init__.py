"""Sans-I/O protocol engine: framing, packet dispatch, session state, responses."""

from .dispatcher import PacketDispatcher
from .encoder import ResponseEncoder
from .framer import LineFramer
from .handlers import HANDLERS, PacketHandler
from .protocol_engine import ProtocolEngine
from .state import Continuation, PlayerStats, Roster, RosterEntry, Session
from .types import Compass, DialogMode, EngineConfig, IntentResult, Verdict

__all__ = [
    "ProtocolEngine",
    "PacketDispatcher",
    "ResponseEncoder",
    "LineFramer",
    "HANDLERS",
    "PacketHandler",
    "Session",
    "PlayerStats",
    "Roster",
    "RosterEntry",
    "Continuation",
    "Compass",
    "DialogMode",
    "EngineConfig",
    "IntentResult",
    "Verdict",
]
