"""Shared protocol constants."""

# Network
DEFAULT_HOST = "phantasia4.net"
DEFAULT_PORT = 43302
CONNECT_TIMEOUT = 10.0  # seconds
READ_CHUNK_SIZE = 1024

# Packet codes are valid in 1..MAX_PACKET_CODE - 1
MAX_PACKET_CODE = 64

# Handshake
BUILD_ID = "1004"
PHANT5_PREAMBLE = ("BETA", "010")  # sent before the build id by Phantasia 5 clients
TOKEN_SALT = "Impressive"

# Dialogs
BUTTON_SLOTS = 8
CLASS_DIALOG_MARKER = "Magic-User"
REROLL_LABEL = "Reroll"

# Character classes (1-based slot of the class-selection dialog)
CLASS_FIGHTER = 2
# A fighter rerolls automatically while below either minimum
FIGHTER_MIN_SPEED = 37
FIGHTER_MIN_STRENGTH = 42

# Wire terminators
INBOUND_TERMINATOR = b"\n"
OUTBOUND_TERMINATOR = b"\x00"
