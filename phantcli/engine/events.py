"""Events the engine emits to the UI sink.

Events are plain immutable records. The engine never waits on the sink.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Union

from ..common.protocol import PacketType
from .types import DialogMode


@dataclass(frozen=True)
class TextLine:
    text: str


@dataclass(frozen=True)
class ClearText:
    """Clear the message area."""


@dataclass(frozen=True)
class DialogReady:
    """A buttons dialog is ready; slots are (index, label) in slot order."""

    mode: DialogMode
    slots: tuple[tuple[int, str], ...]
    more_prompt: bool = False
    class_dialog: bool = False


@dataclass(frozen=True)
class PromptReady:
    kind: DialogMode
    text: str


@dataclass(frozen=True)
class SpecialTextBlock:
    lines: tuple[str, ...]


@dataclass(frozen=True)
class StatChanged:
    """A player stat changed; value is the raw value, not formatted."""

    stat: PacketType
    value: Any


@dataclass(frozen=True)
class ChatToggled:
    active: bool


@dataclass(frozen=True)
class ChatMessage:
    text: str


@dataclass(frozen=True)
class ValidationError:
    message: str


@dataclass(frozen=True)
class ConnectionEnded:
    reason: str


@dataclass(frozen=True)
class ShutdownRequested:
    """The server is going down; the UI should wait for a key, then exit."""

    message: str


@dataclass(frozen=True)
class ServerError:
    message: str


@dataclass(frozen=True)
class RosterChanged:
    names: tuple[str, ...]


UIEvent = Union[
    TextLine,
    ClearText,
    DialogReady,
    PromptReady,
    SpecialTextBlock,
    StatChanged,
    ChatToggled,
    ChatMessage,
    ValidationError,
    ConnectionEnded,
    ShutdownRequested,
    ServerError,
    RosterChanged,
]

EventCallback = Callable[[UIEvent], None]
