"""core — OBS websocket connection, request correlation and events."""
from .errors import (
    CloseEvent,
    FrameDecodeError,
    OBSAuthError,
    OBSConnectionError,
    OBSRemoteError,
    OBSRequestError,
    PasswordRequiredError,
)
from .events import EventBus
from .engine import RequestEngine
from .router import EventRouter, UPDATE_EVENTS
from .transport import SocketTransport
from .remote import OBSRemote, DISCONNECT_REASONS

__all__ = [
    "CloseEvent",
    "DISCONNECT_REASONS",
    "EventBus",
    "EventRouter",
    "FrameDecodeError",
    "OBSAuthError",
    "OBSConnectionError",
    "OBSRemote",
    "OBSRemoteError",
    "OBSRequestError",
    "PasswordRequiredError",
    "RequestEngine",
    "SocketTransport",
    "UPDATE_EVENTS",
]
