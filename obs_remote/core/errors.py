"""
core/errors.py — Exception taxonomy for the OBS remote client.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class CloseEvent:
    """Why a socket went away. 1006 means no close frame was ever received."""
    code: int
    reason: str = ""


class OBSRemoteError(Exception):
    pass


class OBSConnectionError(OBSRemoteError):
    """No live socket, or the connect handshake failed."""

    def __init__(self, error: str, event: Optional[CloseEvent] = None):
        super().__init__(error)
        self.error = error
        self.event = event


class OBSRequestError(OBSRemoteError):
    """The server answered a request with ``status: "error"``."""

    def __init__(self, payload: dict[str, Any]):
        self.payload = payload
        self.error = payload.get("error", "Unknown Error")
        super().__init__(self.error)


class OBSAuthError(OBSRequestError):
    pass


class PasswordRequiredError(OBSRemoteError):
    pass


class FrameDecodeError(OBSRemoteError):
    def __init__(self, message: str, raw: Any):
        super().__init__(message)
        self.raw = raw
