"""
In-memory stand-ins for the websocket and an obs-websocket 4.x server.
"""

import asyncio
import json
from typing import Any, Callable, Optional

from obs_remote.core import CloseEvent, OBSConnectionError


class FakeTransport:
    """
    Drop-in for SocketTransport. Records outbound frames and, when a
    ``responder`` is given, answers them on the next loop iteration.
    """

    def __init__(
        self,
        on_open=None,
        on_message=None,
        on_error=None,
        on_close=None,
        responder: Optional[Callable[[dict], Optional[dict]]] = None,
        fail_code: Optional[int] = None,
    ):
        self.on_open = on_open
        self.on_message = on_message
        self.on_error = on_error
        self.on_close = on_close
        self.responder = responder
        self.fail_code = fail_code

        self.url: Optional[str] = None
        self.connected = False
        self.closed = False
        self.sent: list[dict] = []

    async def open(self, url: str) -> None:
        self.url = url
        if self.fail_code is not None:
            if self.on_error:
                self.on_error(ConnectionRefusedError("refused"))
            if self.on_close:
                self.on_close(CloseEvent(self.fail_code, "refused"))
            return
        self.connected = True
        if self.on_open:
            self.on_open()

    async def send(self, text: str) -> None:
        if not self.connected:
            raise OBSConnectionError("Connection isn't opened")
        frame = json.loads(text)
        self.sent.append(frame)
        if self.responder is not None:
            reply = self.responder(frame)
            if reply is not None:
                full = {"message-id": frame["message-id"], "status": "ok", **reply}
                asyncio.get_running_loop().call_soon(self.deliver, full)

    def deliver(self, message: Any) -> None:
        text = message if isinstance(message, str) else json.dumps(message)
        if self.on_message:
            self.on_message(text)

    def server_close(self, code: int, reason: str = "") -> None:
        self.connected = False
        if self.on_close:
            self.on_close(CloseEvent(code, reason))

    def detach(self) -> None:
        self.on_open = self.on_message = self.on_error = self.on_close = None

    async def close(self) -> None:
        self.closed = True
        if self.connected:
            self.server_close(1000)

    def request_types(self) -> list[str]:
        return [f.get("request-type") for f in self.sent]


def obs_responder(auth_required: bool = False, version: str = "4.8.0", **overrides) -> Callable:
    """Answers like an obs-websocket 4.x server. ``overrides`` maps request-type → reply (or None)."""
    def respond(frame: dict) -> Optional[dict]:
        request_type = frame.get("request-type")
        if request_type in overrides:
            return overrides[request_type]
        if request_type == "GetVersion":
            return {"version": 1.1, "obs-websocket-version": version, "obs-studio-version": "25.0.8"}
        if request_type == "GetAuthRequired":
            if auth_required:
                return {"authRequired": True, "salt": "PZVbYpvAnZut2SS6JNJytDm9", "challenge": "ztTBnnuqrqaKDzRM3xcVdbYm"}
            return {"authRequired": False}
        return {}
    return respond


async def settle(rounds: int = 5) -> None:
    for _ in range(rounds):
        await asyncio.sleep(0)
