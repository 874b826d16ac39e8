"""
core/engine.py — Request/response correlation over a single socket.

Every outbound request gets the next ``message-id`` (1, 2, 3, ... for the
lifetime of the engine, never reset on reconnect) and a pending future keyed
by that id. Inbound frames carrying ``update-type`` go to the EventRouter;
everything else is treated as a reply and matched back to its future.

Replies resolve in arrival order, not send order. Requests that never get a
reply stay pending; there is no timeout and no cancellation.
"""

from __future__ import annotations

import asyncio
import itertools
import json
import logging
from typing import Any, Optional

from .errors import FrameDecodeError, OBSConnectionError, OBSRequestError
from .events import EventBus
from .router import EventRouter

log = logging.getLogger(__name__)

MESSAGE_ID = "message-id"
UPDATE_TYPE = "update-type"
STATUS_ERROR = "error"


def parse_message_id(value: Any) -> Optional[int]:
    """Map a wire id back to its integer key, or None if it can't be one of ours."""
    if isinstance(value, str) and value.isdecimal() and value == str(int(value)):
        return int(value)
    return None


class RequestEngine:
    def __init__(self, bus: EventBus, router: Optional[EventRouter] = None, debug: bool = False):
        self._bus = bus
        self._router = router or EventRouter(bus)
        self.debug = debug

        self._ids = itertools.count(1)
        self._pending: dict[int, asyncio.Future] = {}
        self._transport: Optional[Any] = None

    # ── Transport binding ─────────────────────────────────────────────

    def attach(self, transport: Any) -> None:
        self._transport = transport

    def detach(self) -> None:
        self._transport = None

    @property
    def pending_ids(self) -> list[int]:
        return sorted(self._pending)

    # ── Outbound ──────────────────────────────────────────────────────

    async def send(self, body: dict[str, Any]) -> dict[str, Any]:
        """
        Send one request and wait for its reply.

        Raises OBSConnectionError before registering anything if there is no
        open transport, and OBSRequestError if the server answers with
        ``status: "error"``.
        """
        transport = self._transport
        if transport is None or not transport.connected:
            raise OBSConnectionError("Connection isn't opened")

        message_id = next(self._ids)
        future = asyncio.get_running_loop().create_future()
        self._pending[message_id] = future

        frame = dict(body)
        frame[MESSAGE_ID] = str(message_id)
        try:
            await transport.send(json.dumps(frame))
        except Exception:
            self._pending.pop(message_id, None)
            raise
        return await future

    # ── Inbound ───────────────────────────────────────────────────────

    def handle_frame(self, raw: str) -> None:
        """Dispatch one inbound text frame. Never raises."""
        try:
            received = json.loads(raw)
        except (TypeError, ValueError, RecursionError) as e:
            self._reject_frame(f"Undecodable frame: {e}", raw)
            return

        if self.debug:
            log.info(f"<< {received}")

        if not isinstance(received, dict):
            self._reject_frame("Frame is not a JSON object", raw)
            return

        update_type = received.get(UPDATE_TYPE)
        if update_type is not None and not isinstance(update_type, str):
            self._reject_frame(f"{UPDATE_TYPE} is not a string", raw)
        elif update_type:
            self._router.route(update_type, received)
        else:
            self._resolve(received)

    def _reject_frame(self, reason: str, raw: Any) -> None:
        log.warning(f"{reason}, frame dropped")
        self._bus.publish("error", FrameDecodeError(reason, raw))

    def _resolve(self, message: dict[str, Any]) -> None:
        key = parse_message_id(message.get(MESSAGE_ID))
        future = self._pending.pop(key, None) if key is not None else None
        is_error = message.get("status") == STATUS_ERROR

        if future is not None:
            if future.done():
                # caller stopped waiting
                return
            if is_error:
                future.set_exception(OBSRequestError(message))
            else:
                future.set_result(message)
        elif is_error:
            log.warning(f"Error reply without a pending request: {message.get('error')}")
            self._bus.publish("error", OBSRequestError(message))
        else:
            log.debug(f"Dropping unmatched reply {message.get(MESSAGE_ID)!r}")
