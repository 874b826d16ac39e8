"""
core/transport.py — One WebSocket, four signals.

SocketTransport knows nothing about what travels over it. The owner passes
its handlers in explicitly and gets opened / message / error / closed
callbacks. detach() drops every handler so a superseded socket can be closed
without its late callbacks reaching the new session.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Optional

import websockets
from websockets.exceptions import ConnectionClosed, ConnectionClosedError, WebSocketException

from .errors import CloseEvent, OBSConnectionError

log = logging.getLogger(__name__)

ABNORMAL_CLOSURE = 1006


class SocketTransport:
    def __init__(
        self,
        on_open: Optional[Callable[[], None]] = None,
        on_message: Optional[Callable[[str], None]] = None,
        on_error: Optional[Callable[[Exception], None]] = None,
        on_close: Optional[Callable[[CloseEvent], None]] = None,
    ):
        self.on_open = on_open
        self.on_message = on_message
        self.on_error = on_error
        self.on_close = on_close

        self.url: Optional[str] = None
        self._detached = False
        self._ws: Optional[Any] = None
        self._reader: Optional[asyncio.Task] = None

    @property
    def connected(self) -> bool:
        return self._ws is not None

    # ── Lifecycle ─────────────────────────────────────────────────────

    async def open(self, url: str) -> None:
        """
        Establish the socket. Failure is reported through the signals rather
        than raised: on_error, then on_close with code 1006.
        """
        self.url = url
        try:
            self._ws = await websockets.connect(url)
        except (OSError, WebSocketException, asyncio.TimeoutError) as e:
            log.warning(f"WebSocket open failed for {url}: {e}")
            self._emit_error(e)
            self._emit_close(CloseEvent(ABNORMAL_CLOSURE, str(e)))
            return

        if self._detached:
            # superseded while the opening handshake was in flight
            ws, self._ws = self._ws, None
            await ws.close()
            return

        log.debug(f"WebSocket open: {url}")
        self._reader = asyncio.get_running_loop().create_task(self._read_loop(self._ws))
        if self.on_open:
            self.on_open()

    def detach(self) -> None:
        self._detached = True
        self.on_open = self.on_message = self.on_error = self.on_close = None

    async def close(self) -> None:
        ws, reader = self._ws, self._reader
        if ws is None:
            return
        await ws.close()
        if reader is not None:
            await asyncio.gather(reader, return_exceptions=True)

    async def send(self, text: str) -> None:
        if self._ws is None:
            raise OBSConnectionError("Connection isn't opened")
        try:
            await self._ws.send(text)
        except ConnectionClosed as e:
            raise OBSConnectionError("Connection isn't opened") from e

    # ── Reader ────────────────────────────────────────────────────────

    async def _read_loop(self, ws: Any) -> None:
        try:
            async for message in ws:
                if isinstance(message, bytes):
                    message = message.decode("utf-8", errors="replace")
                if self.on_message:
                    try:
                        self.on_message(message)
                    except Exception as e:
                        log.error(f"Message handler error: {e}")
        except ConnectionClosedError as e:
            self._emit_error(e)
        finally:
            if self._ws is ws:
                self._ws = None
            if ws.close_code is None:
                # reader stopped without a closing handshake
                await ws.close()
            code = ws.close_code if ws.close_code is not None else ABNORMAL_CLOSURE
            log.debug(f"WebSocket closed: {code} {ws.close_reason or ''}")
            self._emit_close(CloseEvent(code, ws.close_reason or ""))

    def _emit_error(self, error: Exception) -> None:
        if self.on_error:
            self.on_error(error)

    def _emit_close(self, event: CloseEvent) -> None:
        if self.on_close:
            self.on_close(event)
