"""
core/remote.py — Async obs-websocket 4.x remote with connect/auth handshake.

connect()  → opens the socket, then asks GetVersion + GetAuthRequired and
             resolves with {"version": ..., "auth": ...}
login()    → answers the auth challenge when the server wants one
everything else is a thin request wrapper over RequestEngine.send()

Events (subscribe with remote.on(name, handler)):
  ready, socket.open, socket.error, socket.close, error,
  stream.status, stream.start, stream.stop, scenes.switch, scenes.change,
  sources.order, source.change, source.repopulate, volume.change
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Optional

from .auth import auth_response
from .engine import RequestEngine
from .errors import (
    CloseEvent,
    OBSAuthError,
    OBSConnectionError,
    OBSRequestError,
    PasswordRequiredError,
)
from .events import EventBus, EventHandler
from .router import EventRouter
from .transport import SocketTransport

log = logging.getLogger(__name__)

DISCONNECT_REASONS: dict[int, str] = {
    1006: "Server not reachable",
}

TransportFactory = Callable[..., Any]


class OBSRemote:
    def __init__(
        self,
        host: str = "localhost",
        port: int = 4444,
        debug: bool = False,
        transport_factory: TransportFactory = SocketTransport,
    ):
        self.host = host
        self.port = port

        self._bus = EventBus()
        self._engine = RequestEngine(self._bus, EventRouter(self._bus), debug=debug)
        self._transport_factory = transport_factory
        self._transport: Optional[Any] = None
        self._connecting: Optional[asyncio.Future] = None
        self._handshake: Optional[asyncio.Task] = None

    @property
    def url(self) -> str:
        return f"ws://{self.host}:{self.port}"

    @property
    def debug(self) -> bool:
        return self._engine.debug

    @debug.setter
    def debug(self, value: bool) -> None:
        self._engine.debug = value

    # ── Events ────────────────────────────────────────────────────────

    def subscribe(self, event: str, handler: EventHandler) -> None:
        self._bus.subscribe(event, handler)

    on = subscribe

    def unsubscribe(self, event: str, handler: EventHandler) -> None:
        self._bus.unsubscribe(event, handler)

    def publish(self, event: str, *args: Any) -> None:
        self._bus.publish(event, *args)

    # ── Connection ────────────────────────────────────────────────────

    async def connect(self) -> dict[str, Any]:
        """
        Open a fresh socket and run the capability handshake.

        Any previous socket is detached before it is closed so none of its
        callbacks reach this session. Raises OBSConnectionError if the socket
        closes before the handshake finishes; ``error`` is "Server not
        reachable" for close code 1006 and "Unknown Error" otherwise.
        """
        await self._teardown()

        connecting = asyncio.get_running_loop().create_future()
        self._connecting = connecting

        transport = self._transport_factory(
            on_open=self._on_socket_open,
            on_message=self._engine.handle_frame,
            on_error=self._on_socket_error,
            on_close=self._on_socket_close,
        )
        self._transport = transport
        self._engine.attach(transport)

        log.info(f"Connecting to OBS at {self.url}")
        await transport.open(self.url)
        return await connecting

    async def close(self) -> None:
        if self._transport is not None:
            await self._transport.close()

    def is_connected(self) -> bool:
        return self._transport is not None and self._transport.connected

    async def _teardown(self) -> None:
        previous = self._connecting
        self._connecting = None
        if previous is not None and not previous.done():
            previous.set_exception(OBSConnectionError("Connection superseded"))
        self._cancel_handshake()

        old = self._transport
        self._transport = None
        self._engine.detach()
        if old is not None:
            old.detach()
            await old.close()

    def _cancel_handshake(self) -> None:
        if self._handshake is not None and not self._handshake.done():
            self._handshake.cancel()
        self._handshake = None

    async def _run_handshake(self, connecting: asyncio.Future) -> None:
        version, auth = await asyncio.gather(
            self.get_version(), self.get_auth_required(), return_exceptions=True
        )
        for result in (version, auth):
            if isinstance(result, BaseException):
                if self._connecting is connecting:
                    self._connecting = None
                if not connecting.done():
                    connecting.set_exception(result)
                return

        auth_required = bool(auth.get("authRequired"))
        if self._connecting is connecting:
            self._connecting = None
        if not auth_required:
            self._bus.publish("ready")
        if not connecting.done():
            connecting.set_result({
                "version": version.get("obs-websocket-version") or version.get("version"),
                "auth": auth_required,
            })

    # ── Socket signals ────────────────────────────────────────────────

    def _on_socket_open(self) -> None:
        connecting = self._connecting
        if connecting is not None and not connecting.done():
            self._handshake = asyncio.get_running_loop().create_task(self._run_handshake(connecting))
        log.info(f"Socket open: {self.url}")
        self._bus.publish("socket.open")

    def _on_socket_error(self, error: Exception) -> None:
        log.warning(f"Socket error: {error}")
        self._bus.publish("socket.error", error)

    def _on_socket_close(self, event: CloseEvent) -> None:
        connecting = self._connecting
        if connecting is not None:
            self._connecting = None
            self._cancel_handshake()
            if not connecting.done():
                message = DISCONNECT_REASONS.get(event.code, "Unknown Error")
                connecting.set_exception(OBSConnectionError(message, event))
        log.info(f"Socket closed ({event.code})")
        self._bus.publish("socket.close", event)

    # ── Requests ──────────────────────────────────────────────────────

    async def send(self, body: dict[str, Any]) -> dict[str, Any]:
        """Send a raw request body; ``message-id`` is filled in for you."""
        return await self._engine.send(body)

    async def login(self, password: Optional[str] = None) -> bool:
        auth = await self.get_auth_required()
        if not auth.get("authRequired"):
            return True
        if not password:
            raise PasswordRequiredError("Password Required")

        response = auth_response(password, auth.get("salt", ""), auth.get("challenge", ""))
        try:
            await self.authenticate(response)
        except OBSRequestError as e:
            raise OBSAuthError(e.payload) from e
        log.info("Authenticated with OBS")
        self._bus.publish("ready")
        return True

    async def authenticate(self, auth: str) -> dict[str, Any]:
        return await self.send({"request-type": "Authenticate", "auth": auth})

    async def get_auth_required(self) -> dict[str, Any]:
        return await self.send({"request-type": "GetAuthRequired"})

    async def get_version(self) -> dict[str, Any]:
        return await self.send({"request-type": "GetVersion"})

    # ── Scenes ───────────────────────────────────────────────────────

    async def get_scene_list(self) -> dict[str, Any]:
        return await self.send({"request-type": "GetSceneList"})

    async def get_current_scene(self) -> dict[str, Any]:
        return await self.send({"request-type": "GetCurrentScene"})

    async def set_current_scene(self, scene_name: str) -> dict[str, Any]:
        return await self.send({"request-type": "SetCurrentScene", "scene-name": scene_name})

    # ── Sources ───────────────────────────────────────────────────────

    async def set_source_render(
        self, source: str, render: bool, scene: Optional[str] = None
    ) -> dict[str, Any]:
        """
        Show or hide a source. Without ``scene`` the server uses the
        current scene.
        """
        body: dict[str, Any] = {"request-type": "SetSourceRender", "source": source, "render": render}
        if scene is not None:
            body["scene-name"] = scene
        return await self.send(body)

    set_source_visibility = set_source_render

    # ── Streaming / recording ─────────────────────────────────────────

    async def get_streaming_status(self) -> dict[str, Any]:
        return await self.send({"request-type": "GetStreamingStatus"})

    async def start_streaming(self) -> dict[str, Any]:
        return await self.send({"request-type": "StartStreaming"})

    async def stop_streaming(self) -> dict[str, Any]:
        return await self.send({"request-type": "StopStreaming"})

    async def start_stop_streaming(self) -> dict[str, Any]:
        return await self.send({"request-type": "StartStopStreaming"})

    async def start_recording(self) -> dict[str, Any]:
        return await self.send({"request-type": "StartRecording"})

    async def stop_recording(self) -> dict[str, Any]:
        return await self.send({"request-type": "StopRecording"})

    # ── Audio ─────────────────────────────────────────────────────────

    async def get_volume(self, source: str) -> dict[str, Any]:
        return await self.send({"request-type": "GetVolume", "source": source})

    async def set_volume(self, source: str, volume: float) -> dict[str, Any]:
        """``volume`` is linear, 0.0 to 1.0."""
        return await self.send({"request-type": "SetVolume", "source": source, "volume": volume})

    async def set_mute(self, source: str, mute: bool) -> dict[str, Any]:
        return await self.send({"request-type": "SetMute", "source": source, "mute": mute})

    async def toggle_mute(self, source: str) -> dict[str, Any]:
        return await self.send({"request-type": "ToggleMute", "source": source})

    # ── Transitions ───────────────────────────────────────────────────

    async def set_current_transition(self, transition_name: str) -> dict[str, Any]:
        return await self.send({"request-type": "SetCurrentTransition", "transition-name": transition_name})

    async def set_transition_duration(self, duration_ms: int) -> dict[str, Any]:
        return await self.send({"request-type": "SetTransitionDuration", "duration": duration_ms})
