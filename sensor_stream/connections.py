"""Accept, register and retire clients of both transports.

Every connection moves Connected -> Closed exactly once; the transition is a
deregistration, reachable from a client close, a transport error or an
eviction by the broadcaster. Deregistration is idempotent, so whichever of
those fires first wins and the others are no-ops.
"""
import json
import logging
from typing import Optional, Union

import anyio
from anyio.abc import TaskGroup
from anyio.streams.memory import MemoryObjectReceiveStream
from starlette.endpoints import WebSocketEndpoint
from starlette.requests import Request
from starlette.types import Message
from starlette.websockets import WebSocket, WebSocketState

from sensor_stream.config import Settings
from sensor_stream.event import encode_json
from sensor_stream.handles import PushHandle, SocketHandle
from sensor_stream.models import ConnectionEvent, EchoEvent, Transport
from sensor_stream.registry import ClientEntry
from sensor_stream.sse import EventSourceResponse
from sensor_stream.state import ServerState

logger = logging.getLogger(__name__)


async def sse_endpoint(request: Request) -> EventSourceResponse:
    state: ServerState = request.app.state.server
    settings: Settings = request.app.state.settings

    send_stream, receive_stream = anyio.create_memory_object_stream(
        settings.client_buffer_size
    )
    handle = PushHandle(send_stream)
    entry = ClientEntry(handle=handle)

    # Queued before registration, so it precedes any tick.
    handle.send(ConnectionEvent(entry.id, Transport.SSE).to_message())
    state.connect(Transport.SSE, entry)
    logger.info("SSE client connected: %s (%s)", entry.id, request.client)

    def on_close() -> None:
        if state.disconnect(Transport.SSE, entry.id) is not None:
            logger.info("SSE client disconnected: %s", entry.id)
        handle.close()
        receive_stream.close()

    return EventSourceResponse(
        receive_stream,
        retry=settings.sse_retry_ms,
        ping=settings.sse_ping_interval,
        on_close=on_close,
    )


def _is_connected(websocket: WebSocket) -> bool:
    return (
        websocket.client_state == WebSocketState.CONNECTED
        and websocket.application_state == WebSocketState.CONNECTED
    )


class SensorSocket(WebSocketEndpoint):
    """WebSocket clients: welcome, sensor stream, and JSON echo of inbound frames.

    Outbound frames go through the client's ``SocketHandle`` and are written
    by a task that lives as long as the connection.
    """

    entry: Optional[ClientEntry] = None
    task_group: Optional[TaskGroup] = None

    async def dispatch(self) -> None:
        async with anyio.create_task_group() as task_group:
            self.task_group = task_group
            await super().dispatch()
            task_group.cancel_scope.cancel()

    async def decode(self, websocket: WebSocket, message: Message) -> Union[str, bytes]:
        # Binary frames carry JSON just like text frames.
        if message.get("bytes") is not None:
            return message["bytes"]
        return message.get("text") or ""

    def _state(self, websocket: WebSocket) -> ServerState:
        return websocket.app.state.server

    async def on_connect(self, websocket: WebSocket) -> None:
        await websocket.accept()
        settings: Settings = websocket.app.state.settings
        send_stream, receive_stream = anyio.create_memory_object_stream(
            settings.client_buffer_size
        )
        handle = SocketHandle(send_stream)
        self.entry = ClientEntry(handle=handle)

        # Queued before registration, so it precedes any tick.
        handle.send(ConnectionEvent(self.entry.id, Transport.WEBSOCKET).to_message())
        self.task_group.start_soon(self._write, websocket, receive_stream)
        self._state(websocket).connect(Transport.WEBSOCKET, self.entry)
        logger.info(
            "WebSocket client connected: %s (%s)", self.entry.id, websocket.client
        )

    async def _write(
        self, websocket: WebSocket, receive_stream: MemoryObjectReceiveStream
    ) -> None:
        async with receive_stream:
            async for payload in receive_stream:
                try:
                    await websocket.send_text(encode_json(payload))
                except Exception as e:
                    self._retire(websocket, e)
                    return

        # The handle was closed by an eviction while the peer is still there.
        if _is_connected(websocket):
            await websocket.close(1011)

    def _retire(self, websocket: WebSocket, reason: object) -> None:
        entry = self._state(websocket).disconnect(Transport.WEBSOCKET, self.entry.id)
        if entry is not None:
            logger.warning("Evicted websocket client %s: %r", self.entry.id, reason)
        self.entry.handle.close()

    async def on_receive(self, websocket: WebSocket, data: Union[str, bytes]) -> None:
        try:
            payload = json.loads(data)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning("Ignoring malformed message from %s: %s", self.entry.id, e)
            return

        logger.debug("WebSocket message from %s: %r", self.entry.id, payload)
        try:
            self.entry.handle.send(EchoEvent(original=payload).to_message())
        except (
            anyio.WouldBlock,
            anyio.ClosedResourceError,
            anyio.BrokenResourceError,
        ) as e:
            self._retire(websocket, e)

    async def on_disconnect(self, websocket: WebSocket, close_code: int) -> None:
        if self.entry is None:
            return
        self.entry.handle.close()
        entry = self._state(websocket).disconnect(Transport.WEBSOCKET, self.entry.id)
        if entry is not None:
            logger.info(
                "WebSocket client disconnected: %s (code %s)", self.entry.id, close_code
            )
