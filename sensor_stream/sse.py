import logging
from datetime import datetime, timezone
from typing import Any, AsyncIterable, Awaitable, Callable, Mapping, Optional, Union

import anyio
from starlette.responses import Response
from starlette.types import Receive, Scope, Send

from sensor_stream.appstatus import AppStatus
from sensor_stream.event import ServerSentEvent

logger = logging.getLogger(__name__)


class EventSourceResponse(Response):
    """
    Streaming response that sends data conforming to the SSE (Server-Sent Events)
    specification.

    ``content`` yields JSON envelopes, each framed as one event whose id is the
    envelope's ``id``. It is drained until it is exhausted, the client
    disconnects or the server shuts down. ``on_close`` runs exactly once
    afterwards, however the stream ended.
    """

    DEFAULT_PING_INTERVAL = 15
    media_type = "text/event-stream"

    def __init__(
        self,
        content: AsyncIterable[Mapping[str, Any]],
        retry: Optional[int] = None,
        ping: Optional[float] = None,
        on_close: Optional[Callable[[], None]] = None,
    ) -> None:
        self.body_iterator = content
        self.status_code = 200
        self.retry = retry
        self.on_close = on_close

        self.init_headers(
            {
                "Cache-Control": "no-cache",
                # mandatory for servers-sent events headers
                "Connection": "keep-alive",
                "X-Accel-Buffering": "no",
            }
        )

        self.ping_interval = self.DEFAULT_PING_INTERVAL if ping is None else ping

        self.active = True
        self._send_lock = anyio.Lock()

    @property
    def ping_interval(self) -> Union[int, float]:
        return self._ping_interval

    @ping_interval.setter
    def ping_interval(self, value: Union[int, float]) -> None:
        if not isinstance(value, (int, float)):
            raise TypeError("ping interval must be int")
        if value < 0:
            raise ValueError("ping interval must be greater than 0")
        self._ping_interval = value

    async def _send_chunk(self, send: Send, chunk: bytes) -> None:
        async with self._send_lock:
            await send({"type": "http.response.body", "body": chunk, "more_body": True})

    async def _stream_response(self, send: Send) -> None:
        """Send out SSE data to the client as it becomes available in the iterator."""
        await send(
            {
                "type": "http.response.start",
                "status": self.status_code,
                "headers": self.raw_headers,
            }
        )

        if self.retry is not None:
            await self._send_chunk(send, ServerSentEvent(retry=self.retry).encode())

        async for payload in self.body_iterator:
            chunk = ServerSentEvent.from_payload(payload).encode()
            logger.debug("chunk: %s", chunk)
            await self._send_chunk(send, chunk)

        async with self._send_lock:
            self.active = False
            await send({"type": "http.response.body", "body": b"", "more_body": False})

    async def _listen_for_disconnect(self, receive: Receive) -> None:
        """Watch for a disconnect message from the client."""
        while self.active:
            message = await receive()
            if message["type"] == "http.disconnect":
                self.active = False
                logger.debug("Got event: http.disconnect. Stop streaming.")
                break

    async def _ping(self, send: Send) -> None:
        """Periodically send a comment line to keep the connection alive on proxies."""
        if not self._ping_interval:
            await anyio.sleep_forever()

        while self.active:
            await anyio.sleep(self._ping_interval)
            sse_ping = ServerSentEvent(comment=f"ping - {datetime.now(timezone.utc)}")
            async with self._send_lock:
                if self.active:
                    await send(
                        {
                            "type": "http.response.body",
                            "body": sse_ping.encode(),
                            "more_body": True,
                        }
                    )

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """Entrypoint for Starlette's ASGI contract. We spin up tasks:
        - _stream_response to push events
        - _ping to keep the connection alive
        - AppStatus.wait_for_exit to respond to server shutdown
        - _listen_for_disconnect to respond to client disconnect
        """
        try:
            async with anyio.create_task_group() as task_group:

                async def cancel_on_finish(coro: Callable[[], Awaitable[None]]):
                    await coro()
                    task_group.cancel_scope.cancel()

                task_group.start_soon(
                    cancel_on_finish, lambda: self._stream_response(send)
                )
                task_group.start_soon(cancel_on_finish, lambda: self._ping(send))
                task_group.start_soon(cancel_on_finish, AppStatus.wait_for_exit)
                task_group.start_soon(
                    cancel_on_finish, lambda: self._listen_for_disconnect(receive)
                )
        finally:
            self.active = False
            if self.on_close is not None:
                self.on_close()
