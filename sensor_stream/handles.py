"""Send capabilities held by registry entries, one per transport.

Both handles have the same shape: a bounded memory object stream written with
``send_nowait`` and drained by a writer the connection owns (the
``EventSourceResponse`` for SSE, the endpoint's writer task for WebSocket).
A send never waits. A full buffer raises ``anyio.WouldBlock``, a closed handle
``anyio.ClosedResourceError`` and a finished writer ``anyio.BrokenResourceError``.
"""
from typing import Any, Mapping

from anyio.streams.memory import MemoryObjectSendStream


class QueueHandle:
    def __init__(self, stream: MemoryObjectSendStream) -> None:
        self._stream = stream
        self._closed = False

    @property
    def is_open(self) -> bool:
        return not self._closed

    def send(self, payload: Mapping[str, Any]) -> None:
        self._stream.send_nowait(payload)

    def close(self) -> None:
        """End the stream; the writer drains what is buffered, then finishes."""
        if not self._closed:
            self._closed = True
            self._stream.close()


class PushHandle(QueueHandle):
    """Write side of one SSE client's event stream."""


class SocketHandle(QueueHandle):
    """Write side of one WebSocket client's outbound frames.

    Closing it while the socket is still up makes the writer close the socket
    with 1011.
    """
