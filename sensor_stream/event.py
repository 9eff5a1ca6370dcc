import io
import json
import re
from typing import Any, Callable, Mapping, Optional


def encode_json(payload: Mapping[str, Any]) -> str:
    """Compact JSON text, the body of one SSE data line or one WebSocket frame."""
    return json.dumps(payload, separators=(",", ":"))


class ServerSentEvent:
    """
    Helper class to format string data for Server-Sent Events (SSE).
    """

    _LINE_SEP_EXPR = re.compile(r"\r\n|\r|\n")
    SEPARATOR = "\n"

    TAG_COMMENT = ": "
    TAG_ID = "id: "
    TAG_EVENT = "event: "
    TAG_DATA = "data: "
    TAG_RETRY = "retry: "

    def __init__(
        self,
        data: Optional[Any] = None,
        *,
        event: Optional[str] = None,
        id: Optional[str] = None,
        retry: Optional[int] = None,
        comment: Optional[str] = None,
    ) -> None:
        self.data = str(data) if data is not None else None
        self.event = event
        self.id = id
        self.retry = retry
        self.comment = comment

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "ServerSentEvent":
        """Frame a JSON envelope, reusing its ``id`` as the SSE event id."""
        event_id = payload.get("id")
        return cls(encode_json(payload), id=str(event_id) if event_id else None)

    def _encode_impl(self, write_fn: Callable[[str], Any]) -> None:
        if self.comment is not None:
            for chunk in self._LINE_SEP_EXPR.split(self.comment):
                write_fn(f"{self.TAG_COMMENT}{chunk}{self.SEPARATOR}")

        if self.id is not None:
            # Clean newlines in the event id
            clean_id = self._LINE_SEP_EXPR.sub("", self.id)
            write_fn(f"{self.TAG_ID}{clean_id}{self.SEPARATOR}")

        if self.event is not None:
            clean_event = self._LINE_SEP_EXPR.sub("", self.event)
            write_fn(f"{self.TAG_EVENT}{clean_event}{self.SEPARATOR}")

        if self.data is not None:
            # Break multi-line data into multiple data: lines
            for chunk in self._LINE_SEP_EXPR.split(self.data):
                write_fn(f"{self.TAG_DATA}{chunk}{self.SEPARATOR}")

        if self.retry is not None:
            if not isinstance(self.retry, int):
                raise TypeError("retry argument must be int")
            write_fn(f"{self.TAG_RETRY}{self.retry}{self.SEPARATOR}")

        write_fn(self.SEPARATOR)

    def encode(self) -> bytes:
        buffer = io.StringIO()
        self._encode_impl(buffer.write)
        return buffer.getvalue().encode("utf-8")
