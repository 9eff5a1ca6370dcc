import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterator, List, Optional

from sensor_stream.exceptions import DuplicateClientError
from sensor_stream.models import Transport, new_id, utcnow

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class ClientEntry:
    """A connected peer.

    ``handle`` is the transport specific send capability: a ``PushHandle`` for
    SSE clients, a ``SocketHandle`` for WebSocket clients.
    """

    handle: Any
    id: str = field(default_factory=new_id)
    connected_at: datetime = field(default_factory=utcnow)
    message_count: int = 0


class Registry:
    """Clients currently able to receive sends on one transport."""

    def __init__(self, transport: Transport) -> None:
        self.transport = transport
        self._entries: Dict[str, ClientEntry] = {}

    def register(self, entry: ClientEntry) -> None:
        if entry.id in self._entries:
            raise DuplicateClientError(entry.id)
        self._entries[entry.id] = entry
        logger.debug("%s registry: +%s (%d)", self.transport.value, entry.id, len(self))

    def deregister(self, client_id: str) -> Optional[ClientEntry]:
        """Remove a client. Absent ids are ignored, so close and eviction may race."""
        entry = self._entries.pop(client_id, None)
        if entry is not None:
            logger.debug(
                "%s registry: -%s (%d)", self.transport.value, client_id, len(self)
            )
        return entry

    def get(self, client_id: str) -> Optional[ClientEntry]:
        return self._entries.get(client_id)

    def snapshot(self) -> List[ClientEntry]:
        return list(self._entries.values())

    def __iter__(self) -> Iterator[ClientEntry]:
        return self._live(self.snapshot())

    def _live(self, entries: List[ClientEntry]) -> Iterator[ClientEntry]:
        # Members removed after the snapshot was taken are skipped.
        for entry in entries:
            if self._entries.get(entry.id) is entry:
                yield entry

    def __contains__(self, client_id: object) -> bool:
        return client_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)
