import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from sensor_stream.models import Transport
from sensor_stream.registry import ClientEntry, Registry

logger = logging.getLogger(__name__)


@dataclass
class TransportCounters:
    messages_sent: int = 0
    total_clients: int = 0


class ServerState:
    """Registries and counters shared by the broadcaster and the connection handlers.

    One instance lives on ``app.state.server`` for the lifetime of the process.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self.clock = clock
        self.start_time = clock()
        self.registries: Dict[Transport, Registry] = {
            transport: Registry(transport) for transport in Transport
        }
        self.counters: Dict[Transport, TransportCounters] = {
            transport: TransportCounters() for transport in Transport
        }

    @property
    def sse(self) -> Registry:
        return self.registries[Transport.SSE]

    @property
    def websocket(self) -> Registry:
        return self.registries[Transport.WEBSOCKET]

    def connect(self, transport: Transport, entry: ClientEntry) -> None:
        self.registries[transport].register(entry)
        self.counters[transport].total_clients += 1

    def disconnect(self, transport: Transport, client_id: str) -> Optional[ClientEntry]:
        return self.registries[transport].deregister(client_id)

    def record_delivery(self, transport: Transport, entry: ClientEntry) -> None:
        entry.message_count += 1
        self.counters[transport].messages_sent += 1

    @property
    def total_messages_sent(self) -> int:
        return sum(counter.messages_sent for counter in self.counters.values())

    def elapsed(self) -> float:
        """Seconds since the state was created."""
        return max(self.clock() - self.start_time, 0.0)

    def clear(self) -> None:
        """Reset the lifetime counters. Connected clients stay registered."""
        for counter in self.counters.values():
            counter.messages_sent = 0
            counter.total_clients = 0
        logger.info("Counters cleared")
