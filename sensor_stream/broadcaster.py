import logging
from typing import Any, Callable, Dict, Mapping

from sensor_stream.models import BroadcastEvent, SensorEvent, Target, Transport
from sensor_stream.registry import ClientEntry
from sensor_stream.state import ServerState

logger = logging.getLogger(__name__)

PayloadFactory = Callable[[Transport], Mapping[str, Any]]


class Broadcaster:
    """Fans events out to every registered client of both transports.

    Sends only enqueue into each client's bounded buffer, so a fan-out never
    waits on a client and never delays the next tick. A failed send only ever
    costs the failing client its registry entry: the error is logged, the
    handle closed, and delivery to everyone else goes on. Nothing raised by a
    client handle reaches the caller.
    """

    def __init__(self, state: ServerState) -> None:
        self.state = state

    def tick(self, event: SensorEvent) -> Dict[Transport, int]:
        """Deliver one sensor reading; successful sends are counted."""
        return {
            transport: self._deliver(transport, event.to_message, counted=True)
            for transport in Transport
        }

    def broadcast(
        self, message: str, target: Target = Target.ALL
    ) -> Dict[Transport, int]:
        """Deliver an operator message. Sensor counters are left untouched."""
        event = BroadcastEvent(message=message)
        delivered = {
            transport: self._deliver(transport, event.to_message)
            for transport in target.transports
        }
        logger.info(
            "Broadcast %s to %s: %s",
            event.id,
            target.value,
            {t.value: n for t, n in delivered.items()},
        )
        return delivered

    def _deliver(
        self, transport: Transport, payload: PayloadFactory, counted: bool = False
    ) -> int:
        message = payload(transport)
        delivered = 0
        for entry in self.state.registries[transport]:
            if not entry.handle.is_open:
                self._evict(transport, entry, "handle closed")
                continue
            try:
                entry.handle.send(message)
            except Exception as e:
                self._evict(transport, entry, e)
                entry.handle.close()
                continue
            delivered += 1
            if counted:
                self.state.record_delivery(transport, entry)
        return delivered

    def _evict(self, transport: Transport, entry: ClientEntry, reason: object) -> None:
        if self.state.disconnect(transport, entry.id) is not None:
            logger.warning(
                "Evicted %s client %s: %r", transport.value, entry.id, reason
            )
