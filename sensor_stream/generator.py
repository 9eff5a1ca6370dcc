import logging
import random
from typing import Optional

import anyio

from sensor_stream.broadcaster import Broadcaster
from sensor_stream.models import SensorEvent
from sensor_stream.state import ServerState

logger = logging.getLogger(__name__)


class EventGenerator:
    """Produces one synthetic sensor reading per tick.

    ``value`` and ``simulated_network_delay`` are drawn uniformly from [0, 100).
    With probability ``packet_loss`` a tick produces nothing at all.

    ``sequence`` is the combined count of sensor messages sent over both
    transports at generation time, not a private counter: it can repeat
    (a tick with no clients, a dropped tick) and is informational only.
    """

    DEFAULT_INTERVAL = 1.0
    DEFAULT_PACKET_LOSS = 0.02

    def __init__(
        self,
        state: ServerState,
        interval: float = DEFAULT_INTERVAL,
        packet_loss: float = DEFAULT_PACKET_LOSS,
        rng: Optional[random.Random] = None,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be greater than 0")
        if not 0.0 <= packet_loss <= 1.0:
            raise ValueError("packet_loss must be between 0 and 1")
        self.state = state
        self.interval = interval
        self.packet_loss = packet_loss
        self._rng = rng or random.Random()

    def generate(self) -> Optional[SensorEvent]:
        sequence = self.state.total_messages_sent
        network_delay = self._rng.random() * 100
        if self._rng.random() < self.packet_loss:
            logger.debug("Simulated packet loss at sequence %d", sequence)
            return None
        return SensorEvent(
            sequence=sequence,
            value=self._rng.random() * 100,
            simulated_network_delay=network_delay,
        )

    async def run(self, broadcaster: Broadcaster) -> None:
        """Tick forever on a fixed period until cancelled."""
        logger.info("Generating sensor data every %ss", self.interval)
        deadline = anyio.current_time()
        while True:
            deadline = max(deadline + self.interval, anyio.current_time())
            await anyio.sleep_until(deadline)
            try:
                event = self.generate()
                if event is not None:
                    broadcaster.tick(event)
            except Exception:
                logger.exception("Tick failed, continuing")
