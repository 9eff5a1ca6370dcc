from typing import Any, Dict

from sensor_stream.models import Transport
from sensor_stream.state import ServerState


def format_uptime(milliseconds: float) -> str:
    """``"{h}h {m}m {s}s"``; hours is the largest unit."""
    seconds = int(milliseconds // 1000)
    hours, remainder = divmod(seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours}h {minutes}m {secs}s"


def messages_per_second(messages_sent: int, elapsed_seconds: float) -> float:
    if elapsed_seconds <= 0:
        return 0.0
    return messages_sent / elapsed_seconds


class StatsAggregator:
    """Read-only view over ``ServerState`` in the shape the dashboard polls."""

    def __init__(self, state: ServerState) -> None:
        self.state = state

    def transport_snapshot(
        self, transport: Transport, elapsed: float
    ) -> Dict[str, Any]:
        counters = self.state.counters[transport]
        return {
            "activeClients": len(self.state.registries[transport]),
            "totalClients": counters.total_clients,
            "messagesSent": counters.messages_sent,
            "messagesPerSecond": messages_per_second(counters.messages_sent, elapsed),
        }

    def snapshot(self) -> Dict[str, Any]:
        elapsed = self.state.elapsed()
        return {
            "uptime": {
                "seconds": int(elapsed),
                "humanReadable": format_uptime(elapsed * 1000),
            },
            "sse": self.transport_snapshot(Transport.SSE, elapsed),
            "websocket": self.transport_snapshot(Transport.WEBSOCKET, elapsed),
            "total": {
                "activeClients": sum(len(r) for r in self.state.registries.values()),
                "messagesSent": self.state.total_messages_sent,
            },
        }
