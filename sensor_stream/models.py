"""Event envelopes delivered over both transports."""
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class Transport(str, Enum):
    SSE = "sse"
    WEBSOCKET = "websocket"


class Target(str, Enum):
    """Which registries a broadcast reaches; values match the HTTP API."""

    ALL = "all"
    SSE = "sse"
    WEBSOCKET = "websocket"

    @property
    def transports(self) -> Tuple[Transport, ...]:
        if self is Target.ALL:
            return (Transport.SSE, Transport.WEBSOCKET)
        return (Transport(self.value),)


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def isoformat(moment: Optional[datetime] = None) -> str:
    """ISO-8601 in UTC with millisecond precision and a ``Z`` suffix."""
    utc = (moment or utcnow()).astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class SensorEvent:
    """One synthetic reading produced by a generator tick."""

    sequence: int
    value: float
    simulated_network_delay: float
    id: str = field(default_factory=new_id)
    timestamp: str = field(default_factory=isoformat)
    server_time: int = field(default_factory=lambda: int(time.time() * 1000))
    type: str = "sensor-data"

    def to_message(self, transport: Transport) -> Dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "sequence": self.sequence,
            "value": self.value,
            "networkDelay": self.simulated_network_delay,
            "packetLoss": False,
            "type": self.type,
            "serverTime": self.server_time,
            "protocol": transport.value,
        }


@dataclass(frozen=True)
class BroadcastEvent:
    message: str
    id: str = field(default_factory=new_id)
    timestamp: str = field(default_factory=isoformat)
    type: str = "broadcast"

    def to_message(self, transport: Transport) -> Dict[str, Any]:
        return {
            "type": self.type,
            "message": self.message,
            "timestamp": self.timestamp,
            "id": self.id,
            "protocol": transport.value,
        }


@dataclass(frozen=True)
class ConnectionEvent:
    """Welcome event; ``id`` is the id assigned to the new client."""

    id: str
    transport: Transport
    timestamp: str = field(default_factory=isoformat)
    type: str = "connection"

    @property
    def message(self) -> str:
        if self.transport is Transport.SSE:
            return "SSE connection established"
        return "WebSocket connection established"

    def to_message(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "id": self.id,
            "message": self.message,
            "timestamp": self.timestamp,
            "protocol": self.transport.value,
        }


@dataclass(frozen=True)
class EchoEvent:
    original: Any
    timestamp: str = field(default_factory=isoformat)
    type: str = "echo"

    def to_message(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "original": self.original,
            "timestamp": self.timestamp,
            "protocol": Transport.WEBSOCKET.value,
        }
