from sensor_stream.app import create_app
from sensor_stream.broadcaster import Broadcaster
from sensor_stream.config import Settings
from sensor_stream.event import ServerSentEvent
from sensor_stream.generator import EventGenerator
from sensor_stream.models import (
    BroadcastEvent,
    ConnectionEvent,
    EchoEvent,
    SensorEvent,
    Target,
    Transport,
)
from sensor_stream.registry import ClientEntry, Registry
from sensor_stream.sse import EventSourceResponse
from sensor_stream.state import ServerState
from sensor_stream.stats import StatsAggregator

__version__ = "0.1.0"

__all__ = [
    "Broadcaster",
    "BroadcastEvent",
    "ClientEntry",
    "ConnectionEvent",
    "EchoEvent",
    "EventGenerator",
    "EventSourceResponse",
    "Registry",
    "SensorEvent",
    "ServerSentEvent",
    "ServerState",
    "Settings",
    "StatsAggregator",
    "Target",
    "Transport",
    "create_app",
]
