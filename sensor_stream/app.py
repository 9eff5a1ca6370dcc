import contextlib
import logging
import random
from typing import AsyncIterator, Optional

import anyio
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.routing import Route, WebSocketRoute

from sensor_stream import endpoints
from sensor_stream.broadcaster import Broadcaster
from sensor_stream.config import Settings
from sensor_stream.connections import SensorSocket, sse_endpoint
from sensor_stream.generator import EventGenerator
from sensor_stream.state import ServerState
from sensor_stream.stats import StatsAggregator

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None, rng: Optional[random.Random] = None
) -> Starlette:
    """Build the demo server.

    Everything mutable lives on ``app.state``: ``settings``, ``server`` (the
    registries and counters), ``broadcaster``, ``generator`` and ``stats``.
    The generator loop runs for the lifetime of the application.
    """
    settings = settings or Settings.from_config()
    state = ServerState()
    broadcaster = Broadcaster(state)
    generator = EventGenerator(
        state,
        interval=settings.tick_interval or EventGenerator.DEFAULT_INTERVAL,
        packet_loss=settings.packet_loss,
        rng=rng,
    )

    @contextlib.asynccontextmanager
    async def lifespan(app: Starlette) -> AsyncIterator[None]:
        async with anyio.create_task_group() as task_group:
            if settings.tick_interval > 0:
                task_group.start_soon(generator.run, broadcaster)
            else:
                logger.info("Periodic generation disabled")
            yield
            task_group.cancel_scope.cancel()

    routes = [
        Route("/", endpoint=endpoints.home),
        Route("/sse", endpoint=sse_endpoint),
        Route("/api/stats", endpoint=endpoints.stats),
        Route("/api/broadcast", endpoint=endpoints.broadcast, methods=["POST"]),
        WebSocketRoute("/", endpoint=SensorSocket),
    ]
    middleware = [
        Middleware(
            CORSMiddleware,
            allow_origins=list(settings.cors_origins),
            allow_methods=["GET", "POST"],
            allow_headers=["*"],
        )
    ]

    app = Starlette(routes=routes, middleware=middleware, lifespan=lifespan)
    app.state.settings = settings
    app.state.server = state
    app.state.broadcaster = broadcaster
    app.state.generator = generator
    app.state.stats = StatsAggregator(state)
    return app
