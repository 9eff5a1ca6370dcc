import logging
from typing import Callable

import httpx
import pytest
from asgi_lifespan import LifespanManager
from starlette.testclient import TestClient

from sensor_stream.app import create_app
from sensor_stream.appstatus import AppStatus
from sensor_stream.broadcaster import Broadcaster
from sensor_stream.config import Settings
from sensor_stream.registry import ClientEntry
from sensor_stream.state import ServerState

_log = logging.getLogger(__name__)
log_fmt = r"%(asctime)-15s %(levelname)s %(name)s %(funcName)s:%(lineno)d %(message)s"
datefmt = "%Y-%m-%d %H:%M:%S"
logging.basicConfig(format=log_fmt, level=logging.DEBUG, datefmt=datefmt)

logging.getLogger("httpx").setLevel(logging.INFO)
logging.getLogger("httpcore").setLevel(logging.INFO)


@pytest.fixture
def anyio_backend():
    """Exclude trio from tests"""
    return "asyncio"


@pytest.fixture(autouse=True)
def reset_appstatus_event():
    # avoid: RuntimeError: <asyncio.locks.Event object> is bound to a different event loop
    AppStatus.reset()
    yield
    AppStatus.reset()


@pytest.fixture
def state() -> ServerState:
    return ServerState()


@pytest.fixture
def broadcaster(state) -> Broadcaster:
    return Broadcaster(state)


@pytest.fixture
def add_client(state) -> Callable[..., ClientEntry]:
    def _add(transport, handle) -> ClientEntry:
        entry = ClientEntry(handle=handle)
        state.connect(transport, entry)
        return entry

    return _add


@pytest.fixture
def settings() -> Settings:
    # No periodic ticks and no pings: tests drive the stream by hand.
    return Settings(tick_interval=0, sse_ping_interval=0)


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app=app, base_url="http://localhost:3000") as client:
        _log.info("Yielding Client")
        yield client


@pytest.fixture
async def httpx_client(app):
    async with LifespanManager(app):
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(
            transport=transport, base_url="http://localhost:3000"
        ) as client:
            _log.info("Yielding Client")
            yield client
