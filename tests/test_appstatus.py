from unittest.mock import Mock

import anyio
import pytest
from uvicorn.main import Server

from sensor_stream.appstatus import AppStatus


@pytest.fixture
def original_handler(monkeypatch):
    handler = Mock()
    monkeypatch.setattr(AppStatus, "original_handler", handler)
    return handler


def test_uvicornExitHandler_isPatched():
    assert Server.handle_exit is AppStatus.handle_exit


def test_handleExit_setsFlagAndCallsOriginal(original_handler):
    AppStatus.handle_exit("server", 2, None)

    assert AppStatus.should_exit is True
    original_handler.assert_called_once_with("server", 2, None)


@pytest.mark.anyio
async def test_waitForExit_whenAlreadyExiting_thenReturnsImmediately(original_handler):
    AppStatus.handle_exit()

    with anyio.fail_after(0.5):
        await AppStatus.wait_for_exit()


@pytest.mark.anyio
async def test_waitForExit_wakesOnHandleExit(original_handler):
    woken = []

    async def waiter():
        await AppStatus.wait_for_exit()
        woken.append(True)

    with anyio.fail_after(2):
        async with anyio.create_task_group() as tg:
            tg.start_soon(waiter)
            tg.start_soon(waiter)
            await anyio.sleep(0.05)
            assert woken == []
            AppStatus.handle_exit()

    assert woken == [True, True]


def test_reset_clearsState(original_handler):
    AppStatus.handle_exit()
    AppStatus.reset()

    assert AppStatus.should_exit is False
    assert AppStatus.should_exit_event is None
