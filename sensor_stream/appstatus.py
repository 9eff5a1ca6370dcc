import logging
from typing import Callable, Optional

import anyio
from uvicorn.main import Server

logger = logging.getLogger(__name__)


class AppStatus:
    """Captures uvicorn's shutdown signal so open SSE streams can finish.

    uvicorn waits for running requests before it shuts down, and an SSE
    stream never completes on its own; streams wait on ``wait_for_exit``.
    """

    should_exit = False
    should_exit_event: Optional[anyio.Event] = None
    original_handler: Optional[Callable] = None

    @staticmethod
    def handle_exit(*args, **kwargs):
        logger.debug("Exit signal received, ending event streams")
        AppStatus.should_exit = True
        if AppStatus.should_exit_event is not None:
            AppStatus.should_exit_event.set()
        if AppStatus.original_handler is not None:
            AppStatus.original_handler(*args, **kwargs)

    @staticmethod
    def reset() -> None:
        """Forget the exit state; the event is bound to the loop that created it."""
        AppStatus.should_exit = False
        AppStatus.should_exit_event = None

    @staticmethod
    async def wait_for_exit() -> None:
        # Check if should_exit was set before anybody started waiting
        if AppStatus.should_exit:
            return

        if AppStatus.should_exit_event is None:
            AppStatus.should_exit_event = anyio.Event()

        # Check if should_exit got set while we set up the event
        if AppStatus.should_exit:
            return

        await AppStatus.should_exit_event.wait()


AppStatus.original_handler = Server.handle_exit
Server.handle_exit = AppStatus.handle_exit  # type: ignore
