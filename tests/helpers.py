from typing import Any, Callable, Dict, List, Mapping

import anyio


class FakeHandle:
    """Records payloads; ``fail`` makes every send raise like a full buffer."""

    def __init__(self, fail: bool = False, closed: bool = False):
        self.fail = fail
        self.closed = closed
        self.sent: List[Dict[str, Any]] = []

    @property
    def is_open(self) -> bool:
        return not self.closed

    def send(self, payload: Mapping[str, Any]) -> None:
        if self.closed:
            raise anyio.ClosedResourceError()
        if self.fail:
            raise anyio.WouldBlock()
        self.sent.append(dict(payload))

    def close(self) -> None:
        self.closed = True


async def wait_for(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    with anyio.fail_after(timeout):
        while not predicate():
            await anyio.sleep(0.01)
