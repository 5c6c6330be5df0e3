"""
Pytest configuration and shared fixtures.
"""

import asyncio
import contextlib
import tempfile
from pathlib import Path

import pytest

from chuk_mcp_strudel.dispatch import Dispatcher
from chuk_mcp_strudel.evaluators import LoggingEvaluator
from chuk_mcp_strudel.triggers import LIBRARY_PATH

_CLOSED = object()


class FakeWebSocket:
    """In-memory stand-in for a client connection."""

    def __init__(self) -> None:
        self.inbox: asyncio.Queue = asyncio.Queue()
        self.close_calls = 0
        self.hang_on_close = False

    async def feed(self, frame) -> None:
        """Deliver a frame (or an exception to raise) to the reader."""
        await self.inbox.put(frame)

    async def drop(self) -> None:
        """Simulate the peer closing cleanly."""
        await self.inbox.put(_CLOSED)

    async def close(self) -> None:
        self.close_calls += 1
        if self.hang_on_close:
            await asyncio.sleep(3600)
        await self.inbox.put(_CLOSED)

    def __aiter__(self):
        return self

    async def __anext__(self):
        item = await self.inbox.get()
        if item is _CLOSED:
            raise StopAsyncIteration
        if isinstance(item, BaseException):
            raise item
        return item


class FakeConnector:
    """Connector that hands out FakeWebSockets and counts releases."""

    def __init__(self, failures: list[BaseException] | None = None) -> None:
        self.failures = list(failures or [])
        self.endpoints: list[str] = []
        self.sockets: list[FakeWebSocket] = []
        self.released = 0

    def __call__(self, endpoint: str):
        self.endpoints.append(endpoint)
        return self._session()

    @contextlib.asynccontextmanager
    async def _session(self):
        if self.failures:
            raise self.failures.pop(0)
        websocket = FakeWebSocket()
        self.sockets.append(websocket)
        try:
            yield websocket
        finally:
            self.released += 1

    @property
    def current(self) -> FakeWebSocket:
        return self.sockets[-1]


class FailingEvaluator:
    """Evaluator that rejects every program."""

    def evaluate(self, source_text: str) -> None:
        raise ValueError(f"cannot parse: {source_text}")

    def stop(self) -> None:
        raise RuntimeError("stop failed")


async def settle(rounds: int = 10) -> None:
    """Let pending tasks run."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def temp_dir() -> Path:
    """Create a temporary directory for test outputs."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def library_path() -> Path:
    """Path to the built-in trigger library."""
    return LIBRARY_PATH


@pytest.fixture
def evaluator() -> LoggingEvaluator:
    """Evaluator that records every call."""
    return LoggingEvaluator()


@pytest.fixture
def dispatcher(evaluator: LoggingEvaluator) -> Dispatcher:
    return Dispatcher(evaluator)


@pytest.fixture
def connector() -> FakeConnector:
    return FakeConnector()
