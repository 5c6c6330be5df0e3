"""
Tests for the control bridge.

Tests cover:
- Bridge lifecycle and status
- Greeting, broadcast fan-out and path checks over real loopback sockets
- Lag reporting for slow players
- End to end: host trigger -> bridge -> remote channel -> player evaluator
"""

import asyncio
import contextlib
import json
import threading

import pytest
import pytest_asyncio
from websockets.asyncio.client import connect
from websockets.exceptions import InvalidStatus

from chuk_mcp_strudel.bridge import BroadcastEvaluator, ControlBridge
from chuk_mcp_strudel.bridge.server import _Player
from chuk_mcp_strudel.channel import RemoteControlChannel
from chuk_mcp_strudel.constants import ConnectionState
from chuk_mcp_strudel.dispatch import Dispatcher
from chuk_mcp_strudel.errors import StrudelControlError
from chuk_mcp_strudel.evaluators import LoggingEvaluator
from chuk_mcp_strudel.models import BridgeConfig, Evaluate, Stop
from chuk_mcp_strudel.surface import ControlSurface
from chuk_mcp_strudel.triggers import TriggerLoader


async def wait_until(predicate, timeout: float = 2.0) -> None:
    """Poll until predicate() is true."""
    deadline = asyncio.get_running_loop().time() + timeout
    while not predicate():
        if asyncio.get_running_loop().time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.01)


async def recv_json(websocket) -> dict:
    return json.loads(await asyncio.wait_for(websocket.recv(), timeout=2.0))


@pytest_asyncio.fixture
async def bridge():
    """A running bridge on an ephemeral loopback port."""
    bridge = ControlBridge()
    await bridge.start()
    yield bridge
    await bridge.stop()


class TestLifecycle:
    """Tests for starting and stopping the bridge."""

    @pytest.mark.asyncio
    async def test_start_and_stop(self) -> None:
        """The bridge reports its URL while running."""
        bridge = ControlBridge()
        assert not bridge.running
        assert bridge.url is None

        url = await bridge.start()
        assert bridge.running
        assert url == f"ws://127.0.0.1:{bridge.port}/ws"
        assert bridge.port and bridge.port > 0

        await bridge.stop()
        assert not bridge.running
        assert bridge.port is None

    @pytest.mark.asyncio
    async def test_start_twice(self, bridge: ControlBridge) -> None:
        """Starting a running bridge is an error."""
        with pytest.raises(StrudelControlError):
            await bridge.start()

    @pytest.mark.asyncio
    async def test_start_without_bound_socket(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """A server with no listening socket is shut down and reported."""
        monkeypatch.setattr(ControlBridge, "url", property(lambda self: None))
        bridge = ControlBridge()

        with pytest.raises(StrudelControlError, match="no listening socket"):
            await bridge.start()
        assert not bridge.running

    @pytest.mark.asyncio
    async def test_stop_twice(self, bridge: ControlBridge) -> None:
        """Stopping is idempotent."""
        await bridge.stop()
        await bridge.stop()
        assert not bridge.running

    def test_broadcast_requires_running_bridge(self) -> None:
        """Broadcasting before start is an error."""
        with pytest.raises(StrudelControlError):
            ControlBridge().broadcast(Stop())

    def test_from_config(self) -> None:
        """Bridges can be built from configuration."""
        bridge = ControlBridge.from_config(BridgeConfig(port=8765, path="/live", capacity=4))
        assert bridge.requested_port == 8765
        assert bridge.path == "/live"
        assert bridge.capacity == 4


class TestBroadcast:
    """Tests for fan-out to players."""

    @pytest.mark.asyncio
    async def test_hello(self, bridge: ControlBridge) -> None:
        """Every player is greeted."""
        async with connect(bridge.url) as websocket:
            assert await recv_json(websocket) == {"type": "message", "text": "hello"}

    @pytest.mark.asyncio
    async def test_fan_out(self, bridge: ControlBridge) -> None:
        """Broadcast frames reach every player in order."""
        async with connect(bridge.url) as first, connect(bridge.url) as second:
            await recv_json(first)
            await recv_json(second)
            await wait_until(lambda: bridge.client_count == 2)

            assert bridge.broadcast(Evaluate(source_text='s("bd")')) == 2
            bridge.broadcast(Stop())

            for websocket in (first, second):
                assert await recv_json(websocket) == {"type": "evaluate", "sourceText": 's("bd")'}
                assert await recv_json(websocket) == {"type": "stop"}

        await wait_until(lambda: bridge.client_count == 0)
        assert bridge.status()["broadcasts"] == 2

    @pytest.mark.asyncio
    async def test_broadcast_from_thread(self, bridge: ControlBridge) -> None:
        """Broadcasts from other threads are delivered."""
        async with connect(bridge.url) as websocket:
            await recv_json(websocket)
            await wait_until(lambda: bridge.client_count == 1)

            thread = threading.Thread(target=bridge.broadcast, args=(Stop(),))
            thread.start()
            thread.join()

            assert await recv_json(websocket) == {"type": "stop"}

    @pytest.mark.asyncio
    async def test_other_paths_rejected(self, bridge: ControlBridge) -> None:
        """Only the configured path accepts upgrades."""
        with pytest.raises(InvalidStatus):
            async with connect(f"ws://127.0.0.1:{bridge.port}/elsewhere"):
                pass

    @pytest.mark.asyncio
    async def test_broadcast_without_players(self, bridge: ControlBridge) -> None:
        """Broadcasting with nobody listening is fine."""
        assert bridge.broadcast(Stop()) == 0


class TestLag:
    """Tests for slow-player handling."""

    @pytest.mark.asyncio
    async def test_overflow_drops_oldest(self) -> None:
        """A full queue drops its oldest frame and counts the loss."""
        player = _Player(remote="test", queue=asyncio.Queue(maxsize=2))
        for frame in ("1", "2", "3", "4"):
            player.offer(frame)

        assert player.lagged == 2
        assert player.queue.get_nowait() == "3"
        assert player.queue.get_nowait() == "4"

    @pytest.mark.asyncio
    async def test_lag_reported_before_next_frame(self) -> None:
        """A lagging player is told how many frames it missed."""

        class RecordingConnection:
            def __init__(self) -> None:
                self.sent: list[str] = []

            async def send(self, frame: str) -> None:
                self.sent.append(frame)

        bridge = ControlBridge(capacity=2)
        player = _Player(remote="test", queue=asyncio.Queue(maxsize=2))
        for frame in ("1", "2", "3", "4", "5"):
            player.offer(frame)
        connection = RecordingConnection()

        pump = asyncio.create_task(bridge._pump(connection, player))
        await wait_until(lambda: len(connection.sent) == 3)
        pump.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await pump

        assert json.loads(connection.sent[0]) == {
            "type": "error",
            "message": "broadcast lagged by 3 messages",
        }
        assert connection.sent[1:] == ["4", "5"]
        assert player.sent == 2


class TestEndToEnd:
    """Host triggers played by a remote channel."""

    @pytest.mark.asyncio
    async def test_trigger_reaches_player(self, bridge: ControlBridge) -> None:
        """Firing a host trigger plays the pattern on the player."""
        host = ControlSurface(
            TriggerLoader().build_registry(), Dispatcher(BroadcastEvaluator(bridge))
        )
        player = LoggingEvaluator()
        channel = RemoteControlChannel(Dispatcher(player), close_timeout=1.0)

        await channel.open(bridge.url)
        assert await channel.wait_until_open(timeout=2.0)
        await wait_until(lambda: bridge.client_count == 1)

        await host.fire("a")
        host.evaluate('s("bd")')
        await host.fire("stop")
        await wait_until(lambda: len(player.history) == 3)

        assert player.history == ["s('bd,jvbass(3,8)').jux(rev)", 's("bd")', None]
        assert channel.commands_dispatched == 3
        assert list(channel.diagnostics) == []

        await channel.close()
        assert channel.state is ConnectionState.DISCONNECTED
        await wait_until(lambda: bridge.client_count == 0)

    @pytest.mark.asyncio
    async def test_bridge_shutdown_disconnects_player(self, bridge: ControlBridge) -> None:
        """Stopping the bridge closes the player's channel."""
        channel = RemoteControlChannel(Dispatcher(LoggingEvaluator()), close_timeout=1.0)
        await channel.open(bridge.url)
        assert await channel.wait_until_open(timeout=2.0)

        await bridge.stop()
        await asyncio.wait_for(channel.wait_finished(), timeout=2.0)

        assert channel.state is ConnectionState.DISCONNECTED
        await channel.close()

    @pytest.mark.asyncio
    async def test_unreachable_endpoint(self) -> None:
        """Connecting to a closed port reports a connection failure."""
        bridge = ControlBridge()
        await bridge.start()
        url = bridge.url
        await bridge.stop()

        channel = RemoteControlChannel(Dispatcher(LoggingEvaluator()), close_timeout=1.0)
        await channel.open(url)
        await asyncio.wait_for(channel.wait_finished(), timeout=5.0)

        assert channel.state is ConnectionState.DISCONNECTED
        assert channel.diagnostics[-1].kind.value == "connection_failure"
