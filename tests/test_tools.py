"""
Tests for MCP tools.

Tests the MCP tool implementations for triggers and the control bridge.
"""

import json

import pytest

from chuk_mcp_strudel.bridge import BroadcastEvaluator, ControlBridge
from chuk_mcp_strudel.dispatch import Dispatcher
from chuk_mcp_strudel.evaluators import LoggingEvaluator
from chuk_mcp_strudel.surface import ControlSurface
from chuk_mcp_strudel.tools import register_bridge_tools, register_trigger_tools
from chuk_mcp_strudel.triggers import TriggerLoader


# Mock MCP server for testing tools
class MockMCPServer:
    """Mock MCP server that just stores registered tools."""

    def __init__(self, name: str):
        self.name = name
        self.tools: dict = {}

    def tool(self, func):
        """Decorator to register a tool."""
        self.tools[func.__name__] = func
        return func


@pytest.fixture
def surface(evaluator: LoggingEvaluator) -> ControlSurface:
    return ControlSurface(TriggerLoader().build_registry(), Dispatcher(evaluator))


class TestTriggerTools:
    """Tests for trigger tools."""

    def test_registration(self, surface: ControlSurface) -> None:
        """All trigger tools are registered with the server."""
        mcp = MockMCPServer("test")
        tools = register_trigger_tools(mcp, surface)
        assert set(tools) == set(mcp.tools) == {
            "strudel_list_triggers",
            "strudel_fire_trigger",
            "strudel_evaluate",
            "strudel_stop",
        }

    @pytest.mark.asyncio
    async def test_list_triggers(self, surface: ControlSurface) -> None:
        """List triggers tool."""
        tools = register_trigger_tools(MockMCPServer("test"), surface)

        data = json.loads(await tools["strudel_list_triggers"]())
        assert data["status"] == "success"
        assert data["count"] == 4
        assert [t["name"] for t in data["triggers"]] == ["a", "b", "c", "stop"]

    @pytest.mark.asyncio
    async def test_fire_trigger(self, surface: ControlSurface, evaluator: LoggingEvaluator) -> None:
        """Fire trigger tool plays the bound pattern."""
        tools = register_trigger_tools(MockMCPServer("test"), surface)

        data = json.loads(await tools["strudel_fire_trigger"](name="a"))
        assert data["status"] == "success"
        assert data["command"] == {
            "type": "evaluate",
            "sourceText": "s('bd,jvbass(3,8)').jux(rev)",
        }
        assert evaluator.current == "s('bd,jvbass(3,8)').jux(rev)"

    @pytest.mark.asyncio
    async def test_fire_unknown_trigger(
        self, surface: ControlSurface, evaluator: LoggingEvaluator
    ) -> None:
        """Fire trigger returns an error listing the available triggers."""
        tools = register_trigger_tools(MockMCPServer("test"), surface)

        data = json.loads(await tools["strudel_fire_trigger"](name="z"))
        assert data["status"] == "error"
        assert data["available"] == ["a", "b", "c", "stop"]
        assert evaluator.history == []

    @pytest.mark.asyncio
    async def test_evaluate_and_stop(
        self, surface: ControlSurface, evaluator: LoggingEvaluator
    ) -> None:
        """Evaluate and stop tools go through the dispatcher."""
        tools = register_trigger_tools(MockMCPServer("test"), surface)

        data = json.loads(await tools["strudel_evaluate"](source_text='s("bd*4")'))
        assert data["status"] == "success"
        assert data["command"]["sourceText"] == 's("bd*4")'

        data = json.loads(await tools["strudel_stop"]())
        assert data["command"] == {"type": "stop"}
        assert evaluator.history == ['s("bd*4")', None]

    @pytest.mark.asyncio
    async def test_evaluate_without_bridge(self) -> None:
        """Sending code before the bridge is up reports an error."""
        bridge = ControlBridge()
        surface = ControlSurface(
            TriggerLoader().build_registry(), Dispatcher(BroadcastEvaluator(bridge))
        )
        tools = register_trigger_tools(MockMCPServer("test"), surface)

        data = json.loads(await tools["strudel_evaluate"](source_text='s("bd")'))
        assert data["status"] == "error"
        assert "not running" in data["message"]


class TestBridgeTools:
    """Tests for bridge tools."""

    @pytest.mark.asyncio
    async def test_lifecycle(self) -> None:
        """Start, inspect and stop the bridge."""
        bridge = ControlBridge()
        tools = register_bridge_tools(MockMCPServer("test"), bridge)

        try:
            data = json.loads(await tools["strudel_start_bridge"]())
            assert data["status"] == "success"
            assert data["running"] is True
            assert data["url"].startswith("ws://127.0.0.1:")

            again = json.loads(await tools["strudel_start_bridge"]())
            assert again["status"] == "success"
            assert again["port"] == data["port"]

            status = json.loads(await tools["strudel_bridge_status"]())
            assert status["clients"] == 0

            data = json.loads(await tools["strudel_stop_bridge"]())
            assert data["status"] == "success"
            assert not bridge.running
        finally:
            await bridge.stop()

    @pytest.mark.asyncio
    async def test_stop_when_not_running(self) -> None:
        """Stopping a bridge that is not running is an error."""
        tools = register_bridge_tools(MockMCPServer("test"), ControlBridge())

        data = json.loads(await tools["strudel_stop_bridge"]())
        assert data["status"] == "error"

    @pytest.mark.asyncio
    async def test_status_when_not_running(self) -> None:
        """Status works before start."""
        tools = register_bridge_tools(MockMCPServer("test"), ControlBridge())

        data = json.loads(await tools["strudel_bridge_status"]())
        assert data["status"] == "success"
        assert data["running"] is False
        assert data["url"] is None
