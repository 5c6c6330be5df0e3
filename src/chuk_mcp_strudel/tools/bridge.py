"""
Bridge tools - MCP tools for the control bridge lifecycle.

Players (browser pages or `chuk-mcp-strudel-player`) connect to the
bridge's WebSocket URL to receive commands.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from chuk_mcp_strudel.bridge import ControlBridge
from chuk_mcp_strudel.constants import ErrorMessages, SuccessMessages

if TYPE_CHECKING:
    from chuk_mcp_server import ChukMCPServer

logger = logging.getLogger(__name__)


def register_bridge_tools(
    mcp: ChukMCPServer,
    bridge: ControlBridge,
) -> dict[str, Any]:
    """
    Register bridge lifecycle tools with the MCP server.

    Args:
        mcp: The MCP server instance
        bridge: The control bridge

    Returns:
        Dictionary of registered tool functions
    """
    tools: dict[str, Any] = {}

    @mcp.tool  # type: ignore[arg-type]
    async def strudel_start_bridge() -> str:
        """
        Start the control bridge.

        Players connect to the returned WebSocket URL. Starting a bridge
        that is already running just reports its URL.

        Returns:
            JSON string with the bridge URL and port

        Example:
            strudel_start_bridge()
        """
        try:
            if bridge.running:
                return json.dumps(
                    {
                        "status": "success",
                        "message": ErrorMessages.BRIDGE_ALREADY_RUNNING.format(port=bridge.port),
                        **bridge.status(),
                    }
                )
            url = await bridge.start()
            return json.dumps(
                {
                    "status": "success",
                    "message": SuccessMessages.BRIDGE_STARTED.format(url=url),
                    **bridge.status(),
                }
            )
        except Exception as e:
            logger.exception("Failed to start bridge")
            return json.dumps({"status": "error", "message": str(e)})

    tools["strudel_start_bridge"] = strudel_start_bridge

    @mcp.tool  # type: ignore[arg-type]
    async def strudel_bridge_status() -> str:
        """
        Report the bridge's URL, port and connected players.

        Returns:
            JSON string with bridge status

        Example:
            strudel_bridge_status()
        """
        try:
            return json.dumps({"status": "success", **bridge.status()})
        except Exception as e:
            logger.exception("Failed to read bridge status")
            return json.dumps({"status": "error", "message": str(e)})

    tools["strudel_bridge_status"] = strudel_bridge_status

    @mcp.tool  # type: ignore[arg-type]
    async def strudel_stop_bridge() -> str:
        """
        Stop the control bridge and disconnect every player.

        Returns:
            JSON string confirming shutdown

        Example:
            strudel_stop_bridge()
        """
        try:
            if not bridge.running:
                return json.dumps(
                    {"status": "error", "message": ErrorMessages.BRIDGE_NOT_RUNNING}
                )
            await bridge.stop()
            return json.dumps({"status": "success", "message": SuccessMessages.BRIDGE_STOPPED})
        except Exception as e:
            logger.exception("Failed to stop bridge")
            return json.dumps({"status": "error", "message": str(e)})

    tools["strudel_stop_bridge"] = strudel_stop_bridge

    return tools
