"""
Trigger tools - MCP tools for firing triggers and sending pattern programs.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from chuk_mcp_strudel.constants import SuccessMessages
from chuk_mcp_strudel.errors import UnknownTrigger
from chuk_mcp_strudel.surface import ControlSurface

if TYPE_CHECKING:
    from chuk_mcp_server import ChukMCPServer

logger = logging.getLogger(__name__)


def register_trigger_tools(
    mcp: ChukMCPServer,
    surface: ControlSurface,
) -> dict[str, Any]:
    """
    Register trigger tools with the MCP server.

    Args:
        mcp: The MCP server instance
        surface: The control surface commands go through

    Returns:
        Dictionary of registered tool functions
    """
    tools: dict[str, Any] = {}

    @mcp.tool  # type: ignore[arg-type]
    async def strudel_list_triggers() -> str:
        """
        List the available triggers.

        Returns:
            JSON string with each trigger's name, action and pattern program

        Example:
            strudel_list_triggers()
        """
        try:
            triggers = surface.registry.describe()
            return json.dumps(
                {"status": "success", "triggers": triggers, "count": len(triggers)}
            )
        except Exception as e:
            logger.exception("Failed to list triggers")
            return json.dumps({"status": "error", "message": str(e)})

    tools["strudel_list_triggers"] = strudel_list_triggers

    @mcp.tool  # type: ignore[arg-type]
    async def strudel_fire_trigger(name: str) -> str:
        """
        Fire a named trigger.

        Resolves the trigger to its pattern program (or stop) and sends it
        to every connected player.

        Args:
            name: Trigger name (e.g., 'a', 'b', 'c', 'stop')

        Returns:
            JSON string with the command that was sent

        Example:
            strudel_fire_trigger(name="a")
        """
        try:
            command = await surface.fire(name)
            return json.dumps(
                {
                    "status": "success",
                    "message": SuccessMessages.TRIGGER_FIRED.format(name=name),
                    "command": command.model_dump(by_alias=True) if command else None,
                }
            )
        except UnknownTrigger as e:
            return json.dumps(
                {
                    "status": "error",
                    "message": str(e),
                    "available": surface.triggers(),
                }
            )
        except Exception as e:
            logger.exception("Failed to fire trigger")
            return json.dumps({"status": "error", "message": str(e)})

    tools["strudel_fire_trigger"] = strudel_fire_trigger

    @mcp.tool  # type: ignore[arg-type]
    async def strudel_evaluate(source_text: str) -> str:
        """
        Play a pattern program.

        Replaces whatever the players are running with the given code.

        Args:
            source_text: Strudel pattern program

        Returns:
            JSON string confirming the command

        Example:
            strudel_evaluate(source_text='s("bd*2, hh*4")')
        """
        try:
            command = surface.evaluate(source_text)
            return json.dumps(
                {"status": "success", "command": command.model_dump(by_alias=True)}
            )
        except Exception as e:
            logger.exception("Failed to evaluate pattern")
            return json.dumps({"status": "error", "message": str(e)})

    tools["strudel_evaluate"] = strudel_evaluate

    @mcp.tool  # type: ignore[arg-type]
    async def strudel_stop() -> str:
        """
        Stop all playing patterns.

        Returns:
            JSON string confirming the command

        Example:
            strudel_stop()
        """
        try:
            command = surface.stop()
            return json.dumps(
                {"status": "success", "command": command.model_dump(by_alias=True)}
            )
        except Exception as e:
            logger.exception("Failed to stop")
            return json.dumps({"status": "error", "message": str(e)})

    tools["strudel_stop"] = strudel_stop

    return tools
