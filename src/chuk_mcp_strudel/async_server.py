#!/usr/bin/env python3
"""
Async Strudel MCP Server using chuk-mcp-server

This server puts a live Strudel session under MCP control. Pattern programs
are sent over a WebSocket control bridge to every connected player (a
browser page running Strudel, or `chuk-mcp-strudel-player`).

The server provides tools for:
- Listing and firing named triggers (pattern presets and stop)
- Sending ad-hoc pattern programs
- Starting, inspecting and stopping the control bridge
"""

import logging
import os
from pathlib import Path

from chuk_mcp_server import ChukMCPServer

from chuk_mcp_strudel.bridge import BroadcastEvaluator, ControlBridge
from chuk_mcp_strudel.models.config import StrudelConfig
from chuk_mcp_strudel.surface import ControlSurface
from chuk_mcp_strudel.tools import register_bridge_tools, register_trigger_tools
from chuk_mcp_strudel.triggers import LIBRARY_PATH

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Create the MCP server instance
mcp = ChukMCPServer("chuk-mcp-strudel")

# Paths - use standard project structure
BASE_PATH = Path.cwd()
CONFIG_PATH = Path(os.environ.get("CHUK_STRUDEL_CONFIG", BASE_PATH / "strudel.yaml"))

config = StrudelConfig.load(CONFIG_PATH)
if config.triggers.project_path is None:
    config.triggers.project_path = BASE_PATH / "triggers"

# Bridge and the surface that feeds it
bridge = ControlBridge.from_config(config.bridge)
surface = ControlSurface.from_config(config, BroadcastEvaluator(bridge), with_channel=False)

# Register all tools
trigger_tools = register_trigger_tools(mcp, surface)
bridge_tools = register_bridge_tools(mcp, bridge)

# Export tool functions for direct access
strudel_list_triggers = trigger_tools["strudel_list_triggers"]
strudel_fire_trigger = trigger_tools["strudel_fire_trigger"]
strudel_evaluate = trigger_tools["strudel_evaluate"]
strudel_stop = trigger_tools["strudel_stop"]

strudel_start_bridge = bridge_tools["strudel_start_bridge"]
strudel_bridge_status = bridge_tools["strudel_bridge_status"]
strudel_stop_bridge = bridge_tools["strudel_stop_bridge"]

logger.info("CHUK Strudel MCP Server initialized")
logger.info(f"  Config: {CONFIG_PATH}")
logger.info(f"  Trigger library: {LIBRARY_PATH}")
logger.info(f"  Triggers: {', '.join(surface.triggers())}")
