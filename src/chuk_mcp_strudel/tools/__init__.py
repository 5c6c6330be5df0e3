"""
MCP tool implementations.

Tools are organized by domain:
- triggers - Firing triggers and sending pattern programs
- bridge - Control bridge lifecycle
"""

from chuk_mcp_strudel.tools.bridge import register_bridge_tools
from chuk_mcp_strudel.tools.triggers import register_trigger_tools

__all__ = [
    "register_bridge_tools",
    "register_trigger_tools",
]
