"""
Control bridge - the host side of the remote control channel.
"""

from chuk_mcp_strudel.bridge.evaluator import BroadcastEvaluator
from chuk_mcp_strudel.bridge.server import ControlBridge

__all__ = [
    "BroadcastEvaluator",
    "ControlBridge",
]
