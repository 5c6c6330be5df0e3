"""
Remote control channel - pattern commands over a persistent connection.
"""

from chuk_mcp_strudel.channel.backoff import calculate_reconnect_backoff
from chuk_mcp_strudel.channel.client import Connector, Diagnostic, RemoteControlChannel

__all__ = [
    "Connector",
    "Diagnostic",
    "RemoteControlChannel",
    "calculate_reconnect_backoff",
]
