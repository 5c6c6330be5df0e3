"""
Pydantic models for the control surface.

This module provides:
- Evaluate / Stop: Commands sent to a pattern evaluator
- Notice / ErrorNotice: Informational wire frames
- TriggerBinding / TriggerSet: Static trigger definitions
- StrudelConfig: Host configuration
"""

from chuk_mcp_strudel.models.command import (
    Command,
    ErrorNotice,
    Evaluate,
    Notice,
    RemoteMessage,
    Stop,
    is_command,
)
from chuk_mcp_strudel.models.config import (
    BridgeConfig,
    ChannelConfig,
    ReconnectPolicy,
    StrudelConfig,
    TriggerConfig,
)
from chuk_mcp_strudel.models.trigger import TriggerBinding, TriggerSet, TriggerSetMetadata

__all__ = [
    "BridgeConfig",
    "ChannelConfig",
    "Command",
    "ErrorNotice",
    "Evaluate",
    "Notice",
    "ReconnectPolicy",
    "RemoteMessage",
    "Stop",
    "StrudelConfig",
    "TriggerBinding",
    "TriggerConfig",
    "TriggerSet",
    "TriggerSetMetadata",
    "is_command",
]
