"""
Trigger system - named events bound to pattern programs.

Trigger sets live in YAML so new triggers can be added without touching
dispatch logic.
"""

from chuk_mcp_strudel.triggers.loader import LIBRARY_PATH, TriggerLoader
from chuk_mcp_strudel.triggers.registry import ActionRegistry

__all__ = [
    "LIBRARY_PATH",
    "ActionRegistry",
    "TriggerLoader",
]
