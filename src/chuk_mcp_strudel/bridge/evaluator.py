"""
Broadcast evaluator - plays patterns on every connected player.

Plugged into a Dispatcher on the host side, it turns local triggers into
frames on the control bridge.
"""

from __future__ import annotations

import logging

from chuk_mcp_strudel.bridge.server import ControlBridge
from chuk_mcp_strudel.models.command import Evaluate, Stop

logger = logging.getLogger(__name__)


class BroadcastEvaluator:
    """Pattern evaluator that forwards to a ControlBridge."""

    def __init__(self, bridge: ControlBridge):
        self.bridge = bridge
        self.last_recipients = 0

    def evaluate(self, source_text: str) -> None:
        self.last_recipients = self.bridge.broadcast(Evaluate(source_text=source_text))
        logger.info("Sent pattern program to %d player(s)", self.last_recipients)

    def stop(self) -> None:
        self.last_recipients = self.bridge.broadcast(Stop())
        logger.info("Sent stop to %d player(s)", self.last_recipients)
