#!/usr/bin/env python3
"""
Headless player - follows a control bridge and logs what it would play.

Useful for checking a bridge end to end without a browser:

    chuk-mcp-strudel-player ws://127.0.0.1:8765/ws --reconnect
"""

import argparse
import asyncio
import logging
from pathlib import Path

from chuk_mcp_strudel.constants import ErrorMessages
from chuk_mcp_strudel.errors import StrudelControlError
from chuk_mcp_strudel.evaluators import LoggingEvaluator
from chuk_mcp_strudel.models.config import StrudelConfig
from chuk_mcp_strudel.surface import ControlSurface

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


async def run_player(config: StrudelConfig) -> None:
    """Connect and follow the bridge until it goes away or we are cancelled."""
    surface = ControlSurface.from_config(config, LoggingEvaluator())
    channel = surface.channel
    if channel is None:
        raise StrudelControlError(ErrorMessages.NO_CHANNEL)
    try:
        await surface.fire(surface.connect_trigger)
        await channel.wait_finished()
    finally:
        await surface.close()


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="CHUK Strudel headless player")
    parser.add_argument(
        "endpoint",
        nargs="?",
        help="Bridge WebSocket URL (default: channel.endpoint from config)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to strudel.yaml",
    )
    parser.add_argument(
        "--reconnect",
        action="store_true",
        help="Reconnect with backoff when the bridge goes away",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    args = parser.parse_args()

    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    config = StrudelConfig.load(args.config)
    if args.endpoint:
        config.channel.endpoint = args.endpoint
    if args.reconnect:
        config.channel.reconnect.enabled = True
    if not config.channel.endpoint:
        parser.error("no endpoint given and none configured")

    try:
        asyncio.run(run_player(config))
    except KeyboardInterrupt:
        logger.info("Player stopped")


if __name__ == "__main__":
    main()
