#!/usr/bin/env python3
"""
Entry point for the CHUK Strudel MCP Server.

This module provides the main entry point for the MCP server,
supporting multiple transport modes (stdio, http). The control bridge is
started alongside the server and stopped when it exits.
"""

import argparse
import asyncio
import logging
import os

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def main() -> None:
    """Main entry point with transport detection."""
    parser = argparse.ArgumentParser(description="CHUK Strudel MCP Server")
    parser.add_argument(
        "--transport",
        choices=["stdio", "http"],
        default="stdio",
        help="Transport mode (default: stdio)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="HTTP port (only for http transport)",
    )
    parser.add_argument(
        "--config",
        help="Path to strudel.yaml (default: ./strudel.yaml)",
    )
    parser.add_argument(
        "--no-bridge",
        action="store_true",
        help="Do not start the control bridge automatically",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    args = parser.parse_args()

    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)
    if args.config:
        os.environ["CHUK_STRUDEL_CONFIG"] = args.config

    # Import after argument parsing so the config path is in place
    from chuk_mcp_strudel.async_server import bridge, mcp

    async def serve() -> None:
        if not args.no_bridge:
            await bridge.start()
        try:
            if args.transport == "stdio":
                logger.info("Starting CHUK Strudel MCP Server (stdio)")
                await mcp.run_stdio()
            else:
                logger.info(f"Starting CHUK Strudel MCP Server (http:{args.port})")
                await mcp.run_http(port=args.port)
        finally:
            await bridge.stop()

    asyncio.run(serve())


if __name__ == "__main__":
    main()
