#!/usr/bin/env python3
"""
Example: A host and a player in one process.

The host fires triggers; the control bridge broadcasts them; a remote
control channel receives them and plays them on a logging evaluator.

Usage:
    python examples/remote_session.py
"""

import asyncio

from chuk_mcp_strudel.bridge import BroadcastEvaluator, ControlBridge
from chuk_mcp_strudel.channel import RemoteControlChannel
from chuk_mcp_strudel.dispatch import Dispatcher
from chuk_mcp_strudel.evaluators import LoggingEvaluator
from chuk_mcp_strudel.surface import ControlSurface
from chuk_mcp_strudel.triggers import TriggerLoader


async def main() -> None:
    """Demonstrate a remote session."""
    print("CHUK Strudel Remote Session Demo")
    print("=" * 40)
    print()

    bridge = ControlBridge()
    url = await bridge.start()
    print(f"Bridge listening on {url}")

    registry = TriggerLoader().build_registry("default")
    host = ControlSurface(registry, Dispatcher(BroadcastEvaluator(bridge)))

    player = LoggingEvaluator()
    channel = RemoteControlChannel(Dispatcher(player))
    await channel.open(url)
    await channel.wait_until_open(timeout=2.0)
    while bridge.client_count == 0:
        await asyncio.sleep(0.01)
    print(f"Player connected ({channel.state.value})")
    print()

    for name in ("a", "b", "c", "stop"):
        command = await host.fire(name)
        print(f"  fired {name!r}: {command}")
        await asyncio.sleep(0.05)

    print()
    print("Player history:")
    for entry in player.history:
        print(f"  {entry if entry is not None else '<stop>'}")

    await channel.close()
    await bridge.stop()


if __name__ == "__main__":
    asyncio.run(main())
