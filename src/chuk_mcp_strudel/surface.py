"""
Control Surface - named triggers in front of a dispatcher.

Firing a trigger resolves it through the action registry and applies the
resulting command. The connect trigger (`socket` by default) opens the
remote control channel instead.
"""

from __future__ import annotations

import logging

from chuk_mcp_strudel.channel import RemoteControlChannel
from chuk_mcp_strudel.constants import DEFAULT_CONNECT_TRIGGER, ErrorMessages
from chuk_mcp_strudel.dispatch import Dispatcher
from chuk_mcp_strudel.errors import ConfigError
from chuk_mcp_strudel.evaluators import PatternEvaluator
from chuk_mcp_strudel.models.command import Command, Evaluate, Stop
from chuk_mcp_strudel.models.config import StrudelConfig
from chuk_mcp_strudel.triggers import ActionRegistry, TriggerLoader

logger = logging.getLogger(__name__)


class ControlSurface:
    """
    Local triggers plus an optional remote channel, sharing one dispatcher.

    Args:
        registry: Trigger table
        dispatcher: Single entry point into the evaluator
        channel: Remote channel feeding the same dispatcher, if any
        endpoint: Where the connect trigger points the channel
        connect_trigger: Trigger name that opens the channel
    """

    def __init__(
        self,
        registry: ActionRegistry,
        dispatcher: Dispatcher,
        channel: RemoteControlChannel | None = None,
        endpoint: str | None = None,
        connect_trigger: str = DEFAULT_CONNECT_TRIGGER,
    ):
        self.registry = registry
        self.dispatcher = dispatcher
        self.channel = channel
        self.endpoint = endpoint
        self.connect_trigger = connect_trigger

    @classmethod
    def from_config(
        cls,
        config: StrudelConfig,
        evaluator: PatternEvaluator,
        *,
        with_channel: bool = True,
        loader: TriggerLoader | None = None,
    ) -> ControlSurface:
        """Build a surface (and optionally its channel) from configuration."""
        loader = loader or TriggerLoader(project_path=config.triggers.project_path)
        registry = loader.build_registry(*config.triggers.sets)
        dispatcher = Dispatcher(evaluator)
        channel = None
        if with_channel:
            channel = RemoteControlChannel(
                dispatcher,
                reconnect=config.channel.reconnect,
                close_timeout=config.channel.close_timeout,
            )
        return cls(
            registry,
            dispatcher,
            channel=channel,
            endpoint=config.channel.endpoint,
            connect_trigger=config.connect_trigger,
        )

    def triggers(self) -> list[str]:
        """Every trigger name this surface answers to."""
        names = self.registry.names()
        if self.channel is not None and self.connect_trigger not in names:
            names.append(self.connect_trigger)
        return names

    async def fire(self, name: str) -> Command | None:
        """
        Fire a trigger.

        Returns:
            The command that was applied, or None for the connect trigger

        Raises:
            UnknownTrigger: If the name is not bound
            ConfigError: If the connect trigger fires with no endpoint configured
        """
        if name == self.connect_trigger and self.channel is not None:
            if self.endpoint is None:
                raise ConfigError(ErrorMessages.NO_ENDPOINT.format(name=name))
            await self.channel.open(self.endpoint)
            return None

        command = self.registry.resolve(name)
        logger.info("Trigger %s -> %s", name, command)
        self.dispatcher.apply(command)
        return command

    def evaluate(self, source_text: str) -> Command:
        """Apply an ad-hoc pattern program."""
        command = Evaluate(source_text=source_text)
        self.dispatcher.apply(command)
        return command

    def stop(self) -> Command:
        """Silence everything."""
        command = Stop()
        self.dispatcher.apply(command)
        return command

    async def close(self) -> None:
        if self.channel is not None:
            await self.channel.close()
