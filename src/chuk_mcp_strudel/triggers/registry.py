"""
Action Registry - resolves trigger names to commands.

The registry is a read-only table built once from trigger bindings. It
performs pure lookup and never touches the evaluator.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from types import MappingProxyType

from chuk_mcp_strudel.errors import UnknownTrigger
from chuk_mcp_strudel.models.command import Command, Stop
from chuk_mcp_strudel.models.trigger import TriggerBinding


class ActionRegistry:
    """
    Fixed mapping of trigger name to command.

    Bindings given later override earlier ones with the same name, so a
    project set can shadow a library trigger.
    """

    def __init__(self, bindings: Iterable[TriggerBinding] = ()):
        table: dict[str, TriggerBinding] = {}
        for binding in bindings:
            table[binding.name] = binding
        self._bindings: Mapping[str, TriggerBinding] = MappingProxyType(table)
        self._commands: Mapping[str, Command] = MappingProxyType(
            {name: binding.to_command() for name, binding in table.items()}
        )

    @classmethod
    def from_commands(cls, commands: Mapping[str, Command]) -> ActionRegistry:
        """Build a registry directly from name -> command pairs."""
        bindings = []
        for name, command in commands.items():
            if isinstance(command, Stop):
                bindings.append(TriggerBinding(name=name, action="stop"))
            else:
                bindings.append(
                    TriggerBinding(name=name, action="evaluate", source=command.source_text)
                )
        return cls(bindings)

    @property
    def bindings(self) -> Mapping[str, TriggerBinding]:
        """Read-only view of the bindings."""
        return self._bindings

    def resolve(self, name: str) -> Command:
        """
        Resolve a trigger name to its command.

        Raises:
            UnknownTrigger: If no binding exists for the name
        """
        try:
            return self._commands[name]
        except KeyError:
            raise UnknownTrigger(name) from None

    def names(self) -> list[str]:
        """Registered trigger names, sorted."""
        return sorted(self._commands)

    def describe(self) -> list[dict[str, str | None]]:
        """Summaries of every binding, sorted by name."""
        return [
            {
                "name": binding.name,
                "action": binding.action.value,
                "source": binding.source_text,
                "description": binding.description,
            }
            for binding in sorted(self._bindings.values(), key=lambda b: b.name)
        ]

    def __contains__(self, name: object) -> bool:
        return name in self._commands

    def __len__(self) -> int:
        return len(self._commands)

    def __repr__(self) -> str:
        return f"ActionRegistry({self.names()!r})"
