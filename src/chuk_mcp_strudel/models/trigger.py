"""
Trigger models - static bindings from trigger names to commands.

A trigger set is one YAML document:

    schema: triggers/v1
    name: default
    triggers:
      a:
        action: evaluate
        source: s('bd,jvbass(3,8)').jux(rev)
      stop:
        action: stop
"""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator

from chuk_mcp_strudel.constants import SchemaVersion, TriggerAction
from chuk_mcp_strudel.models.command import Command, Evaluate, Stop


class TriggerBinding(BaseModel):
    """
    A single trigger binding.

    Evaluate bindings must carry the pattern program; stop bindings must not.
    """

    name: str = Field(..., min_length=1, description="Trigger name")
    action: TriggerAction = Field(..., description="What the trigger does")
    source_text: str | None = Field(None, alias="source", description="Pattern program")
    description: str = Field("", description="Human-readable description")

    model_config = {"frozen": True, "populate_by_name": True}

    @model_validator(mode="after")
    def _check_source(self) -> TriggerBinding:
        if self.action == TriggerAction.EVALUATE and self.source_text is None:
            raise ValueError(f"Trigger '{self.name}' evaluates but has no source")
        if self.action == TriggerAction.STOP and self.source_text is not None:
            raise ValueError(f"Trigger '{self.name}' stops but has a source")
        return self

    def to_command(self) -> Command:
        """Build the command this binding produces."""
        if self.action == TriggerAction.EVALUATE and self.source_text is not None:
            return Evaluate(source_text=self.source_text)
        return Stop()


class TriggerSet(BaseModel):
    """A named collection of trigger bindings."""

    schema_version: SchemaVersion = Field(
        "triggers/v1", alias="schema", description="Schema version"
    )
    name: str = Field(..., description="Set name")
    description: str = Field("", description="Human-readable description")
    triggers: dict[str, TriggerBinding] = Field(
        default_factory=dict, description="Bindings keyed by trigger name"
    )

    model_config = {"populate_by_name": True}

    @model_validator(mode="before")
    @classmethod
    def _inject_names(cls, data: object) -> object:
        """Allow YAML bindings to omit their name (the mapping key is the name)."""
        if isinstance(data, dict) and isinstance(data.get("triggers"), dict):
            triggers = {}
            for key, binding in data["triggers"].items():
                if isinstance(binding, dict):
                    binding = {"name": key, **binding}
                triggers[key] = binding
            data = {**data, "triggers": triggers}
        return data


class TriggerSetMetadata(BaseModel):
    """
    Lightweight trigger set metadata for listing/discovery.
    """

    name: str = Field(..., description="Set name")
    description: str = Field("", description="Human-readable description")
    triggers: list[str] = Field(default_factory=list, description="Trigger names")
    path: str | None = Field(None, description="Path to set file")

    @classmethod
    def from_set(cls, trigger_set: TriggerSet, path: str | None = None) -> TriggerSetMetadata:
        """Create metadata from a full trigger set."""
        return cls(
            name=trigger_set.name,
            description=trigger_set.description,
            triggers=sorted(trigger_set.triggers),
            path=path,
        )
