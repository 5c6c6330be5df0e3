"""
Configuration model.

Loaded from a YAML file; every section is optional and falls back to the
defaults in constants.py.

    schema: config/v1
    bridge:
      host: 127.0.0.1
      port: 0
    channel:
      endpoint: ws://127.0.0.1:8765/ws
      reconnect:
        enabled: true
    triggers:
      sets: [default]
      project_path: ./triggers
    connect_trigger: socket
"""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError

from chuk_mcp_strudel.constants import (
    DEFAULT_BRIDGE_HOST,
    DEFAULT_BRIDGE_PORT,
    DEFAULT_BROADCAST_CAPACITY,
    DEFAULT_CLOSE_TIMEOUT,
    DEFAULT_CONNECT_TRIGGER,
    DEFAULT_SOCKET_PATH,
    SchemaVersion,
)
from chuk_mcp_strudel.errors import ConfigError


class ReconnectPolicy(BaseModel):
    """Automatic reconnect with jittered exponential backoff. Off by default."""

    enabled: bool = Field(False, description="Reconnect after an unrequested disconnect")
    base_seconds: float = Field(1.0, ge=0, description="First backoff delay")
    max_seconds: float = Field(30.0, ge=0, description="Backoff ceiling")


class BridgeConfig(BaseModel):
    """Where the control bridge listens."""

    host: str = Field(DEFAULT_BRIDGE_HOST, description="Bind address")
    port: int = Field(DEFAULT_BRIDGE_PORT, ge=0, le=65535, description="Port (0 = ephemeral)")
    path: str = Field(DEFAULT_SOCKET_PATH, description="WebSocket path")
    capacity: int = Field(
        DEFAULT_BROADCAST_CAPACITY, gt=0, description="Per-player queue length"
    )


class ChannelConfig(BaseModel):
    """How a player connects to a bridge."""

    endpoint: str | None = Field(None, description="ws:// URL of the bridge")
    close_timeout: float = Field(DEFAULT_CLOSE_TIMEOUT, gt=0, description="Seconds")
    reconnect: ReconnectPolicy = Field(default_factory=ReconnectPolicy)


class TriggerConfig(BaseModel):
    """Which trigger sets to load."""

    sets: list[str] = Field(default_factory=lambda: ["default"], description="Set names")
    project_path: Path | None = Field(None, description="Directory of user trigger sets")


class StrudelConfig(BaseModel):
    """Top-level configuration."""

    schema_version: SchemaVersion = Field(
        "config/v1", alias="schema", description="Schema version"
    )
    bridge: BridgeConfig = Field(default_factory=BridgeConfig)
    channel: ChannelConfig = Field(default_factory=ChannelConfig)
    triggers: TriggerConfig = Field(default_factory=TriggerConfig)
    connect_trigger: str = Field(
        DEFAULT_CONNECT_TRIGGER, description="Trigger name that opens the remote channel"
    )

    model_config = {"populate_by_name": True}

    @classmethod
    def load(cls, path: Path | None = None) -> StrudelConfig:
        """
        Load configuration from a YAML file.

        A missing path (or None) yields the defaults. Relative trigger
        project paths are resolved against the config file's directory.

        Raises:
            ConfigError: If the file exists but cannot be parsed
        """
        if path is None or not path.exists():
            return cls()

        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Config {path} must be a mapping")

        try:
            config = cls.model_validate(data)
        except ValidationError as e:
            raise ConfigError(f"Invalid config {path}: {e}") from e

        project_path = config.triggers.project_path
        if project_path is not None and not project_path.is_absolute():
            config.triggers.project_path = path.parent / project_path

        return config
