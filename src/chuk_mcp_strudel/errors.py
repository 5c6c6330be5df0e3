"""
Error taxonomy for the control surface.

Remote-input errors (MalformedMessage, InvalidCommand) are raised by the
codec and handled inside the remote channel. UnknownTrigger is reported to
the caller of a trigger. ConnectionFailure wraps transport errors.
"""

from __future__ import annotations

from chuk_mcp_strudel.constants import ErrorMessages


class StrudelControlError(Exception):
    """Base error for the control surface."""


class ConfigError(StrudelControlError):
    """Configuration or trigger-set file could not be loaded."""


class UnknownTrigger(StrudelControlError):
    """A trigger name is not registered."""

    def __init__(self, name: str, message: str | None = None) -> None:
        super().__init__(message or ErrorMessages.UNKNOWN_TRIGGER.format(name=name))
        self.name = name


class MalformedMessage(StrudelControlError):
    """A remote frame is not decodable structured data."""

    def __init__(self, message: str, *, frame: str | bytes | None = None) -> None:
        super().__init__(message)
        self.frame = frame


class InvalidCommand(StrudelControlError):
    """A remote frame decoded but is missing fields or has an unknown type."""

    def __init__(self, message: str, *, payload: object = None) -> None:
        super().__init__(message)
        self.payload = payload


class ConnectionFailure(StrudelControlError):
    """Transport-level failure on the remote channel."""

    def __init__(self, message: str, *, endpoint: str | None = None) -> None:
        super().__init__(message)
        self.endpoint = endpoint
