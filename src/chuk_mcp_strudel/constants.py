"""
Constants and enums for the control surface.

No magic strings - use enums and Literal types for constrained values.
"""

from enum import Enum
from typing import Literal


class ConnectionState(str, Enum):
    """
    Lifecycle of the remote control connection.

    disconnected -> connecting -> open -> closing -> disconnected
    """

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSING = "closing"


class DiagnosticKind(str, Enum):
    """Kinds of diagnostics the remote channel reports."""

    MALFORMED_MESSAGE = "malformed_message"
    INVALID_COMMAND = "invalid_command"
    CONNECTION_FAILURE = "connection_failure"
    EVALUATION_FAILURE = "evaluation_failure"


class TriggerAction(str, Enum):
    """What a trigger binding produces when fired."""

    EVALUATE = "evaluate"
    STOP = "stop"


# Bridge defaults (loopback only, ephemeral port)
DEFAULT_BRIDGE_HOST = "127.0.0.1"
DEFAULT_BRIDGE_PORT = 0
DEFAULT_SOCKET_PATH = "/ws"
DEFAULT_BROADCAST_CAPACITY = 16

# Channel defaults
DEFAULT_CLOSE_TIMEOUT = 2.0
DEFAULT_CONNECT_TRIGGER = "socket"
DIAGNOSTIC_HISTORY = 50

# Greeting sent to every player that connects to the bridge
HELLO_TEXT = "hello"

# Schema versions - frozen for v1
SchemaVersion = Literal[
    "triggers/v1",
    "config/v1",
]


class ErrorMessages:
    """Standardized error messages."""

    UNKNOWN_TRIGGER = "Unknown trigger: '{name}'."
    TRIGGER_SET_NOT_FOUND = "Trigger set '{name}' not found."
    FRAME_NOT_TEXT = "Frame is not valid UTF-8 text."
    FRAME_NOT_JSON = "Frame is not valid JSON: {error}"
    FRAME_NOT_OBJECT = "Frame must be a JSON object, got {kind}."
    INVALID_COMMAND = "Frame is not a recognized command: {error}"
    BRIDGE_NOT_RUNNING = "Control bridge is not running. Start it first."
    BRIDGE_ALREADY_RUNNING = "Control bridge already running on port {port}."
    BRIDGE_NO_SOCKET = "Control bridge has no listening socket."
    NO_ENDPOINT = "Trigger '{name}' connects the remote channel, but no endpoint is configured."
    NO_CHANNEL = "Control surface has no remote channel."
    LAGGED = "broadcast lagged by {count} messages"


class SuccessMessages:
    """Standardized success messages."""

    TRIGGER_FIRED = "Fired trigger '{name}'."
    BRIDGE_STARTED = "Control bridge listening on {url}."
    BRIDGE_STOPPED = "Control bridge stopped."
