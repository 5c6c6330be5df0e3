"""
Wire codec - JSON text frames to and from message models.

Decoding is split in two stages so callers can tell the failures apart:
1. Structure: the frame must be UTF-8 JSON holding an object
   (MalformedMessage otherwise)
2. Validation: the object must carry a known `type` and that type's
   required fields (InvalidCommand otherwise)
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import TypeAdapter, ValidationError

from chuk_mcp_strudel.constants import ErrorMessages
from chuk_mcp_strudel.errors import InvalidCommand, MalformedMessage
from chuk_mcp_strudel.models.command import (
    Command,
    ErrorNotice,
    Evaluate,
    Notice,
    RemoteMessage,
    Stop,
)

_remote_message_adapter: TypeAdapter[Evaluate | Stop | Notice | ErrorNotice] = TypeAdapter(
    RemoteMessage
)


def parse_frame(frame: str | bytes) -> dict[str, Any]:
    """
    Parse a raw frame into a JSON object.

    Raises:
        MalformedMessage: If the frame is not UTF-8, not JSON, or not an object
    """
    if isinstance(frame, (bytes, bytearray)):
        try:
            frame = bytes(frame).decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedMessage(ErrorMessages.FRAME_NOT_TEXT, frame=frame) from e

    # Deep nesting raises RecursionError, oversized integers a plain ValueError
    try:
        payload = json.loads(frame)
    except (ValueError, RecursionError) as e:
        raise MalformedMessage(ErrorMessages.FRAME_NOT_JSON.format(error=e), frame=frame) from e

    if not isinstance(payload, dict):
        raise MalformedMessage(
            ErrorMessages.FRAME_NOT_OBJECT.format(kind=type(payload).__name__),
            frame=frame,
        )
    return payload


def validate_payload(payload: dict[str, Any]) -> Evaluate | Stop | Notice | ErrorNotice:
    """
    Validate a parsed payload against the known message types.

    Raises:
        InvalidCommand: If the discriminator is missing or unknown, or a
            required field is missing or has the wrong type
    """
    # Wire frames carry aliases only; Python field names are for local construction
    try:
        return _remote_message_adapter.validate_python(payload, by_alias=True, by_name=False)
    except ValidationError as e:
        errors = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'frame'}: {err['msg']}"
            for err in e.errors()
        )
        raise InvalidCommand(
            ErrorMessages.INVALID_COMMAND.format(error=errors), payload=payload
        ) from e


def decode_frame(frame: str | bytes) -> Evaluate | Stop | Notice | ErrorNotice:
    """
    Decode a raw frame into a message.

    Args:
        frame: Text (or UTF-8 bytes) received from the transport

    Returns:
        The decoded message

    Raises:
        MalformedMessage: Frame is not a JSON object
        InvalidCommand: Frame is a JSON object but not a known message
    """
    return validate_payload(parse_frame(frame))


def encode_message(message: Command | Notice | ErrorNotice) -> str:
    """Encode a command or notice as a JSON text frame."""
    return message.model_dump_json(by_alias=True)


def encode_command(command: Command) -> str:
    """Encode a command as a JSON text frame."""
    return encode_message(command)
