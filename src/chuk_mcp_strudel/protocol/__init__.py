"""
Wire protocol - JSON text frames carried over a WebSocket.

    {"type": "evaluate", "sourceText": "s(\\"bd\\")"}
    {"type": "stop"}
    {"type": "message", "text": "hello"}
    {"type": "error", "message": "broadcast lagged by 3 messages"}
"""

from chuk_mcp_strudel.protocol.codec import (
    decode_frame,
    encode_command,
    encode_message,
    parse_frame,
    validate_payload,
)

__all__ = [
    "decode_frame",
    "encode_command",
    "encode_message",
    "parse_frame",
    "validate_payload",
]
