"""Fixed 64-byte HID command/response framing."""

from i1d3tool.protocol.framing import (
    encode_command,
    encode_frame,
    split_command,
    validate_response,
)
from i1d3tool.protocol.types import FRAME_SIZE, Command

__all__ = [
    "FRAME_SIZE",
    "Command",
    "encode_command",
    "encode_frame",
    "split_command",
    "validate_response",
]
