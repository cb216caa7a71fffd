"""Command frame build and response frame validation.

Command frame layout (64 bytes):
    Byte 0:  major opcode (HID report id)
    Byte 1:  minor opcode when the major opcode is 0, otherwise payload
    Rest:    opcode-specific payload, zero padded

Response frame layout (64 bytes):
    Byte 0:  status (0x00 = success)
    Byte 1:  echo of the major opcode
    Rest:    opcode-specific data
"""

from __future__ import annotations

from i1d3tool.exceptions import InvalidParameterError, ProtocolMismatchError
from i1d3tool.protocol.types import (
    FRAME_SIZE,
    PAYLOAD_OFFSET,
    PAYLOAD_OFFSET_MINOR,
    STATUS_OK,
    Command,
)


def split_command(code: int) -> tuple[int, int]:
    """Split a 16-bit command code into (major, minor) opcodes."""
    return (code >> 8) & 0xFF, code & 0xFF


def encode_frame(major: int, minor: int = 0, payload: bytes = b"") -> bytes:
    """Build a 64-byte command frame.

    The minor opcode is only placed in the frame when the major opcode is 0;
    otherwise it is ignored and the payload starts at byte 1.
    """
    if not 0 <= major <= 0xFF or not 0 <= minor <= 0xFF:
        raise InvalidParameterError(
            f"Opcodes must be single bytes: major=0x{major:X} minor=0x{minor:X}"
        )

    offset = PAYLOAD_OFFSET_MINOR if major == 0 else PAYLOAD_OFFSET
    if len(payload) > FRAME_SIZE - offset:
        raise InvalidParameterError(
            f"Payload {len(payload)} bytes exceeds {FRAME_SIZE - offset} "
            f"available for major opcode 0x{major:02X}"
        )

    frame = bytearray(FRAME_SIZE)
    frame[0] = major
    if major == 0:
        frame[1] = minor
    frame[offset:offset + len(payload)] = payload
    return bytes(frame)


def encode_command(command: Command | int, payload: bytes = b"") -> bytes:
    """Build a command frame from a 16-bit command code."""
    major, minor = split_command(int(command))
    return encode_frame(major, minor, payload)


def validate_response(frame: bytes, expected_major: int) -> bytes:
    """Check a response frame against the major opcode that was sent.

    Returns the frame unchanged when byte 0 is 0x00 and byte 1 echoes the
    major opcode.

    Raises:
        ProtocolMismatchError: On a short frame, a non-zero status or a
            wrong echo byte.
    """
    if len(frame) < FRAME_SIZE:
        raise ProtocolMismatchError(
            f"Response frame too short: {len(frame)} bytes, expected {FRAME_SIZE}",
            expected_opcode=expected_major,
        )

    status, echo = frame[0], frame[1]
    if status != STATUS_OK or echo != expected_major:
        raise ProtocolMismatchError(
            f"Bad response to opcode 0x{expected_major:02X}: "
            f"status 0x{status:02X}, echo 0x{echo:02X}",
            expected_opcode=expected_major,
            status=status,
            echo=echo,
        )
    return bytes(frame[:FRAME_SIZE])
