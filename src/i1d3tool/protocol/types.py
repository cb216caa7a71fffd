"""Command codes, frame geometry and protocol constants."""

from __future__ import annotations

from enum import IntEnum


# Every HID report exchanged with the probe is exactly this size
FRAME_SIZE = 64

# Response byte 0 on success
STATUS_OK = 0x00

# Payload start for non-zero major opcodes (byte 0 is the report id)
PAYLOAD_OFFSET = 1

# Payload start when the major opcode is 0 (byte 1 holds the minor opcode)
PAYLOAD_OFFSET_MINOR = 2

# ANSWER_CHALLENGE result byte 2 when the key was accepted
UNLOCK_ACCEPTED = 0x77

# Magic payload for ENABLE_WRITE
ENABLE_WRITE_MAGIC = bytes([0xA3, 0x80, 0x25, 0x41])

# USB identity
I1D3_VENDOR_ID = 0x0765
I1D3_PRODUCT_ID = 0x5020
# Reported after a serial-number rewrite until the internal EEPROM is re-read
I1D3_PRODUCT_ID_CONFUSED = 0x5021


class Command(IntEnum):
    """16-bit command codes: high byte = major opcode, low byte = minor opcode."""

    GET_INFO = 0x0000
    WRITE_INTERNAL = 0x0700
    READ_INTERNAL = 0x0800
    READ_EXTERNAL = 0x1200
    WRITE_EXTERNAL = 0x1300
    GET_CHALLENGE = 0x9900
    ANSWER_CHALLENGE = 0x9A00
    ENABLE_WRITE = 0xAB00

    @property
    def major(self) -> int:
        return (self.value >> 8) & 0xFF

    @property
    def minor(self) -> int:
        return self.value & 0xFF
