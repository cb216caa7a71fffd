"""Additive 16-bit checksum over the external EEPROM image.

The checksum is stored little-endian at offsets 2-3 and covers bytes
[4, end), where end depends on the hardware revision.
"""

from __future__ import annotations

import struct
from enum import StrEnum

from i1d3tool.exceptions import ChecksumMismatchError, InvalidParameterError
from i1d3tool.utils.logging import get_logger

logger = get_logger(__name__)

CHECKSUM_OFFSET = 2
CHECKSUM_START = 4


class HardwareRevision(StrEnum):
    """Hardware revisions, distinguished by the checksummed region length."""
    REV1 = "rev1"
    REV2 = "rev2"


_CHECKSUM_END: dict[HardwareRevision, int] = {
    HardwareRevision.REV2: 0x178E,
    HardwareRevision.REV1: 0x179A,
}


def checksum_end(revision: HardwareRevision) -> int:
    return _CHECKSUM_END[HardwareRevision(revision)]


def checksum(image: bytes | bytearray, revision: HardwareRevision = HardwareRevision.REV2) -> int:
    """Sum image[4:end] truncated to 16 bits."""
    end = checksum_end(revision)
    if len(image) < end:
        raise InvalidParameterError(
            f"Image of {len(image)} bytes is too short for a {revision} checksum "
            f"(needs {end})"
        )
    return sum(image[CHECKSUM_START:end]) & 0xFFFF


def stored_checksum(image: bytes | bytearray) -> int:
    """Return the little-endian checksum stored at offset 2-3."""
    return struct.unpack_from("<H", image, CHECKSUM_OFFSET)[0]


def verify_checksum(
    image: bytes | bytearray, revision: HardwareRevision = HardwareRevision.REV2
) -> int:
    """Validate the stored checksum against the image contents.

    Returns:
        The checksum value.

    Raises:
        ChecksumMismatchError: If the stored and computed values differ.
    """
    stored = stored_checksum(image)
    computed = checksum(image, revision)
    if stored != computed:
        raise ChecksumMismatchError(
            f"External EEPROM checksum mismatch: stored 0x{stored:04X}, "
            f"computed 0x{computed:04X} ({revision}). "
            f"The probe may not be {revision} hardware",
            stored=stored,
            computed=computed,
            revision=str(revision),
        )
    return computed


def update_checksum(
    image: bytearray, revision: HardwareRevision = HardwareRevision.REV2
) -> int:
    """Recompute the checksum and store it at offset 2-3 in place."""
    value = checksum(image, revision)
    struct.pack_into("<H", image, CHECKSUM_OFFSET, value)
    logger.debug("checksum_updated", value=f"0x{value:04X}", revision=str(revision))
    return value


def match_revision(image: bytes | bytearray) -> HardwareRevision | None:
    """Return the first revision whose checksum matches the stored value.

    For reporting only; a patch must be validated against an explicit
    revision.
    """
    stored = stored_checksum(image)
    for revision in (HardwareRevision.REV2, HardwareRevision.REV1):
        if checksum(image, revision) == stored:
            return revision
    return None
