"""Well-known fields of the EEPROM images."""

from __future__ import annotations

from i1d3tool.core.checksum import HardwareRevision, update_checksum, verify_checksum
from i1d3tool.core.eeprom import EXTERNAL, INTERNAL
from i1d3tool.exceptions import InvalidParameterError
from i1d3tool.utils.logging import get_logger

logger = get_logger(__name__)

# Internal EEPROM
SERIAL_OFFSET = 16
SERIAL_LENGTH = 20

# External EEPROM
SIGNATURE_OFFSET = 0x1638
SIGNATURE_LENGTH = 0x48


def _require_size(image: bytes | bytearray, size: int, region: str) -> None:
    if len(image) != size:
        raise InvalidParameterError(
            f"{region} image must be {size} bytes, got {len(image)}"
        )


def get_serial_number(image: bytes | bytearray) -> bytes:
    """Return the raw 20-byte serial number field."""
    _require_size(image, INTERNAL.size, INTERNAL.name)
    return bytes(image[SERIAL_OFFSET:SERIAL_OFFSET + SERIAL_LENGTH])


def serial_number_text(raw: bytes) -> str:
    """Decode a serial number field, stopping at the first NUL if any."""
    return raw.split(b"\x00", 1)[0].decode("ascii", errors="replace")


def encode_serial_number(serial: bytes | str) -> bytes:
    """Encode a serial number as stored, truncated or NUL-padded to 20 bytes."""
    if isinstance(serial, str):
        try:
            serial = serial.encode("ascii")
        except UnicodeEncodeError as exc:
            raise InvalidParameterError(
                f"Serial number must be ASCII: {serial!r}"
            ) from exc
    return serial[:SERIAL_LENGTH].ljust(SERIAL_LENGTH, b"\x00")


def set_serial_number(image: bytearray, serial: bytes | str) -> None:
    """Store a serial number in the internal image.

    The internal image carries no checksum.
    """
    _require_size(image, INTERNAL.size, INTERNAL.name)
    field = encode_serial_number(serial)
    image[SERIAL_OFFSET:SERIAL_OFFSET + SERIAL_LENGTH] = field


def get_signature(image: bytes | bytearray) -> bytes:
    """Return the 0x48-byte signature block."""
    _require_size(image, EXTERNAL.size, EXTERNAL.name)
    return bytes(image[SIGNATURE_OFFSET:SIGNATURE_OFFSET + SIGNATURE_LENGTH])


def set_signature(
    image: bytearray,
    signature: bytes,
    revision: HardwareRevision = HardwareRevision.REV2,
) -> int:
    """Patch the signature block and restore the checksum.

    The existing checksum must validate first; on mismatch the image is
    left untouched.

    Returns:
        The new checksum.

    Raises:
        ChecksumMismatchError: The image's stored checksum is stale.
    """
    _require_size(image, EXTERNAL.size, EXTERNAL.name)
    if len(signature) != SIGNATURE_LENGTH:
        raise InvalidParameterError(
            f"Signature must be {SIGNATURE_LENGTH} bytes, got {len(signature)}"
        )

    old = verify_checksum(image, revision)
    image[SIGNATURE_OFFSET:SIGNATURE_OFFSET + SIGNATURE_LENGTH] = signature
    new = update_checksum(image, revision)
    logger.info("signature_patched", old_checksum=f"0x{old:04X}", new_checksum=f"0x{new:04X}")
    return new
