"""Unit tests for the external EEPROM checksum."""

from __future__ import annotations

import pytest

from i1d3tool.core.checksum import (
    HardwareRevision,
    checksum,
    checksum_end,
    match_revision,
    stored_checksum,
    update_checksum,
    verify_checksum,
)
from i1d3tool.exceptions import ChecksumMismatchError, InvalidParameterError


class TestChecksum:
    """Test checksum computation over the revision-specific range."""

    def test_region_ends(self):
        assert checksum_end(HardwareRevision.REV2) == 0x178E
        assert checksum_end(HardwareRevision.REV1) == 0x179A

    def test_sums_from_offset_four(self):
        image = bytearray(8192)
        image[0:4] = b"\xFF\xFF\xFF\xFF"  # excluded
        image[4] = 0x10
        image[0x178D] = 0x01  # last byte included for rev2
        image[0x178E] = 0x80  # excluded for rev2, included for rev1
        assert checksum(image, HardwareRevision.REV2) == 0x11
        assert checksum(image, HardwareRevision.REV1) == 0x91

    def test_truncates_to_16_bits(self):
        image = bytearray(b"\xFF" * 8192)
        expected = (0xFF * (0x178E - 4)) & 0xFFFF
        assert checksum(image) == expected

    def test_idempotent(self, external_image):
        assert checksum(external_image) == checksum(external_image)

    def test_image_too_short(self):
        with pytest.raises(InvalidParameterError):
            checksum(bytearray(100))


class TestStoredChecksum:
    """Test reading, verifying and restoring the stored checksum."""

    def test_little_endian(self):
        image = bytearray(8192)
        image[2] = 0x34
        image[3] = 0x12
        assert stored_checksum(image) == 0x1234

    def test_update_then_verify(self):
        image = bytearray((i * 5) & 0xFF for i in range(8192))
        value = update_checksum(image)
        assert stored_checksum(image) == value
        assert verify_checksum(image) == value

    def test_verify_mismatch(self, external_image):
        external_image[100] ^= 0xFF
        with pytest.raises(ChecksumMismatchError) as exc_info:
            verify_checksum(external_image)
        assert exc_info.value.revision == "rev2"
        assert exc_info.value.stage == "integrity"

    def test_match_revision(self, external_image):
        assert match_revision(external_image) == HardwareRevision.REV2

        update_checksum(external_image, HardwareRevision.REV1)
        # rev1 covers 12 more bytes, and those are not all zero here
        assert match_revision(external_image) == HardwareRevision.REV1

    def test_match_revision_none(self, external_image):
        external_image[2] ^= 0x01
        assert match_revision(external_image) is None
