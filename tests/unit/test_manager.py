"""Unit tests for ProbeManager against a simulated probe."""

from __future__ import annotations

import pytest

from i1d3tool.core.checksum import HardwareRevision, checksum, stored_checksum, update_checksum
from i1d3tool.core.fields import SIGNATURE_LENGTH
from i1d3tool.core.manager import ProbeManager
from i1d3tool.core.session import ProbeSession
from i1d3tool.exceptions import ChecksumMismatchError, InvalidParameterError, UnlockError
from i1d3tool.protocol.types import I1D3_PRODUCT_ID_CONFUSED


def _manager(sim) -> ProbeManager:
    return ProbeManager(ProbeSession(sim))


class TestInfo:
    """Test firmware and variant reporting."""

    def test_get_info(self, make_probe):
        sim = make_probe(accepted_key=7)
        info = _manager(sim).get_info()

        assert info.firmware == "i1Display3 Rev 2.28"
        assert info.variant_index == 7
        assert info.variant == "SpectraCal C6"

    def test_unknown_variant_is_not_an_error(self, make_probe):
        info = _manager(make_probe(accepted_key=None)).get_info()
        assert info.variant is None
        assert info.variant_label == "Unknown signature"


class TestSerialNumber:
    """Test serial number read and write."""

    def test_read(self, probe_sim):
        probe_sim.internal[16:36] = b"ABC123".ljust(20, b"\x00")
        number = _manager(probe_sim).read_serial_number()
        assert number.text == "ABC123"
        assert number.raw_hex.startswith("414243313233")

    def test_write_committed(self, probe_sim):
        before = bytes(probe_sim.internal)
        _manager(probe_sim).write_serial_number("NEWSERIAL", commit=True)

        assert probe_sim.internal[16:36] == b"NEWSERIAL".ljust(20, b"\x00")
        assert probe_sim.internal[:16] == before[:16]
        assert probe_sim.internal[36:] == before[36:]

    def test_write_not_committed(self, probe_sim):
        before = bytes(probe_sim.internal)
        number = _manager(probe_sim).write_serial_number("NEWSERIAL", commit=False)

        assert number.text == "NEWSERIAL"
        assert bytes(probe_sim.internal) == before
        assert 0x07 not in probe_sim.opcodes()

    def test_non_ascii_rejected_before_device_traffic(self, probe_sim):
        with pytest.raises(InvalidParameterError):
            _manager(probe_sim).write_serial_number("SN\u00e9", commit=True)
        assert probe_sim.sent == []

    def test_locked_probe(self, make_probe):
        with pytest.raises(UnlockError) as exc_info:
            _manager(make_probe(accepted_key=None)).read_serial_number()
        assert exc_info.value.stage == "authentication"


class TestRegions:
    """Test whole-region backup and restore."""

    def test_internal_round_trip(self, probe_sim):
        manager = _manager(probe_sim)
        image = manager.read_internal()
        image[0] ^= 0xFF

        assert manager.write_internal(image, commit=True)
        assert manager.read_internal() == image

    def test_external_round_trip(self, probe_sim, external_image):
        manager = _manager(probe_sim)
        assert manager.write_external(external_image, commit=True)
        assert manager.read_external() == external_image

    def test_enable_write_precedes_write(self, probe_sim):
        manager = _manager(probe_sim)
        manager.write_internal(bytearray(256), commit=True)
        ops = probe_sim.opcodes()
        assert ops.index(0xAB) < ops.index(0x07)

    def test_write_wrong_size(self, probe_sim):
        with pytest.raises(InvalidParameterError):
            _manager(probe_sim).write_external(bytearray(100), commit=True)
        assert probe_sim.sent == []


class TestSignature:
    """Test signature read and patch."""

    def test_read_without_unlock(self, make_probe):
        sim = make_probe(accepted_key=None)
        sig = _manager(sim).read_signature()
        assert sig == bytes(sim.external[0x1638:0x1680])
        assert 0x99 not in sim.opcodes()

    def test_write(self, probe_sim, external_image):
        probe_sim.external[:] = external_image
        new_sig = b"\xC6" * SIGNATURE_LENGTH

        value = _manager(probe_sim).write_signature(new_sig, commit=True)

        assert probe_sim.external[0x1638:0x1680] == new_sig
        assert stored_checksum(probe_sim.external) == value
        assert checksum(probe_sim.external, HardwareRevision.REV2) == value

    def test_write_checksum_mismatch_aborts(self, probe_sim):
        # the simulated probe's default external image has no valid checksum
        before = bytes(probe_sim.external)
        with pytest.raises(ChecksumMismatchError):
            _manager(probe_sim).write_signature(bytes(SIGNATURE_LENGTH), commit=True)
        assert bytes(probe_sim.external) == before
        assert 0x13 not in probe_sim.opcodes()

    def test_write_rev1(self, probe_sim):
        image = bytearray((i * 3 + 1) & 0xFF for i in range(8192))
        update_checksum(image, HardwareRevision.REV1)
        probe_sim.external[:] = image

        _manager(probe_sim).write_signature(
            bytes(SIGNATURE_LENGTH), HardwareRevision.REV1, commit=True
        )
        assert stored_checksum(probe_sim.external) == checksum(
            probe_sim.external, HardwareRevision.REV1
        )


class TestRecovery:
    """Test the confused product-id recovery path."""

    def test_needs_recovery(self, make_probe):
        assert not _manager(make_probe()).needs_recovery
        assert _manager(make_probe(product_id=I1D3_PRODUCT_ID_CONFUSED)).needs_recovery

    def test_recover_reads_internal(self, make_probe):
        sim = make_probe(product_id=I1D3_PRODUCT_ID_CONFUSED)
        _manager(sim).recover()
        assert sim.opcodes() == [0x99, 0x9A, 0xAB] + [0x08] * 5
