"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import pytest
import structlog

from i1d3tool.core.checksum import HardwareRevision, update_checksum
from i1d3tool.core.unlock import UNLOCK_KEYS, build_unlock_frame
from i1d3tool.exceptions import CommTimeoutError
from i1d3tool.protocol.types import (
    ENABLE_WRITE_MAGIC,
    FRAME_SIZE,
    I1D3_PRODUCT_ID,
    UNLOCK_ACCEPTED,
)
from i1d3tool.transport.base import HidConfig, Transport

FIRMWARE = b"i1Display3 Rev 2.28"


class SimulatedProbe(Transport):
    """In-memory probe speaking the 64-byte frame protocol.

    Holds both EEPROMs, accepts exactly one unlock key (or none) and only
    honours writes after a successful unlock plus ENABLE_WRITE.
    """

    def __init__(self, accepted_key: int | None = 0, product_id: int = I1D3_PRODUCT_ID) -> None:
        super().__init__(HidConfig(timeout=0.1))
        self.accepted_key = accepted_key
        self._product_id = product_id
        self.internal = bytearray(range(256))
        self.external = bytearray((i * 7) & 0xFF for i in range(8192))
        self.sent: list[bytes] = []
        self.unlocked = False
        self.write_enabled = False
        self.bad_echo_opcode: int | None = None
        self.timeout_after: int | None = None
        self._challenge = bytes(FRAME_SIZE)
        self._challenge_count = 0
        self._pending: list[bytes] = []

    @property
    def product_id(self) -> int:
        return self._product_id

    def connect(self) -> None:
        self._connected = True

    def disconnect(self) -> None:
        self._connected = False

    def opcodes(self) -> list[int]:
        return [frame[0] for frame in self.sent]

    def send(self, frame: bytes, timeout: float) -> None:
        assert len(frame) == FRAME_SIZE
        if self.timeout_after is not None and len(self.sent) >= self.timeout_after:
            raise CommTimeoutError("simulated timeout")
        self.sent.append(bytes(frame))
        self._pending.append(self._respond(frame))

    def receive(self, timeout: float) -> bytes:
        if not self._pending:
            raise CommTimeoutError("nothing to receive")
        return self._pending.pop(0)

    def _make_challenge(self) -> bytes:
        self._challenge_count += 1
        seed = self._challenge_count
        return bytes([0x00, 0x99] + [(seed * 31 + i * 13) & 0xFF for i in range(2, FRAME_SIZE)])

    def _respond(self, frame: bytes) -> bytes:
        major = frame[0]
        out = bytearray(FRAME_SIZE)
        out[1] = major

        if major == 0x00:
            out[2:2 + len(FIRMWARE)] = FIRMWARE
        elif major == 0x99:
            self._challenge = self._make_challenge()
            out[:] = self._challenge
        elif major == 0x9A:
            key = None if self.accepted_key is None else UNLOCK_KEYS[self.accepted_key]
            if key is not None and build_unlock_frame(key, self._challenge)[24:40] == frame[24:40]:
                self.unlocked = True
                out[2] = UNLOCK_ACCEPTED
        elif major == 0xAB:
            if self.unlocked and frame[1:5] == ENABLE_WRITE_MAGIC:
                self.write_enabled = True
        elif major == 0x08:
            addr, length = frame[1], frame[2]
            out[2:4] = frame[1:3]
            out[4:4 + length] = self.internal[addr:addr + length]
        elif major == 0x12:
            addr, length = (frame[1] << 8) | frame[2], frame[3]
            out[2:5] = frame[1:4]
            out[5:5 + length] = self.external[addr:addr + length]
        elif major == 0x07:
            if not self.write_enabled:
                out[0] = 0x01
            else:
                addr, length = frame[1], frame[2]
                self.internal[addr:addr + length] = frame[3:3 + length]
        elif major == 0x13:
            if not self.write_enabled:
                out[0] = 0x01
            else:
                addr, length = (frame[1] << 8) | frame[2], frame[3]
                self.external[addr:addr + length] = frame[4:4 + length]
        else:
            out[0] = 0x01

        if self.bad_echo_opcode == major:
            out[1] = major ^ 0xFF
        return bytes(out)


def make_external_image(revision: HardwareRevision = HardwareRevision.REV2) -> bytearray:
    """An 8 KiB external image with a valid checksum for ``revision``."""
    image = bytearray((i * 3 + 1) & 0xFF for i in range(8192))
    update_checksum(image, revision)
    return image


@pytest.fixture
def probe_sim() -> SimulatedProbe:
    """A connected simulated probe that accepts the first key."""
    sim = SimulatedProbe()
    sim.connect()
    return sim


@pytest.fixture
def external_image() -> bytearray:
    return make_external_image()


@pytest.fixture
def make_probe():
    """Factory for simulated probes with a chosen key or product id."""
    def _make(**kwargs) -> SimulatedProbe:
        sim = SimulatedProbe(**kwargs)
        sim.connect()
        return sim
    return _make


@pytest.fixture(autouse=True)
def _reset_structlog():
    """Drop CLI logging configuration bound to a CliRunner's streams."""
    yield
    structlog.reset_defaults()
