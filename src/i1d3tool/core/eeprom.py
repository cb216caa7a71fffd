"""Packetized read/write of the internal and external EEPROM address spaces.

Each region is moved in chunks that fit a single 64-byte frame together
with an address/length header. Request header (from frame byte 1):

    internal:  [addr, len]
    external:  [addr_hi, addr_lo, len]

The response echoes the header after the status/echo bytes, so read data
starts at byte 4 (internal) or byte 5 (external).
"""

from __future__ import annotations

from dataclasses import dataclass

from i1d3tool.core.session import ProbeSession
from i1d3tool.exceptions import InvalidParameterError
from i1d3tool.protocol.types import FRAME_SIZE, PAYLOAD_OFFSET, Command
from i1d3tool.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class RegionLayout:
    """Geometry and command codes for one EEPROM address space."""

    name: str
    size: int
    read_chunk: int
    write_chunk: int
    read_command: Command
    write_command: Command
    address_width: int

    @property
    def header_size(self) -> int:
        return self.address_width + 1

    @property
    def read_data_offset(self) -> int:
        # status + echo + echoed header
        return 2 + self.header_size

    def __post_init__(self) -> None:
        if self.read_data_offset + self.read_chunk > FRAME_SIZE:
            raise ValueError(f"{self.name}: read chunk does not fit a frame")
        if PAYLOAD_OFFSET + self.header_size + self.write_chunk > FRAME_SIZE:
            raise ValueError(f"{self.name}: write chunk does not fit a frame")

    def header(self, address: int, length: int) -> bytes:
        return address.to_bytes(self.address_width, "big") + bytes([length])


INTERNAL = RegionLayout(
    name="internal",
    size=256,
    read_chunk=60,
    write_chunk=32,
    read_command=Command.READ_INTERNAL,
    write_command=Command.WRITE_INTERNAL,
    address_width=1,
)

EXTERNAL = RegionLayout(
    name="external",
    size=8192,
    read_chunk=59,
    write_chunk=32,
    read_command=Command.READ_EXTERNAL,
    write_command=Command.WRITE_EXTERNAL,
    address_width=2,
)


def plan_chunks(size: int, chunk: int) -> list[tuple[int, int]]:
    """Return (address, length) pairs covering [0, size); the last may be short."""
    if chunk <= 0:
        raise InvalidParameterError(f"Chunk size must be positive, got {chunk}")
    return [(addr, min(chunk, size - addr)) for addr in range(0, size, chunk)]


def read_region(session: ProbeSession, layout: RegionLayout) -> bytearray:
    """Read a whole EEPROM region into a new image.

    Any failed chunk aborts the read and propagates the error.
    """
    image = bytearray(layout.size)
    offset = layout.read_data_offset
    for address, length in plan_chunks(layout.size, layout.read_chunk):
        response = session.command(layout.read_command, layout.header(address, length))
        image[address:address + length] = response[offset:offset + length]

    logger.info("eeprom_region_read", region=layout.name, size=layout.size)
    return image


def write_region(session: ProbeSession, layout: RegionLayout, image: bytes | bytearray) -> None:
    """Write a whole image to an EEPROM region.

    Any failed chunk aborts the write; the region is then partially
    written and must not be assumed consistent.
    """
    if len(image) != layout.size:
        raise InvalidParameterError(
            f"{layout.name} image must be {layout.size} bytes, got {len(image)}"
        )

    for address, length in plan_chunks(layout.size, layout.write_chunk):
        chunk = bytes(image[address:address + length])
        session.command(layout.write_command, layout.header(address, length) + chunk)

    logger.info("eeprom_region_written", region=layout.name, size=layout.size)
