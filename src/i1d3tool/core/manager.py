"""Probe-level operations composed from the protocol engine."""

from __future__ import annotations

from i1d3tool.core.checksum import HardwareRevision
from i1d3tool.core.eeprom import EXTERNAL, INTERNAL, read_region, write_region
from i1d3tool.core.fields import (
    encode_serial_number,
    get_serial_number,
    get_signature,
    serial_number_text,
    set_serial_number,
    set_signature,
)
from i1d3tool.core.session import ProbeSession
from i1d3tool.core.unlock import UnlockEngine, UnlockResult
from i1d3tool.exceptions import InvalidParameterError, UnlockError
from i1d3tool.models.eeprom import SerialNumber
from i1d3tool.models.probe import ProbeInfo
from i1d3tool.protocol.types import ENABLE_WRITE_MAGIC, I1D3_PRODUCT_ID_CONFUSED, Command
from i1d3tool.utils.logging import get_logger

logger = get_logger(__name__)

_INFO_OFFSET = 2


def _serial_model(raw: bytes) -> SerialNumber:
    return SerialNumber(text=serial_number_text(raw), raw_hex=raw.hex())


class ProbeManager:
    """High-level probe operations.

    Every write method takes ``commit``: when False, everything up to the
    device write (unlock, read-back, validation, patch) still runs but no
    write command is sent.
    """

    def __init__(self, session: ProbeSession) -> None:
        self._session = session
        self._unlock = UnlockEngine(session)

    @property
    def session(self) -> ProbeSession:
        return self._session

    @property
    def needs_recovery(self) -> bool:
        """True when the probe enumerates with the post-rewrite product id."""
        return self._session.transport.product_id == I1D3_PRODUCT_ID_CONFUSED

    def get_firmware(self) -> str:
        response = self._session.command(Command.GET_INFO)
        text = response[_INFO_OFFSET:].split(b"\x00", 1)[0]
        return text.decode("ascii", errors="replace")

    def unlock(self) -> UnlockResult:
        return self._unlock.unlock()

    def require_unlock(self) -> UnlockResult:
        """Unlock or raise UnlockError."""
        result = self._unlock.unlock()
        if not result.unlocked:
            raise UnlockError(
                f"Failed to unlock the probe after {result.attempts} key attempts"
            )
        return result

    def enable_write(self) -> None:
        self._session.command(Command.ENABLE_WRITE, ENABLE_WRITE_MAGIC)
        logger.debug("eeprom_write_enabled")

    def get_info(self) -> ProbeInfo:
        """Firmware string plus the variant identified by unlocking."""
        firmware = self.get_firmware()
        result = self.unlock()
        return ProbeInfo(
            firmware=firmware,
            product_id=self._session.transport.product_id,
            variant_index=result.variant_index,
            variant=result.variant,
        )

    def recover(self) -> None:
        """Clear the confused product-id state by re-reading the internal EEPROM.

        The probe must be replugged afterwards.
        """
        logger.warning("probe_recovery_started", product_id=f"0x{I1D3_PRODUCT_ID_CONFUSED:04X}")
        self.require_unlock()
        self.enable_write()
        read_region(self._session, INTERNAL)
        logger.info("probe_recovery_complete")

    # Internal EEPROM

    def read_internal(self) -> bytearray:
        self.require_unlock()
        return read_region(self._session, INTERNAL)

    def write_internal(self, image: bytes | bytearray, commit: bool = False) -> bool:
        if len(image) != INTERNAL.size:
            raise InvalidParameterError(
                f"Internal image must be {INTERNAL.size} bytes, got {len(image)}"
            )
        self.require_unlock()
        self.enable_write()
        if not commit:
            logger.info("eeprom_write_skipped", region=INTERNAL.name)
            return False
        write_region(self._session, INTERNAL, image)
        return True

    def read_serial_number(self) -> SerialNumber:
        image = self.read_internal()
        return _serial_model(get_serial_number(image))

    def write_serial_number(self, serial: str, commit: bool = False) -> SerialNumber:
        field = encode_serial_number(serial)
        self.require_unlock()
        self.enable_write()
        image = read_region(self._session, INTERNAL)
        set_serial_number(image, field)
        if commit:
            write_region(self._session, INTERNAL, image)
        else:
            logger.info("eeprom_write_skipped", region=INTERNAL.name)
        return _serial_model(get_serial_number(image))

    # External EEPROM

    def read_external(self) -> bytearray:
        self.require_unlock()
        return read_region(self._session, EXTERNAL)

    def write_external(self, image: bytes | bytearray, commit: bool = False) -> bool:
        if len(image) != EXTERNAL.size:
            raise InvalidParameterError(
                f"External image must be {EXTERNAL.size} bytes, got {len(image)}"
            )
        self.require_unlock()
        self.enable_write()
        if not commit:
            logger.info("eeprom_write_skipped", region=EXTERNAL.name)
            return False
        write_region(self._session, EXTERNAL, image)
        return True

    def read_signature(self) -> bytes:
        # The external EEPROM is readable without unlocking
        image = read_region(self._session, EXTERNAL)
        return get_signature(image)

    def write_signature(
        self,
        signature: bytes,
        revision: HardwareRevision = HardwareRevision.REV2,
        commit: bool = False,
    ) -> int:
        """Patch the signature block on the probe.

        Returns:
            The new external EEPROM checksum.
        """
        self.require_unlock()
        self.enable_write()
        image = read_region(self._session, EXTERNAL)
        new_checksum = set_signature(image, signature, revision)
        if commit:
            write_region(self._session, EXTERNAL, image)
        else:
            logger.info("eeprom_write_skipped", region=EXTERNAL.name)
        return new_checksum
