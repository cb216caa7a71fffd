"""EEPROM field and checksum models."""

from __future__ import annotations

from pydantic import BaseModel


class SerialNumber(BaseModel):
    """Serial number field of the internal EEPROM."""

    text: str
    raw_hex: str


class ChecksumReport(BaseModel):
    """Stored and computed checksums of an external EEPROM image."""

    stored: int
    rev1: int
    rev2: int
    matched: str | None = None

    @property
    def valid(self) -> bool:
        return self.matched is not None
