"""Probe identity and discovery models."""

from __future__ import annotations

from pydantic import BaseModel


class HidDeviceInfo(BaseModel):
    """A matching HID device found during enumeration."""

    path: str
    vendor_id: int
    product_id: int
    serial_number: str = ""
    product: str = ""


class ProbeInfo(BaseModel):
    """Firmware string and unlock variant of a connected probe."""

    firmware: str
    product_id: int
    variant_index: int | None = None
    variant: str | None = None

    @property
    def variant_label(self) -> str:
        return self.variant or "Unknown signature"
