"""Pydantic models for probe, EEPROM and discovery results."""

from i1d3tool.models.eeprom import ChecksumReport, SerialNumber
from i1d3tool.models.probe import HidDeviceInfo, ProbeInfo

__all__ = [
    "ChecksumReport",
    "HidDeviceInfo",
    "ProbeInfo",
    "SerialNumber",
]
