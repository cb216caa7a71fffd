"""Probe protocol engine: unlock, EEPROM transfer, checksum and field access."""
