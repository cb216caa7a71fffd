"""i1d3tool - EEPROM backup, restore and signature tool for i1Display Pro probes."""

__version__ = "0.1.0"
