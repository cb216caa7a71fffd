"""Transport layer for probe communication."""

from i1d3tool.transport.base import HidConfig, Transport
from i1d3tool.transport.hid import HidTransport, find_probes

__all__ = [
    "HidConfig",
    "HidTransport",
    "Transport",
    "find_probes",
]
