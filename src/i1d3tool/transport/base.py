"""Abstract transport layer for probe communication."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from i1d3tool.protocol.types import (
    I1D3_PRODUCT_ID,
    I1D3_PRODUCT_ID_CONFUSED,
    I1D3_VENDOR_ID,
)

DEFAULT_TIMEOUT_S = 1.0


@dataclass(frozen=True)
class HidConfig:
    """USB HID transport configuration."""
    vendor_id: int = I1D3_VENDOR_ID
    product_ids: tuple[int, ...] = (I1D3_PRODUCT_ID, I1D3_PRODUCT_ID_CONFUSED)
    timeout: float = DEFAULT_TIMEOUT_S
    path: str | None = None


class Transport(ABC):
    """Duplex channel exchanging fixed-size frames with one probe."""

    def __init__(self, config: HidConfig) -> None:
        self._config = config
        self._connected = False

    @property
    def config(self) -> HidConfig:
        return self._config

    @property
    def is_connected(self) -> bool:
        return self._connected

    @property
    @abstractmethod
    def product_id(self) -> int:
        """USB product id of the connected probe."""

    @abstractmethod
    def connect(self) -> None:
        """Open the device."""

    @abstractmethod
    def disconnect(self) -> None:
        """Close the device."""

    @abstractmethod
    def send(self, frame: bytes, timeout: float) -> None:
        """Send one frame.

        Backends whose writes block without a timeout check ``timeout`` once
        the write returns; they cannot interrupt a write that never returns.

        Raises:
            CommTimeoutError: The frame was not accepted within ``timeout``.
            IoFailureError: The device reported an I/O error.
        """

    @abstractmethod
    def receive(self, timeout: float) -> bytes:
        """Receive one frame.

        Raises:
            CommTimeoutError: Nothing arrived within ``timeout``.
            IoFailureError: The device reported an I/O error.
        """

    def __enter__(self) -> Transport:
        self.connect()
        return self

    def __exit__(self, *args: object) -> None:
        self.disconnect()
