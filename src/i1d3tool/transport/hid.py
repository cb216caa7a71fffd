"""USB HID transport implementation using hidapi."""

from __future__ import annotations

import time

import hid

from i1d3tool.exceptions import (
    CommTimeoutError,
    DeviceNotFoundError,
    DeviceNotOpenError,
    IoFailureError,
)
from i1d3tool.models.probe import HidDeviceInfo
from i1d3tool.protocol.types import FRAME_SIZE
from i1d3tool.transport.base import HidConfig, Transport
from i1d3tool.utils.logging import get_logger

logger = get_logger(__name__)

# Prefixed to every output report; the probe does not use numbered reports
_REPORT_ID = 0x00


def find_probes(config: HidConfig | None = None) -> list[HidDeviceInfo]:
    """Enumerate HID devices matching the configured vendor/product ids."""
    config = config or HidConfig()
    found: list[HidDeviceInfo] = []
    for info in hid.enumerate(config.vendor_id, 0):
        if info.get("product_id") not in config.product_ids:
            continue
        path = info.get("path", b"")
        found.append(HidDeviceInfo(
            path=path.decode(errors="replace") if isinstance(path, bytes) else str(path),
            vendor_id=info.get("vendor_id", config.vendor_id),
            product_id=info["product_id"],
            serial_number=info.get("serial_number") or "",
            product=info.get("product_string") or "",
        ))
    logger.debug("hid_scan_complete", count=len(found))
    return found


class HidTransport(Transport):
    """Transport over the probe's HID interrupt endpoints.

    Reads are blocking with a millisecond timeout; hidapi completes writes
    synchronously, so a short write is reported as an I/O failure.
    """

    def __init__(self, config: HidConfig | None = None) -> None:
        super().__init__(config or HidConfig())
        self._device: hid.device | None = None
        self._product_id = 0

    @property
    def product_id(self) -> int:
        return self._product_id

    def _select(self) -> HidDeviceInfo:
        probes = find_probes(self._config)
        if self._config.path is not None:
            probes = [p for p in probes if p.path == self._config.path]
        if not probes:
            raise DeviceNotFoundError(
                f"No i1Display Pro probe found (vendor 0x{self._config.vendor_id:04X})"
            )
        return probes[0]

    def connect(self) -> None:
        if self._connected:
            return
        target = self._select()
        logger.info("hid_connecting", path=target.path, product_id=f"0x{target.product_id:04X}")

        device = hid.device()
        try:
            device.open_path(target.path.encode())
        except OSError as exc:
            raise IoFailureError(f"Failed to open {target.path}: {exc}") from exc
        device.set_nonblocking(0)

        self._device = device
        self._product_id = target.product_id
        self._connected = True
        logger.info("hid_connected")

    def disconnect(self) -> None:
        if not self._connected:
            return
        logger.info("hid_disconnecting")
        if self._device is not None:
            self._device.close()
            self._device = None
        self._connected = False
        logger.info("hid_disconnected")

    def _require_device(self) -> hid.device:
        if self._device is None:
            raise DeviceNotOpenError("HID transport is not connected")
        return self._device

    def send(self, frame: bytes, timeout: float) -> None:
        """Write one output report.

        hidapi writes block with no timeout of their own, so ``timeout`` is
        checked once the write returns: a write that took longer raises
        CommTimeoutError. A write that never returns is not interrupted.
        """
        device = self._require_device()
        report = bytes([_REPORT_ID]) + frame
        start = time.monotonic()
        try:
            written = device.write(report)
        except (OSError, ValueError) as exc:
            raise IoFailureError(f"HID write failed: {exc}") from exc
        if written < 0:
            raise IoFailureError(f"HID write failed: {device.error()}")
        if written < len(report):
            raise IoFailureError(f"HID write incomplete: {written} of {len(report)} bytes")
        elapsed = time.monotonic() - start
        if elapsed > timeout:
            raise CommTimeoutError(f"HID write took {elapsed:.2f}s, limit {timeout:.2f}s")

    def receive(self, timeout: float) -> bytes:
        device = self._require_device()
        try:
            data = device.read(FRAME_SIZE, int(timeout * 1000 + 0.5))
        except (OSError, ValueError) as exc:
            raise IoFailureError(f"HID read failed: {exc}") from exc
        if not data:
            raise CommTimeoutError(f"No response within {timeout:.2f}s")
        return bytes(data)
