"""Exception hierarchy for probe communication, protocol and image integrity errors."""

from __future__ import annotations

from enum import StrEnum


class FailureStage(StrEnum):
    """Stage of an operation that failed, reported to the operator."""
    COMMUNICATION = "communication"
    PROTOCOL = "protocol"
    AUTHENTICATION = "authentication"
    INTEGRITY = "integrity"
    STORAGE = "storage"
    USAGE = "usage"


class I1d3Error(Exception):
    """Base exception for all i1d3tool errors."""

    stage: FailureStage = FailureStage.COMMUNICATION

    def __init__(self, message: str, stage: FailureStage | None = None) -> None:
        if stage is not None:
            self.stage = stage
        super().__init__(message)


class TransportError(I1d3Error):
    """Error in the HID transport layer."""


class CommTimeoutError(TransportError):
    """A frame was not sent or received within the timeout."""


class IoFailureError(TransportError):
    """The operating system reported an I/O failure on the device."""


class DeviceNotFoundError(TransportError):
    """No matching probe was found."""


class DeviceNotOpenError(TransportError):
    """The transport is not open."""


class ProtocolMismatchError(I1d3Error):
    """A response frame broke the status/echo contract."""

    stage = FailureStage.PROTOCOL

    def __init__(
        self,
        message: str,
        expected_opcode: int | None = None,
        status: int | None = None,
        echo: int | None = None,
    ) -> None:
        self.expected_opcode = expected_opcode
        self.status = status
        self.echo = echo
        super().__init__(message)


class UnlockError(I1d3Error):
    """No key in the unlock table was accepted by the probe."""

    stage = FailureStage.AUTHENTICATION


class ChecksumMismatchError(I1d3Error):
    """The stored external EEPROM checksum does not match its contents."""

    stage = FailureStage.INTEGRITY

    def __init__(self, message: str, stored: int, computed: int, revision: str) -> None:
        self.stored = stored
        self.computed = computed
        self.revision = revision
        super().__init__(message)


class InvalidParameterError(I1d3Error):
    """An invalid parameter (payload, image size, field value) was supplied."""

    stage = FailureStage.USAGE


class BackupFileError(I1d3Error):
    """A backup image could not be read or written."""

    stage = FailureStage.STORAGE
