"""One request/response exchange per command against a single probe."""

from __future__ import annotations

from i1d3tool.protocol.framing import encode_command, validate_response
from i1d3tool.protocol.types import Command
from i1d3tool.transport.base import Transport
from i1d3tool.utils.logging import get_logger

logger = get_logger(__name__)


class ProbeSession:
    """Strict request/response command channel.

    Only one command is ever in flight. Failures propagate to the caller
    unchanged; nothing is retried here.
    """

    def __init__(self, transport: Transport, timeout: float | None = None) -> None:
        self._transport = transport
        self._timeout = timeout if timeout is not None else transport.config.timeout

    @property
    def transport(self) -> Transport:
        return self._transport

    @property
    def timeout(self) -> float:
        return self._timeout

    def transact(self, frame: bytes) -> bytes:
        """Send a pre-built command frame and return the validated response."""
        major = frame[0]
        self._transport.send(frame, self._timeout)
        response = self._transport.receive(self._timeout)
        logger.debug(
            "frame_exchanged",
            opcode=f"0x{major:02X}",
            sent=frame[:8].hex(),
            received=response[:8].hex(),
        )
        return validate_response(response, major)

    def command(self, command: Command | int, payload: bytes = b"") -> bytes:
        """Encode and send a command; return the validated response frame."""
        return self.transact(encode_command(command, payload))
