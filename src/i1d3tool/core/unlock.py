"""Challenge-response unlock and vendor variant identification.

The probe hands out a 64-byte challenge. Eight bytes of it are mixed with
a 64-bit vendor key to produce a 16-byte response; the probe runs the same
transform with its own key and accepts the answer only if they agree.
Trying every known key in table order both unlocks the probe and tells us
which vendor variant it is locked to.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from i1d3tool.exceptions import I1d3Error, InvalidParameterError
from i1d3tool.protocol.framing import encode_command
from i1d3tool.protocol.types import UNLOCK_ACCEPTED, Command
from i1d3tool.utils.logging import get_logger

if TYPE_CHECKING:
    from i1d3tool.core.session import ProbeSession

logger = get_logger(__name__)

_MASK32 = 0xFFFFFFFF

# Challenge layout
CHALLENGE_XOR_INDEX = 3
CHALLENGE_DATA_OFFSET = 35
CHALLENGE_DATA_LENGTH = 8
CHALLENGE_RESPONSE_XOR_INDEX = 2

# Response layout
RESPONSE_OFFSET = 24
RESPONSE_LENGTH = 16


@dataclass(frozen=True)
class UnlockKey:
    """A vendor key pair and the variant it identifies."""

    k0: int
    k1: int
    variant: str


# Table order is the identification order; do not reorder.
UNLOCK_KEYS: tuple[UnlockKey, ...] = (
    UnlockKey(0xE9622E9F, 0x8D63E133, "Retail"),
    UnlockKey(0xE01E6E0A, 0x257462DE, "ColorMunki"),
    UnlockKey(0xCAA62B2C, 0x30815B61, "OEM"),
    UnlockKey(0xA9119479, 0x5B168761, "NEC"),
    UnlockKey(0x160EB6AE, 0x14440E70, "Quato"),
    UnlockKey(0x291E41D7, 0x51937BDD, "HP DreamColor"),
    UnlockKey(0x1ABFAE03, 0xF25AC8E8, "Wacom"),
    UnlockKey(0xC9BFAFE0, 0x02871166, "SpectraCal C6"),
    UnlockKey(0x828C43E9, 0xCBB8A8ED, "TPA3"),
)


# (intermediate word, bit shift, sign, sum byte) for each of the 16 response
# bytes. Words are d0..d3, sum bytes are s0/s1.
_RESPONSE_TABLE: tuple[tuple[int, int, int, int], ...] = (
    (0, 16, +1, 0),
    (2, 8, -1, 1),
    (3, 0, +1, 1),
    (1, 16, +1, 0),
    (2, 16, -1, 1),
    (3, 16, -1, 0),
    (1, 24, -1, 0),
    (0, 0, -1, 1),
    (3, 8, +1, 0),
    (2, 24, -1, 1),
    (0, 8, +1, 0),
    (1, 8, -1, 1),
    (1, 0, +1, 1),
    (3, 24, +1, 1),
    (2, 0, +1, 0),
    (0, 24, -1, 0),
)


def _word_bytes(value: int) -> list[int]:
    return [(value >> shift) & 0xFF for shift in (0, 8, 16, 24)]


def derive_response(k0: int, k1: int, challenge: bytes) -> bytes:
    """Compute the 16-byte core unlock response for one key pair."""
    if len(challenge) < CHALLENGE_DATA_OFFSET + CHALLENGE_DATA_LENGTH:
        raise InvalidParameterError(
            f"Challenge frame too short: {len(challenge)} bytes"
        )

    xor = challenge[CHALLENGE_XOR_INDEX]
    sc = [
        challenge[CHALLENGE_DATA_OFFSET + i] ^ xor
        for i in range(CHALLENGE_DATA_LENGTH)
    ]

    word0 = (sc[3] << 24) | (sc[0] << 16) | (sc[4] << 8) | sc[6]
    word1 = (sc[1] << 24) | (sc[7] << 16) | (sc[2] << 8) | sc[5]

    neg_k0 = -k0 & _MASK32
    neg_k1 = -k1 & _MASK32

    words = (
        (neg_k0 - word1) & _MASK32,
        (neg_k1 - word0) & _MASK32,
        (word1 * neg_k0) & _MASK32,
        (word0 * neg_k1) & _MASK32,
    )

    total = sum(sc) + sum(_word_bytes(neg_k0)) + sum(_word_bytes(neg_k1))
    sums = (total & 0xFF, (total >> 8) & 0xFF)

    return bytes(
        ((words[w] >> shift) + sign * sums[s]) & 0xFF
        for w, shift, sign, s in _RESPONSE_TABLE
    )


def build_unlock_frame(key: UnlockKey, challenge: bytes) -> bytes:
    """Build the ANSWER_CHALLENGE frame for a challenge and key.

    Response bytes land at frame offsets 24..39, masked with challenge
    byte 2. Everything else apart from the opcode is zero.
    """
    core = derive_response(key.k0, key.k1, challenge)
    mask = challenge[CHALLENGE_RESPONSE_XOR_INDEX]
    masked = bytes(b ^ mask for b in core)
    # payload starts at frame byte 1
    payload = bytes(RESPONSE_OFFSET - 1) + masked
    return encode_command(Command.ANSWER_CHALLENGE, payload)


class UnlockState(Enum):
    LOCKED = "locked"
    CHALLENGED = "challenged"
    UNLOCKED = "unlocked"
    FAILED = "failed"


@dataclass(frozen=True)
class UnlockResult:
    """Outcome of an unlock pass over the key table."""

    variant_index: int | None
    attempts: int

    @property
    def unlocked(self) -> bool:
        return self.variant_index is not None

    @property
    def variant(self) -> str | None:
        if self.variant_index is None:
            return None
        return UNLOCK_KEYS[self.variant_index].variant


class UnlockEngine:
    """Runs the challenge-response handshake against one probe session."""

    def __init__(
        self,
        session: ProbeSession,
        keys: tuple[UnlockKey, ...] = UNLOCK_KEYS,
    ) -> None:
        self._session = session
        self._keys = keys
        self._state = UnlockState.LOCKED

    @property
    def state(self) -> UnlockState:
        return self._state

    def unlock(self) -> UnlockResult:
        """Try each key in table order until the probe accepts one.

        A fresh challenge is requested for every attempt. Any transport or
        protocol error aborts the whole pass.
        """
        self._state = UnlockState.LOCKED
        attempts = 0
        try:
            for index, key in enumerate(self._keys):
                challenge = self._session.command(Command.GET_CHALLENGE)
                self._state = UnlockState.CHALLENGED

                attempts += 1
                result = self._session.transact(build_unlock_frame(key, challenge))
                if result[2] == UNLOCK_ACCEPTED:
                    self._state = UnlockState.UNLOCKED
                    logger.info("probe_unlocked", variant=key.variant, index=index)
                    return UnlockResult(variant_index=index, attempts=attempts)

                logger.debug("unlock_key_rejected", variant=key.variant, index=index)
        except I1d3Error:
            self._state = UnlockState.FAILED
            raise

        self._state = UnlockState.FAILED
        logger.warning("probe_unlock_failed", attempts=attempts)
        return UnlockResult(variant_index=None, attempts=attempts)
