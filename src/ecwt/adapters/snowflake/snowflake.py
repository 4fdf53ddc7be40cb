from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Callable, Optional

from .. import base62
from ...domain.exceptions import ConfigurationError
from ...domain.ports import IdentitySource
from ...utils.time import now_ms

# 2020-01-01T00:00:00Z
EPOCH_MS = 1_577_836_800_000

TIMESTAMP_BITS = 41
WORKER_ID_BITS = 10
SEQUENCE_BITS = 12

MAX_WORKER_ID = (1 << WORKER_ID_BITS) - 1
MAX_SEQUENCE = (1 << SEQUENCE_BITS) - 1
MAX_TIMESTAMP = (1 << TIMESTAMP_BITS) - 1

BYTE_LENGTH = 8


@dataclass(frozen=True, slots=True, order=True)
class Snowflake:
    """
    Time-ordered 63-bit id: timestamp | worker id | sequence.

    Ordering of the integer value follows creation order for ids issued
    by one factory.
    """

    value: int

    @classmethod
    def compose(cls, timestamp: int, worker_id: int, sequence: int) -> "Snowflake":
        offset = timestamp - EPOCH_MS
        if not 0 <= offset <= MAX_TIMESTAMP:
            raise ValueError(f"Timestamp out of range: {timestamp}")
        return cls(
            (offset << (WORKER_ID_BITS + SEQUENCE_BITS))
            | (worker_id << SEQUENCE_BITS)
            | sequence
        )

    # --- Decomposition ---------------------------------------------------

    @property
    def timestamp(self) -> int:
        return (self.value >> (WORKER_ID_BITS + SEQUENCE_BITS)) + EPOCH_MS

    @property
    def worker_id(self) -> int:
        return (self.value >> SEQUENCE_BITS) & MAX_WORKER_ID

    @property
    def sequence(self) -> int:
        return self.value & MAX_SEQUENCE

    # --- Encodings -------------------------------------------------------

    def to_bytes(self) -> bytes:
        return self.value.to_bytes(BYTE_LENGTH, "big")

    def to_text(self) -> str:
        return base62.encode(self.to_bytes())

    def __str__(self) -> str:
        return self.to_text()


class SnowflakeFactory(IdentitySource):
    """
    IdentitySource issuing Snowflake ids for one worker.

    When all sequence values of the current millisecond are used, `issue`
    sleeps until the clock moves on. A clock that steps backwards keeps
    using the last seen millisecond, so ids never decrease.
    """

    def __init__(self, worker_id: int = 0, clock: Optional[Callable[[], int]] = None) -> None:
        if isinstance(worker_id, bool) or not isinstance(worker_id, int) or not 0 <= worker_id <= MAX_WORKER_ID:
            raise ConfigurationError(f"worker_id must be an integer in [0, {MAX_WORKER_ID}], got {worker_id!r}")

        self.worker_id = worker_id
        self._clock = clock or now_ms
        self._last_timestamp = -1
        self._sequence = 0

    async def issue(self) -> Snowflake:
        while True:
            now = self._clock()
            if now > self._last_timestamp:
                self._last_timestamp = now
                self._sequence = 0
            elif self._sequence < MAX_SEQUENCE:
                self._sequence += 1
            else:
                await asyncio.sleep(max(self._last_timestamp + 1 - now, 1) / 1000)
                continue

            return Snowflake.compose(self._last_timestamp, self.worker_id, self._sequence)

    def parse(self, value: bytes) -> Snowflake:
        if not isinstance(value, (bytes, bytearray)) or len(value) != BYTE_LENGTH:
            raise ValueError("Snowflake must be exactly 8 bytes")
        return Snowflake(int.from_bytes(value, "big"))

    def parse_text(self, value: str) -> Snowflake:
        return self.parse(base62.decode(value))
