from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence

from .value_objects import CacheEntry


class Identifier(Protocol):
    """Unique, time-ordered token id that embeds its creation timestamp."""

    @property
    def timestamp(self) -> int:
        """Creation time in milliseconds since the Unix epoch."""
        ...

    def to_bytes(self) -> bytes:
        ...

    def to_text(self) -> str:
        ...


class IdentitySource(Protocol):
    """
    Port for issuing token ids.

    `issue` may suspend while the source waits out its own uniqueness
    constraint (e.g. sequence rollover within one millisecond).
    """

    async def issue(self) -> Identifier:
        ...

    def parse(self, value: bytes) -> Identifier:
        """
        Rebuild an id from its binary form.

        Raises:
          - ValueError if `value` is not a valid binary id
        """
        ...


class Cipher(Protocol):
    """Port for authenticated symmetric encryption."""

    key_size: int

    def encrypt(self, plaintext: bytes, key: bytes) -> bytes:
        """Return self-describing ciphertext (carries nonce and tag)."""
        ...

    def decrypt(self, ciphertext: bytes, key: bytes) -> bytes:
        """Return plaintext or raise if authentication fails."""
        ...


class TupleCodec(Protocol):
    """Port for compact positional binary serialization."""

    def serialize(self, value: Sequence[Any]) -> bytes:
        ...

    def deserialize(self, data: bytes) -> Any:
        ...


class TextCodec(Protocol):
    """Port for the bijective bytes <-> text mapping of token strings."""

    def encode(self, data: bytes) -> str:
        ...

    def decode(self, text: str) -> bytes:
        ...


class RevocationStore(Protocol):
    """
    Port for the remote time-scored set of revoked token ids.

    Scores are absolute expiry times in milliseconds.
    """

    async def upsert(self, key: str, member: str, score: float) -> None:
        ...

    async def score_of(self, key: str, member: str) -> Optional[float]:
        ...

    async def prune(self, key: str, before: float) -> int:
        """Remove members scored strictly below `before`; return how many."""
        ...


class DecodeCache(Protocol):
    """Port for the local cache of decoded tokens, keyed by token string."""

    async def get(self, key: str) -> Optional[CacheEntry]:
        ...

    async def set(self, key: str, value: CacheEntry, ttl_ms: Optional[int]) -> None:
        """Store `value`; `ttl_ms=None` means the entry does not expire."""
        ...

    async def clear(self) -> None:
        ...
