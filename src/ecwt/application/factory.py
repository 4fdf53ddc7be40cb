from __future__ import annotations

import math
from typing import Any, Callable, Mapping, Optional

import structlog

from .token_codec import TokenCodec
from ..adapters.base62 import Base62TextCodec
from ..adapters.crypto.aes_gcm import AesGcmCipher
from ..adapters.msgpack.tuple_codec import MsgpackTupleCodec
from ..domain.constants import NEVER_EXPIRES_TTL, REDIS_PREFIX
from ..domain.exceptions import (
    ConfigurationError,
    TokenExpiredError,
    TokenFormatError,
    TokenRevokedError,
    ValidationError,
)
from ..domain.ports import (
    Cipher,
    DecodeCache,
    IdentitySource,
    RevocationStore,
    TextCodec,
    TupleCodec,
)
from ..domain.token import Ecwt
from ..domain.value_objects import CacheEntry, Schema, SchemaSpec, is_valid_ttl
from ..utils.time import now_ms

logger = structlog.get_logger(__name__)


class EcwtFactory:
    """
    Creates, verifies and revokes tokens.

    Configuration is fixed at construction:
      - identity_source: issues token ids
      - key:             secret for `cipher`, exactly `cipher.key_size` bytes
      - schema:          token data fields and their validators
      - namespace:       scopes the revocation set key
      - revocation_store / decode_cache: optional collaborators

    Without a revocation store tokens are purely stateless and `revoke()`
    only logs a warning.
    """

    def __init__(
        self,
        *,
        identity_source: IdentitySource,
        key: bytes,
        schema: Schema | SchemaSpec | None = None,
        namespace: Optional[str] = None,
        revocation_store: Optional[RevocationStore] = None,
        decode_cache: Optional[DecodeCache] = None,
        cipher: Optional[Cipher] = None,
        tuple_codec: Optional[TupleCodec] = None,
        text_codec: Optional[TextCodec] = None,
        clock: Optional[Callable[[], int]] = None,
    ) -> None:
        if identity_source is None:
            raise ConfigurationError("identity_source is required")

        cipher = cipher or AesGcmCipher()
        if not isinstance(key, (bytes, bytearray)) or len(key) != cipher.key_size:
            raise ConfigurationError(f"Encryption key must be {cipher.key_size} bytes")

        if namespace is not None and (not isinstance(namespace, str) or not namespace):
            raise ConfigurationError("namespace must be a non-empty string or None")

        self.identity_source = identity_source
        self.schema = schema if isinstance(schema, Schema) else Schema(schema)
        self.namespace = namespace
        self.revocation_store = revocation_store
        self.decode_cache = decode_cache
        self.codec = TokenCodec(
            key=bytes(key),
            cipher=cipher,
            tuple_codec=tuple_codec or MsgpackTupleCodec(),
            text_codec=text_codec or Base62TextCodec(),
        )
        self._clock = clock or now_ms

        if namespace:
            self.revoked_key = f"{REDIS_PREFIX}{namespace}:revoked"
        else:
            self.revoked_key = f"{REDIS_PREFIX}revoked"

    def now(self) -> int:
        """Current time in milliseconds, as seen by this factory."""
        return self._clock()

    # ------------------------------------------------------------------ #
    # Public operations
    # ------------------------------------------------------------------ #

    async def create(
        self,
        data: Optional[Mapping[str, Any]] = None,
        *,
        ttl: Optional[float] = None,
    ) -> Ecwt:
        """
        Create a new token.

        Args:
            data: token data; keys must be schema fields. Keys outside the
                  schema raise ValidationError rather than being dropped.
            ttl:  time to live in seconds; None means the token never expires.

        Raises:
            ValidationError
        """
        if data is None:
            data = {}
        if not isinstance(data, Mapping):
            raise ValidationError("Token data must be a mapping.")

        payload = self.schema.to_payload(data)

        if not is_valid_ttl(ttl):
            raise ValidationError(f"TTL must be a finite non-negative number or None, got {ttl!r}.")

        snowflake = await self.identity_source.issue()
        token = self.codec.encode(snowflake.to_bytes(), ttl, payload)

        entry = CacheEntry(
            snowflake=snowflake,
            ttl_initial=ttl,
            data=self.schema.to_data(self.codec.canonical_payload(payload)),
        )
        await self._set_cache(token, entry)

        return self._build(token, entry)

    async def verify(self, token: str) -> Ecwt:
        """
        Decode a token string and check it is still valid.

        Raises:
            TokenFormatError   - not a string, or not a token issued with this key
            TokenExpiredError  - TTL elapsed
            TokenRevokedError  - id found in the revocation store
        """
        if not isinstance(token, str):
            raise TokenFormatError("Token must be a string.")

        entry = await self.decode_cache.get(token) if self.decode_cache is not None else None

        if entry is None:
            if self.decode_cache is not None:
                logger.debug("ecwt_cache_miss")
            decoded = self.codec.decode(token)
            try:
                snowflake = self.identity_source.parse(decoded.id_bytes)
            except ValueError:
                raise TokenFormatError("Malformed token.") from None

            entry = CacheEntry(
                snowflake=snowflake,
                ttl_initial=decoded.ttl,
                data=self.schema.to_data(decoded.payload),
            )
            await self._set_cache(token, entry)
        else:
            logger.debug("ecwt_cache_hit", token_id=entry.snowflake.to_text())

        ecwt = self._build(token, entry)

        if ecwt.ttl_initial is not None and ecwt.created_at + ecwt.ttl_initial * 1000 < self.now():
            raise TokenExpiredError(ecwt)

        if self.revocation_store is not None:
            score = await self.revocation_store.score_of(self.revoked_key, ecwt.id)
            if score is not None:
                raise TokenRevokedError(ecwt)

        return ecwt

    async def revoke(
        self,
        *,
        token_id: str,
        created_at: int,
        ttl_initial: Optional[float],
    ) -> None:
        """
        Record a token id as revoked until the token's natural expiry.

        Usually called through `Ecwt.revoke()`. Store errors propagate;
        the write is not retried.
        """
        if self.revocation_store is None:
            logger.warning(
                "ecwt_revocation_store_missing",
                token_id=token_id,
                detail="token cannot be revoked and remains valid",
            )
            return

        # lifetimes beyond the sentinel are scored like non-expiring tokens
        ttl = NEVER_EXPIRES_TTL if ttl_initial is None else min(ttl_initial, NEVER_EXPIRES_TTL)
        expires_at = created_at + ttl * 1000
        if expires_at <= self.now():
            logger.debug("ecwt_revoke_skipped", token_id=token_id, reason="expired")
            return

        await self.revocation_store.upsert(self.revoked_key, token_id, expires_at)
        logger.debug("ecwt_revoked", token_id=token_id, expires_at=expires_at)

    async def purge_cache(self) -> None:
        if self.decode_cache is not None:
            await self.decode_cache.clear()

    async def purge_revoked(self) -> int:
        """
        Drop revocation entries of tokens that have expired by now.

        Entries of non-expiring tokens are kept. Returns the number removed.
        """
        if self.revocation_store is None:
            return 0

        removed = await self.revocation_store.prune(self.revoked_key, self.now())
        logger.info("ecwt_revocations_pruned", key=self.revoked_key, removed=removed)
        return removed

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    def _build(self, token: str, entry: CacheEntry) -> Ecwt:
        return Ecwt(
            token=token,
            snowflake=entry.snowflake,
            ttl_initial=entry.ttl_initial,
            data=entry.data,
            factory=self,
        )

    async def _set_cache(self, token: str, entry: CacheEntry) -> None:
        """
        Cache a decoded token for no longer than its remaining lifetime.

        Non-expiring tokens, and lifetimes too large to express in ms, are
        cached without a deadline; tokens with no lifetime left are not
        cached at all.
        """
        if self.decode_cache is None:
            return

        ttl_ms: Optional[int] = None
        if entry.ttl_initial is not None:
            remaining = entry.snowflake.timestamp + entry.ttl_initial * 1000 - self.now()
            if remaining <= 0:
                return
            if math.isfinite(remaining):
                ttl_ms = int(remaining)

        await self.decode_cache.set(token, entry, ttl_ms)
