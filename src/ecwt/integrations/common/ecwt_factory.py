from __future__ import annotations

from typing import Optional

from redis.asyncio import Redis

from ...adapters.memory.decode_cache import InMemoryDecodeCache
from ...adapters.redis.revocation_store import RedisRevocationStore
from ...adapters.snowflake.snowflake import SnowflakeFactory
from ...admin.settings import EcwtSettings
from ...application.factory import EcwtFactory
from ...domain.value_objects import Schema, SchemaSpec


def create_ecwt_factory(
        settings: EcwtSettings,
        *,
        schema: Schema | SchemaSpec | None = None,
        redis_client: Optional[Redis] = None,
) -> EcwtFactory:
    """
    High-level factory: EcwtSettings -> EcwtFactory.

    - `schema` overrides `settings.schema_fields` (use it to attach validators)
    - `redis_client` overrides `settings.redis_url`
    - a decode cache is attached when `settings.cache_size > 0`
    """
    revocation_store: Optional[RedisRevocationStore] = None
    if redis_client is not None:
        revocation_store = RedisRevocationStore(redis_client)
    elif settings.revocation_enabled:
        revocation_store = RedisRevocationStore.from_url(settings.redis_url)

    decode_cache = InMemoryDecodeCache(settings.cache_size) if settings.cache_enabled else None

    return EcwtFactory(
        identity_source=SnowflakeFactory(settings.worker_id),
        key=settings.key,
        schema=schema if schema is not None else settings.schema_fields,
        namespace=settings.namespace,
        revocation_store=revocation_store,
        decode_cache=decode_cache,
    )
