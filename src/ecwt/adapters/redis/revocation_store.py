from __future__ import annotations

from typing import Optional

from redis.asyncio import Redis

from ...domain.ports import RevocationStore


class RedisRevocationStore(RevocationStore):
    """
    RevocationStore over a Redis sorted set.

    Members are token ids, scores are expiry times in milliseconds.
    Errors from the client propagate to the caller; nothing is retried.
    """

    def __init__(self, client: Redis) -> None:
        self._client = client

    @classmethod
    def from_url(cls, url: str) -> "RedisRevocationStore":
        return cls(Redis.from_url(url))

    async def close(self) -> None:
        await self._client.aclose()

    async def upsert(self, key: str, member: str, score: float) -> None:
        await self._client.zadd(key, {member: score})

    async def score_of(self, key: str, member: str) -> Optional[float]:
        return await self._client.zscore(key, member)

    async def prune(self, key: str, before: float) -> int:
        # exclusive upper bound: only scores strictly below `before`
        return await self._client.zremrangebyscore(key, "-inf", f"({before}")
