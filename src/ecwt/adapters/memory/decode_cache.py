"""In-memory LRU decode cache with per-entry expiry."""

from __future__ import annotations

from collections import OrderedDict
from typing import Callable, Optional, Tuple

import structlog

from ...domain.exceptions import ConfigurationError
from ...domain.ports import DecodeCache
from ...domain.value_objects import CacheEntry
from ...utils.time import now_ms

logger = structlog.get_logger(__name__)


class InMemoryDecodeCache(DecodeCache):
    """
    Bounded LRU cache of decoded tokens.

    Each entry carries its own deadline in milliseconds (None = never
    expires). Expired entries are dropped lazily on lookup.
    """

    def __init__(self, max_size: int = 10_000, clock: Optional[Callable[[], int]] = None) -> None:
        if isinstance(max_size, bool) or not isinstance(max_size, int) or max_size < 1:
            raise ConfigurationError(f"max_size must be a positive integer, got {max_size!r}")

        self.max_size = max_size
        self._clock = clock or now_ms
        self._entries: "OrderedDict[str, Tuple[CacheEntry, Optional[int]]]" = OrderedDict()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    async def get(self, key: str) -> Optional[CacheEntry]:
        item = self._entries.get(key)
        if item is None:
            self.misses += 1
            return None

        value, deadline = item
        if deadline is not None and deadline <= self._clock():
            del self._entries[key]
            self.misses += 1
            return None

        self._entries.move_to_end(key)
        self.hits += 1
        return value

    async def set(self, key: str, value: CacheEntry, ttl_ms: Optional[int]) -> None:
        deadline = None if ttl_ms is None else self._clock() + ttl_ms
        self._entries[key] = (value, deadline)
        self._entries.move_to_end(key)

        while len(self._entries) > self.max_size:
            self._entries.popitem(last=False)
            logger.debug("ecwt_cache_evicted", size=self.max_size)

    async def clear(self) -> None:
        self._entries.clear()
        self.hits = 0
        self.misses = 0
