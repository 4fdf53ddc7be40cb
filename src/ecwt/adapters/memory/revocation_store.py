from __future__ import annotations

from typing import Dict, Optional

from ...domain.ports import RevocationStore


class InMemoryRevocationStore(RevocationStore):
    """
    Process-local RevocationStore.

    Mirrors the sorted-set contract of the Redis adapter. Suitable for
    tests and single-process deployments only.
    """

    def __init__(self) -> None:
        self._sets: Dict[str, Dict[str, float]] = {}

    async def upsert(self, key: str, member: str, score: float) -> None:
        self._sets.setdefault(key, {})[member] = score

    async def score_of(self, key: str, member: str) -> Optional[float]:
        return self._sets.get(key, {}).get(member)

    async def prune(self, key: str, before: float) -> int:
        members = self._sets.get(key, {})
        stale = [m for m, score in members.items() if score < before]
        for member in stale:
            del members[member]
        return len(stale)
