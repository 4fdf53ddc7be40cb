from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(slots=True)
class EcwtSettings:
    """
    Token factory wiring settings.

    Host code decides how to construct this (env, config file, etc.).
    """
    key: bytes
    namespace: Optional[str] = None
    schema_fields: List[str] = field(default_factory=list)
    worker_id: int = 0

    # Optional collaborators
    redis_url: Optional[str] = None
    cache_size: int = 0

    @property
    def revocation_enabled(self) -> bool:
        return bool(self.redis_url)

    @property
    def cache_enabled(self) -> bool:
        return self.cache_size > 0
