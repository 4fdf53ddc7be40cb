from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Mapping, Optional

from .ports import Identifier
from ..utils.time import to_seconds

if TYPE_CHECKING:
    from ..application.factory import EcwtFactory


@dataclass(frozen=True, slots=True)
class Ecwt:
    """
    Decoded, immutable view of a token.

    Only `EcwtFactory.create` and `EcwtFactory.verify` build these. The
    factory reference is a plain handle used by `revoke()`; the token
    does not own it.
    """

    token: str
    snowflake: Identifier
    ttl_initial: Optional[float]
    data: Mapping[str, Any]
    factory: EcwtFactory = field(repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "data", MappingProxyType(dict(self.data)))

    # --- Read-only shortcuts ----------------------------------------------

    @property
    def id(self) -> str:
        """Text form of the token id."""
        return self.snowflake.to_text()

    @property
    def created_at(self) -> int:
        """Creation time in milliseconds."""
        return self.snowflake.timestamp

    @property
    def expires_at(self) -> Optional[float]:
        """Expiry time in seconds, or None for a token that never expires."""
        if self.ttl_initial is None:
            return None
        return to_seconds(self.created_at) + self.ttl_initial

    def get_ttl(self) -> Optional[float]:
        """
        Remaining time to live in seconds.

        Non-positive once expired. Revocation is not checked here.
        """
        if self.ttl_initial is None:
            return None
        return self.ttl_initial - to_seconds(self.factory.now() - self.created_at)

    async def revoke(self) -> None:
        await self.factory.revoke(
            token_id=self.id,
            created_at=self.created_at,
            ttl_initial=self.ttl_initial,
        )
