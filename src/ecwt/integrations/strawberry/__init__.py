from .auth import (
    StrawberryEcwtAuth,
    StrawberryEcwtContext,
    create_strawberry_auth,
)

__all__ = [
    "StrawberryEcwtAuth",
    "StrawberryEcwtContext",
    "create_strawberry_auth",
]
