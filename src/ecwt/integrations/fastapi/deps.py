from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials

from .security import DEFAULT_COOKIE_NAME, bearer_scheme, extract_token_from_request, find_token_in_request
from ...application.factory import EcwtFactory
from ...domain.exceptions import (
    ConfigurationError,
    TokenExpiredError,
    TokenFormatError,
    TokenRevokedError,
)
from ...domain.token import Ecwt


@dataclass(slots=True)
class FastAPIEcwtAuth:
    """
    FastAPI integration for ecwt.

    Verifies the request token with an `EcwtFactory` and exposes the
    resulting `Ecwt` through FastAPI dependencies.
    """

    factory: EcwtFactory
    cookie_name: str = DEFAULT_COOKIE_NAME

    # ------------------------------------------------------------------ #
    # Base dependencies
    # ------------------------------------------------------------------ #

    async def get_current_token(
            self,
            request: Request,
            credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    ) -> Ecwt:
        """Dependency: Require a valid token."""
        token = extract_token_from_request(request, credentials, self.cookie_name)
        try:
            return await self.factory.verify(token)
        except TokenExpiredError as exc:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Token expired",
            ) from exc
        except TokenRevokedError as exc:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Token revoked",
            ) from exc
        except TokenFormatError as exc:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid token",
            ) from exc

    async def get_optional_token(
            self,
            request: Request,
            credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    ) -> Ecwt | None:
        """Dependency: Optional authentication."""
        token = find_token_in_request(request, credentials, self.cookie_name)
        if token is None:
            # no token anywhere -> anonymous
            return None

        try:
            return await self.factory.verify(token)
        except (TokenFormatError, TokenExpiredError, TokenRevokedError):
            # bad token -> treat as anonymous
            return None

    # ------------------------------------------------------------------ #
    # Authorization dependency factories
    # ------------------------------------------------------------------ #

    def require_data(self, field: str, *allowed: Any) -> Callable:
        """
        Dependency factory: token data `field` must equal one of `allowed`.

        With no `allowed` values the field only has to be present and not None.
        """
        if field not in self.factory.schema.fields:
            raise ConfigurationError(f"Field {field!r} is not part of the token schema")

        async def dependency(
                ecwt: Ecwt = Depends(self.get_current_token),
        ) -> Ecwt:
            value = ecwt.data.get(field)
            if value is None or (allowed and value not in allowed):
                raise HTTPException(
                    status_code=status.HTTP_403_FORBIDDEN,
                    detail=f"Token field {field!r} does not satisfy requirement",
                )
            return ecwt

        return dependency
