from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional, Type

from graphql import GraphQLError
from starlette.requests import Request
from strawberry.permission import BasePermission
from strawberry.types import Info

from ..common.ecwt_factory import create_ecwt_factory
from ...admin.settings import EcwtSettings
from ...application.factory import EcwtFactory
from ...domain.exceptions import (
    ConfigurationError,
    TokenExpiredError,
    TokenFormatError,
    TokenRevokedError,
)
from ...domain.token import Ecwt
from ...domain.value_objects import Schema, SchemaSpec


# --------------------------------------------------------------------- #
# Context type used by Strawberry
# --------------------------------------------------------------------- #

@dataclass(slots=True)
class StrawberryEcwtContext:
    """
    Default context type for Strawberry GraphQL.

    You can use this directly, or extend it in your app by adding more fields.
    """
    request: Request
    token: Optional[Ecwt] = None
    extra: Any = None  # host app can put UoW, services, etc. here if desired


def _extract_token_from_request(
    request: Request,
    cookie_name: str,
) -> Optional[str]:
    """
    Token extractor:

      1. Authorization: Bearer <token>
      2. Cookie: cookie_name
    """
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        token = auth_header.removeprefix("Bearer ").strip()
        if token:
            return token

    return request.cookies.get(cookie_name) or None


# --------------------------------------------------------------------- #
# Main integration: StrawberryEcwtAuth
# --------------------------------------------------------------------- #

@dataclass(slots=True)
class StrawberryEcwtAuth:
    """
    Strawberry GraphQL integration for ecwt.

    Responsibilities:
      - provide a `context_getter` for Strawberry's GraphQLRouter
      - provide permission classes you can attach to fields/mutations
    """

    factory: EcwtFactory
    cookie_name: str = "ecwt"

    def make_context_getter(
        self,
        *,
        optional: bool = True,
        extra_factory: Optional[Callable[[Request, Optional[Ecwt]], Any]] = None,
    ):
        """
        Build an async function compatible with:

            strawberry.fastapi.GraphQLRouter(context_getter=...)

        Args:
            optional:
                - True:   missing or rejected tokens become `token=None`
                - False:  they become GraphQL errors
            extra_factory:
                - Optional callable: (request, token | None) -> Any,
                  stored on context.extra
        """

        async def _context_getter(request: Request) -> StrawberryEcwtContext:
            raw = _extract_token_from_request(request, self.cookie_name)

            token: Optional[Ecwt] = None
            if raw is None:
                if not optional:
                    raise GraphQLError("Not authenticated")
            else:
                try:
                    token = await self.factory.verify(raw)
                except TokenExpiredError:
                    if not optional:
                        raise GraphQLError("Token expired")
                except TokenRevokedError:
                    if not optional:
                        raise GraphQLError("Token revoked")
                except TokenFormatError:
                    if not optional:
                        raise GraphQLError("Invalid token")

            extra = extra_factory(request, token) if extra_factory else None
            return StrawberryEcwtContext(request=request, token=token, extra=extra)

        return _context_getter

    # ----------------------------------------------------------------- #
    # Permission helpers
    # ----------------------------------------------------------------- #

    def require_authenticated(self) -> Type[BasePermission]:
        """
        Permission: request carried a valid token (context.token is not None).
        """

        class _RequireAuthenticated(BasePermission):
            message = "Authentication required"

            def has_permission(self, source: Any, info: Info, **kwargs: Any) -> bool:
                ctx: StrawberryEcwtContext = info.context
                return ctx.token is not None

        return _RequireAuthenticated

    def require_data(self, field: str, *allowed: Any) -> Type[BasePermission]:
        """
        Permission: token data `field` must equal one of `allowed`
        (or just be set, when no values are given).

        Example:

            RequireAdmin = strawberry_auth.require_data("role", "admin")

            @strawberry.field(permission_classes=[RequireAdmin])
            def secret_stuff(self, info: Info) -> str:
                ...
        """
        if field not in self.factory.schema.fields:
            raise ConfigurationError(f"Field {field!r} is not part of the token schema")

        class _RequireData(BasePermission):
            message = "Forbidden"

            def has_permission(self, source: Any, info: Info, **kwargs: Any) -> bool:
                ctx: StrawberryEcwtContext = info.context
                if ctx.token is None:
                    self.message = "Authentication required"
                    return False

                value = ctx.token.data.get(field)
                return value is not None and (not allowed or value in allowed)

        return _RequireData


def create_strawberry_auth(
    settings: EcwtSettings,
    *,
    schema: Schema | SchemaSpec | None = None,
    cookie_name: str = "ecwt",
) -> StrawberryEcwtAuth:
    """
    Convenience helper:

        strawberry_auth = create_strawberry_auth(settings, schema=["user_id", "role"])
    """
    factory = create_ecwt_factory(settings, schema=schema)
    return StrawberryEcwtAuth(factory=factory, cookie_name=cookie_name)
