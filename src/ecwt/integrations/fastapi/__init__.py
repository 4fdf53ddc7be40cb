"""

from ecwt.integrations.fastapi import create_fastapi_auth
from app.config import settings  # your own EcwtSettings

fastapi_auth = create_fastapi_auth(settings, schema={"user_id": None, "role": None})

get_current_token = fastapi_auth.get_current_token
get_optional_token = fastapi_auth.get_optional_token
require_admin = fastapi_auth.require_data("role", "admin")


"""
from __future__ import annotations

from .deps import FastAPIEcwtAuth
from .security import bearer_scheme, extract_token_from_request
from ..common.ecwt_factory import create_ecwt_factory
from ...admin.settings import EcwtSettings
from ...domain.value_objects import Schema, SchemaSpec


def create_fastapi_auth(
    settings: EcwtSettings,
    *,
    schema: Schema | SchemaSpec | None = None,
    cookie_name: str | None = None,
) -> FastAPIEcwtAuth:
    """
    High-level helper for FastAPI apps:

    - Creates an EcwtFactory from settings
    - Wraps it in FastAPIEcwtAuth, exposing dependencies like:

        fastapi_auth.get_current_token
        fastapi_auth.get_optional_token
        fastapi_auth.require_data(...)
    """
    factory = create_ecwt_factory(settings, schema=schema)
    if cookie_name is None:
        return FastAPIEcwtAuth(factory=factory)
    return FastAPIEcwtAuth(factory=factory, cookie_name=cookie_name)


__all__ = [
    "FastAPIEcwtAuth",
    "bearer_scheme",
    "create_fastapi_auth",
    "extract_token_from_request",
]
