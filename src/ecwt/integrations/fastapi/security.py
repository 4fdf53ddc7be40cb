from __future__ import annotations

from typing import Optional

from fastapi import HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

# Expose this so apps can plug it into dependencies if they want OpenAPI security
bearer_scheme = HTTPBearer(auto_error=False)

DEFAULT_COOKIE_NAME = "ecwt"


def find_token_in_request(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = None,
    cookie_name: str = DEFAULT_COOKIE_NAME,
) -> Optional[str]:
    """
    Look for a token in, by priority:

      1. HTTP Bearer credentials resolved by `bearer_scheme`
      2. the raw Authorization header
      3. a cookie (default: 'ecwt')
    """
    if credentials is not None:
        token = (credentials.credentials or "").strip()
        if token:
            return token

    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        token = auth_header.removeprefix("Bearer ").strip()
        if token:
            return token

    return request.cookies.get(cookie_name) or None


def extract_token_from_request(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = None,
    cookie_name: str = DEFAULT_COOKIE_NAME,
) -> str:
    """
    Same as `find_token_in_request`, but raises HTTPException(401) if no
    token is found.
    """
    token = find_token_in_request(request, credentials, cookie_name)
    if token is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return token
