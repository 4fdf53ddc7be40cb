from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .token import Ecwt


class EcwtError(Exception):
    """Base class for every error raised by ecwt."""
    pass


class ConfigurationError(EcwtError):
    """Raised when a factory or adapter is configured with invalid values."""
    pass


class ValidationError(EcwtError):
    """Raised when token data or TTL is rejected at creation time."""
    pass


class TokenFormatError(EcwtError):
    """Raised when a token string cannot be decoded."""
    pass


class InvalidTokenError(EcwtError):
    """
    Raised when a token was decoded but must not be accepted.

    The decoded token is kept on `.token` so callers can still inspect
    its id and data (e.g. for logging).
    """

    def __init__(self, token: Ecwt, message: str = "Token is invalid.") -> None:
        super().__init__(message)
        self.token = token


class TokenExpiredError(InvalidTokenError):
    """Raised when token has expired."""

    def __init__(self, token: Ecwt) -> None:
        super().__init__(token, "Token is expired.")


class TokenRevokedError(InvalidTokenError):
    """Raised when token has been revoked."""

    def __init__(self, token: Ecwt) -> None:
        super().__init__(token, "Token is revoked.")
