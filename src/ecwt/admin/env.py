from __future__ import annotations

import base64
import binascii
import os

from .settings import EcwtSettings
from ..domain.exceptions import ConfigurationError


def decode_key(raw: str) -> bytes:
    """Decode a urlsafe-base64 key; padding is optional."""
    value = raw.strip()
    try:
        return base64.urlsafe_b64decode(value + "=" * (-len(value) % 4))
    except (binascii.Error, ValueError) as exc:
        raise ConfigurationError("ECWT_KEY is not valid urlsafe base64") from exc


def settings_from_env() -> EcwtSettings:
    def _int(key: str, default: int) -> int:
        raw = os.getenv(key)
        if raw is None or not raw.strip():
            return default
        try:
            value = int(raw.strip())
        except ValueError as exc:
            raise ConfigurationError(f"{key} must be an integer, got {raw!r}") from exc
        if value < 0:
            raise ConfigurationError(f"{key} must not be negative, got {raw!r}")
        return value

    def _split_csv(key: str) -> list[str]:
        raw = os.getenv(key)
        if not raw:
            return []
        return [x.strip() for x in raw.split(",") if x and x.strip()]

    raw_key = os.getenv("ECWT_KEY")
    if not raw_key:
        raise ConfigurationError("Missing ecwt settings: ECWT_KEY")

    return EcwtSettings(
        key=decode_key(raw_key),
        namespace=os.getenv("ECWT_NAMESPACE") or None,
        schema_fields=_split_csv("ECWT_SCHEMA_FIELDS"),
        worker_id=_int("ECWT_WORKER_ID", 0),
        redis_url=os.getenv("ECWT_REDIS_URL") or None,
        cache_size=_int("ECWT_CACHE_SIZE", 0),
    )
