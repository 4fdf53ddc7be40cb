"""
ecwt.admin

Configuration and command-line helpers:

- EcwtSettings: factory wiring settings.
- settings_from_env: build EcwtSettings from ECWT_* variables.
- cli.main: the `ecwt` command (keygen / create / verify / revoke / purge-revoked).
"""

from __future__ import annotations

from .env import settings_from_env
from .settings import EcwtSettings

__all__ = [
    "EcwtSettings",
    "settings_from_env",
]
