"""Millisecond time helpers."""

from __future__ import annotations

import time


def now_ms() -> int:
    """Return the current Unix time in whole milliseconds."""
    return time.time_ns() // 1_000_000


def to_seconds(value_ms: int) -> int:
    return value_ms // 1000
