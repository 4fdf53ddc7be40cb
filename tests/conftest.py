import logging
import os

import pytest
import structlog
from structlog.testing import capture_logs

from ecwt import EcwtFactory, InMemoryDecodeCache, InMemoryRevocationStore, SnowflakeFactory

START_MS = 1_700_000_000_000


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start: int = START_MS) -> None:
        self.value = start

    def __call__(self) -> int:
        return self.value

    def advance(self, ms: int) -> None:
        self.value += ms


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def key():
    return os.urandom(32)


@pytest.fixture
def make_factory(clock, key):
    def _make(**kwargs):
        kwargs.setdefault("identity_source", SnowflakeFactory(worker_id=1, clock=clock))
        kwargs.setdefault("key", key)
        kwargs.setdefault("schema", {"role": lambda v: v in ("user", "admin"), "user_id": None})
        kwargs.setdefault("clock", clock)
        return EcwtFactory(**kwargs)

    return _make


@pytest.fixture
def factory(make_factory):
    return make_factory()


@pytest.fixture
def store():
    return InMemoryRevocationStore()


@pytest.fixture
def cache(clock):
    return InMemoryDecodeCache(max_size=16, clock=clock)


@pytest.fixture
def debug_logs():
    # the CLI tests leave a WARNING filter configured
    structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(logging.DEBUG))
    with capture_logs() as logs:
        yield logs
    structlog.reset_defaults()
