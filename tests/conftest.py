"""Pytest configuration and fixtures."""

import os
from datetime import datetime, timezone

import pytest

from srs_engine.clock import FixedClock
from srs_engine.policy import ENV_PREFIX, get_policy


@pytest.fixture(autouse=True)
def default_policy(monkeypatch):
    """Run every test against the built-in policy defaults."""
    for name in list(os.environ):
        if name.startswith(ENV_PREFIX):
            monkeypatch.delenv(name)
    get_policy.cache_clear()
    yield get_policy()
    get_policy.cache_clear()


@pytest.fixture
def override_policy(monkeypatch):
    """Fixture that applies SRS_* environment overrides and rebuilds the policy."""

    def _override(**fields):
        for name, value in fields.items():
            monkeypatch.setenv(f"{ENV_PREFIX}{name.upper()}", str(value))
        get_policy.cache_clear()
        return get_policy()

    return _override


@pytest.fixture
def now():
    return datetime(2024, 1, 15, 10, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock(now):
    return FixedClock(now)
