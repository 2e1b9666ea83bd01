"""Pytest configuration and fixtures."""

from datetime import datetime, timezone

import pytest

from solcerer.db import MonitorDatabase
from solcerer.models import RawObservation, SourceType


class FakeSink:
    """Records deliveries instead of posting to Discord."""

    def __init__(self, available: bool = True):
        self.available = available
        self.resolved = []
        self.delivered = []

    def resolve_channel(self, category):
        self.resolved.append(category)
        return f"channel:{category.value}" if self.available else None

    async def deliver(self, channel, message):
        self.delivered.append((channel, message))
        return True


@pytest.fixture
def t0() -> datetime:
    """Reference subscription time."""
    return datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def db(tmp_path) -> MonitorDatabase:
    """Fresh SQLite store per test."""
    return MonitorDatabase(tmp_path / "monitor.db")


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def fake_sleep(sleeps):
    """Async sleep that records the delay and returns immediately."""
    async def _sleep(seconds):
        sleeps.append(seconds)
    return _sleep


@pytest.fixture
def sink() -> FakeSink:
    return FakeSink()


@pytest.fixture
def unavailable_sink() -> FakeSink:
    return FakeSink(available=False)


@pytest.fixture
def make_observation():
    """Factory for social observations."""
    def _make(dedup_key, timestamp, entity_key="alice", source_type=SourceType.SOCIAL, payload=None):
        return RawObservation(
            source_type=source_type,
            dedup_key=dedup_key,
            entity_key=entity_key,
            timestamp=timestamp,
            payload=payload or {},
        )
    return _make
