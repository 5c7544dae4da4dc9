"""Pytest configuration and shared fixtures."""

import os
from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

import pytest

from push_channel.domain.event_types import EventTypeRegistry
from push_channel.domain.subscription import a_new_subscription
from push_channel.infrastructure.config import PushChannelConfig
from push_channel.infrastructure.in_memory_kv_store import InMemoryKVStore
from push_channel.infrastructure.in_memory_metrics import InMemoryMetrics
from push_channel.infrastructure.kv_subscription_repository import KVSubscriptionRepository
from push_channel.ports.clock import ClockPort

T0 = datetime(2024, 1, 1, 12, 0, 0, tzinfo=UTC)


class ManualClock(ClockPort):
    """Clock that only moves when a test advances it."""

    def __init__(self, start: datetime = T0):
        self.current = start

    def now(self) -> datetime:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += timedelta(seconds=seconds)


@pytest.fixture
def registry():
    """Event type registry with the two test event types."""
    registry = EventTypeRegistry()
    registry.register("SimpleEvent")
    registry.register("AnotherEvent")
    registry.freeze()
    return registry


@pytest.fixture
def simple_event(registry):
    return registry.resolve("SimpleEvent")


@pytest.fixture
def another_event(registry):
    return registry.resolve("AnotherEvent")


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def kv_store():
    return InMemoryKVStore()


@pytest.fixture
def metrics():
    return InMemoryMetrics()


@pytest.fixture
def mock_logger():
    """Create a mock logger for testing."""
    mock = MagicMock()
    mock.info = MagicMock()
    mock.warning = MagicMock()
    mock.error = MagicMock()
    mock.debug = MagicMock()
    return mock


@pytest.fixture
def repository(kv_store, registry, metrics, mock_logger):
    return KVSubscriptionRepository(
        kv_store, registry, config=PushChannelConfig(), logger=mock_logger, metrics=metrics
    )


@pytest.fixture
def make_subscription(clock):
    """Build subscriptions renewed at the current manual clock time."""

    def _make(subscriber, event_type, renewed_at=None):
        return (
            a_new_subscription()
            .subscriber(subscriber)
            .event_type(event_type)
            .renewed_at(renewed_at or clock.now())
            .build()
        )

    return _make


@pytest.fixture(scope="session")
def nats_url():
    """NATS server for integration tests: NATS_URL or a throwaway container."""
    if os.getenv("SKIP_INTEGRATION_TESTS", "").lower() == "true":
        pytest.skip("Integration tests disabled")

    if os.getenv("NATS_URL"):
        yield os.getenv("NATS_URL")
        return

    try:
        from testcontainers.nats import NatsContainer

        container = NatsContainer("nats:2.10-alpine")
        container.with_command("-js")
        container.start()
    except Exception as e:
        pytest.skip(f"NATS container unavailable: {e}")

    yield f"nats://{container.get_container_host_ip()}:{container.get_exposed_port(4222)}"

    container.stop()
