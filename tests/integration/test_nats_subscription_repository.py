"""Integration tests for the subscription registry on a real NATS KV bucket."""

import uuid
from datetime import timedelta

import pytest
import pytest_asyncio

from push_channel.application.active_subscriptions_filter import ActiveSubscriptionsFilter
from push_channel.domain.exceptions import KVRevisionMismatchError
from push_channel.domain.models import KVOptions
from push_channel.domain.value_objects import Duration
from push_channel.infrastructure.config import KVStoreConfig, NATSConnectionConfig
from push_channel.infrastructure.kv_subscription_repository import KVSubscriptionRepository
from push_channel.infrastructure.nats_kv_store import NATSKVStore

pytestmark = pytest.mark.integration


@pytest_asyncio.fixture
async def nats_store(nats_url):
    bucket = f"push_test_{uuid.uuid4().hex[:8]}"
    store = NATSKVStore(
        nats_config=NATSConnectionConfig(servers=[nats_url]),
        kv_config=KVStoreConfig(bucket=bucket),
    )
    await store.connect(bucket)
    yield store
    await store.disconnect()


@pytest.fixture
def nats_repository(nats_store, registry):
    return KVSubscriptionRepository(nats_store, registry)


class TestNATSSubscriptionRepository:
    @pytest.mark.asyncio
    async def test_subscriber_ids_with_reserved_characters(
        self, nats_repository, make_subscription, simple_event
    ):
        subscription = make_subscription("john@gmail.com", simple_event)

        await nats_repository.put(subscription)

        assert await nats_repository.has_subscription(simple_event, "john@gmail.com")
        assert await nats_repository.find_by_event_type(simple_event) == [subscription]

    @pytest.mark.asyncio
    async def test_put_replaces_existing_subscription(
        self, nats_repository, make_subscription, simple_event, clock
    ):
        await nats_repository.put(make_subscription("john@gmail.com", simple_event))
        renewed = make_subscription(
            "john@gmail.com", simple_event, renewed_at=clock.now() + timedelta(seconds=10)
        )

        await nats_repository.put(renewed)

        assert await nats_repository.find_by_subscriber("john@gmail.com") == [renewed]

    @pytest.mark.asyncio
    async def test_remove_all_subscriptions(
        self, nats_repository, make_subscription, simple_event, another_event
    ):
        await nats_repository.put(make_subscription("john@gmail.com", simple_event))
        await nats_repository.put(make_subscription("john@gmail.com", another_event))
        await nats_repository.put(make_subscription("jane@gmail.com", simple_event))

        await nats_repository.remove_all_subscriptions("john@gmail.com")

        assert await nats_repository.find_by_subscriber("john@gmail.com") == []
        assert [s.subscriber for s in await nats_repository.find_by_event_type(simple_event)] == [
            "jane@gmail.com"
        ]

    @pytest.mark.asyncio
    async def test_lazy_eviction(self, nats_repository, make_subscription, simple_event, clock):
        await nats_repository.put(make_subscription("john@gmail.com", simple_event))
        subscriptions_filter = ActiveSubscriptionsFilter(
            nats_repository, clock, Duration(seconds=30.0)
        )
        clock.advance(40)

        assert await subscriptions_filter.filter_subscriptions(simple_event) == []
        assert not await nats_repository.has_subscription(simple_event, "john@gmail.com")

    @pytest.mark.asyncio
    async def test_revision_guarded_update(self, nats_store):
        revision = await nats_store.put("idx:type:SimpleEvent", ["a"])

        with pytest.raises(KVRevisionMismatchError):
            await nats_store.put(
                "idx:type:SimpleEvent", ["a", "b"], KVOptions(revision=revision + 5)
            )

        await nats_store.put("idx:type:SimpleEvent", ["a", "b"], KVOptions(revision=revision))
        entry = await nats_store.get("idx:type:SimpleEvent")
        assert entry.value == ["a", "b"]
