"""Unit tests for NATSKVStore with a mocked NATS client."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from nats.errors import TimeoutError as NATSTimeoutError
from nats.js.errors import (
    BucketNotFoundError,
    KeyNotFoundError,
    KeyWrongLastSequenceError,
    NoKeysError,
)

from push_channel.domain.exceptions import (
    KVKeyAlreadyExistsError,
    KVNotConnectedError,
    KVRevisionMismatchError,
    KVStoreError,
)
from push_channel.domain.models import KVOptions
from push_channel.infrastructure.config import KVStoreConfig
from push_channel.infrastructure.in_memory_metrics import InMemoryMetrics
from push_channel.infrastructure.key_codec import KeyCodec
from push_channel.infrastructure.nats_kv_store import NATSKVStore

KEY = "sub:SimpleEvent:john@gmail.com"


def make_entry(value, revision=1):
    entry = MagicMock()
    entry.value = json.dumps(value).encode()
    entry.revision = revision
    entry.created = None
    return entry


@pytest.fixture
def kv():
    kv = MagicMock()
    kv.get = AsyncMock()
    kv.put = AsyncMock(return_value=1)
    kv.create = AsyncMock(return_value=1)
    kv.update = AsyncMock(return_value=2)
    kv.delete = AsyncMock(return_value=True)
    kv.keys = AsyncMock(return_value=[])
    return kv


@pytest.fixture
def js(kv):
    js = MagicMock()
    js.key_value = AsyncMock(return_value=kv)
    js.create_key_value = AsyncMock(return_value=kv)
    return js


@pytest.fixture
def client(js):
    client = MagicMock()
    client.is_connected = True
    client.jetstream.return_value = js
    client.close = AsyncMock()
    return client


@pytest.fixture
def metrics():
    return InMemoryMetrics()


@pytest.fixture
def store(client, metrics, mock_logger):
    return NATSKVStore(client=client, metrics=metrics, logger=mock_logger)


@pytest_asyncio.fixture
async def connected_store(store):
    await store.connect("push_subscriptions")
    return store


class TestConnection:
    """Test bucket connection management."""

    @pytest.mark.asyncio
    async def test_connect_to_existing_bucket(self, store, js):
        await store.connect("push_subscriptions")

        js.key_value.assert_awaited_once_with("push_subscriptions")
        js.create_key_value.assert_not_awaited()
        assert await store.is_connected()

    @pytest.mark.asyncio
    async def test_connect_creates_missing_bucket(self, client, js, mock_logger):
        js.key_value.side_effect = BucketNotFoundError()
        store = NATSKVStore(
            client=client, kv_config=KVStoreConfig(history_size=5), logger=mock_logger
        )

        await store.connect("push_subscriptions")

        config = js.create_key_value.await_args.kwargs["config"]
        assert config.bucket == "push_subscriptions"
        assert config.history == 5
        assert await store.is_connected()

    @pytest.mark.asyncio
    async def test_connect_failure_raises_store_error(self, store, js):
        js.key_value.side_effect = NATSTimeoutError()

        with pytest.raises(KVStoreError) as exc_info:
            await store.connect("push_subscriptions")

        assert exc_info.value.operation == "connect"
        assert not await store.is_connected()

    @pytest.mark.asyncio
    async def test_shared_client_is_not_closed(self, connected_store, client):
        await connected_store.disconnect()

        client.close.assert_not_awaited()
        assert not await connected_store.is_connected()

    @pytest.mark.asyncio
    async def test_operations_require_connection(self, store):
        with pytest.raises(KVNotConnectedError):
            await store.get(KEY)
        with pytest.raises(KVNotConnectedError):
            await store.put(KEY, {})


class TestReadWrite:
    """Test get/put/delete against the mocked bucket."""

    @pytest.mark.asyncio
    async def test_keys_are_encoded(self, connected_store, kv):
        await connected_store.put(KEY, {"subscriber": "john@gmail.com"})

        kv.put.assert_awaited_once_with(
            KeyCodec.encode(KEY), b'{"subscriber":"john@gmail.com"}'
        )

    @pytest.mark.asyncio
    async def test_get_converts_entry(self, connected_store, kv):
        kv.get.return_value = make_entry(["john@gmail.com"], revision=7)

        entry = await connected_store.get(KEY)

        assert entry.key == KEY
        assert entry.value == ["john@gmail.com"]
        assert entry.revision == 7

    @pytest.mark.asyncio
    async def test_get_missing_key(self, connected_store, kv):
        kv.get.side_effect = KeyNotFoundError()

        assert await connected_store.get(KEY) is None
        assert not await connected_store.exists(KEY)

    @pytest.mark.asyncio
    async def test_get_failure_is_not_swallowed(self, connected_store, kv, metrics):
        kv.get.side_effect = NATSTimeoutError()

        with pytest.raises(KVStoreError):
            await connected_store.get(KEY)
        assert metrics.get_all()["counters"]["kv.get.error"] == 1

    @pytest.mark.asyncio
    async def test_create_only_conflict(self, connected_store, kv):
        kv.create.side_effect = KeyWrongLastSequenceError()

        with pytest.raises(KVKeyAlreadyExistsError):
            await connected_store.put(KEY, [], KVOptions(create_only=True))

    @pytest.mark.asyncio
    async def test_revision_update(self, connected_store, kv):
        revision = await connected_store.put(KEY, [], KVOptions(update_only=True, revision=4))

        kv.update.assert_awaited_once_with(KeyCodec.encode(KEY), b"[]", last=4)
        assert revision == 2

    @pytest.mark.asyncio
    async def test_revision_conflict(self, connected_store, kv):
        kv.update.side_effect = KeyWrongLastSequenceError()

        with pytest.raises(KVRevisionMismatchError):
            await connected_store.put(KEY, [], KVOptions(update_only=True, revision=4))

    @pytest.mark.asyncio
    async def test_delete_missing_key(self, connected_store, kv):
        kv.get.side_effect = KeyNotFoundError()

        assert not await connected_store.delete(KEY)
        kv.delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delete_existing_key(self, connected_store, kv):
        kv.get.return_value = make_entry({})

        assert await connected_store.delete(KEY)
        kv.delete.assert_awaited_once_with(KeyCodec.encode(KEY))

    @pytest.mark.asyncio
    async def test_delete_with_revision_conflict(self, connected_store, kv):
        kv.delete.side_effect = KeyWrongLastSequenceError()

        with pytest.raises(KVRevisionMismatchError):
            await connected_store.delete(KEY, revision=3)

    @pytest.mark.asyncio
    async def test_keys_decodes_and_filters(self, connected_store, kv):
        kv.keys.return_value = [
            KeyCodec.encode(KEY),
            KeyCodec.encode("idx:type:SimpleEvent"),
            "foreign.key",
        ]

        assert await connected_store.keys("sub:") == [KEY]

    @pytest.mark.asyncio
    async def test_keys_on_empty_bucket(self, connected_store, kv):
        kv.keys.side_effect = NoKeysError()

        assert await connected_store.keys() == []
