"""KV Store-based implementation of the subscription repository.

The store is a flat key space without secondary indexes, so the repository
maintains three coordinated views:

- ``sub:{event_type}:{subscriber}`` holds the subscription record
- ``idx:type:{event_type}`` holds the ordered list of subscriber ids
- ``idx:subscriber:{subscriber}`` holds the ordered list of event type names

Mutations write the record first and the indexes afterwards. Index updates
are read-modify-write guarded by the store's revisions; when conflicts keep
happening the update falls back to last-writer-wins. The registry is a
liveness cache, so a lost index entry is repaired by the next subscribe or
keep-alive, and a dangling one is pruned by the next read that meets it.
"""

from __future__ import annotations

from collections.abc import Callable

from ..domain.event_types import EventType, EventTypeRegistry
from ..domain.exceptions import (
    InvalidArgumentError,
    KVKeyAlreadyExistsError,
    KVKeyNotFoundError,
    KVRevisionMismatchError,
    KVStoreError,
    StorageUnavailableError,
)
from ..domain.models import KVOptions
from ..domain.subscription import Subscription, validate_subscriber
from ..ports.kv_store import KVStorePort
from ..ports.logger import LoggerPort
from ..ports.metrics import MetricsPort
from ..ports.subscription_repository import SubscriptionRepositoryPort
from .config import PushChannelConfig
from .in_memory_metrics import InMemoryMetrics

RECORD_PREFIX = "sub"
TYPE_INDEX_PREFIX = "idx:type"
SUBSCRIBER_INDEX_PREFIX = "idx:subscriber"

_CONFLICTS = (KVRevisionMismatchError, KVKeyAlreadyExistsError, KVKeyNotFoundError)


def record_key(event_type: str, subscriber: str) -> str:
    return f"{RECORD_PREFIX}:{event_type}:{subscriber}"


def type_index_key(event_type: str) -> str:
    return f"{TYPE_INDEX_PREFIX}:{event_type}"


def subscriber_index_key(subscriber: str) -> str:
    return f"{SUBSCRIBER_INDEX_PREFIX}:{subscriber}"


def _appending(item: str) -> Callable[[list[str]], list[str]]:
    def mutate(items: list[str]) -> list[str]:
        return items if item in items else [*items, item]

    return mutate


def _removing(*removed: str) -> Callable[[list[str]], list[str]]:
    def mutate(items: list[str]) -> list[str]:
        return [item for item in items if item not in removed]

    return mutate


class KVSubscriptionRepository(SubscriptionRepositoryPort):
    """Subscription repository on top of any KVStorePort implementation."""

    def __init__(
        self,
        kv_store: KVStorePort,
        registry: EventTypeRegistry,
        config: PushChannelConfig | None = None,
        logger: LoggerPort | None = None,
        metrics: MetricsPort | None = None,
    ):
        """Initialize the repository.

        Args:
            kv_store: The KV store port implementation
            registry: Event types accepted by the repository
            config: Optional settings, defaults apply when omitted
            logger: Optional logger for debugging
            metrics: Optional metrics port. Defaults to in-memory metrics.
        """
        self._kv_store = kv_store
        self._registry = registry
        self._config = config or PushChannelConfig()
        self._logger = logger
        self._metrics = metrics or InMemoryMetrics()

    def _event_type_name(self, event_type: EventType | str) -> str:
        return self._registry.resolve(event_type).name

    def _storage_error(
        self, operation: str, key: str | None, error: Exception
    ) -> StorageUnavailableError:
        if self._logger:
            self._logger.error(
                "Subscription store operation failed",
                operation=operation,
                key=key,
                error=str(error),
            )
        return StorageUnavailableError(
            f"Subscription store unavailable during '{operation}': {error}",
            operation=operation,
            key=key,
        )

    async def _read_index(self, key: str) -> list[str]:
        entry = await self._kv_store.get(key)
        if entry is None or not isinstance(entry.value, list):
            return []
        return [str(item) for item in entry.value]

    async def _update_index(self, key: str, mutate: Callable[[list[str]], list[str]]) -> None:
        """Apply ``mutate`` to the list stored at ``key`` with optimistic concurrency."""
        for _ in range(self._config.index_update_attempts):
            entry = await self._kv_store.get(key)
            current = list(entry.value) if entry and isinstance(entry.value, list) else []
            updated = mutate(current)
            if entry is not None and updated == current:
                return

            try:
                if entry is None:
                    if not updated:
                        return
                    await self._kv_store.put(key, updated, KVOptions(create_only=True))
                elif not updated:
                    await self._kv_store.delete(key, revision=entry.revision)
                else:
                    await self._kv_store.put(
                        key, updated, KVOptions(update_only=True, revision=entry.revision)
                    )
                return
            except _CONFLICTS:
                self._metrics.increment("index.conflicts")
                continue

        # Contention did not settle, accept last-writer-wins
        if self._logger:
            self._logger.warning(
                "Index update kept conflicting, falling back to last-writer-wins",
                key=key,
                attempts=self._config.index_update_attempts,
            )
        current = await self._read_index(key)
        updated = mutate(current)
        if updated:
            await self._kv_store.put(key, updated)
        else:
            await self._kv_store.delete(key)

    async def put(self, subscription: Subscription) -> None:
        """Store the subscription, replacing one with the same key."""
        event_type = self._event_type_name(subscription.event_type)
        subscriber = validate_subscriber(subscription.subscriber)
        key = record_key(event_type, subscriber)

        try:
            await self._kv_store.put(key, subscription.to_record())
            await self._update_index(type_index_key(event_type), _appending(subscriber))
            await self._update_index(subscriber_index_key(subscriber), _appending(event_type))
        except KVStoreError as e:
            raise self._storage_error("put", key, e) from e

        self._metrics.increment("subscriptions.put")
        if self._logger:
            self._logger.debug(
                "Subscription stored", event_type=event_type, subscriber=subscriber
            )

    async def has_subscription(self, event_type: EventType | str, subscriber: str) -> bool:
        key = record_key(self._event_type_name(event_type), validate_subscriber(subscriber))

        try:
            return await self._kv_store.exists(key)
        except KVStoreError as e:
            raise self._storage_error("has_subscription", key, e) from e

    async def _load_records(
        self, index_key: str, record_keys: list[tuple[str, str]]
    ) -> list[Subscription]:
        """Load the records an index points to, pruning entries without a record."""
        subscriptions = []
        dangling = []
        for index_item, key in record_keys:
            entry = await self._kv_store.get(key)
            if entry is None:
                dangling.append(index_item)
                continue
            try:
                subscriptions.append(Subscription.from_record(entry.value, self._registry))
            except InvalidArgumentError as e:
                # Event type registered by another process sharing the store
                self._metrics.increment("records.skipped")
                if self._logger:
                    self._logger.warning(
                        "Skipping unreadable subscription record", key=key, error=str(e)
                    )

        if dangling:
            self._metrics.increment("index.pruned", len(dangling))
            if self._logger:
                self._logger.debug("Pruning dangling index entries", key=index_key)
            await self._update_index(index_key, _removing(*dangling))

        return subscriptions

    async def find_by_event_type(self, event_type: EventType | str) -> list[Subscription]:
        name = self._event_type_name(event_type)
        index_key = type_index_key(name)

        try:
            subscribers = await self._read_index(index_key)
            return await self._load_records(
                index_key, [(subscriber, record_key(name, subscriber)) for subscriber in subscribers]
            )
        except KVStoreError as e:
            raise self._storage_error("find_by_event_type", index_key, e) from e

    async def find_by_subscriber(self, subscriber: str) -> list[Subscription]:
        subscriber = validate_subscriber(subscriber)
        index_key = subscriber_index_key(subscriber)

        try:
            event_types = await self._read_index(index_key)
            return await self._load_records(
                index_key, [(name, record_key(name, subscriber)) for name in event_types]
            )
        except KVStoreError as e:
            raise self._storage_error("find_by_subscriber", index_key, e) from e

    async def remove_subscription(self, subscription: Subscription) -> bool:
        """Remove the subscription only if the stored record is still this one.

        A record renewed since ``subscription`` was read is left in place,
        together with its index entries.

        Returns:
            True if the record was removed or was already gone
        """
        name = self._event_type_name(subscription.event_type)
        subscriber = validate_subscriber(subscription.subscriber)
        key = record_key(name, subscriber)

        try:
            entry = await self._kv_store.get(key)
            if entry is not None:
                if entry.value != subscription.to_record():
                    return False
                try:
                    await self._kv_store.delete(key, revision=entry.revision)
                except KVRevisionMismatchError:
                    return False
            await self._update_index(type_index_key(name), _removing(subscriber))
            await self._update_index(subscriber_index_key(subscriber), _removing(name))
            if await self._kv_store.exists(key):
                # Re-subscribed or renewed while the indexes were being cleaned
                await self._update_index(type_index_key(name), _appending(subscriber))
                await self._update_index(subscriber_index_key(subscriber), _appending(name))
        except KVStoreError as e:
            raise self._storage_error("remove_subscription", key, e) from e

        if entry is not None:
            self._metrics.increment("subscriptions.removed")
            if self._logger:
                self._logger.debug("Subscription removed", event_type=name, subscriber=subscriber)
        return True

    async def remove(self, event_type: EventType | str, subscriber: str) -> None:
        """Remove one subscription; a missing one is a no-op."""
        name = self._event_type_name(event_type)
        subscriber = validate_subscriber(subscriber)
        key = record_key(name, subscriber)

        try:
            deleted = await self._kv_store.delete(key)
            await self._update_index(type_index_key(name), _removing(subscriber))
            await self._update_index(subscriber_index_key(subscriber), _removing(name))
        except KVStoreError as e:
            raise self._storage_error("remove", key, e) from e

        if deleted:
            self._metrics.increment("subscriptions.removed")
            if self._logger:
                self._logger.debug("Subscription removed", event_type=name, subscriber=subscriber)

    async def remove_all_subscriptions(self, subscriber: str) -> None:
        """Remove every subscription of a subscriber, leaving other subscribers untouched."""
        subscriber = validate_subscriber(subscriber)
        index_key = subscriber_index_key(subscriber)

        try:
            event_types = await self._read_index(index_key)
            for name in event_types:
                if await self._kv_store.delete(record_key(name, subscriber)):
                    self._metrics.increment("subscriptions.removed")
                await self._update_index(type_index_key(name), _removing(subscriber))
            await self._update_index(index_key, _removing(*event_types))
        except KVStoreError as e:
            raise self._storage_error("remove_all_subscriptions", index_key, e) from e

        if self._logger:
            self._logger.info(
                "All subscriptions removed", subscriber=subscriber, count=len(event_types)
            )
