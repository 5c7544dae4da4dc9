"""Subscription repository port.

The repository is the sole owner of persisted subscription records. Callers
receive immutable Subscription values, never references into the store.
"""

from abc import ABC, abstractmethod

from ..domain.event_types import EventType
from ..domain.subscription import Subscription


class SubscriptionRepositoryPort(ABC):
    """Compound-keyed subscription storage with per-type and per-subscriber views.

    Absence is never an error: lookups return empty lists or False, and
    removing a missing subscription is a no-op. Storage failures surface as
    ``StorageUnavailableError``.
    """

    @abstractmethod
    async def put(self, subscription: Subscription) -> None:
        """Insert the subscription or replace the one with the same key."""
        ...

    @abstractmethod
    async def has_subscription(self, event_type: EventType | str, subscriber: str) -> bool:
        """Check whether the subscriber is subscribed to the event type."""
        ...

    @abstractmethod
    async def find_by_event_type(self, event_type: EventType | str) -> list[Subscription]:
        """List subscriptions for an event type in insertion order."""
        ...

    @abstractmethod
    async def find_by_subscriber(self, subscriber: str) -> list[Subscription]:
        """List a subscriber's subscriptions across all event types in insertion order."""
        ...

    @abstractmethod
    async def remove_subscription(self, subscription: Subscription) -> bool:
        """Remove the record only if it is still the given subscription.

        A record renewed in the meantime is kept. Returns False in that case.
        """
        ...

    @abstractmethod
    async def remove(self, event_type: EventType | str, subscriber: str) -> None:
        """Remove the record for the given event type and subscriber."""
        ...

    @abstractmethod
    async def remove_all_subscriptions(self, subscriber: str) -> None:
        """Remove every subscription of the subscriber."""
        ...
