"""Domain layer - Subscriptions, event types and errors."""

from .event_types import EventType, EventTypeRegistry
from .exceptions import (
    InvalidArgumentError,
    KVKeyAlreadyExistsError,
    KVKeyNotFoundError,
    KVNotConnectedError,
    KVRevisionMismatchError,
    KVStoreError,
    PushChannelError,
    StorageUnavailableError,
)
from .models import KVEntry, KVOptions
from .subscription import (
    Subscription,
    SubscriptionBuilder,
    a_new_subscription,
    validate_subscriber,
)
from .value_objects import Duration

__all__ = [
    "Duration",
    "EventType",
    "EventTypeRegistry",
    "InvalidArgumentError",
    "KVEntry",
    "KVKeyAlreadyExistsError",
    "KVKeyNotFoundError",
    "KVNotConnectedError",
    "KVOptions",
    "KVRevisionMismatchError",
    "KVStoreError",
    "PushChannelError",
    "StorageUnavailableError",
    "Subscription",
    "SubscriptionBuilder",
    "a_new_subscription",
    "validate_subscriber",
]
