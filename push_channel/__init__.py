"""
push_channel - Subscription registry for server-side push channels.

Tracks which subscribers listen for which event types, renews them on
keep-alive and lazily evicts the ones whose liveness window elapsed.
Follows a hexagonal layout: domain, ports, application, infrastructure.
"""

__version__ = "0.1.0"

from .application import ActiveSubscriptionsFilter, PushChannelService
from .domain import (
    Duration,
    EventType,
    EventTypeRegistry,
    InvalidArgumentError,
    PushChannelError,
    StorageUnavailableError,
    Subscription,
    a_new_subscription,
)

__all__ = [
    "ActiveSubscriptionsFilter",
    "Duration",
    "EventType",
    "EventTypeRegistry",
    "InvalidArgumentError",
    "PushChannelError",
    "PushChannelService",
    "StorageUnavailableError",
    "Subscription",
    "a_new_subscription",
]
