"""Application layer - Use cases over the subscription registry."""

from .active_subscriptions_filter import ActiveSubscriptionsFilter
from .push_channel_service import PushChannelService

__all__ = ["ActiveSubscriptionsFilter", "PushChannelService"]
