"""Channel endpoint operations on top of the subscription registry.

The RPC transport that exposes these operations to browsers is not part of
this package; it calls into ``PushChannelService``.
"""

import uuid

from ..domain.event_types import EventType, EventTypeRegistry
from ..domain.exceptions import StorageUnavailableError
from ..domain.subscription import a_new_subscription, validate_subscriber
from ..ports.clock import ClockPort
from ..ports.logger import LoggerPort
from ..ports.subscription_repository import SubscriptionRepositoryPort
from .active_subscriptions_filter import ActiveSubscriptionsFilter


class PushChannelService:
    """Handle subscribe, unsubscribe, keep-alive and disconnect for subscribers."""

    def __init__(
        self,
        repository: SubscriptionRepositoryPort,
        subscriptions_filter: ActiveSubscriptionsFilter,
        registry: EventTypeRegistry,
        clock: ClockPort,
        logger: LoggerPort | None = None,
        subscribe_put_attempts: int = 2,
    ):
        """Initialize the service.

        Args:
            repository: Subscription repository
            subscriptions_filter: Filter used when dispatching events
            registry: Event types clients may subscribe to
            clock: Source of renewal timestamps
            logger: Optional logger
            subscribe_put_attempts: Attempts to store a subscription when the
                store is unavailable
        """
        self._repository = repository
        self._filter = subscriptions_filter
        self._registry = registry
        self._clock = clock
        self._logger = logger
        self._subscribe_put_attempts = max(1, subscribe_put_attempts)

    async def connect(self, subscriber: str) -> str:
        """Open a channel for the subscriber and return its channel token."""
        subscriber = validate_subscriber(subscriber)
        token = f"{subscriber}-{uuid.uuid4().hex}"
        if self._logger:
            self._logger.info("Subscriber connected", subscriber=subscriber)
        return token

    async def subscribe(self, subscriber: str, event_type: EventType | str) -> None:
        """Register the subscriber's interest in an event type.

        Raises:
            InvalidArgumentError: If the subscriber or event type is invalid
            StorageUnavailableError: If every attempt to store failed
        """
        subscription = (
            a_new_subscription()
            .subscriber(subscriber)
            .event_type(self._registry.resolve(event_type))
            .renewed_now(self._clock)
            .build()
        )

        for attempt in range(1, self._subscribe_put_attempts + 1):
            try:
                await self._repository.put(subscription)
                break
            except StorageUnavailableError:
                if attempt == self._subscribe_put_attempts:
                    raise
                if self._logger:
                    self._logger.warning(
                        "Retrying subscription store",
                        subscriber=subscription.subscriber,
                        event_type=subscription.event_type.name,
                        attempt=attempt,
                    )

        if self._logger:
            self._logger.info(
                "Subscribed",
                subscriber=subscription.subscriber,
                event_type=subscription.event_type.name,
            )

    async def unsubscribe(self, subscriber: str, event_type: EventType | str) -> None:
        await self._repository.remove(event_type, subscriber)
        if self._logger:
            self._logger.info("Unsubscribed", subscriber=subscriber, event_type=str(event_type))

    async def keep_alive(self, subscriber: str) -> int:
        """Renew every subscription of the subscriber.

        Keep-alives are best effort: a storage failure is logged and dropped,
        the next keep-alive repairs the state.

        Returns:
            Number of subscriptions renewed
        """
        subscriber = validate_subscriber(subscriber)
        now = self._clock.now()
        renewed = 0

        try:
            for subscription in await self._repository.find_by_subscriber(subscriber):
                await self._repository.put(subscription.renewed(now))
                renewed += 1
        except StorageUnavailableError as e:
            if self._logger:
                self._logger.warning(
                    "Keep-alive dropped", subscriber=subscriber, renewed=renewed, error=str(e)
                )
            return 0

        return renewed

    async def disconnect(self, subscriber: str) -> None:
        await self._repository.remove_all_subscriptions(subscriber)
        if self._logger:
            self._logger.info("Subscriber disconnected", subscriber=subscriber)

    async def active_subscribers(self, event_type: EventType | str) -> list[str]:
        """Subscribers that should receive an event of the given type."""
        subscriptions = await self._filter.filter_subscriptions(event_type)
        return [subscription.subscriber for subscription in subscriptions]
