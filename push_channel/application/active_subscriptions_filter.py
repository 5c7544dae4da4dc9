"""Active subscription filtering with lazy eviction."""

from ..domain.event_types import EventType
from ..domain.subscription import Subscription
from ..domain.value_objects import Duration
from ..ports.clock import ClockPort
from ..ports.logger import LoggerPort
from ..ports.metrics import MetricsPort
from ..ports.subscription_repository import SubscriptionRepositoryPort


class ActiveSubscriptionsFilter:
    """Select the live subscriptions of an event type.

    Subscriptions whose liveness window has elapsed are removed from the
    repository as a side effect of the query. There is no background sweep;
    this is where expired subscriptions get collected.
    """

    def __init__(
        self,
        repository: SubscriptionRepositoryPort,
        clock: ClockPort,
        liveness_window: Duration,
        logger: LoggerPort | None = None,
        metrics: MetricsPort | None = None,
    ):
        self._repository = repository
        self._clock = clock
        self._liveness_window = liveness_window
        self._logger = logger
        self._metrics = metrics

    @property
    def liveness_window(self) -> Duration:
        return self._liveness_window

    async def filter_subscriptions(self, event_type: EventType | str) -> list[Subscription]:
        """Return the active subscriptions for an event type in repository order.

        Raises:
            InvalidArgumentError: If the event type is not registered
            StorageUnavailableError: If the repository cannot be reached
        """
        now = self._clock.now()
        active: list[Subscription] = []

        for subscription in await self._repository.find_by_event_type(event_type):
            if subscription.is_active(now, self._liveness_window):
                active.append(subscription)
                continue

            if not await self._repository.remove_subscription(subscription):
                # Renewed by a concurrent keep-alive
                continue
            if self._metrics:
                self._metrics.increment("subscriptions.evicted")
            if self._logger:
                self._logger.debug(
                    "Evicted expired subscription",
                    event_type=subscription.event_type.name,
                    subscriber=subscription.subscriber,
                )

        return active
