"""Subscription entity and its builder."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .event_types import EventType, EventTypeRegistry
from .exceptions import InvalidArgumentError
from .value_objects import Duration

if TYPE_CHECKING:
    from ..ports.clock import ClockPort


def validate_subscriber(subscriber: Any) -> str:
    """Return the normalized subscriber id or raise InvalidArgumentError."""
    if not isinstance(subscriber, str) or not subscriber.strip():
        raise InvalidArgumentError(
            "Subscriber id must be a non-empty string",
            details={"subscriber": repr(subscriber)},
        )
    return subscriber.strip()


class Subscription(BaseModel):
    """One subscriber's interest in one event type.

    The pair ``(event_type, subscriber)`` is the natural key; a subscriber
    holds at most one subscription per event type. Instances are immutable,
    a keep-alive produces a renewed copy.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        str_strip_whitespace=True,
        strict=True,
    )

    subscriber: str = Field(..., min_length=1, description="Opaque subscriber identifier")
    event_type: EventType = Field(..., description="Event category listened for")
    last_renewed_at: datetime = Field(..., description="Creation or last keep-alive time")

    @field_validator("last_renewed_at")
    @classmethod
    def validate_timezone(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            raise ValueError("last_renewed_at must be timezone-aware")
        return v

    @property
    def key(self) -> tuple[str, str]:
        return (self.event_type.name, self.subscriber)

    def is_active(self, now: datetime, window: Duration) -> bool:
        """Check whether the subscription is still within its liveness window.

        Args:
            now: Current time from the injected clock
            window: Maximum allowed time since the last renewal

        Returns:
            True while ``now - last_renewed_at`` is shorter than the window
        """
        return now - self.last_renewed_at < window.to_timedelta()

    def renewed(self, at: datetime) -> Subscription:
        """Return a copy renewed at the given time."""
        return Subscription(
            subscriber=self.subscriber, event_type=self.event_type, last_renewed_at=at
        )

    def to_record(self) -> dict[str, Any]:
        """Convert to the JSON-compatible form kept in the store."""
        return {
            "subscriber": self.subscriber,
            "event_type": self.event_type.name,
            "last_renewed_at": self.last_renewed_at.isoformat(),
        }

    @classmethod
    def from_record(cls, data: dict[str, Any], registry: EventTypeRegistry) -> Subscription:
        """Rebuild a subscription from its stored form.

        Raises:
            InvalidArgumentError: If the record is malformed or names an
                unregistered event type
        """
        try:
            event_type = registry.resolve(data["event_type"])
            return cls(
                subscriber=data["subscriber"],
                event_type=event_type,
                last_renewed_at=datetime.fromisoformat(data["last_renewed_at"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidArgumentError(
                f"Malformed subscription record: {e}", details={"record": data}
            ) from e


class SubscriptionBuilder:
    """Fluent builder for Subscription objects."""

    def __init__(self) -> None:
        self._subscriber: str | None = None
        self._event_type: EventType | None = None
        self._renewed_at: datetime | None = None

    def subscriber(self, subscriber: str) -> SubscriptionBuilder:
        self._subscriber = subscriber
        return self

    def event_type(self, event_type: EventType) -> SubscriptionBuilder:
        self._event_type = event_type
        return self

    def renewed_at(self, at: datetime) -> SubscriptionBuilder:
        self._renewed_at = at
        return self

    def renewed_now(self, clock: ClockPort) -> SubscriptionBuilder:
        """Stamp the subscription with the clock's current time."""
        self._renewed_at = clock.now()
        return self

    def build(self) -> Subscription:
        """Build the subscription.

        Raises:
            InvalidArgumentError: If a field is missing or invalid
        """
        subscriber = validate_subscriber(self._subscriber)
        if self._event_type is None:
            raise InvalidArgumentError("Subscription requires an event type")
        if self._renewed_at is None:
            raise InvalidArgumentError("Subscription requires a renewal timestamp")

        try:
            return Subscription(
                subscriber=subscriber,
                event_type=self._event_type,
                last_renewed_at=self._renewed_at,
            )
        except ValidationError as e:
            raise InvalidArgumentError(f"Invalid subscription: {e}") from e


def a_new_subscription() -> SubscriptionBuilder:
    return SubscriptionBuilder()
