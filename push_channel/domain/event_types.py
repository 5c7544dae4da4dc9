"""Registry of event types a subscriber can listen for.

Event types form a closed taxonomy: each category is registered once under a
stable name, and that name is both the routing key for dispatch and part of
the storage key of every subscription to it.
"""

import re
from collections.abc import Iterator
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .exceptions import InvalidArgumentError

_NAME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9_.\-]*$")


class EventType(BaseModel):
    """Value object identifying one category of push event."""

    model_config = ConfigDict(frozen=True, strict=True)

    name: str = Field(..., min_length=1, max_length=64, description="Stable event type name")
    description: str | None = Field(
        default=None, description="Handler capability able to receive this event"
    )

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Names start with a letter and never contain the ':' key separator."""
        if not _NAME_PATTERN.match(v):
            raise ValueError(
                f"Invalid event type name '{v}'. Must start with a letter and contain "
                "only letters, numbers, '_', '-' and '.'"
            )
        return v

    def __str__(self) -> str:
        return self.name

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, EventType):
            return self.name == other.name
        if isinstance(other, str):
            return self.name == other
        return False

    def __hash__(self) -> int:
        return hash(self.name)


class EventTypeRegistry:
    """Closed set of registered event types.

    Types are registered during bootstrap; after ``freeze()`` the taxonomy
    can no longer grow.
    """

    def __init__(self, *names: str) -> None:
        self._types: dict[str, EventType] = {}
        self._frozen = False
        for name in names:
            self.register(name)

    def register(self, name: str, description: str | None = None) -> EventType:
        """Register a new event type.

        Raises:
            InvalidArgumentError: If the name is taken, malformed, or the
                registry is frozen
        """
        if self._frozen:
            raise InvalidArgumentError(
                f"Cannot register '{name}': event type registry is frozen",
                details={"event_type": name},
            )
        if name in self._types:
            raise InvalidArgumentError(
                f"Event type '{name}' is already registered",
                details={"event_type": name},
            )
        try:
            event_type = EventType(name=name, description=description)
        except ValueError as e:
            raise InvalidArgumentError(
                f"Invalid event type name '{name}'", details={"event_type": name}
            ) from e

        self._types[name] = event_type
        return event_type

    def freeze(self) -> None:
        self._frozen = True

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    def resolve(self, event_type: "EventType | str") -> EventType:
        """Return the registered instance for a type or type name.

        Raises:
            InvalidArgumentError: If the event type is not registered
        """
        name = event_type.name if isinstance(event_type, EventType) else event_type
        if not isinstance(name, str) or name not in self._types:
            raise InvalidArgumentError(
                f"Unregistered event type: {name!r}", details={"event_type": str(name)}
            )
        return self._types[name]

    def names(self) -> list[str]:
        return list(self._types)

    def __contains__(self, item: object) -> bool:
        if isinstance(item, EventType):
            return item.name in self._types
        return item in self._types

    def __iter__(self) -> Iterator[EventType]:
        return iter(list(self._types.values()))

    def __len__(self) -> int:
        return len(self._types)
