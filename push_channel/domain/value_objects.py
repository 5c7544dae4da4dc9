"""Value objects for the push channel domain.

Value objects are immutable and compared by value rather than identity.
"""

from datetime import timedelta

from pydantic import BaseModel, ConfigDict, Field


class Duration(BaseModel):
    """Value object representing a non-negative time span.

    Used for the liveness window that decides when a subscription
    that stopped renewing is considered expired.
    """

    model_config = ConfigDict(frozen=True, strict=True)

    seconds: float = Field(..., ge=0, description="Duration in seconds")

    @classmethod
    def from_milliseconds(cls, milliseconds: float) -> "Duration":
        """Create Duration from milliseconds."""
        return cls(seconds=float(milliseconds) / 1000)

    @classmethod
    def from_minutes(cls, minutes: float) -> "Duration":
        """Create Duration from minutes."""
        return cls(seconds=float(minutes) * 60)

    @classmethod
    def from_timedelta(cls, td: timedelta) -> "Duration":
        """Create Duration from Python timedelta."""
        return cls(seconds=td.total_seconds())

    def total_seconds(self) -> float:
        return self.seconds

    def to_timedelta(self) -> timedelta:
        """Convert to Python timedelta."""
        return timedelta(seconds=self.seconds)

    def __str__(self) -> str:
        return f"{self.seconds:g}s"

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Duration):
            return NotImplemented
        return self.seconds < other.seconds

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Duration):
            return NotImplemented
        return self.seconds <= other.seconds

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Duration):
            return NotImplemented
        return self.seconds > other.seconds

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Duration):
            return NotImplemented
        return self.seconds >= other.seconds

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Duration):
            return self.seconds == other.seconds
        return False

    def __hash__(self) -> int:
        return hash(self.seconds)
