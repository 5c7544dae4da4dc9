"""Clock port abstraction for time handling.

Liveness checks and keep-alive refreshes read the current time through this
port so that expiry can be simulated deterministically in tests.
"""

from abc import ABC, abstractmethod
from datetime import datetime


class ClockPort(ABC):
    """Abstract clock interface for time operations."""

    @abstractmethod
    def now(self) -> datetime:
        """Get the current time as a timezone-aware datetime.

        Note:
            Implementations MUST return timezone-aware datetimes.
        """
        ...
