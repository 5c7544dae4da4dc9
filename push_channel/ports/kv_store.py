"""Key-Value Store interface - Port definition for KV storage infrastructure."""

from abc import ABC, abstractmethod
from typing import Any

from ..domain.models import KVEntry, KVOptions


class KVStorePort(ABC):
    """Abstract interface for a flat key-value store.

    The store offers single-key operations only, with no multi-key
    transactions. Optimistic concurrency is available per key through
    revisions (see ``KVOptions``).
    """

    @abstractmethod
    async def connect(self, bucket: str) -> None:
        """Connect to a KV store bucket.

        Args:
            bucket: The name of the KV bucket to connect to
        """
        ...

    @abstractmethod
    async def disconnect(self) -> None:
        """Disconnect from the KV store."""
        ...

    @abstractmethod
    async def is_connected(self) -> bool:
        """Check if connected to the KV store."""
        ...

    @abstractmethod
    async def get(self, key: str) -> KVEntry | None:
        """Get a value by key.

        Args:
            key: The key to retrieve

        Returns:
            KVEntry if found, None otherwise

        Raises:
            KVStoreError: If the store cannot be reached
        """
        ...

    @abstractmethod
    async def put(self, key: str, value: Any, options: KVOptions | None = None) -> int:
        """Put a value with optional revision check.

        Args:
            key: The key to store
            value: The value to store (must be JSON-serializable)
            options: Optional KV options (create_only, update_only, revision)

        Returns:
            The revision number of the stored entry

        Raises:
            KVKeyAlreadyExistsError: If create_only and the key exists
            KVKeyNotFoundError: If update_only and the key is absent
            KVRevisionMismatchError: If the revision check fails
            KVStoreError: If the store cannot be reached
        """
        ...

    @abstractmethod
    async def delete(self, key: str, revision: int | None = None) -> bool:
        """Delete a key with optional revision check.

        Args:
            key: The key to delete
            revision: Optional revision for optimistic concurrency

        Returns:
            True if a value was deleted, False if the key was absent

        Raises:
            KVRevisionMismatchError: If the revision check fails
        """
        ...

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Check if a key exists."""
        ...

    @abstractmethod
    async def keys(self, prefix: str = "") -> list[str]:
        """List all keys with optional prefix filter."""
        ...
