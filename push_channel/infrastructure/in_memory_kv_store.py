"""In-memory implementation of the KVStorePort.

Used for tests, development and single-process deployments. Each call runs
without yielding to the event loop, so every operation is atomic with
respect to other coroutines.
"""

import copy
from datetime import UTC, datetime
from typing import Any

from ..domain.exceptions import (
    KVKeyAlreadyExistsError,
    KVKeyNotFoundError,
    KVNotConnectedError,
    KVRevisionMismatchError,
)
from ..domain.models import KVEntry, KVOptions
from ..ports.kv_store import KVStorePort


class InMemoryKVStore(KVStorePort):
    """Dict-backed KV store with per-key revisions."""

    def __init__(self, bucket: str = "memory") -> None:
        self._storage: dict[str, KVEntry] = {}
        self._revision_counter = 0
        self._bucket: str | None = bucket
        self._connected = True

    async def connect(self, bucket: str) -> None:
        self._bucket = bucket
        self._connected = True

    async def disconnect(self) -> None:
        self._connected = False

    async def is_connected(self) -> bool:
        return self._connected

    def _ensure_connected(self, operation: str) -> None:
        if not self._connected:
            raise KVNotConnectedError(operation)

    async def get(self, key: str) -> KVEntry | None:
        self._ensure_connected("get")
        entry = self._storage.get(key)
        # Hand out copies so callers never mutate stored values
        return entry.model_copy(deep=True) if entry else None

    async def put(self, key: str, value: Any, options: KVOptions | None = None) -> int:
        self._ensure_connected("put")
        current = self._storage.get(key)

        if options:
            if options.create_only and current is not None:
                raise KVKeyAlreadyExistsError(key)
            if options.update_only and current is None:
                raise KVKeyNotFoundError(key, self._bucket)
            if options.revision is not None:
                actual = current.revision if current else 0
                if actual != options.revision:
                    raise KVRevisionMismatchError(key, options.revision, actual)

        self._revision_counter += 1
        now = datetime.now(UTC).isoformat()
        self._storage[key] = KVEntry(
            key=key,
            value=copy.deepcopy(value),
            revision=self._revision_counter,
            created_at=current.created_at if current else now,
            updated_at=now,
        )
        return self._revision_counter

    async def delete(self, key: str, revision: int | None = None) -> bool:
        self._ensure_connected("delete")
        current = self._storage.get(key)
        if revision is not None:
            actual = current.revision if current else 0
            if actual != revision:
                raise KVRevisionMismatchError(key, revision, actual)
        return self._storage.pop(key, None) is not None

    async def exists(self, key: str) -> bool:
        self._ensure_connected("exists")
        return key in self._storage

    async def keys(self, prefix: str = "") -> list[str]:
        self._ensure_connected("keys")
        return [key for key in self._storage if key.startswith(prefix)]
