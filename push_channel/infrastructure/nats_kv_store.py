"""NATS KV Store adapter - Concrete implementation of KVStorePort."""

import json
from datetime import UTC, datetime
from typing import Any

import nats
from nats.aio.client import Client as NATSClient
from nats.js import api
from nats.js.errors import (
    BucketNotFoundError,
    KeyNotFoundError,
    KeyWrongLastSequenceError,
    NoKeysError,
)
from nats.js.kv import KeyValue

from ..domain.exceptions import (
    KVKeyAlreadyExistsError,
    KVKeyNotFoundError,
    KVNotConnectedError,
    KVRevisionMismatchError,
    KVStoreError,
)
from ..domain.models import KVEntry, KVOptions
from ..ports.kv_store import KVStorePort
from ..ports.logger import LoggerPort
from ..ports.metrics import MetricsPort
from .config import KVStoreConfig, LogContext, NATSConnectionConfig
from .in_memory_metrics import InMemoryMetrics
from .key_codec import KeyCodec
from .simple_logger import SimpleLogger


class NATSKVStore(KVStorePort):
    """NATS JetStream Key-Value implementation of the KV Store port.

    Logical keys are encoded with ``KeyCodec`` before they reach NATS.
    Missing keys are reported as ``None``/``False``; every other NATS failure
    is raised as ``KVStoreError`` without internal retries.
    """

    def __init__(
        self,
        nats_config: NATSConnectionConfig | None = None,
        kv_config: KVStoreConfig | None = None,
        client: NATSClient | None = None,
        metrics: MetricsPort | None = None,
        logger: LoggerPort | None = None,
    ):
        """Initialize NATS KV Store adapter.

        Args:
            nats_config: Connection settings used when no client is given
            kv_config: Bucket settings used when the bucket has to be created
            client: Optional already-connected NATS client to share
            metrics: Optional metrics port. Defaults to in-memory metrics.
            logger: Optional logger port. Defaults to the simple logger.
        """
        self._nats_config = nats_config or NATSConnectionConfig()
        self._kv_config = kv_config or KVStoreConfig()
        self._nc = client
        self._owns_connection = client is None
        self._metrics = metrics or InMemoryMetrics()
        self._logger = logger or SimpleLogger("push_channel.nats_kv_store")
        self._kv: KeyValue | None = None
        self._bucket_name: str | None = None

    def _require_kv(self, operation: str) -> KeyValue:
        if self._kv is None:
            raise KVNotConnectedError(operation)
        return self._kv

    def _store_error(self, operation: str, key: str | None, error: Exception) -> KVStoreError:
        self._metrics.increment(f"kv.{operation}.error")
        log_ctx = LogContext(operation=operation, component="NATSKVStore", key=key)
        self._logger.error(
            f"KV {operation} failed: {error}", **log_ctx.with_error(error).to_dict()
        )
        return KVStoreError(
            f"KV {operation} failed: {error}",
            key=key,
            bucket=self._bucket_name,
            operation=operation,
        )

    async def connect(self, bucket: str) -> None:
        """Connect to a KV bucket, creating it when it does not exist yet."""
        log_ctx = LogContext(operation="connect_kv", component="NATSKVStore")

        try:
            if self._nc is None or not self._nc.is_connected:
                self._nc = await nats.connect(**self._nats_config.to_connection_params())
                self._owns_connection = True

            js = self._nc.jetstream()
            try:
                self._kv = await js.key_value(bucket)
            except BucketNotFoundError:
                self._kv = await js.create_key_value(
                    config=api.KeyValueConfig(
                        bucket=bucket,
                        history=self._kv_config.history_size,
                        max_value_size=self._kv_config.max_value_size,
                    )
                )
                self._logger.info(f"Created NATS KV bucket: {bucket}", **log_ctx.to_dict())
        except Exception as e:
            self._metrics.increment("kv.connect.error")
            self._logger.exception(
                f"Failed to connect to KV bucket '{bucket}'",
                exc_info=e,
                **log_ctx.with_error(e).to_dict(),
            )
            raise KVStoreError(
                f"Failed to connect to KV bucket '{bucket}': {e}",
                bucket=bucket,
                operation="connect",
            ) from e

        self._bucket_name = bucket
        self._metrics.gauge("kv.buckets.active", 1)
        self._logger.info(f"Connected to NATS KV bucket: {bucket}", **log_ctx.to_dict())

    async def disconnect(self) -> None:
        """Release the bucket and close the connection if this store opened it."""
        self._kv = None
        self._bucket_name = None
        self._metrics.gauge("kv.buckets.active", 0)
        if self._nc is not None and self._owns_connection:
            await self._nc.close()
            self._nc = None

    async def is_connected(self) -> bool:
        return self._kv is not None and self._nc is not None and self._nc.is_connected

    def _to_entry(self, key: str, entry: Any) -> KVEntry:
        value = json.loads(entry.value.decode()) if entry.value else None

        # Some server versions omit the created timestamp
        if entry.created and hasattr(entry.created, "isoformat"):
            created_at = entry.created.isoformat()
        else:
            created_at = datetime.now(UTC).isoformat()

        return KVEntry(
            key=key,
            value=value,
            revision=entry.revision or 1,
            created_at=created_at,
            updated_at=created_at,
        )

    async def get(self, key: str) -> KVEntry | None:
        kv = self._require_kv("get")

        with self._metrics.timer("kv.get"):
            try:
                entry = await kv.get(KeyCodec.encode(key))
            except KeyNotFoundError:
                self._metrics.increment("kv.get.miss")
                return None
            except Exception as e:
                raise self._store_error("get", key, e) from e

        self._metrics.increment("kv.get.success")
        return self._to_entry(key, entry)

    async def put(self, key: str, value: Any, options: KVOptions | None = None) -> int:
        kv = self._require_kv("put")
        encoded = KeyCodec.encode(key)
        serialized = json.dumps(value, separators=(",", ":")).encode()

        with self._metrics.timer("kv.put"):
            try:
                if options and options.create_only:
                    revision = await kv.create(encoded, serialized)
                elif options and options.revision is not None:
                    revision = await kv.update(encoded, serialized, last=options.revision)
                elif options and options.update_only:
                    current = await kv.get(encoded)
                    revision = await kv.update(encoded, serialized, last=current.revision)
                else:
                    revision = await kv.put(encoded, serialized)
            except KeyWrongLastSequenceError as e:
                self._metrics.increment("kv.put.conflict")
                if options and options.create_only:
                    raise KVKeyAlreadyExistsError(key) from e
                expected = options.revision if options and options.revision is not None else 0
                raise KVRevisionMismatchError(key, expected, 0) from e
            except KeyNotFoundError as e:
                raise KVKeyNotFoundError(key, self._bucket_name) from e
            except Exception as e:
                raise self._store_error("put", key, e) from e

        self._metrics.increment("kv.put.success")
        return int(revision)

    async def delete(self, key: str, revision: int | None = None) -> bool:
        kv = self._require_kv("delete")
        encoded = KeyCodec.encode(key)

        with self._metrics.timer("kv.delete"):
            try:
                if revision is None:
                    # NATS writes a delete marker even for absent keys
                    try:
                        await kv.get(encoded)
                    except KeyNotFoundError:
                        self._metrics.increment("kv.delete.miss")
                        return False
                    await kv.delete(encoded)
                else:
                    await kv.delete(encoded, last=revision)
            except KeyWrongLastSequenceError as e:
                self._metrics.increment("kv.delete.conflict")
                raise KVRevisionMismatchError(key, revision or 0, 0) from e
            except Exception as e:
                raise self._store_error("delete", key, e) from e

        self._metrics.increment("kv.delete.success")
        return True

    async def exists(self, key: str) -> bool:
        return await self.get(key) is not None

    async def keys(self, prefix: str = "") -> list[str]:
        kv = self._require_kv("keys")

        try:
            encoded_keys = await kv.keys()
        except NoKeysError:
            return []
        except Exception as e:
            raise self._store_error("keys", None, e) from e

        result = []
        for encoded in encoded_keys:
            try:
                key = KeyCodec.decode(encoded)
            except ValueError:
                # Written by another client, not one of ours
                continue
            if key.startswith(prefix):
                result.append(key)
        return result
