"""Infrastructure layer - Concrete implementations of ports."""

from .bootstrap import create_in_memory_channel, create_nats_channel, create_push_channel
from .config import KVStoreConfig, LogContext, NATSConnectionConfig, PushChannelConfig
from .in_memory_kv_store import InMemoryKVStore
from .in_memory_metrics import InMemoryMetrics
from .key_codec import KeyCodec
from .kv_subscription_repository import KVSubscriptionRepository
from .nats_kv_store import NATSKVStore
from .simple_logger import SimpleLogger
from .system_clock import SystemClock

__all__ = [
    "InMemoryKVStore",
    "InMemoryMetrics",
    "KVStoreConfig",
    "KVSubscriptionRepository",
    "KeyCodec",
    "LogContext",
    "NATSConnectionConfig",
    "NATSKVStore",
    "PushChannelConfig",
    "SimpleLogger",
    "SystemClock",
    "create_in_memory_channel",
    "create_nats_channel",
    "create_push_channel",
]
