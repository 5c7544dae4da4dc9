"""Factories wiring the push channel from its infrastructure adapters."""

from ..application.active_subscriptions_filter import ActiveSubscriptionsFilter
from ..application.push_channel_service import PushChannelService
from ..domain.event_types import EventTypeRegistry
from ..ports.clock import ClockPort
from ..ports.kv_store import KVStorePort
from ..ports.logger import LoggerPort
from ..ports.metrics import MetricsPort
from .config import KVStoreConfig, NATSConnectionConfig, PushChannelConfig
from .in_memory_kv_store import InMemoryKVStore
from .in_memory_metrics import InMemoryMetrics
from .kv_subscription_repository import KVSubscriptionRepository
from .nats_kv_store import NATSKVStore
from .simple_logger import SimpleLogger
from .system_clock import SystemClock


def create_push_channel(
    kv_store: KVStorePort,
    registry: EventTypeRegistry,
    config: PushChannelConfig | None = None,
    clock: ClockPort | None = None,
    logger: LoggerPort | None = None,
    metrics: MetricsPort | None = None,
) -> PushChannelService:
    """Wire repository, filter and service over an already connected KV store."""
    config = config or PushChannelConfig()
    clock = clock or SystemClock()
    logger = logger or SimpleLogger()
    metrics = metrics or InMemoryMetrics()

    repository = KVSubscriptionRepository(
        kv_store, registry, config=config, logger=logger, metrics=metrics
    )
    subscriptions_filter = ActiveSubscriptionsFilter(
        repository, clock, config.liveness_window, logger=logger, metrics=metrics
    )
    return PushChannelService(
        repository,
        subscriptions_filter,
        registry,
        clock,
        logger=logger,
        subscribe_put_attempts=config.subscribe_put_attempts,
    )


def create_in_memory_channel(
    registry: EventTypeRegistry,
    config: PushChannelConfig | None = None,
    clock: ClockPort | None = None,
) -> PushChannelService:
    """Push channel backed by a process-local store."""
    return create_push_channel(InMemoryKVStore(), registry, config=config, clock=clock)


async def create_nats_channel(
    registry: EventTypeRegistry,
    nats_config: NATSConnectionConfig | None = None,
    kv_config: KVStoreConfig | None = None,
    config: PushChannelConfig | None = None,
    clock: ClockPort | None = None,
) -> PushChannelService:
    """Push channel backed by a NATS JetStream KV bucket shared across processes.

    Raises:
        KVStoreError: If NATS or the bucket cannot be reached
    """
    kv_config = kv_config or KVStoreConfig()
    kv_store = NATSKVStore(
        nats_config=nats_config or NATSConnectionConfig.from_env(), kv_config=kv_config
    )
    await kv_store.connect(kv_config.bucket)
    return create_push_channel(kv_store, registry, config=config, clock=clock)
