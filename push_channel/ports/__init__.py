"""Ports layer - Interfaces for external collaborators."""

from .clock import ClockPort
from .kv_store import KVStorePort
from .logger import LoggerPort
from .metrics import MetricsPort
from .subscription_repository import SubscriptionRepositoryPort

__all__ = [
    "ClockPort",
    "KVStorePort",
    "LoggerPort",
    "MetricsPort",
    "SubscriptionRepositoryPort",
]
