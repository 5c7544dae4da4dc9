"""Configuration objects for the push channel infrastructure."""

from __future__ import annotations

import os
import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..domain.value_objects import Duration


class PushChannelConfig(BaseModel):
    """Settings shared by the repository, the filter and the channel endpoint."""

    model_config = ConfigDict(
        extra="forbid",
        strict=True,
        validate_assignment=True,
    )

    liveness_window_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Time since the last keep-alive after which a subscription expires",
    )
    index_update_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Optimistic index update attempts before falling back to last-writer-wins",
    )
    subscribe_put_attempts: int = Field(
        default=2,
        ge=1,
        le=5,
        description="Attempts to store a new subscription when the store is unavailable",
    )

    @property
    def liveness_window(self) -> Duration:
        return Duration(seconds=float(self.liveness_window_seconds))

    @classmethod
    def from_env(cls) -> PushChannelConfig:
        """Build configuration from PUSH_* environment variables."""
        data: dict[str, Any] = {}
        window = os.getenv("PUSH_LIVENESS_WINDOW_SECONDS")
        if window:
            data["liveness_window_seconds"] = float(window)
        attempts = os.getenv("PUSH_INDEX_UPDATE_ATTEMPTS")
        if attempts:
            data["index_update_attempts"] = int(attempts)
        put_attempts = os.getenv("PUSH_SUBSCRIBE_PUT_ATTEMPTS")
        if put_attempts:
            data["subscribe_put_attempts"] = int(put_attempts)
        return cls(**data)


class NATSConnectionConfig(BaseModel):
    """Strongly-typed configuration for the NATS connection backing the KV store."""

    model_config = ConfigDict(
        extra="forbid",
        str_strip_whitespace=True,
        strict=True,
        validate_assignment=True,
    )

    servers: list[str] = Field(
        default_factory=lambda: ["nats://localhost:4222"],
        min_length=1,
        description="List of NATS server URLs",
    )
    connect_timeout: float = Field(
        default=2.0,
        gt=0,
        description="Seconds to wait for a connection before failing",
    )
    max_reconnect_attempts: int = Field(
        default=10,
        ge=0,
        description="Maximum reconnection attempts",
    )
    reconnect_time_wait: float = Field(
        default=2.0,
        gt=0,
        description="Time to wait between reconnection attempts in seconds",
    )

    @field_validator("servers")
    @classmethod
    def validate_servers(cls, v: list[str]) -> list[str]:
        """Validate server URLs format."""
        for server in v:
            if not server.startswith(("nats://", "tls://", "ws://", "wss://")):
                raise ValueError(
                    f"Invalid server URL: {server}. "
                    "Must start with nats://, tls://, ws://, or wss://"
                )
        return v

    @classmethod
    def from_env(cls) -> NATSConnectionConfig:
        """Build configuration from NATS_URL (comma-separated) when set."""
        url = os.getenv("NATS_URL")
        if not url:
            return cls()
        return cls(servers=[server.strip() for server in url.split(",") if server.strip()])

    def to_connection_params(self) -> dict[str, Any]:
        """Convert to keyword arguments for ``nats.connect``."""
        return {
            "servers": self.servers,
            "connect_timeout": self.connect_timeout,
            "max_reconnect_attempts": self.max_reconnect_attempts,
            "reconnect_time_wait": self.reconnect_time_wait,
        }


class KVStoreConfig(BaseModel):
    """Configuration for the KV bucket holding subscriptions."""

    model_config = ConfigDict(
        extra="forbid",
        str_strip_whitespace=True,
        strict=True,
        validate_assignment=True,
    )

    bucket: str = Field(
        default="push_subscriptions",
        min_length=1,
        description="KV store bucket name",
    )
    max_value_size: int = Field(
        default=1024 * 1024,  # 1MB
        gt=0,
        description="Maximum value size in bytes",
    )
    history_size: int = Field(
        default=1,
        ge=1,
        le=64,
        description="Number of historical revisions to keep",
    )

    @field_validator("bucket")
    @classmethod
    def validate_bucket_name(cls, v: str) -> str:
        """NATS KV bucket names are alphanumeric with underscores only."""
        if not re.match(r"^[a-zA-Z0-9_]+$", v):
            raise ValueError(
                f"Invalid bucket name: {v}. "
                "Must contain only alphanumeric characters and underscores"
            )
        return v


class LogContext(BaseModel):
    """Strongly-typed context for structured logging."""

    model_config = ConfigDict(
        extra="allow",
        str_strip_whitespace=True,
        strict=False,
        validate_assignment=True,
    )

    operation: str | None = Field(default=None, description="Operation being performed")
    component: str | None = Field(default=None, description="Component generating the log")
    key: str | None = Field(default=None, description="Store key involved")
    event_type: str | None = Field(default=None, description="Event type involved")
    subscriber: str | None = Field(default=None, description="Subscriber involved")
    error_code: str | None = Field(default=None, description="Structured error code")
    error_type: str | None = Field(default=None, description="Type of error encountered")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging frameworks."""
        return {k: v for k, v in self.model_dump().items() if v is not None}

    def with_error(self, error: Exception) -> LogContext:
        """Create a new context with error information."""
        return LogContext(
            **{
                **self.model_dump(),
                "error_code": error.__class__.__name__,
                "error_type": type(error).__module__ + "." + type(error).__name__,
            }
        )
