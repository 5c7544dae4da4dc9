"""Key-value store models using Pydantic for validation."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class KVEntry(BaseModel):
    """Key-Value store entry with metadata."""

    model_config = ConfigDict(
        extra="forbid",
        str_strip_whitespace=True,
        strict=True,
        validate_assignment=True,
        json_schema_extra={
            "example": {
                "key": "idx:type:SimpleEvent",
                "value": ["john@gmail.com", "peter@gmail.com"],
                "revision": 42,
                "created_at": "2025-01-01T00:00:00Z",
                "updated_at": "2025-01-01T00:01:00Z",
            }
        },
    )

    key: str = Field(..., min_length=1, description="The key identifier")
    value: Any = Field(..., description="The stored value (any JSON-serializable type)")
    revision: int = Field(..., ge=1, description="The revision number")
    created_at: str = Field(..., description="Creation timestamp in ISO format")
    updated_at: str = Field(..., description="Last update timestamp in ISO format")

    @field_validator("created_at", "updated_at")
    @classmethod
    def validate_timestamps(cls, v: str) -> str:
        """Validate timestamp is in ISO format."""
        try:
            datetime.fromisoformat(v.replace("Z", "+00:00"))
        except ValueError as e:
            raise ValueError(f"Invalid ISO timestamp format: {v}") from e
        return v


class KVOptions(BaseModel):
    """Options for KV store write operations."""

    model_config = ConfigDict(
        extra="forbid",
        strict=True,
        validate_assignment=True,
    )

    revision: int | None = Field(
        None, ge=0, description="Expected revision for optimistic concurrency control"
    )
    create_only: bool = Field(
        False, description="Only create if key doesn't exist (fail if exists)"
    )
    update_only: bool = Field(
        False, description="Only update if key exists (fail if doesn't exist)"
    )

    @model_validator(mode="after")
    def validate_exclusivity(self) -> "KVOptions":
        """Ensure create_only and update_only are mutually exclusive."""
        if self.create_only and self.update_only:
            raise ValueError("create_only and update_only are mutually exclusive")
        return self
