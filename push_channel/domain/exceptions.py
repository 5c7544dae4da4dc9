"""Domain-specific exceptions for the push channel registry."""


class PushChannelError(Exception):
    """Base exception for all push channel errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidArgumentError(PushChannelError):
    """Rejected input, raised before any store access."""

    pass


class StorageUnavailableError(PushChannelError):
    """The backing store could not be reached or the operation did not complete."""

    def __init__(self, message: str, operation: str | None = None, key: str | None = None):
        super().__init__(message)
        self.operation = operation
        self.key = key
        if operation:
            self.details["operation"] = operation
        if key:
            self.details["key"] = key


class KVStoreError(PushChannelError):
    """Base exception for KV Store operations."""

    def __init__(
        self,
        message: str,
        key: str | None = None,
        bucket: str | None = None,
        operation: str | None = None,
    ):
        super().__init__(message)
        self.key = key
        self.bucket = bucket
        self.operation = operation
        if key:
            self.details["key"] = key
        if bucket:
            self.details["bucket"] = bucket
        if operation:
            self.details["operation"] = operation


class KVNotConnectedError(KVStoreError):
    """Raised when KV store operation is attempted without connection."""

    def __init__(self, operation: str):
        super().__init__(
            f"KV store not connected. Cannot perform '{operation}' operation.",
            operation=operation,
        )


class KVKeyNotFoundError(KVStoreError):
    """Raised when a key is not found in the KV store."""

    def __init__(self, key: str, bucket: str | None = None):
        super().__init__(f"Key '{key}' not found", key=key, bucket=bucket)


class KVRevisionMismatchError(KVStoreError):
    """Raised when optimistic concurrency check fails."""

    def __init__(self, key: str, expected: int, actual: int):
        super().__init__(
            f"Revision mismatch for key '{key}': expected {expected}, got {actual}",
            key=key,
        )
        self.expected_revision = expected
        self.actual_revision = actual
        self.details["expected_revision"] = expected
        self.details["actual_revision"] = actual


class KVKeyAlreadyExistsError(KVStoreError):
    """Raised when trying to create a key that already exists."""

    def __init__(self, key: str):
        super().__init__(f"Key '{key}' already exists", key=key, operation="create")
