"""Tests for the error taxonomy."""

from push_channel.domain.exceptions import (
    InvalidArgumentError,
    KVKeyAlreadyExistsError,
    KVKeyNotFoundError,
    KVNotConnectedError,
    KVRevisionMismatchError,
    KVStoreError,
    PushChannelError,
    StorageUnavailableError,
)


def test_storage_unavailable_details():
    error = StorageUnavailableError("store down", operation="put", key="sub:SimpleEvent:john")

    assert isinstance(error, PushChannelError)
    assert error.message == "store down"
    assert error.details == {"operation": "put", "key": "sub:SimpleEvent:john"}


def test_invalid_argument_is_push_channel_error():
    error = InvalidArgumentError("bad", details={"subscriber": "''"})

    assert isinstance(error, PushChannelError)
    assert error.details["subscriber"] == "''"


def test_kv_errors_share_base():
    for error in (
        KVNotConnectedError("get"),
        KVKeyNotFoundError("k", bucket="b"),
        KVRevisionMismatchError("k", 2, 3),
        KVKeyAlreadyExistsError("k"),
    ):
        assert isinstance(error, KVStoreError)


def test_revision_mismatch_details():
    error = KVRevisionMismatchError("idx:type:SimpleEvent", 2, 5)

    assert error.expected_revision == 2
    assert error.actual_revision == 5
    assert error.details["key"] == "idx:type:SimpleEvent"
