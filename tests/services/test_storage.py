# tests/services/test_storage.py
"""Tests for the S3 object store adapter and the redis token blacklist."""

from unittest.mock import MagicMock

import pytest
import redis
from botocore.exceptions import ClientError, EndpointConnectionError

from agora.core.errors import ServiceUnavailableError
from agora.services.storage import S3ObjectStore, build_object_key
from agora.services.token_blacklist import TokenBlacklist


def _client_error(code: str = "500") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": "boom"}}, "PutObject")


@pytest.fixture()
def s3_client():
    return MagicMock()


@pytest.fixture()
def store(s3_client):
    return S3ObjectStore(s3_client, "agora-media", "http://localhost:9000/")


def test_object_key_keeps_filename() -> None:
    key = build_object_key("my holiday.jpg")
    stamp, token, name = key.split("-", 2)
    assert stamp.isdigit()
    assert len(token) == 8
    assert name == "my-holiday.jpg"
    assert build_object_key("my holiday.jpg") != key


def test_put_uploads_and_returns_public_url(store, s3_client) -> None:
    stored = store.put(b"data", "image/png", "cat.png")

    s3_client.put_object.assert_called_once_with(
        Bucket="agora-media", Key=stored.key, Body=b"data", ContentType="image/png"
    )
    assert stored.url == f"http://localhost:9000/agora-media/{stored.key}"


def test_delete_removes_object(store, s3_client) -> None:
    store.delete("some-key.png")
    s3_client.delete_object.assert_called_once_with(Bucket="agora-media", Key="some-key.png")


def test_transport_errors_become_service_unavailable(store, s3_client) -> None:
    s3_client.put_object.side_effect = _client_error()
    with pytest.raises(ServiceUnavailableError) as exc_info:
        store.put(b"data", "image/png", "cat.png")
    assert exc_info.value.retryable

    s3_client.delete_object.side_effect = EndpointConnectionError(endpoint_url="http://localhost:9000")
    with pytest.raises(ServiceUnavailableError):
        store.delete("k")


def test_ensure_bucket_creates_missing_bucket(store, s3_client) -> None:
    s3_client.head_bucket.side_effect = _client_error("404")
    store.ensure_bucket()
    s3_client.create_bucket.assert_called_once_with(Bucket="agora-media")


def test_ensure_bucket_keeps_existing_bucket(store, s3_client) -> None:
    store.ensure_bucket()
    s3_client.create_bucket.assert_not_called()


def test_blacklist_revoke_and_check() -> None:
    client = MagicMock()
    client.exists.return_value = 1
    blacklist = TokenBlacklist(client)

    blacklist.revoke("tok", 0)
    client.set.assert_called_once_with("blacklist:tok", "1", ex=1)
    assert blacklist.is_revoked("tok")
    client.exists.assert_called_once_with("blacklist:tok")


def test_blacklist_redis_errors_become_service_unavailable() -> None:
    client = MagicMock()
    client.exists.side_effect = redis.ConnectionError("down")
    client.set.side_effect = redis.ConnectionError("down")
    blacklist = TokenBlacklist(client)

    with pytest.raises(ServiceUnavailableError):
        blacklist.is_revoked("tok")
    with pytest.raises(ServiceUnavailableError):
        blacklist.revoke("tok", 60)
