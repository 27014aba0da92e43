"""Photo storage on S3 / MinIO.

The object store is not transactional with the database. Callers upload
before persisting rows that reference an object, and delete objects before
deleting the rows that reference them.
"""

from __future__ import annotations

import logging
import secrets
import time
from dataclasses import dataclass
from typing import Any, Protocol

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from agora.core.errors import ServiceUnavailableError
from agora.core.settings import Settings

logger = logging.getLogger(__name__)

_UNAVAILABLE_DETAIL = "Something went wrong. Try again later."


@dataclass(frozen=True)
class StoredObject:
    """Location of an uploaded object."""

    key: str
    url: str


class ObjectStore(Protocol):
    """Interface the content and profile services rely on."""

    def put(self, data: bytes, content_type: str, filename: str) -> StoredObject: ...

    def delete(self, object_key: str) -> None: ...


def build_object_key(filename: str) -> str:
    """Return a collision-resistant key that keeps the original file name."""
    safe_name = (filename or "upload").replace(" ", "-").replace("/", "-")
    return f"{int(time.time() * 1000)}-{secrets.token_hex(4)}-{safe_name}"


class S3ObjectStore:
    """Manage photo objects in an S3-compatible bucket."""

    def __init__(self, client: Any, bucket_name: str, public_base_url: str) -> None:
        self.client = client
        self.bucket_name = bucket_name
        self.public_base_url = public_base_url.rstrip("/")

    @classmethod
    def from_settings(cls, config: Settings) -> S3ObjectStore:
        """Build a store whose client enforces the configured timeouts."""
        client = boto3.client(
            "s3",
            endpoint_url=config.s3_endpoint_url,
            aws_access_key_id=config.s3_access_key,
            aws_secret_access_key=config.s3_secret_key,
            region_name=config.s3_region,
            config=Config(
                connect_timeout=config.storage_timeout_seconds,
                read_timeout=config.storage_timeout_seconds,
                retries={"max_attempts": 2},
                s3={"addressing_style": "path"},
            ),
        )
        return cls(client, config.s3_bucket_name, config.public_storage_url)

    def url_for(self, key: str) -> str:
        return f"{self.public_base_url}/{self.bucket_name}/{key}"

    def ensure_bucket(self) -> None:
        """Create the bucket if it doesn't exist."""
        try:
            self.client.head_bucket(Bucket=self.bucket_name)
        except ClientError:
            try:
                self.client.create_bucket(Bucket=self.bucket_name)
                logger.info("Created bucket %s", self.bucket_name)
            except (ClientError, BotoCoreError) as e:
                logger.error("Failed to create bucket %s: %s", self.bucket_name, e)
                raise ServiceUnavailableError(_UNAVAILABLE_DETAIL) from e
        except BotoCoreError as e:
            logger.error("Object store unreachable: %s", e)
            raise ServiceUnavailableError(_UNAVAILABLE_DETAIL) from e

    def put(self, data: bytes, content_type: str, filename: str) -> StoredObject:
        """Upload ``data`` and return its key and public URL.

        Raises:
            ServiceUnavailableError: On any transport or service error.
        """
        key = build_object_key(filename)
        try:
            self.client.put_object(
                Bucket=self.bucket_name,
                Key=key,
                Body=data,
                ContentType=content_type,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error("Failed to upload %s: %s", key, e)
            raise ServiceUnavailableError(_UNAVAILABLE_DETAIL) from e
        logger.info("Uploaded %s to %s", key, self.bucket_name)
        return StoredObject(key=key, url=self.url_for(key))

    def delete(self, object_key: str) -> None:
        """Delete an object; a missing object is not an error on S3."""
        try:
            self.client.delete_object(Bucket=self.bucket_name, Key=object_key)
        except (ClientError, BotoCoreError) as e:
            logger.error("Failed to delete %s: %s", object_key, e)
            raise ServiceUnavailableError(_UNAVAILABLE_DETAIL) from e
        logger.info("Deleted %s from %s", object_key, self.bucket_name)
