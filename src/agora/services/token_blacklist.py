"""Revoked access tokens, kept in redis until they would have expired."""

from __future__ import annotations

import logging
from typing import Any

import redis

from agora.core.errors import ServiceUnavailableError
from agora.core.settings import Settings

logger = logging.getLogger(__name__)


class TokenBlacklist:
    """Redis-backed set of revoked bearer tokens."""

    key_prefix = "blacklist:"

    def __init__(self, client: Any) -> None:
        self._redis = client

    @classmethod
    def from_settings(cls, config: Settings) -> TokenBlacklist:
        client = redis.from_url(
            config.redis_url,
            socket_timeout=config.redis_timeout_seconds,
            socket_connect_timeout=config.redis_timeout_seconds,
        )
        return cls(client)

    def revoke(self, token: str, ttl_seconds: int) -> None:
        """Mark ``token`` as revoked for ``ttl_seconds``."""
        try:
            self._redis.set(f"{self.key_prefix}{token}", "1", ex=max(int(ttl_seconds), 1))
        except redis.RedisError as e:
            logger.error("Failed to revoke token: %s", e)
            raise ServiceUnavailableError("Something went wrong. Try again later.") from e

    def is_revoked(self, token: str) -> bool:
        """Return True if ``token`` has been revoked."""
        try:
            return bool(self._redis.exists(f"{self.key_prefix}{token}"))
        except redis.RedisError as e:
            logger.error("Failed to check token revocation: %s", e)
            raise ServiceUnavailableError("Something went wrong. Try again later.") from e

    def close(self) -> None:
        self._redis.close()
