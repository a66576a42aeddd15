"""Hot cache tier backed by Redis.

Every operation here is best-effort. An unconfigured or unreachable Redis
degrades to durable-only operation and is never reported as an exception.
"""

import logging

import redis.asyncio as redis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)

# Cache TTL: 7 days
DEFAULT_TTL_SECONDS = 60 * 60 * 24 * 7

# Max size for cached audio: 500KB base64 (~375KB MP3)
DEFAULT_MAX_PAYLOAD = 500_000


class HotCache:
    """TTL key-value cache for base64-encoded clips."""

    def __init__(
        self,
        client: "redis.Redis | None",
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        max_payload: int = DEFAULT_MAX_PAYLOAD,
    ) -> None:
        """Initialize the hot tier.

        Args:
            client: Async Redis client, or None when the tier is not configured
            ttl_seconds: Expiry applied to every write
            max_payload: Largest encoded value written; larger values are skipped
        """
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive, got {ttl_seconds}")
        self._client = client
        self.ttl_seconds = ttl_seconds
        self.max_payload = max_payload

    @classmethod
    def from_url(cls, url: str | None, **kwargs) -> "HotCache":
        """Build the tier from a Redis URL; an empty URL disables it."""
        if not url:
            logger.info("Hot cache not configured, using durable tier only")
            return cls(None, **kwargs)
        return cls(redis.from_url(url, decode_responses=True), **kwargs)

    @property
    def available(self) -> bool:
        return self._client is not None

    async def get(self, key: str) -> str | None:
        """Return the cached value, or None on miss or failure."""
        if self._client is None:
            return None
        try:
            return await self._client.get(key)
        except (RedisError, OSError) as e:
            logger.warning(f"Hot cache get failed: {e}")
            return None

    async def set(self, key: str, value: str) -> bool:
        """Write a value with the tier's TTL.

        Returns:
            True if the value was written, False if skipped or failed
        """
        if self._client is None:
            return False

        if len(value) > self.max_payload:
            logger.warning(f"Audio too large to cache: {len(value)} bytes")
            return False

        try:
            await self._client.set(key, value, ex=self.ttl_seconds)
        except (RedisError, OSError) as e:
            logger.warning(f"Hot cache set failed: {e}")
            return False
        return True

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
