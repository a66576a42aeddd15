"""Durable, content-addressed clip storage on a BunnyCDN storage zone.

Uploads go to the storage API with the zone's access key. Reads go through
the public pull zone, which serves the same paths.
"""

import logging

import httpx

from ..errors import CacheUnavailable

logger = logging.getLogger(__name__)

DEFAULT_REGION = "la"


def storage_host(region: str) -> str:
    if region == "default":
        return "storage.bunnycdn.com"
    return f"{region}.storage.bunnycdn.com"


class DurableStore:
    """Blob store holding the authoritative copy of every clip."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        storage_zone: str | None,
        storage_password: str | None,
        cdn_hostname: str | None,
        region: str = DEFAULT_REGION,
    ) -> None:
        """Initialize the durable tier.

        Args:
            client: Shared async HTTP client
            storage_zone: Storage zone name
            storage_password: Storage zone access key
            cdn_hostname: Pull zone hostname serving public URLs
            region: Storage region code, or "default" for the main endpoint
        """
        self._client = client
        self.storage_zone = storage_zone
        self.storage_password = storage_password
        self.cdn_hostname = cdn_hostname
        self.region = region or DEFAULT_REGION

    @property
    def configured(self) -> bool:
        return bool(self.storage_zone and self.storage_password and self.cdn_hostname)

    def public_url(self, path: str) -> str:
        if not self.cdn_hostname:
            raise CacheUnavailable("CDN hostname not configured")
        return f"https://{self.cdn_hostname}/{path}"

    def upload_url(self, path: str) -> str:
        return f"https://{storage_host(self.region)}/{self.storage_zone}/{path}"

    async def put(self, path: str, audio: bytes) -> str:
        """Upload a clip and return its public URL.

        Raises:
            CacheUnavailable: If the store is unconfigured or the upload fails
        """
        if not self.configured:
            raise CacheUnavailable("Durable storage configuration missing")

        try:
            response = await self._client.put(
                self.upload_url(path),
                content=audio,
                headers={
                    "AccessKey": self.storage_password,
                    "Content-Type": "audio/mpeg",
                },
            )
        except httpx.HTTPError as e:
            raise CacheUnavailable(f"Durable upload failed: {e}", None, e) from e

        if not response.is_success:
            raise CacheUnavailable(
                f"Durable upload failed: {response.status_code} {response.text}",
                response.status_code,
            )

        logger.debug(f"Uploaded {len(audio)} bytes to {path}")
        return self.public_url(path)

    async def fetch(self, path: str) -> bytes | None:
        """Download a clip, or None if absent or unreachable."""
        if not self.configured:
            return None
        try:
            response = await self._client.get(self.public_url(path))
        except httpx.HTTPError as e:
            logger.warning(f"Durable fetch failed for {path}: {e}")
            return None

        if not response.is_success:
            if response.status_code != 404:
                logger.warning(
                    f"Durable fetch for {path} returned {response.status_code}"
                )
            return None
        return response.content

    async def exists(self, path: str) -> bool:
        if not self.configured:
            return False
        try:
            response = await self._client.head(self.public_url(path))
        except httpx.HTTPError as e:
            logger.warning(f"Durable existence check failed for {path}: {e}")
            return False
        return response.is_success
