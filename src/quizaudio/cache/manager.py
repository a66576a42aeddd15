"""Tiered clip cache for synthesized audio.

Checks a hot Redis tier, then the durable CDN store, and only then falls
back to synthesis, so identical requests across users and sessions are
synthesized once.
"""

import asyncio
import base64
import binascii
import logging

from ..tts.adapter import SynthesisAdapter
from ..tts.fingerprint import clip_path, hot_key
from ..tts.models import SynthesisRequest
from .durable import DurableStore
from .hot import HotCache
from .models import CacheResult

logger = logging.getLogger(__name__)


class TieredClipCache:
    """Coordinates the hot and durable tiers for clip lookup and fill.

    Example:
        cache = TieredClipCache(HotCache.from_url(url), durable_store)

        result = await cache.lookup(request)
        if result is None:
            audio = await adapter.synthesize(...)
            url = await cache.store(request, audio)

        # Or in one step, uploading in the background:
        result = await cache.fetch_or_synthesize(request, adapter)
    """

    def __init__(self, hot: HotCache, durable: DurableStore) -> None:
        self.hot = hot
        self.durable = durable
        self._uploads: set[asyncio.Task] = set()

        logger.debug(
            f"TieredClipCache initialized with "
            f"hot={'on' if hot.available else 'off'}, "
            f"durable={'on' if durable.configured else 'off'}"
        )

    @property
    def hot_available(self) -> bool:
        return self.hot.available

    async def lookup(self, request: SynthesisRequest) -> CacheResult | None:
        """Find a cached clip for the request.

        Returns:
            CacheResult tagged "hot" (bytes) or "durable" (bytes and URL),
            or None on a miss at every tier
        """
        key = hot_key(request)

        cached = await self.hot.get(key)
        if cached:
            try:
                audio = base64.b64decode(cached, validate=True)
            except (binascii.Error, ValueError) as e:
                logger.warning(f"Ignoring corrupt hot cache entry {key!r}: {e}")
            else:
                logger.debug(f"Hot cache hit for {key!r}")
                return CacheResult(tier="hot", audio=audio)

        path = clip_path(request)
        audio = await self.durable.fetch(path)
        if audio:
            logger.debug(f"Durable hit for {path}, backfilling hot tier")
            await self.hot.set(key, base64.b64encode(audio).decode("ascii"))
            return CacheResult(
                tier="durable", audio=audio, url=self.durable.public_url(path)
            )

        logger.debug(f"Cache miss for {key!r}")
        return None

    async def contains(self, request: SynthesisRequest) -> bool:
        """Existence check against the durable tier only (no download)."""
        return await self.durable.exists(clip_path(request))

    async def store(self, request: SynthesisRequest, audio: bytes) -> str:
        """Persist a clip durably and warm the hot tier.

        Returns:
            Public URL of the durable copy

        Raises:
            CacheUnavailable: If the durable upload fails
        """
        url = await self.durable.put(clip_path(request), audio)
        await self.hot.set(hot_key(request), base64.b64encode(audio).decode("ascii"))
        logger.info(f"Stored clip for {request.category} at {url}")
        return url

    async def fetch_or_synthesize(
        self, request: SynthesisRequest, adapter: SynthesisAdapter
    ) -> CacheResult:
        """Return audio for the request, synthesizing on a full miss.

        A freshly synthesized clip is written to the hot tier right away and
        uploaded to the durable tier in the background; an upload failure is
        logged and does not affect the returned audio.

        Raises:
            SynthesisFailed: If synthesis is needed and fails
        """
        result = await self.lookup(request)
        if result is not None:
            return result

        audio = await adapter.synthesize(
            request.text, request.voice, request.speed, request.model
        )
        await self.hot.set(hot_key(request), base64.b64encode(audio).decode("ascii"))

        if self.durable.configured:
            self._schedule_upload(request, audio)

        return CacheResult(tier="synthesized", audio=audio)

    def _schedule_upload(self, request: SynthesisRequest, audio: bytes) -> None:
        path = clip_path(request)
        task = asyncio.create_task(self.durable.put(path, audio))
        self._uploads.add(task)

        def _done(t: asyncio.Task) -> None:
            self._uploads.discard(t)
            if t.cancelled():
                logger.warning(f"Durable upload cancelled for {path}")
                return
            error = t.exception()
            if error is not None:
                logger.error(f"Durable upload failed for {path}: {error}")

        task.add_done_callback(_done)

    async def drain(self) -> None:
        """Wait for background uploads started by fetch_or_synthesize."""
        if self._uploads:
            await asyncio.gather(*list(self._uploads), return_exceptions=True)

    async def aclose(self) -> None:
        await self.drain()
        await self.hot.aclose()
