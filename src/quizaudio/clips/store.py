"""Idempotent clip creation on top of the tiered cache."""

import asyncio
import logging

from ..cache.manager import TieredClipCache
from ..errors import ValidationFailure
from ..tts.adapter import SynthesisAdapter
from ..tts.fingerprint import durable_digest
from ..tts.models import SynthesisRequest
from .models import OWNER_TYPES, AudioClip, OwnerType
from .storage import ClipStorage

logger = logging.getLogger(__name__)


class ClipStore:
    """Creates at most one clip row per fingerprint.

    Concurrent ensure_clip calls for the same fingerprint inside one process
    share a single in-flight task, so they trigger one synthesis. Across
    processes the unique fingerprint column is what keeps the metadata
    consistent; each process may still synthesize once.

    Example:
        store = ClipStore(storage, cache, adapter)
        clip = await store.ensure_clip(request, "story_segment", segment_id)
        again = await store.ensure_clip(request, "story_segment", segment_id)
        assert clip.url == again.url
    """

    def __init__(
        self,
        storage: ClipStorage,
        cache: TieredClipCache,
        adapter: SynthesisAdapter,
        coalesce: bool = True,
    ) -> None:
        """Initialize the clip store.

        Args:
            storage: Clip metadata storage
            cache: Tiered cache used to persist and reuse audio
            adapter: Synthesis adapter called on a full miss
            coalesce: Share one in-flight creation per fingerprint
        """
        self.storage = storage
        self.cache = cache
        self.adapter = adapter
        self.coalesce = coalesce
        self._inflight: dict[str, asyncio.Task[AudioClip]] = {}

    async def ensure_clip(
        self, request: SynthesisRequest, owner_type: OwnerType, owner_id: str
    ) -> AudioClip:
        """Return the clip for a request, creating it on first use.

        Raises:
            ValidationFailure: If owner fields are missing or malformed
            SynthesisFailed: If synthesis is needed and fails
            CacheUnavailable: If the durable upload fails (no row is written)
        """
        if owner_type not in OWNER_TYPES:
            raise ValidationFailure(f"Unknown owner type '{owner_type}'")
        if not owner_id:
            raise ValidationFailure("owner_id cannot be empty")

        fingerprint = durable_digest(request)
        existing = self.storage.get_by_fingerprint(fingerprint)
        if existing is not None:
            logger.debug(f"Clip {fingerprint[:12]} already exists")
            return existing

        if not self.coalesce:
            return await self._create_clip(request, fingerprint, owner_type, owner_id)

        task = self._inflight.get(fingerprint)
        if task is None:
            task = asyncio.create_task(
                self._create_clip(request, fingerprint, owner_type, owner_id)
            )
            self._inflight[fingerprint] = task
            task.add_done_callback(lambda t: self._finish_inflight(fingerprint, t))
        else:
            logger.debug(f"Joining in-flight creation of clip {fingerprint[:12]}")

        # Shield so one cancelled caller does not cancel the shared work
        return await asyncio.shield(task)

    def _finish_inflight(self, fingerprint: str, task: asyncio.Task[AudioClip]) -> None:
        self._inflight.pop(fingerprint, None)
        # Every waiter may have been cancelled, so read the outcome here
        if not task.cancelled() and task.exception() is not None:
            logger.debug(f"Creation of clip {fingerprint[:12]} failed: {task.exception()}")

    async def _create_clip(
        self,
        request: SynthesisRequest,
        fingerprint: str,
        owner_type: OwnerType,
        owner_id: str,
    ) -> AudioClip:
        cached = await self.cache.lookup(request)
        if cached is not None and cached.url:
            url = cached.url
        else:
            if cached is not None and cached.audio:
                audio = cached.audio
            else:
                audio = await self.adapter.synthesize(
                    request.text, request.voice, request.speed, request.model
                )
            url = await self.cache.store(request, audio)

        clip = AudioClip(
            fingerprint=fingerprint,
            url=url,
            owner_type=owner_type,
            owner_id=owner_id,
            provider=request.provider,
            voice=request.voice,
        )
        if self.storage.insert(clip):
            logger.info(f"Recorded clip {fingerprint[:12]} for {owner_type} {owner_id}")

        # Another process may have won the insert; its row is authoritative
        return self.storage.get_by_fingerprint(fingerprint) or clip
