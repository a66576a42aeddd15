"""Core wiring for quizaudio - builds every service once from config."""

import logging

import httpx

from .cache.durable import DurableStore
from .cache.hot import HotCache
from .cache.manager import TieredClipCache
from .clips.storage import ClipStorage
from .clips.store import ClipStore
from .config import QuizAudioConfig
from .errors import QuizAudioError, SynthesisFailed
from .providers import ProviderRegistry
from .providers.base import TTSProvider
from .quiz.builder import QuizBuilder
from .quiz.manifest import ManifestResolver
from .quiz.repository import QuizRepository
from .story.questions import QuestionGenerator
from .tts.adapter import SynthesisAdapter

logger = logging.getLogger(__name__)

HTTP_TIMEOUT_SECONDS = 30.0


class AudioServices:
    """Dependency container for the audio pipeline.

    Clients are created once and shared by every component; components
    receive their collaborators through constructors. Use as an async
    context manager so background uploads are drained and clients closed.

    Example:
        async with AudioServices(load_config()) as services:
            quiz_id = await services.builder.build_quiz("user-1", story_text=text)
            manifest = services.manifest_resolver.resolve_manifest(quiz_id)
    """

    def __init__(
        self,
        config: QuizAudioConfig,
        provider: TTSProvider | None = None,
        http_client: httpx.AsyncClient | None = None,
        hot_cache: HotCache | None = None,
    ) -> None:
        """Build the services.

        Args:
            config: Loaded configuration
            provider: TTS provider to use instead of the configured one
            http_client: Shared HTTP client (one is created if omitted)
            hot_cache: Hot tier to use instead of one built from redis_url

        Raises:
            KeyError: If the configured provider is not registered
            SynthesisAuthError: If the provider's API key is missing
        """
        self.config = config
        self.adapter = SynthesisAdapter(
            provider or ProviderRegistry.create(config.tts.provider)
        )
        self.http = http_client or httpx.AsyncClient(timeout=HTTP_TIMEOUT_SECONDS)

        self.hot = hot_cache or HotCache.from_url(
            config.hot_cache.redis_url, ttl_seconds=config.hot_cache.ttl_seconds
        )
        self.durable = DurableStore(
            self.http,
            storage_zone=config.durable.storage_zone,
            storage_password=config.durable.storage_password,
            cdn_hostname=config.durable.cdn_hostname,
            region=config.durable.region,
        )
        self.cache = TieredClipCache(self.hot, self.durable)

        self.clip_storage = ClipStorage(config.store.db_path)
        self.clip_store = ClipStore(self.clip_storage, self.cache, self.adapter)

        self.repository = QuizRepository(config.store.db_path)
        self.manifest_resolver = ManifestResolver(
            self.repository, self.clip_storage, model=config.tts.model
        )
        self.question_generator = QuestionGenerator(
            self.http, model=config.quiz.question_model
        )
        self.builder = QuizBuilder(
            self.repository,
            self.clip_store,
            self.question_generator,
            model=config.tts.model,
            timeline_policy=config.quiz.timeline_policy,
            question_pause_ms=config.quiz.question_pause_ms,
        )

        if not self.durable.configured:
            logger.warning("Durable tier not configured; clips cannot be stored")

    async def __aenter__(self) -> "AudioServices":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Drain background uploads and close every client."""
        await self.cache.aclose()
        await self.adapter.aclose()
        await self.http.aclose()


async def list_available_voices(provider: str) -> list[dict]:
    """List voices offered by a provider.

    Raises:
        SynthesisAuthError: If API key is not configured
        SynthesisFailed: If API call fails
        KeyError: If provider not found
    """
    provider_instance = ProviderRegistry.create(provider)
    try:
        return await provider_instance.list_voices()
    except (QuizAudioError, KeyError):
        raise
    except Exception as e:
        raise SynthesisFailed(f"Failed to list voices: {e}", None, e) from e
    finally:
        await provider_instance.aclose()
