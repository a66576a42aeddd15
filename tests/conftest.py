"""Pytest configuration and fixtures for quizaudio tests."""

import sys
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from test_helpers import BlobServer, CountingProvider, FakeRedis, make_durable_store

from quizaudio.cache.hot import HotCache
from quizaudio.cache.manager import TieredClipCache
from quizaudio.clips.storage import ClipStorage
from quizaudio.clips.store import ClipStore
from quizaudio.quiz.repository import QuizRepository
from quizaudio.tts.adapter import SynthesisAdapter


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch) -> None:
    """Keep real credentials and overrides out of every test."""
    for name in (
        "OPENAI_API_KEY",
        "ELEVENLABS_API_KEY",
        "OPENROUTER_API_KEY",
        "BUNNY_STORAGE_PASSWORD",
        "BUNNY_STORAGE_ZONE",
        "BUNNY_CDN_HOSTNAME",
        "BUNNY_STORAGE_REGION",
        "QUIZAUDIO_PROVIDER",
        "QUIZAUDIO_VOICE",
        "QUIZAUDIO_REDIS_URL",
        "QUIZAUDIO_DB_PATH",
        "OPENAI_TTS_MODEL",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "quizaudio.db"


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def blob_server() -> BlobServer:
    return BlobServer()


@pytest.fixture
def provider() -> CountingProvider:
    return CountingProvider()


@pytest.fixture
def adapter(provider: CountingProvider) -> SynthesisAdapter:
    return SynthesisAdapter(provider)


@pytest.fixture
def tiered_cache(fake_redis: FakeRedis, blob_server: BlobServer) -> TieredClipCache:
    return TieredClipCache(HotCache(fake_redis), make_durable_store(blob_server))


@pytest.fixture
def clip_storage(db_path: Path) -> ClipStorage:
    return ClipStorage(db_path)


@pytest.fixture
def clip_store(
    clip_storage: ClipStorage,
    tiered_cache: TieredClipCache,
    adapter: SynthesisAdapter,
) -> ClipStore:
    return ClipStore(clip_storage, tiered_cache, adapter)


@pytest.fixture
def repository(db_path: Path) -> QuizRepository:
    return QuizRepository(db_path)
