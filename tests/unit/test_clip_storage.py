"""Unit tests for SQLite clip metadata storage."""

import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from quizaudio.clips import storage as storage_module
from quizaudio.clips.models import AudioClip
from quizaudio.clips.storage import ClipStorage


def _clip(fingerprint: str, url: str = "https://cdn/x.mp3", owner_id: str = "seg-1") -> AudioClip:
    return AudioClip(
        fingerprint=fingerprint,
        url=url,
        owner_type="story_segment",
        owner_id=owner_id,
        provider="openai",
        voice="nova",
    )


class TestClipStorage:
    """Test uniqueness and batch lookups."""

    def test_schema_created_in_new_directory(self, tmp_path: Path) -> None:
        db_path = tmp_path / "nested" / "clips.db"

        ClipStorage(db_path)

        assert db_path.exists()

    def test_insert_and_get(self, clip_storage: ClipStorage) -> None:
        clip = _clip("a" * 64)

        assert clip_storage.insert(clip) is True
        stored = clip_storage.get_by_fingerprint("a" * 64)

        assert stored is not None
        assert stored.url == clip.url
        assert stored.owner_type == "story_segment"
        assert stored.created_at == clip.created_at
        assert stored.duration_ms is None

    def test_duplicate_fingerprint_is_a_noop(self, clip_storage: ClipStorage) -> None:
        first = _clip("b" * 64, url="https://cdn/first.mp3", owner_id="seg-1")
        second = _clip("b" * 64, url="https://cdn/second.mp3", owner_id="seg-2")

        assert clip_storage.insert(first) is True
        assert clip_storage.insert(second) is False

        assert clip_storage.count() == 1
        assert clip_storage.get_by_fingerprint("b" * 64).url == "https://cdn/first.mp3"

    def test_missing_fingerprint(self, clip_storage: ClipStorage) -> None:
        assert clip_storage.get_by_fingerprint("missing") is None

    def test_get_many(self, clip_storage: ClipStorage) -> None:
        clip_storage.insert(_clip("c1"))
        clip_storage.insert(_clip("c2"))

        found = clip_storage.get_many(["c1", "c2", "c1", "absent"])

        assert set(found) == {"c1", "c2"}
        assert clip_storage.get_many([]) == {}

    def test_get_many_chunks_large_batches(self, clip_storage: ClipStorage, monkeypatch) -> None:
        monkeypatch.setattr(storage_module, "MAX_BATCH", 3)
        fingerprints = [f"fp-{i}" for i in range(10)]
        for fp in fingerprints:
            clip_storage.insert(_clip(fp))

        found = clip_storage.get_many(fingerprints)

        assert set(found) == set(fingerprints)
