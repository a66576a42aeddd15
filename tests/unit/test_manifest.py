"""Unit tests for manifest resolution."""

import sys
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from quizaudio.clips.models import AudioClip
from quizaudio.clips.storage import ClipStorage
from quizaudio.errors import NotFound
from quizaudio.quiz.manifest import (
    ManifestResolver,
    QuestionText,
    SegmentText,
    clip_request,
    resolve_item_text,
)
from quizaudio.quiz.models import Manifest, ManifestItem
from quizaudio.quiz.repository import QuizRepository
from quizaudio.story.questions import QuizQuestion
from quizaudio.story.segmenter import StorySegmentDraft
from quizaudio.story.timeline import TimelineItem, build_timeline
from quizaudio.tts.fingerprint import durable_digest


def _seed_quiz(repository: QuizRepository):
    source = repository.create_story_source("Fox", "The fox ran. Did it win?")
    segments = repository.insert_segments(
        source.id,
        [StorySegmentDraft("The fox ran.", 700), StorySegmentDraft("Did it win?", 837)],
    )
    quiz = repository.create_quiz("user-1", source.id, "Fox Quiz", "openai", "nova")
    questions = repository.insert_questions(
        quiz.id, [QuizQuestion("Who ran?", "The fox", "The fox", "The cat", "The dog")]
    )
    timeline = build_timeline(segments, questions)
    repository.save_timeline(quiz.id, timeline)
    return quiz, segments, questions


def _record_clip(storage: ClipStorage, quiz, text, url: str) -> None:
    request = clip_request(quiz, text, "tts-1")
    owner_type = "story_segment" if isinstance(text, SegmentText) else "quiz_question"
    storage.insert(
        AudioClip(
            fingerprint=durable_digest(request),
            url=url,
            owner_type=owner_type,
            owner_id="owner",
            provider="openai",
            voice="nova",
        )
    )


class TestItemText:
    def test_question_text_is_spoken_form(self, repository: QuizRepository) -> None:
        _, _, questions = _seed_quiz(repository)
        item = TimelineItem("question", questions[0].id, 1, 800)

        text = resolve_item_text(item, {}, {questions[0].id: questions[0]})

        assert text == QuestionText(
            questions[0].id, "Question 1: Who ran? A: The fox B: The cat C: The dog"
        )

    def test_dangling_reference(self) -> None:
        item = TimelineItem("story_segment", "gone", 0, 700)

        assert resolve_item_text(item, {}, {}) is None

    def test_clip_request_uses_quiz_voice_and_normal_speed(
        self, repository: QuizRepository
    ) -> None:
        quiz, segments, _ = _seed_quiz(repository)

        request = clip_request(quiz, SegmentText(segments[0].id, "The fox ran."), "tts-1-hd")

        assert request.voice == "nova"
        assert request.speed == 1.0
        assert request.model == "tts-1-hd"
        assert request.category == "story-segment"


class TestResolveManifest:
    """Test ordering, URLs and partial manifests."""

    def test_unknown_quiz(self, repository: QuizRepository, clip_storage: ClipStorage) -> None:
        resolver = ManifestResolver(repository, clip_storage)

        with pytest.raises(NotFound):
            resolver.resolve_manifest("missing")

    def test_partial_manifest_has_empty_urls(
        self, repository: QuizRepository, clip_storage: ClipStorage
    ) -> None:
        quiz, segments, _ = _seed_quiz(repository)
        _record_clip(
            clip_storage, quiz, SegmentText(segments[0].id, "The fox ran."), "https://cdn/s0.mp3"
        )

        manifest = ManifestResolver(repository, clip_storage).resolve_manifest(quiz.id)

        assert manifest.quiz_id == quiz.id
        assert manifest.title == "Fox Quiz"
        assert [i.item_type for i in manifest.items] == [
            "story_segment",
            "question",
            "story_segment",
        ]
        assert [i.audio_url for i in manifest.items] == ["https://cdn/s0.mp3", "", ""]
        assert [i.pause_ms for i in manifest.items] == [700, 800, 837]
        assert manifest.complete is False

    def test_complete_manifest(
        self, repository: QuizRepository, clip_storage: ClipStorage
    ) -> None:
        quiz, segments, questions = _seed_quiz(repository)
        _record_clip(clip_storage, quiz, SegmentText("x", "The fox ran."), "https://cdn/a.mp3")
        _record_clip(clip_storage, quiz, SegmentText("x", "Did it win?"), "https://cdn/b.mp3")
        _record_clip(
            clip_storage,
            quiz,
            QuestionText("x", "Question 1: Who ran? A: The fox B: The cat C: The dog"),
            "https://cdn/q.mp3",
        )

        manifest = ManifestResolver(repository, clip_storage).resolve_manifest(quiz.id)

        assert [i.audio_url for i in manifest.items] == [
            "https://cdn/a.mp3",
            "https://cdn/q.mp3",
            "https://cdn/b.mp3",
        ]
        assert [i.order_index for i in manifest.items] == [0, 1, 2]
        assert manifest.complete is True

    def test_clips_for_other_model_not_matched(
        self, repository: QuizRepository, clip_storage: ClipStorage
    ) -> None:
        quiz, segments, _ = _seed_quiz(repository)
        _record_clip(clip_storage, quiz, SegmentText("x", "The fox ran."), "https://cdn/a.mp3")

        manifest = ManifestResolver(repository, clip_storage, model="tts-1-hd").resolve_manifest(
            quiz.id
        )

        assert all(i.audio_url == "" for i in manifest.items)

    def test_dangling_item_still_listed(
        self, repository: QuizRepository, clip_storage: ClipStorage
    ) -> None:
        source = repository.create_story_source("Fox", "The fox ran.")
        quiz = repository.create_quiz("user-1", source.id, "Fox Quiz", "openai", "nova")
        repository.save_timeline(quiz.id, [TimelineItem("story_segment", "gone", 0, 700)])

        manifest = ManifestResolver(repository, clip_storage).resolve_manifest(quiz.id)

        assert manifest.to_dict() == {
            "quizId": quiz.id,
            "title": "Fox Quiz",
            "items": [
                {"orderIndex": 0, "itemType": "story_segment", "audioUrl": "", "pauseMs": 700}
            ],
        }

    def test_invalid_stored_voice_gives_empty_urls(
        self, repository: QuizRepository, clip_storage: ClipStorage
    ) -> None:
        source = repository.create_story_source("Fox", "The fox ran.")
        segments = repository.insert_segments(source.id, [StorySegmentDraft("The fox ran.", 700)])
        quiz = repository.create_quiz("user-1", source.id, "Fox Quiz", "openai", "Nova")
        repository.save_timeline(quiz.id, build_timeline(segments, []))

        manifest = ManifestResolver(repository, clip_storage).resolve_manifest(quiz.id)

        assert [(i.item_type, i.audio_url) for i in manifest.items] == [("story_segment", "")]


class TestManifestSerialization:
    def test_camel_case_keys(self) -> None:
        manifest = Manifest(
            quiz_id="q1",
            title="Fox Quiz",
            items=[ManifestItem(0, "question", "https://cdn/q.mp3", 800)],
        )

        assert manifest.to_dict()["items"][0] == {
            "orderIndex": 0,
            "itemType": "question",
            "audioUrl": "https://cdn/q.mp3",
            "pauseMs": 800,
        }
