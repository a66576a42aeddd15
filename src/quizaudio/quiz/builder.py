"""End-to-end quiz creation: story, questions, timeline and clips."""

import logging
import random

from ..clips.store import ClipStore
from ..errors import QuizAudioError, ValidationFailure
from ..story.questions import QuestionGenerator, apply_answer_shuffle
from ..story.segmenter import segment_story
from ..story.timeline import (
    DEFAULT_QUESTION_PAUSE_MS,
    TIMELINE_POLICIES,
    TimelinePolicy,
    build_timeline,
)
from ..tts.models import DEFAULT_MODEL, DEFAULT_PROVIDER, DEFAULT_VOICE, SynthesisRequest
from .manifest import QUIZ_SPEED, clip_request, load_item_texts, owner_for
from .models import StorySegment
from .repository import QuizRepository

logger = logging.getLogger(__name__)

MAX_STORY_CHARS = 8000
MAX_SEGMENTS = 80
MAX_QUESTIONS = 6
DEFAULT_STORY_TITLE = "New Story"


class QuizBuilder:
    """Creates audio quizzes from stories.

    Example:
        builder = QuizBuilder(repository, clip_store, question_generator)
        quiz_id = await builder.build_quiz("user-1", story_text="The fox ran.")
    """

    def __init__(
        self,
        repository: QuizRepository,
        clip_store: ClipStore,
        question_generator: QuestionGenerator,
        model: str = DEFAULT_MODEL,
        timeline_policy: TimelinePolicy = "interleave",
        question_pause_ms: int = DEFAULT_QUESTION_PAUSE_MS,
        rng: random.Random | None = None,
    ) -> None:
        self.repository = repository
        self.clip_store = clip_store
        self.question_generator = question_generator
        self.model = model
        self.timeline_policy = timeline_policy
        self.question_pause_ms = question_pause_ms
        self._rng = rng or random.Random()

    def ensure_story_segments(self, story_source_id: str) -> list[StorySegment]:
        """Segment a story once; later calls return the stored rows.

        Raises:
            NotFound: If the story source does not exist
        """
        existing = self.repository.list_segments(story_source_id)
        if existing:
            return existing

        source = self.repository.get_story_source(story_source_id)
        drafts = segment_story(source.source_text)[:MAX_SEGMENTS]
        if not drafts:
            return []

        logger.info(f"Segmented story {story_source_id} into {len(drafts)} segments")
        return self.repository.insert_segments(story_source_id, drafts)

    def _check_settings(self, provider: str, voice: str) -> None:
        """Reject settings every clip of the quiz would fail on."""
        if self.timeline_policy not in TIMELINE_POLICIES:
            raise ValidationFailure(f"Unknown timeline policy '{self.timeline_policy}'")
        SynthesisRequest(
            text="check",
            provider=provider,
            voice=voice,
            speed=QUIZ_SPEED,
            model=self.model,
            category="story-segment",
        )

    async def build_quiz(
        self,
        user_id: str,
        story_text: str | None = None,
        story_source_id: str | None = None,
        title: str | None = None,
        provider: str = DEFAULT_PROVIDER,
        voice: str = DEFAULT_VOICE,
    ) -> str:
        """Create a quiz with narrated clips and return its ID.

        Either story_text or story_source_id must be given. On failure
        during clip generation the quiz is kept with status "failed" and
        the error propagates.

        Raises:
            ValidationFailure: If no story is given or it is too short, or the
                provider, voice or timeline policy is invalid (checked before
                anything is stored)
            NotFound: If story_source_id is unknown
            SynthesisFailed: If clip synthesis fails
            CacheUnavailable: If a clip cannot be uploaded
        """
        title = title.strip() if title else None
        self._check_settings(provider, voice)

        if not story_source_id:
            source_text = (story_text or "").strip()
            if not source_text:
                raise ValidationFailure("story_text or story_source_id is required")
            source = self.repository.create_story_source(
                title or DEFAULT_STORY_TITLE, source_text[:MAX_STORY_CHARS]
            )
            story_source_id = source.id

        story = self.repository.get_story_source(story_source_id)
        segments = self.ensure_story_segments(story_source_id)
        if not segments:
            raise ValidationFailure("Story too short to segment")

        generated = await self.question_generator.generate(
            story.source_text, len(segments)
        )
        questions = [apply_answer_shuffle(q, self._rng) for q in generated[:MAX_QUESTIONS]]
        if not questions:
            raise QuizAudioError("Failed to generate questions")

        quiz = self.repository.create_quiz(
            user_id=user_id,
            story_source_id=story_source_id,
            title=title or f"{story.title} Quiz",
            provider=provider,
            voice=voice,
        )
        records = self.repository.insert_questions(quiz.id, questions)

        timeline = build_timeline(
            segments,
            records,
            policy=self.timeline_policy,
            question_pause_ms=self.question_pause_ms,
        )
        self.repository.save_timeline(quiz.id, timeline)
        logger.info(
            f"Quiz {quiz.id}: {len(segments)} segments, {len(records)} questions"
        )

        try:
            await self.ensure_clips_for_timeline(quiz.id)
        except QuizAudioError:
            self.repository.set_quiz_status(quiz.id, "failed")
            raise

        self.repository.set_quiz_status(quiz.id, "ready")
        return quiz.id

    async def ensure_clips_for_timeline(self, quiz_id: str) -> int:
        """Make sure every timeline item of a quiz has a clip.

        Safe to call again after a failure; existing clips are reused.

        Returns:
            Number of items that have a clip

        Raises:
            NotFound: If the quiz does not exist
        """
        quiz = self.repository.get_quiz(quiz_id)
        timeline = self.repository.list_timeline(quiz_id)
        texts = load_item_texts(self.repository, timeline)

        ensured = 0
        for item, text in zip(timeline, texts):
            if text is None:
                logger.warning(
                    f"Timeline item {item.order_index} of quiz {quiz_id} "
                    f"references missing {item.item_type} {item.item_ref_id}"
                )
                continue
            owner_type, owner_id = owner_for(text)
            await self.clip_store.ensure_clip(
                clip_request(quiz, text, self.model), owner_type, owner_id
            )
            ensured += 1
        return ensured
