"""Playback manifest resolution for quizzes."""

import logging
from dataclasses import dataclass
from typing import TypeAlias

from ..clips.models import CATEGORY_FOR_OWNER, OwnerType
from ..clips.storage import ClipStorage
from ..errors import ValidationFailure
from ..story.questions import format_question_text
from ..story.timeline import TimelineItem
from ..tts.fingerprint import durable_digest
from ..tts.models import DEFAULT_MODEL, SynthesisRequest
from .models import Manifest, ManifestItem, QuestionRecord, Quiz, StorySegment
from .repository import QuizRepository

logger = logging.getLogger(__name__)

# Quiz narration is always synthesized at normal speed
QUIZ_SPEED = 1.0


@dataclass(frozen=True)
class SegmentText:
    segment_id: str
    text: str


@dataclass(frozen=True)
class QuestionText:
    question_id: str
    text: str


ItemText: TypeAlias = SegmentText | QuestionText


def resolve_item_text(
    item: TimelineItem,
    segments: dict[str, StorySegment],
    questions: dict[str, QuestionRecord],
) -> ItemText | None:
    """Text a timeline item narrates, or None when its row is missing."""
    if item.item_type == "story_segment":
        segment = segments.get(item.item_ref_id)
        if segment is None:
            return None
        return SegmentText(segment.id, segment.segment_text)

    question = questions.get(item.item_ref_id)
    if question is None:
        return None
    return QuestionText(
        question.id,
        format_question_text(
            question.order_index,
            question.question_text,
            question.answer_a,
            question.answer_b,
            question.answer_c,
        ),
    )


def owner_for(item_text: ItemText) -> tuple[OwnerType, str]:
    """Owner type and ID a clip for this text is recorded under."""
    if isinstance(item_text, SegmentText):
        return "story_segment", item_text.segment_id
    return "quiz_question", item_text.question_id


def clip_request(quiz: Quiz, item_text: ItemText, model: str) -> SynthesisRequest:
    """Synthesis request for one timeline item of a quiz."""
    owner_type, _ = owner_for(item_text)
    return SynthesisRequest(
        text=item_text.text,
        provider=quiz.provider,
        voice=quiz.voice,
        speed=QUIZ_SPEED,
        model=model,
        category=CATEGORY_FOR_OWNER[owner_type],
    )


def load_item_texts(
    repository: QuizRepository, timeline: list[TimelineItem]
) -> list[ItemText | None]:
    """Resolve the text of every timeline item with one query per table."""
    segment_ids = [i.item_ref_id for i in timeline if i.item_type == "story_segment"]
    question_ids = [i.item_ref_id for i in timeline if i.item_type == "question"]
    segments = repository.get_segments(segment_ids)
    questions = repository.get_questions(question_ids)
    return [resolve_item_text(item, segments, questions) for item in timeline]


class ManifestResolver:
    """Builds the playback manifest of a quiz from its stored timeline.

    Items whose clip has not been generated, or whose segment or question
    row is gone, are still listed with an empty audio URL so clients can
    play a partial quiz.
    """

    def __init__(
        self,
        repository: QuizRepository,
        clip_storage: ClipStorage,
        model: str = DEFAULT_MODEL,
    ) -> None:
        self.repository = repository
        self.clip_storage = clip_storage
        self.model = model

    def _digest(self, quiz: Quiz, text: ItemText | None) -> str | None:
        if text is None:
            return None
        try:
            return durable_digest(clip_request(quiz, text, self.model))
        except ValidationFailure as e:
            # Quizzes stored with settings that no longer validate stay playable
            logger.warning(f"Cannot address clip for quiz {quiz.id}: {e}")
            return None

    def resolve_manifest(self, quiz_id: str) -> Manifest:
        """Resolve a quiz into ordered playable items.

        Raises:
            NotFound: If the quiz does not exist
        """
        quiz = self.repository.get_quiz(quiz_id)
        timeline = self.repository.list_timeline(quiz_id)
        texts = load_item_texts(self.repository, timeline)

        digests = [self._digest(quiz, text) for text in texts]
        clips = self.clip_storage.get_many([d for d in digests if d])

        items = []
        for item, digest in zip(timeline, digests):
            clip = clips.get(digest) if digest else None
            items.append(
                ManifestItem(
                    order_index=item.order_index,
                    item_type=item.item_type,
                    audio_url=clip.url if clip else "",
                    pause_ms=item.pause_ms,
                )
            )

        missing = sum(1 for i in items if not i.audio_url)
        if missing:
            logger.debug(f"Manifest for quiz {quiz_id} has {missing} unresolved items")
        return Manifest(quiz_id=quiz.id, title=quiz.title, items=items)
