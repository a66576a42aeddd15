"""Records of the quiz relational layer and the derived manifest."""

from dataclasses import dataclass, field
from typing import Any, Literal, TypeAlias

from ..story.timeline import ItemType

QuizStatus: TypeAlias = Literal["generating", "ready", "failed"]


@dataclass(frozen=True)
class StorySource:
    id: str
    title: str
    source_text: str


@dataclass(frozen=True)
class StorySegment:
    """A persisted story segment, ordered by segment_index."""

    id: str
    story_source_id: str
    segment_index: int
    segment_text: str
    pause_ms: int
    checksum: str


@dataclass(frozen=True)
class Quiz:
    id: str
    user_id: str
    story_source_id: str
    title: str
    provider: str
    voice: str
    status: QuizStatus


@dataclass(frozen=True)
class QuestionRecord:
    """A persisted quiz question with its choices in spoken order."""

    id: str
    quiz_id: str
    order_index: int
    question_text: str
    correct_answer: str
    answer_a: str
    answer_b: str
    answer_c: str


@dataclass(frozen=True)
class ManifestItem:
    order_index: int
    item_type: ItemType
    audio_url: str
    pause_ms: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "orderIndex": self.order_index,
            "itemType": self.item_type,
            "audioUrl": self.audio_url,
            "pauseMs": self.pause_ms,
        }


@dataclass(frozen=True)
class Manifest:
    """Client-facing playback manifest; derived on every request.

    An item whose clip has not been generated yet has an empty audio_url.
    """

    quiz_id: str
    title: str
    items: list[ManifestItem] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return all(item.audio_url for item in self.items)

    def to_dict(self) -> dict[str, Any]:
        return {
            "quizId": self.quiz_id,
            "title": self.title,
            "items": [item.to_dict() for item in self.items],
        }
