"""Data models for clip metadata."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Literal, TypeAlias

OwnerType: TypeAlias = Literal["story_segment", "quiz_question"]

OWNER_TYPES = frozenset({"story_segment", "quiz_question"})

# Durable-tier category used for each owner kind
CATEGORY_FOR_OWNER = {
    "story_segment": "story-segment",
    "quiz_question": "quiz-question",
}


@dataclass(frozen=True)
class AudioClip:
    """One synthesized clip, unique by fingerprint.

    Attributes:
        fingerprint: Durable-tier digest of the synthesis request
        url: Public URL of the durable copy
        owner_type: Kind of entity the clip was first made for
        owner_id: ID of that entity
        provider: TTS provider name used
        voice: Voice identifier used
        duration_ms: Clip length, when known
        created_at: When the metadata row was written
    """

    fingerprint: str
    url: str
    owner_type: OwnerType
    owner_id: str
    provider: str
    voice: str
    duration_ms: int | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
