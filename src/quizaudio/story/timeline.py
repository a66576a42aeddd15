"""Timeline assembly: narration segments interleaved with quiz questions."""

from dataclasses import dataclass
from typing import Literal, Protocol, TypeAlias

ItemType: TypeAlias = Literal["story_segment", "question"]
TimelinePolicy: TypeAlias = Literal["interleave", "append"]

TIMELINE_POLICIES = frozenset({"interleave", "append"})
DEFAULT_QUESTION_PAUSE_MS = 800


class SegmentRef(Protocol):
    id: str
    pause_ms: int | None


class QuestionRef(Protocol):
    id: str


@dataclass(frozen=True)
class TimelineItem:
    """One playable entry of a quiz timeline.

    Attributes:
        item_type: "story_segment" or "question"
        item_ref_id: ID of the segment or question row
        order_index: Position in the timeline, dense from 0
        pause_ms: Silence after the item
    """

    item_type: ItemType
    item_ref_id: str
    order_index: int
    pause_ms: int


def build_timeline(
    segments: list[SegmentRef],
    questions: list[QuestionRef],
    policy: TimelinePolicy = "interleave",
    question_pause_ms: int = DEFAULT_QUESTION_PAUSE_MS,
) -> list[TimelineItem]:
    """Order segments and questions into one timeline.

    With "interleave", questions are spread evenly: one is placed after
    every ``len(segments) // (len(questions) + 1)`` segments (at least 1)
    and any left over follow the last segment. With "append", every
    question follows the last segment.

    Every input appears exactly once and order_index runs 0..n-1.

    Raises:
        ValueError: If policy is unknown
    """
    if policy not in TIMELINE_POLICIES:
        raise ValueError(f"Unknown timeline policy '{policy}'")

    timeline: list[TimelineItem] = []

    def push(item_type: ItemType, ref_id: str, pause_ms: int) -> None:
        timeline.append(
            TimelineItem(
                item_type=item_type,
                item_ref_id=ref_id,
                order_index=len(timeline),
                pause_ms=pause_ms,
            )
        )

    question_count = len(questions)
    stride = max(1, len(segments) // (question_count + 1))
    cursor = 0

    for placed, segment in enumerate(segments, start=1):
        push("story_segment", segment.id, segment.pause_ms or 0)

        due = cursor < question_count and placed >= stride * (cursor + 1)
        if policy == "interleave" and due:
            push("question", questions[cursor].id, question_pause_ms)
            cursor += 1

    for question in questions[cursor:]:
        push("question", question.id, question_pause_ms)

    return timeline
