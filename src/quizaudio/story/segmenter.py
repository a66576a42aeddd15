"""Deterministic story segmentation into narratable chunks."""

import re
from dataclasses import dataclass

DEFAULT_SENTENCES_PER_SEGMENT = 2
DEFAULT_MIN_PAUSE_MS = 700
DEFAULT_MAX_PAUSE_MS = 1100

# Spreads pauses across the range without randomness
PAUSE_STRIDE = 137

_WHITESPACE = re.compile(r"\s+")
_SENTENCE = re.compile(r"[^.!?]+[.!?]+|[^.!?]+$")


@dataclass(frozen=True)
class StorySegmentDraft:
    """A segment produced by the segmenter, before it is persisted.

    Attributes:
        segment_text: One or more sentences narrated as a single clip
        pause_ms: Silence to play after the segment
    """

    segment_text: str
    pause_ms: int


def split_into_sentences(text: str) -> list[str]:
    """Split text on terminal punctuation, keeping a trailing fragment."""
    cleaned = _WHITESPACE.sub(" ", text).strip()
    if not cleaned:
        return []
    sentences = (match.strip() for match in _SENTENCE.findall(cleaned))
    return [sentence for sentence in sentences if sentence]


def pause_for_index(index: int, min_pause_ms: int, max_pause_ms: int) -> int:
    if max_pause_ms <= min_pause_ms:
        return min_pause_ms
    span = max_pause_ms - min_pause_ms
    return min_pause_ms + (index * PAUSE_STRIDE) % (span + 1)


def segment_story(
    text: str,
    sentences_per_segment: int = DEFAULT_SENTENCES_PER_SEGMENT,
    min_pause_ms: int = DEFAULT_MIN_PAUSE_MS,
    max_pause_ms: int = DEFAULT_MAX_PAUSE_MS,
) -> list[StorySegmentDraft]:
    """Split a story into ordered segments with pauses.

    The same input always yields the same segments and pauses, so rebuilding
    a quiz never reshuffles its pacing.

    Args:
        text: Raw story text
        sentences_per_segment: Sentences grouped per segment (at least 1)
        min_pause_ms: Lower bound of the pause range
        max_pause_ms: Upper bound of the pause range

    Returns:
        Ordered segment drafts; empty for empty or whitespace-only text

    Example:
        >>> [s.segment_text for s in segment_story("The fox ran. It jumped high! Did it win?")]
        ['The fox ran. It jumped high!', 'Did it win?']
    """
    sentences = split_into_sentences(text)
    if not sentences:
        return []

    per_segment = max(1, sentences_per_segment)
    segments: list[StorySegmentDraft] = []
    for start in range(0, len(sentences), per_segment):
        chunk = " ".join(sentences[start : start + per_segment])
        pause_ms = pause_for_index(len(segments), min_pause_ms, max_pause_ms)
        segments.append(StorySegmentDraft(segment_text=chunk, pause_ms=pause_ms))
    return segments
