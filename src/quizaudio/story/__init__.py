"""Story segmentation, quiz questions and timeline assembly."""

from .segmenter import StorySegmentDraft, segment_story
from .timeline import TimelineItem, build_timeline

__all__ = ["StorySegmentDraft", "TimelineItem", "build_timeline", "segment_story"]
