"""Data models for cache lookups."""

from dataclasses import dataclass
from typing import Literal, TypeAlias

CacheTier: TypeAlias = Literal["hot", "durable", "synthesized"]


@dataclass(frozen=True)
class CacheResult:
    """Outcome of a tiered cache lookup.

    Attributes:
        tier: Where the audio came from ("hot", "durable" or "synthesized")
        audio: MP3 bytes, when the tier returned them
        url: Public CDN URL, when the clip is known to be durable
    """

    tier: CacheTier
    audio: bytes | None = None
    url: str | None = None
