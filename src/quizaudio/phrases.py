"""Fixed game phrases and letters pre-generated into the clip cache."""

import asyncio
import logging
from dataclasses import dataclass

from .cache.manager import TieredClipCache
from .errors import CacheUnavailable, SynthesisFailed
from .tts.adapter import SynthesisAdapter
from .tts.models import DEFAULT_MODEL, DEFAULT_PROVIDER, DEFAULT_VOICE, SynthesisRequest

logger = logging.getLogger(__name__)

GAME_INSTRUCTION_TEMPLATES = [
    "Find the lowercase letter",
    "Tap all the letters",
    "Which picture starts with",
    "Which letter does start with",
    "Find the words that start like",
    "Find the words that end like",
    "Find the picture for",
    "Find the word for this picture",
    "Who is this person",
    "How many words can you think of",
]

CORRECT_PHRASES = [
    "Great job!",
    "You got it!",
    "Excellent!",
    "Perfect!",
    "Way to go!",
    "Awesome!",
    "You're doing great!",
    "Nice work!",
    "That's right!",
    "Wonderful!",
]

INCORRECT_PHRASES = ["No", "Not quite", "Incorrect"]

HINT_TEMPLATES = [
    "Look for the same shape, just smaller",
    "Keep looking! Some letters look similar",
    "Think about the sound this letter makes",
    "Listen to the first sound in the word",
    "Listen to the beginning sound",
    "Listen to the ending sound",
    "Say the word for the picture out loud",
    "Think about what this word means",
    "Look at their face carefully",
    "Try again! You can do it",
]

# Hints are read slower for emphasis
HINT_SPEED = 0.85

# USD per million characters
COST_PER_MILLION_CHARS = {"tts-1": 15.0, "tts-1-hd": 30.0}


@dataclass(frozen=True)
class PhraseItem:
    text: str
    speed: float = 1.0


@dataclass
class WarmReport:
    """Outcome counts of a cache warming run."""

    cached: int = 0
    generated: int = 0
    failed: int = 0

    @property
    def total(self) -> int:
        return self.cached + self.generated + self.failed


def pregenerate_content() -> list[PhraseItem]:
    """Every phrase the games play, in generation order."""
    items: list[PhraseItem] = []
    for letter in "abcdefghijklmnopqrstuvwxyz":
        items.append(PhraseItem(letter))
        items.append(PhraseItem(letter.upper()))
    items.extend(PhraseItem(text) for text in GAME_INSTRUCTION_TEMPLATES)
    items.extend(PhraseItem(text) for text in CORRECT_PHRASES)
    items.extend(PhraseItem(text) for text in INCORRECT_PHRASES)
    items.extend(PhraseItem(text, HINT_SPEED) for text in HINT_TEMPLATES)
    return items


def estimate_cost(items: list[PhraseItem], model: str = DEFAULT_MODEL) -> float:
    chars = sum(len(item.text) for item in items)
    rate = COST_PER_MILLION_CHARS.get(model, COST_PER_MILLION_CHARS["tts-1"])
    return chars / 1_000_000 * rate


async def warm_phrase_cache(
    cache: TieredClipCache,
    adapter: SynthesisAdapter,
    voice: str = DEFAULT_VOICE,
    model: str = DEFAULT_MODEL,
    provider: str = DEFAULT_PROVIDER,
    items: list[PhraseItem] | None = None,
    delay: float = 0.1,
) -> WarmReport:
    """Synthesize and store every phrase missing from the durable tier.

    A failure on one phrase is logged and counted; the run continues.

    Args:
        cache: Tiered cache to fill
        adapter: Synthesis adapter for missing phrases
        voice: Voice to narrate with
        model: TTS model identifier
        provider: TTS provider name
        items: Phrases to warm (defaults to pregenerate_content())
        delay: Seconds to wait after each synthesis call

    Returns:
        WarmReport with cached, generated and failed counts
    """
    report = WarmReport()
    items = pregenerate_content() if items is None else items

    for index, item in enumerate(items, start=1):
        request = SynthesisRequest(
            text=item.text,
            provider=provider,
            voice=voice,
            speed=item.speed,
            model=model,
            category="phrases",
        )
        if await cache.contains(request):
            report.cached += 1
            continue

        try:
            audio = await adapter.synthesize(item.text, voice, item.speed, model)
            await cache.store(request, audio)
        except (SynthesisFailed, CacheUnavailable) as e:
            logger.error(f"[{index}/{len(items)}] Failed to warm {item.text!r}: {e}")
            report.failed += 1
        else:
            logger.info(f"[{index}/{len(items)}] Generated {item.text!r}")
            report.generated += 1

        if delay:
            await asyncio.sleep(delay)

    return report
