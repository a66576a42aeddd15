"""Synthesis request models with validation."""

from dataclasses import dataclass
from typing import Literal, TypeAlias

from ..errors import ValidationFailure

ClipCategory: TypeAlias = Literal["story-segment", "quiz-question", "phrases", "words"]

# Quiz clips are addressed by digest, phrase clips by a readable slug
QUIZ_CATEGORIES = frozenset({"story-segment", "quiz-question"})
PHRASE_CATEGORIES = frozenset({"phrases", "words"})
CLIP_CATEGORIES = QUIZ_CATEGORIES | PHRASE_CATEGORIES

PROVIDERS = frozenset({"openai", "elevenlabs"})
OPENAI_VOICES = frozenset({"alloy", "echo", "fable", "nova", "onyx", "shimmer"})

DEFAULT_PROVIDER = "openai"
DEFAULT_VOICE = "nova"
DEFAULT_MODEL = "tts-1"
DEFAULT_SPEED = 1.0

MIN_SPEED = 0.25
MAX_SPEED = 4.0


@dataclass(frozen=True)
class SynthesisRequest:
    """One request to turn text into narrated speech.

    Never persisted directly; only its fingerprints are stored.

    Args:
        text: Text to narrate
        provider: TTS provider name (e.g., "openai")
        voice: Voice identifier for the provider
        speed: Speaking rate (0.25-4.0)
        model: Provider model identifier (e.g., "tts-1")
        category: Clip population, selects the storage addressing scheme
    """

    text: str
    provider: str = DEFAULT_PROVIDER
    voice: str = DEFAULT_VOICE
    speed: float = DEFAULT_SPEED
    model: str = DEFAULT_MODEL
    category: ClipCategory = "phrases"

    def __post_init__(self) -> None:
        """Validate request fields."""
        if not isinstance(self.text, str) or not self.text.strip():
            raise ValidationFailure("text cannot be empty")
        if self.provider not in PROVIDERS:
            raise ValidationFailure(
                f"Unknown provider '{self.provider}'. "
                f"Available providers: {', '.join(sorted(PROVIDERS))}"
            )
        if not self.voice or not self.voice.strip():
            raise ValidationFailure("voice cannot be empty")
        if self.provider == "openai" and self.voice not in OPENAI_VOICES:
            raise ValidationFailure(f"Unknown OpenAI voice '{self.voice}'")
        if isinstance(self.speed, bool) or not isinstance(self.speed, (int, float)):
            raise ValidationFailure("speed must be a number")
        if not MIN_SPEED <= self.speed <= MAX_SPEED:
            raise ValidationFailure(
                f"speed must be between {MIN_SPEED} and {MAX_SPEED}, got {self.speed}"
            )
        if not self.model or not self.model.strip():
            raise ValidationFailure("model cannot be empty")
        if self.category not in CLIP_CATEGORIES:
            raise ValidationFailure(f"Unknown clip category '{self.category}'")
