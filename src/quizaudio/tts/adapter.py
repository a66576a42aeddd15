"""Synthesis adapter wrapping the external text-to-speech engine."""

import logging

from ..errors import SynthesisFailed, ValidationFailure
from ..providers.base import TTSProvider

logger = logging.getLogger(__name__)


class SynthesisAdapter:
    """Turns text into raw MP3 bytes through one configured provider.

    Only called on a cache miss. Performs no retries; every failure is
    surfaced as SynthesisFailed with the upstream status when known.
    """

    def __init__(self, provider: TTSProvider) -> None:
        self.provider = provider
        self.calls = 0

    @property
    def provider_name(self) -> str:
        return self.provider.name

    async def synthesize(
        self, text: str, voice: str, speed: float, model: str
    ) -> bytes:
        """Synthesize text with the given voice settings.

        Raises:
            ValidationFailure: If text is empty
            SynthesisFailed: If the provider call fails
        """
        if not text or not text.strip():
            raise ValidationFailure("text cannot be empty")

        self.calls += 1
        logger.info(
            f"Synthesizing {len(text)} chars via {self.provider_name} "
            f"(voice={voice}, speed={speed}, model={model})"
        )
        try:
            return await self.provider.synthesize(text, voice, speed, model)
        except SynthesisFailed:
            raise
        except Exception as e:
            raise SynthesisFailed(f"Synthesis failed: {e}", None, e) from e

    async def aclose(self) -> None:
        await self.provider.aclose()
