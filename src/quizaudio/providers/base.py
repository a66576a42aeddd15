"""Abstract base class for text-to-speech providers.

This module defines the interface that all TTS providers must implement,
so the synthesis adapter can treat every engine the same way.
"""

from abc import ABC, abstractmethod


class TTSProvider(ABC):
    """Abstract base class for text-to-speech providers.

    All TTS providers must inherit from this class and implement
    the required methods for synthesizing speech and listing voices.

    Voice Dictionary Structure:
        Each voice returned by list_voices() should follow this structure:
        {
            "id": str,       # Unique identifier for the voice
            "name": str,     # Human-readable name for the voice
            "provider": str  # Name of the provider (e.g., "openai")
        }
    """

    name: str = ""
    default_model: str = ""

    @abstractmethod
    async def synthesize(
        self, text: str, voice: str, speed: float, model: str
    ) -> bytes:
        """Convert text to MP3 audio bytes.

        Args:
            text: The text to convert to speech
            voice: Voice ID to use for synthesis
            speed: Speaking rate multiplier
            model: Provider model identifier

        Returns:
            MP3 audio data as bytes

        Raises:
            SynthesisFailed: If synthesis fails
        """
        pass

    @abstractmethod
    async def list_voices(self) -> list[dict]:
        """Return available voices for this provider.

        Returns:
            List of voice dictionaries, each containing:
            - id: Unique voice identifier
            - name: Human-readable voice name
            - provider: Provider name

        Raises:
            SynthesisFailed: If voice listing fails
        """
        pass

    async def aclose(self) -> None:
        """Release network clients held by the provider."""
        return None
