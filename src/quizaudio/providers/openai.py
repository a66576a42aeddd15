"""OpenAI text-to-speech provider implementation."""

import logging
import os

import openai
from openai import AsyncOpenAI

from ..errors import SynthesisAuthError, SynthesisFailed
from ..tts.models import OPENAI_VOICES
from .base import TTSProvider

logger = logging.getLogger(__name__)


class OpenAIProvider(TTSProvider):
    """OpenAI speech provider (``tts-1`` / ``tts-1-hd``)."""

    name = "openai"
    default_model = "tts-1"

    def __init__(
        self, api_key: str | None = None, client: AsyncOpenAI | None = None
    ) -> None:
        """Initialize OpenAI provider.

        Args:
            api_key: OpenAI API key. If not provided, reads from
                    OPENAI_API_KEY environment variable.
            client: Pre-built async client (used by tests and shared wiring)

        Raises:
            SynthesisAuthError: If no API key and no client is available.
        """
        if client is not None:
            self._client = client
            return

        api_key = api_key or os.getenv("OPENAI_API_KEY")
        if not api_key:
            raise SynthesisAuthError(
                "OpenAI API key not found. Set OPENAI_API_KEY environment "
                "variable or provide api_key parameter."
            )
        self._client = AsyncOpenAI(api_key=api_key)

    async def synthesize(
        self, text: str, voice: str, speed: float, model: str
    ) -> bytes:
        """Convert text to speech audio bytes.

        Raises:
            SynthesisAuthError: If the API key is rejected
            SynthesisFailed: For any other upstream or network failure
        """
        try:
            response = await self._client.audio.speech.create(
                model=model or self.default_model,
                voice=voice,
                input=text,
                speed=speed,
                response_format="mp3",
            )
        except openai.AuthenticationError as e:
            raise SynthesisAuthError(
                f"Authentication failed: {e.message}", e.status_code, e
            ) from e
        except openai.APIStatusError as e:
            raise SynthesisFailed(
                f"OpenAI TTS error: {e.status_code} {e.message}", e.status_code, e
            ) from e
        except openai.APIError as e:
            raise SynthesisFailed(f"OpenAI TTS request failed: {e}", None, e) from e

        audio_bytes = response.content
        if not audio_bytes:
            raise SynthesisFailed("No audio data received from API")

        logger.debug(f"OpenAI returned {len(audio_bytes)} bytes for voice {voice}")
        return audio_bytes

    async def list_voices(self) -> list[dict]:
        """OpenAI has a fixed voice set; no API call is needed."""
        return [
            {"id": voice, "name": voice.capitalize(), "provider": self.name}
            for voice in sorted(OPENAI_VOICES)
        ]

    async def aclose(self) -> None:
        await self._client.close()
