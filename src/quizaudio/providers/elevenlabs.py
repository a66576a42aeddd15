"""ElevenLabs text-to-speech provider implementation."""

import asyncio
import os

from elevenlabs.client import ElevenLabs

from ..errors import SynthesisAuthError, SynthesisFailed
from .base import TTSProvider


def _classify_error(e: Exception, action: str) -> SynthesisFailed:
    message = str(e)
    status_code = getattr(e, "status_code", None)
    if status_code == 401 or "unauthorized" in message.lower():
        return SynthesisAuthError(f"Authentication failed: {e}", 401, e)
    if status_code == 429 or "429" in message:
        return SynthesisFailed(f"Rate limit exceeded: {e}", 429, e)
    if isinstance(status_code, int) and status_code >= 500:
        return SynthesisFailed(f"Server error: {e}", status_code, e)
    return SynthesisFailed(f"{action} failed: {e}", status_code, e)


class ElevenLabsProvider(TTSProvider):
    """ElevenLabs TTS provider implementation.

    The ElevenLabs SDK is synchronous, so calls run in a worker thread to
    keep the event loop free.
    """

    name = "elevenlabs"
    default_model = "eleven_turbo_v2_5"

    def __init__(self, api_key: str | None = None) -> None:
        """Initialize ElevenLabs provider.

        Args:
            api_key: ElevenLabs API key. If not provided, reads from
                    ELEVENLABS_API_KEY environment variable.

        Raises:
            SynthesisAuthError: If API key is not provided or invalid.
        """
        self._api_key = api_key or os.getenv("ELEVENLABS_API_KEY")
        if not self._api_key:
            raise SynthesisAuthError(
                "ElevenLabs API key not found. Set ELEVENLABS_API_KEY environment "
                "variable or provide api_key parameter."
            )

        try:
            self._client = ElevenLabs(api_key=self._api_key)
        except Exception as e:
            raise SynthesisAuthError(
                f"Failed to initialize ElevenLabs client: {e}", None, e
            ) from e

        self._voices_cache: list[dict] | None = None

    async def synthesize(
        self, text: str, voice: str, speed: float, model: str
    ) -> bytes:
        """Convert text to speech audio bytes (MP3).

        Raises:
            SynthesisAuthError: If authentication fails
            SynthesisFailed: If the API call fails
        """

        def _sync_convert() -> bytes:
            audio_generator = self._client.text_to_speech.convert(
                text=text.strip(),
                voice_id=voice,
                model_id=model or self.default_model,
                output_format="mp3_44100_128",
                voice_settings={
                    "stability": 0.65,
                    "similarity_boost": 0.75,
                    "speed": speed,
                },
            )
            return b"".join(audio_generator)

        try:
            audio_bytes = await asyncio.to_thread(_sync_convert)
        except Exception as e:
            raise _classify_error(e, "API call") from e

        if not audio_bytes:
            raise SynthesisFailed("No audio data received from API")

        return audio_bytes

    async def list_voices(self) -> list[dict]:
        """Get list of available voices.

        Results are cached after first call to avoid repeated API requests.
        """
        if self._voices_cache is not None:
            return self._voices_cache

        def _sync_get_voices() -> list[dict]:
            response = self._client.voices.get_all()
            return [
                {"id": v.voice_id, "name": v.name, "provider": self.name}
                for v in response.voices
            ]

        try:
            voices = await asyncio.to_thread(_sync_get_voices)
        except Exception as e:
            raise _classify_error(e, "Listing voices") from e

        self._voices_cache = voices
        return voices
