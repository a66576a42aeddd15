"""Unit tests for OpenAIProvider request shape and error mapping."""

import os
import sys
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import openai
import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from quizaudio.errors import SynthesisAuthError, SynthesisFailed
from quizaudio.providers.openai import OpenAIProvider

SPEECH_URL = "https://api.openai.com/v1/audio/speech"


def _status_error(cls, status_code: int, message: str):
    response = httpx.Response(status_code, request=httpx.Request("POST", SPEECH_URL))
    return cls(message, response=response, body=None)


def _mock_client(content: bytes = b"ID3mp3") -> MagicMock:
    client = MagicMock()
    client.audio.speech.create = AsyncMock(return_value=MagicMock(content=content))
    client.close = AsyncMock()
    return client


class TestOpenAIProviderInitialization:
    def test_missing_api_key_raises_auth_error(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(SynthesisAuthError, match="OpenAI API key not found"):
                OpenAIProvider()

    def test_api_key_from_environment(self) -> None:
        with patch.dict(os.environ, {"OPENAI_API_KEY": "sk-test"}):
            with patch("quizaudio.providers.openai.AsyncOpenAI") as mock_openai:
                OpenAIProvider()

        mock_openai.assert_called_once_with(api_key="sk-test")

    def test_injected_client_skips_key_lookup(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            provider = OpenAIProvider(client=_mock_client())

        assert provider.name == "openai"


class TestOpenAIProviderSynthesize:
    """Test synthesize forwards voice settings and maps upstream errors."""

    @pytest.mark.asyncio
    async def test_synthesize_request_shape(self) -> None:
        client = _mock_client(b"mp3-bytes")
        provider = OpenAIProvider(client=client)

        audio = await provider.synthesize("Great job!", "nova", 0.85, "tts-1-hd")

        assert audio == b"mp3-bytes"
        client.audio.speech.create.assert_awaited_once_with(
            model="tts-1-hd",
            voice="nova",
            input="Great job!",
            speed=0.85,
            response_format="mp3",
        )

    @pytest.mark.asyncio
    async def test_empty_model_uses_default(self) -> None:
        client = _mock_client()
        provider = OpenAIProvider(client=client)

        await provider.synthesize("Hi", "nova", 1.0, "")

        assert client.audio.speech.create.call_args.kwargs["model"] == "tts-1"

    @pytest.mark.asyncio
    async def test_authentication_error(self) -> None:
        client = _mock_client()
        client.audio.speech.create.side_effect = _status_error(
            openai.AuthenticationError, 401, "Incorrect API key provided"
        )
        provider = OpenAIProvider(client=client)

        with pytest.raises(SynthesisAuthError, match="Authentication failed") as exc_info:
            await provider.synthesize("Hi", "nova", 1.0, "tts-1")

        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_upstream_status_propagated(self) -> None:
        client = _mock_client()
        client.audio.speech.create.side_effect = _status_error(
            openai.RateLimitError, 429, "Rate limit reached"
        )
        provider = OpenAIProvider(client=client)

        with pytest.raises(SynthesisFailed, match="429") as exc_info:
            await provider.synthesize("Hi", "nova", 1.0, "tts-1")

        assert exc_info.value.status_code == 429
        assert not isinstance(exc_info.value, SynthesisAuthError)

    @pytest.mark.asyncio
    async def test_connection_error(self) -> None:
        client = _mock_client()
        client.audio.speech.create.side_effect = openai.APIConnectionError(
            request=httpx.Request("POST", SPEECH_URL)
        )
        provider = OpenAIProvider(client=client)

        with pytest.raises(SynthesisFailed, match="request failed") as exc_info:
            await provider.synthesize("Hi", "nova", 1.0, "tts-1")

        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_empty_audio_rejected(self) -> None:
        provider = OpenAIProvider(client=_mock_client(b""))

        with pytest.raises(SynthesisFailed, match="No audio data"):
            await provider.synthesize("Hi", "nova", 1.0, "tts-1")


class TestOpenAIProviderVoices:
    @pytest.mark.asyncio
    async def test_fixed_voice_set(self) -> None:
        provider = OpenAIProvider(client=_mock_client())

        voices = await provider.list_voices()

        assert [v["id"] for v in voices] == [
            "alloy",
            "echo",
            "fable",
            "nova",
            "onyx",
            "shimmer",
        ]
        assert all(v["provider"] == "openai" for v in voices)

    @pytest.mark.asyncio
    async def test_aclose_closes_client(self) -> None:
        client = _mock_client()

        await OpenAIProvider(client=client).aclose()

        client.close.assert_awaited_once()
