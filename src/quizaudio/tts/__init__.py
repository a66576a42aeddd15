"""Synthesis requests, fingerprints and the TTS adapter."""

from .adapter import SynthesisAdapter
from .fingerprint import clip_path, durable_digest, hot_key, text_checksum
from .models import SynthesisRequest

__all__ = [
    "SynthesisAdapter",
    "SynthesisRequest",
    "clip_path",
    "durable_digest",
    "hot_key",
    "text_checksum",
]
