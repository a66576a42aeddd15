"""Deterministic fingerprints for synthesis requests.

Two schemes coexist. The hot-tier key is a readable composite string so it
can be inspected in cache tooling. The durable digest is a SHA-256 over a
JSON normalization of the request and doubles as the content address of the
stored clip.

Digests must stay byte-compatible with clips already stored, so the JSON is
compact, keeps non-ASCII characters literal and renders integral speeds
without a fractional part.
"""

import hashlib
import json
import re

from .models import QUIZ_CATEGORIES, SynthesisRequest

HOT_KEY_VERSION = "tts:v2"

# Field order of the normalized payload; changing it changes every digest
DIGEST_FIELDS = ("text", "provider", "voice", "speed", "model")

SLUG_MAX_LENGTH = 50

_SLUG_UNSAFE = re.compile(r"[^a-z0-9]+")


def format_speed(speed: float) -> str:
    """Render speed the way it appears in keys and paths (1, 0.85)."""
    value = float(speed)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def hot_key(request: SynthesisRequest) -> str:
    """Build the hot-tier cache key for a request.

    Example:
        >>> hot_key(SynthesisRequest("Great job!", category="phrases"))
        'tts:v2:tts-1:nova:1:phrases:great job!'
    """
    normalized_text = request.text.lower().strip()
    return (
        f"{HOT_KEY_VERSION}:{request.model}:{request.voice}:"
        f"{format_speed(request.speed)}:{request.category}:{normalized_text}"
    )


def _normalized_payload(request: SynthesisRequest) -> str:
    speed = float(request.speed)
    values = {
        "text": request.text.strip(),
        "provider": request.provider,
        "voice": request.voice,
        "speed": int(speed) if speed.is_integer() else speed,
        "model": request.model,
    }
    ordered = {field: values[field] for field in DIGEST_FIELDS}
    return json.dumps(ordered, ensure_ascii=False, separators=(",", ":"))


def durable_digest(request: SynthesisRequest) -> str:
    """Hash a request into the durable-tier content address (64 hex chars)."""
    payload = _normalized_payload(request)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def text_checksum(text: str) -> str:
    """SHA-256 hex of trimmed text, stored alongside story segments."""
    return hashlib.sha256(text.strip().encode("utf-8")).hexdigest()


def slugify(text: str) -> str:
    slug = _SLUG_UNSAFE.sub("-", text.lower()).strip("-")
    return slug[:SLUG_MAX_LENGTH]


def clip_path(request: SynthesisRequest) -> str:
    """Storage path of the request's clip in the durable tier.

    Quiz clips live under ``audio/quizzes/{category}/{digest}.mp3``. The
    phrase/word cache predates digests and uses
    ``audio/{category}/{voice}-{speed}-{slug}.mp3``.
    """
    if request.category in QUIZ_CATEGORIES:
        return f"audio/quizzes/{request.category}/{durable_digest(request)}.mp3"
    return (
        f"audio/{request.category}/{request.voice}-"
        f"{format_speed(request.speed)}-{slugify(request.text)}.mp3"
    )
