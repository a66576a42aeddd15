"""Configuration management for quizaudio.

Loads configuration from ~/.config/quizaudio/config.toml.
Priority chain: CLI flags > env vars > config file.
"""

import os
import sys
import tomllib
from dataclasses import dataclass
from pathlib import Path

CONFIG_DIR = Path.home() / ".config" / "quizaudio"
CONFIG_PATH = CONFIG_DIR / "config.toml"

DEFAULT_CONFIG = """\
# quizaudio configuration

[tts]
# Provider: "openai" (default) or "elevenlabs"
provider = "openai"

# Voice ID for narration
# OpenAI: alloy, echo, fable, nova, onyx, shimmer
# ElevenLabs: use `quizaudio voices --provider elevenlabs`
voice = "nova"

# Provider model: "tts-1" or "tts-1-hd" for OpenAI
model = "tts-1"

[hot_cache]
# Redis URL for the hot tier; leave empty to run without it
redis_url = ""

# Entry lifetime in seconds (7 days)
ttl_seconds = 604800

[durable]
# BunnyCDN storage zone and pull-zone hostname
storage_zone = ""
cdn_hostname = ""

# Storage region: "la", "ny", "sg", ... or "default"
region = "la"

[store]
# SQLite database for clip metadata and quizzes
db_path = "~/.local/share/quizaudio/quizaudio.db"

[quiz]
# Timeline layout: "interleave" (questions spread through the story)
# or "append" (questions after the story)
timeline_policy = "interleave"

# Silence after each question, in milliseconds
question_pause_ms = 800

# OpenRouter model used to write questions
question_model = "anthropic/claude-3-haiku"

# Secrets are read from environment variables, not this file:
#   OPENAI_API_KEY          - OpenAI provider
#   ELEVENLABS_API_KEY      - ElevenLabs provider
#   BUNNY_STORAGE_PASSWORD  - durable tier uploads
#   OPENROUTER_API_KEY      - question generation
"""


@dataclass(frozen=True)
class TTSConfig:
    """TTS provider configuration."""

    provider: str
    voice: str
    model: str


@dataclass(frozen=True)
class HotCacheConfig:
    """Hot tier (Redis) configuration."""

    redis_url: str | None
    ttl_seconds: int


@dataclass(frozen=True)
class DurableConfig:
    """Durable tier (BunnyCDN) configuration."""

    storage_zone: str | None
    storage_password: str | None
    cdn_hostname: str | None
    region: str


@dataclass(frozen=True)
class StoreConfig:
    """Metadata store configuration."""

    db_path: Path


@dataclass(frozen=True)
class QuizConfig:
    """Quiz creation configuration."""

    timeline_policy: str
    question_pause_ms: int
    question_model: str


@dataclass(frozen=True)
class QuizAudioConfig:
    """Top-level quizaudio configuration."""

    tts: TTSConfig
    hot_cache: HotCacheConfig
    durable: DurableConfig
    store: StoreConfig
    quiz: QuizConfig


_cached_config: QuizAudioConfig | None = None


def generate_config(path: Path = CONFIG_PATH) -> Path:
    """Generate default config file at ~/.config/quizaudio/config.toml."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(DEFAULT_CONFIG)
    return path


def _env_or(name: str, value: str | None) -> str | None:
    # Empty strings count as unset in both places
    return os.getenv(name) or value or None


def load_config(path: Path | None = None) -> QuizAudioConfig:
    """Load configuration from config file with env var overrides.

    On first run, generates the config file and exits so the user
    can review it before proceeding. The default file is read once per
    process; an explicit path is always read fresh.

    Args:
        path: Config file to read instead of the default location

    Returns:
        Loaded and validated QuizAudioConfig.

    Raises:
        SystemExit: If config is missing (after generating) or invalid.
    """
    global _cached_config
    if path is None and _cached_config is not None:
        return _cached_config

    config_path = path or CONFIG_PATH
    if not config_path.exists():
        generated = generate_config(config_path)
        print(
            f"No config found. Generated {generated}; review it and run again.",
            file=sys.stderr,
        )
        raise SystemExit(1)

    with open(config_path, "rb") as f:
        data = tomllib.load(f)

    tts = data.get("tts", {})
    hot = data.get("hot_cache", {})
    durable = data.get("durable", {})
    store = data.get("store", {})
    quiz = data.get("quiz", {})

    # Validate required fields
    missing = []
    if "provider" not in tts:
        missing.append("tts.provider")
    if "voice" not in tts:
        missing.append("tts.voice")
    if "model" not in tts:
        missing.append("tts.model")
    if "db_path" not in store:
        missing.append("store.db_path")

    if missing:
        print(
            f"Missing required config values: {', '.join(missing)}",
            file=sys.stderr,
        )
        print(f"Edit {config_path} or delete it to regenerate.", file=sys.stderr)
        raise SystemExit(1)

    db_path = os.getenv("QUIZAUDIO_DB_PATH", store["db_path"])

    config = QuizAudioConfig(
        tts=TTSConfig(
            provider=os.getenv("QUIZAUDIO_PROVIDER", tts["provider"]),
            voice=os.getenv("QUIZAUDIO_VOICE", tts["voice"]),
            model=os.getenv("OPENAI_TTS_MODEL", tts["model"]),
        ),
        hot_cache=HotCacheConfig(
            redis_url=_env_or("QUIZAUDIO_REDIS_URL", hot.get("redis_url")),
            ttl_seconds=int(hot.get("ttl_seconds", 7 * 24 * 60 * 60)),
        ),
        durable=DurableConfig(
            storage_zone=_env_or("BUNNY_STORAGE_ZONE", durable.get("storage_zone")),
            storage_password=os.getenv("BUNNY_STORAGE_PASSWORD") or None,
            cdn_hostname=_env_or("BUNNY_CDN_HOSTNAME", durable.get("cdn_hostname")),
            region=_env_or("BUNNY_STORAGE_REGION", durable.get("region")) or "la",
        ),
        store=StoreConfig(db_path=Path(db_path).expanduser()),
        quiz=QuizConfig(
            timeline_policy=quiz.get("timeline_policy", "interleave"),
            question_pause_ms=int(quiz.get("question_pause_ms", 800)),
            question_model=quiz.get("question_model", "anthropic/claude-3-haiku"),
        ),
    )

    if path is None:
        _cached_config = config
    return config
