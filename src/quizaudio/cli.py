"""Typer CLI definition for quizaudio."""

import asyncio
import json
import logging
import sys
from pathlib import Path

import typer

from .clips.models import CATEGORY_FOR_OWNER, OWNER_TYPES
from .clips.storage import ClipStorage
from .config import CONFIG_PATH, QuizAudioConfig, generate_config, load_config
from .core import AudioServices, list_available_voices
from .errors import (
    NotFound,
    QuizAudioError,
    SynthesisAuthError,
    SynthesisFailed,
    ValidationFailure,
)
from .phrases import estimate_cost, pregenerate_content, warm_phrase_cache
from .quiz.manifest import ManifestResolver
from .quiz.repository import QuizRepository
from .story.segmenter import segment_story
from .tts.models import SynthesisRequest

app = typer.Typer(help="Narrated audio quizzes and cached speech clips")


def _debug(ctx: typer.Context) -> bool:
    return bool(ctx.obj and ctx.obj.get("debug"))


def _config(ctx: typer.Context) -> QuizAudioConfig:
    return load_config(ctx.obj.get("config_path") if ctx.obj else None)


def _fail(ctx: typer.Context, label: str, e: Exception) -> typer.Exit:
    """Report an error the way every command does and build the exit."""
    if _debug(ctx):
        typer.echo(f"Debug - {label}: {e!r}", err=True)
    elif isinstance(e, (QuizAudioError, KeyError)):
        typer.echo(f"Error: {e}", err=True)
    else:
        typer.echo("Error: An unexpected error occurred", err=True)
    return typer.Exit(1)


def _read_text(text: str | None, file: Path | None) -> str:
    """Get text from argument, file, or stdin (in priority order)."""
    if text is None and file:
        try:
            text = file.read_text()
        except FileNotFoundError:
            typer.echo(f"Error: File not found: {file}", err=True)
            raise typer.Exit(1) from None
        except UnicodeDecodeError:
            typer.echo(f"Error: Unable to decode file as text: {file}", err=True)
            raise typer.Exit(1) from None
    elif text is None and not sys.stdin.isatty():
        text = sys.stdin.read().strip()

    if not text or not text.strip():
        typer.echo("Error: No text provided", err=True)
        raise typer.Exit(1)
    return text


@app.callback()
def main(
    ctx: typer.Context,
    debug: bool = typer.Option(
        False, "--debug", help="Show verbose error messages and cache activity"
    ),
    config_path: Path | None = typer.Option(
        None, "--config", help="Config file (default ~/.config/quizaudio/config.toml)"
    ),
) -> None:
    """Narrated audio quizzes and cached speech clips."""
    if debug:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )
    ctx.obj = {"debug": debug, "config_path": config_path}


@app.command("init-config")
def init_config(
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file"),
    path: Path = typer.Option(CONFIG_PATH, "--path", help="Where to write the file"),
) -> None:
    """Write the default config file."""
    if path.exists() and not force:
        typer.echo(f"Config already exists at {path} (use --force to overwrite)")
        raise typer.Exit(1)
    typer.echo(f"Wrote {generate_config(path)}")


@app.command()
def segment(
    text: str | None = typer.Argument(None, help="Story text"),
    file: Path | None = typer.Option(None, "-f", "--file", help="Read story from file"),
    sentences: int = typer.Option(2, "--sentences", help="Sentences per segment"),
    min_pause: int = typer.Option(700, "--min-pause", help="Shortest pause (ms)"),
    max_pause: int = typer.Option(1100, "--max-pause", help="Longest pause (ms)"),
) -> None:
    """Split a story into narration segments and print them as JSON."""
    story = _read_text(text, file)
    drafts = segment_story(story, sentences, min_pause, max_pause)
    typer.echo(
        json.dumps(
            [{"segmentText": d.segment_text, "pauseMs": d.pause_ms} for d in drafts],
            indent=2,
            ensure_ascii=False,
        )
    )


@app.command()
def speak(
    ctx: typer.Context,
    text: str | None = typer.Argument(None, help="Text to convert to speech"),
    output: Path = typer.Option(..., "-o", "--output", help="MP3 file to write"),
    voice: str | None = typer.Option(None, "-v", "--voice", help="Voice ID"),
    speed: float = typer.Option(1.0, "-s", "--speed", help="Speaking rate"),
    category: str = typer.Option("phrases", "-c", "--category", help="Clip category"),
) -> None:
    """Fetch a clip through the tiered cache and save it."""
    story = _read_text(text, None)
    config = _config(ctx)

    async def _run() -> str:
        async with AudioServices(config) as services:
            request = SynthesisRequest(
                text=story,
                provider=config.tts.provider,
                voice=voice or config.tts.voice,
                speed=speed,
                model=config.tts.model,
                category=category,
            )
            result = await services.cache.fetch_or_synthesize(request, services.adapter)
            output.write_bytes(result.audio or b"")
            return result.tier

    try:
        tier = asyncio.run(_run())
    except SynthesisAuthError as e:
        raise _fail(ctx, "Authentication error", e) from None
    except (ValidationFailure, SynthesisFailed) as e:
        raise _fail(ctx, "Synthesis error", e) from None
    except OSError as e:
        if _debug(ctx):
            typer.echo(f"Debug - File system error: {e!r}", err=True)
        else:
            typer.echo(f"Error: Failed to save audio file: {e}", err=True)
        raise typer.Exit(1) from None
    except Exception as e:
        raise _fail(ctx, "Unexpected error", e) from None

    typer.echo(f"Audio saved to {output} ({tier})")


@app.command()
def clip(
    ctx: typer.Context,
    text: str = typer.Argument(..., help="Text of the clip"),
    owner_type: str = typer.Option(
        "story_segment", "--owner-type", help="story_segment or quiz_question"
    ),
    owner_id: str = typer.Option(..., "--owner-id", help="ID of the owning row"),
    voice: str | None = typer.Option(None, "-v", "--voice", help="Voice ID"),
) -> None:
    """Ensure a durable clip exists for the text and print its URL."""
    if owner_type not in OWNER_TYPES:
        typer.echo(f"Error: Unknown owner type '{owner_type}'", err=True)
        raise typer.Exit(1)
    config = _config(ctx)

    async def _run() -> str:
        async with AudioServices(config) as services:
            request = SynthesisRequest(
                text=text,
                provider=config.tts.provider,
                voice=voice or config.tts.voice,
                model=config.tts.model,
                category=CATEGORY_FOR_OWNER[owner_type],
            )
            result = await services.clip_store.ensure_clip(request, owner_type, owner_id)
            return result.url

    try:
        url = asyncio.run(_run())
    except (QuizAudioError, KeyError) as e:
        raise _fail(ctx, "Clip error", e) from None
    except Exception as e:
        raise _fail(ctx, "Unexpected error", e) from None

    typer.echo(url)


@app.command()
def build(
    ctx: typer.Context,
    text: str | None = typer.Argument(None, help="Story text"),
    file: Path | None = typer.Option(None, "-f", "--file", help="Read story from file"),
    story_source_id: str | None = typer.Option(
        None, "--story", help="Reuse a stored story source"
    ),
    title: str | None = typer.Option(None, "-t", "--title", help="Quiz title"),
    user_id: str = typer.Option("local", "--user", help="Owner of the quiz"),
    voice: str | None = typer.Option(None, "-v", "--voice", help="Voice ID"),
) -> None:
    """Build a narrated quiz from a story and print its ID."""
    story = None if story_source_id else _read_text(text, file)
    config = _config(ctx)

    async def _run() -> str:
        async with AudioServices(config) as services:
            return await services.builder.build_quiz(
                user_id,
                story_text=story,
                story_source_id=story_source_id,
                title=title,
                provider=config.tts.provider,
                voice=voice or config.tts.voice,
            )

    try:
        quiz_id = asyncio.run(_run())
    except (QuizAudioError, KeyError) as e:
        raise _fail(ctx, "Quiz build error", e) from None
    except Exception as e:
        raise _fail(ctx, "Unexpected error", e) from None

    typer.echo(quiz_id)


@app.command()
def manifest(
    ctx: typer.Context,
    quiz_id: str = typer.Argument(..., help="Quiz ID"),
) -> None:
    """Print the playback manifest of a quiz as JSON."""
    config = _config(ctx)
    resolver = ManifestResolver(
        QuizRepository(config.store.db_path),
        ClipStorage(config.store.db_path),
        model=config.tts.model,
    )
    try:
        result = resolver.resolve_manifest(quiz_id)
    except NotFound as e:
        raise _fail(ctx, "Quiz lookup error", e) from None

    typer.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))


@app.command("ensure-clips")
def ensure_clips(
    ctx: typer.Context,
    quiz_id: str = typer.Argument(..., help="Quiz ID"),
) -> None:
    """Generate any clips a quiz is still missing."""
    config = _config(ctx)

    async def _run() -> int:
        async with AudioServices(config) as services:
            count = await services.builder.ensure_clips_for_timeline(quiz_id)
            services.repository.set_quiz_status(quiz_id, "ready")
            return count

    try:
        count = asyncio.run(_run())
    except (QuizAudioError, KeyError) as e:
        raise _fail(ctx, "Clip generation error", e) from None
    except Exception as e:
        raise _fail(ctx, "Unexpected error", e) from None

    typer.echo(f"{count} clips ready for quiz {quiz_id}")


@app.command()
def pregenerate(
    ctx: typer.Context,
    voice: str | None = typer.Option(None, "-v", "--voice", help="Voice ID"),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Only print the item count and estimated cost"
    ),
) -> None:
    """Warm the durable cache with game phrases and letters."""
    config = _config(ctx)
    items = pregenerate_content()
    typer.echo(f"Items: {len(items)}")
    typer.echo(f"Estimated cost: ${estimate_cost(items, config.tts.model):.4f}")
    if dry_run:
        return

    async def _run():
        async with AudioServices(config) as services:
            return await warm_phrase_cache(
                services.cache,
                services.adapter,
                voice=voice or config.tts.voice,
                model=config.tts.model,
                provider=config.tts.provider,
                items=items,
            )

    try:
        report = asyncio.run(_run())
    except (QuizAudioError, KeyError) as e:
        raise _fail(ctx, "Pre-generation error", e) from None
    except Exception as e:
        raise _fail(ctx, "Unexpected error", e) from None

    typer.echo(f"Cached: {report.cached}")
    typer.echo(f"Generated: {report.generated}")
    typer.echo(f"Errors: {report.failed}")
    if report.failed:
        raise typer.Exit(1)


@app.command()
def voices(
    ctx: typer.Context,
    provider: str = typer.Option("openai", "-p", "--provider", help="TTS provider"),
) -> None:
    """List available voices for a provider."""
    try:
        found = asyncio.run(list_available_voices(provider))
    except (QuizAudioError, KeyError) as e:
        raise _fail(ctx, "Failed to list voices", e) from None

    for voice in found:
        typer.echo(f"{voice['name']}: {voice['id']}")
