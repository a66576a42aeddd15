"""quizaudio - narrated audio quizzes on a tiered speech-clip cache."""

__version__ = "0.1.0"
__all__ = ["AudioServices", "load_config"]


def __getattr__(name: str):  # type: ignore[no-untyped-def]
    if name == "AudioServices":
        from .core import AudioServices

        return AudioServices
    if name == "load_config":
        from .config import load_config

        return load_config
    raise AttributeError(f"module 'quizaudio' has no attribute {name!r}")
