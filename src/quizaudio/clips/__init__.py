"""Clip metadata: one durable clip per fingerprint."""

from .models import AudioClip
from .storage import ClipStorage
from .store import ClipStore

__all__ = ["AudioClip", "ClipStorage", "ClipStore"]
