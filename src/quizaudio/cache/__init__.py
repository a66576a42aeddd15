"""Tiered clip cache: hot Redis tier in front of a durable CDN store."""

from .durable import DurableStore
from .hot import HotCache
from .manager import TieredClipCache
from .models import CacheResult

__all__ = ["CacheResult", "DurableStore", "HotCache", "TieredClipCache"]
