"""Infrastructure cache module."""

from .lru_session_cache import LRUSessionCache

__all__ = [
    "LRUSessionCache",
]
