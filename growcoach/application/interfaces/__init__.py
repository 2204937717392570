"""Application interfaces module."""

from .ai_service import IAIService
from .session_cache_backend import ISessionCacheBackend

__all__ = [
    "IAIService",
    "ISessionCacheBackend",
]
