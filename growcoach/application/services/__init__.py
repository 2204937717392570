"""Application services module."""

from .session_cache import SessionCache, message_from_record
from .session_locks import SessionLockRegistry

__all__ = [
    "SessionCache",
    "message_from_record",
    "SessionLockRegistry",
]
