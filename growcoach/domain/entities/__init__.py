"""Domain entities module."""

from .coaching_state import CoachingState, Reality, Resources, Plan
from .message import Message, MessageRole
from .session import SessionEntry, session_cache_key

__all__ = [
    "CoachingState",
    "Reality",
    "Resources",
    "Plan",
    "Message",
    "MessageRole",
    "SessionEntry",
    "session_cache_key",
]
