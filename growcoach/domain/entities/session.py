"""Coaching session domain entity."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..value_objects import Stage, CoachType, INITIAL_STAGE, DEFAULT_COACH_TYPE
from .message import Message


@dataclass
class SessionEntry:
    """In-memory view of one coaching session."""

    user_id: str
    session_id: str
    stage: Stage = INITIAL_STAGE
    coach_type: CoachType = DEFAULT_COACH_TYPE
    messages: List[Message] = field(default_factory=list)
    face_sheet_summary: Optional[str] = None  # None until loaded
    created_at: Optional[int] = None
    updated_at: Optional[int] = None

    @property
    def cache_key(self) -> str:
        return session_cache_key(self.user_id, self.session_id)

    @property
    def last_created_at(self) -> int:
        """Timestamp of the newest message, 0 for an empty session."""
        if not self.messages:
            return 0
        return self.messages[-1].created_at

    def metadata(self) -> Dict[str, Any]:
        """Session document fields."""
        data: Dict[str, Any] = {
            "stage": self.stage.value,
            "coachType": self.coach_type.value,
        }
        if self.created_at is not None:
            data["createdAt"] = self.created_at
        if self.updated_at is not None:
            data["updatedAt"] = self.updated_at
        return data


def session_cache_key(user_id: str, session_id: str) -> str:
    """Cache key scoping a session id to its owner."""
    return f"{user_id}/{session_id}"
