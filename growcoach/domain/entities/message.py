"""Conversation message domain entity."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from ..value_objects import Stage, CoachType
from .coaching_state import CoachingState


class MessageRole(str, Enum):
    """Who wrote a message."""
    USER = "user"
    COACH = "coach"


@dataclass
class Message:
    """One message of a coaching conversation."""

    role: MessageRole
    content: str
    created_at: int  # epoch milliseconds, strictly increasing within a session
    stage: Optional[Stage] = None
    state: Optional[CoachingState] = None
    coach_type: Optional[CoachType] = None

    @property
    def is_user_message(self) -> bool:
        """Check if message is from user."""
        return self.role == MessageRole.USER

    @property
    def is_coach_message(self) -> bool:
        """Check if message is from the coach."""
        return self.role == MessageRole.COACH

    def to_record(self) -> Dict[str, Any]:
        """Serialize to the persisted/wire shape."""
        record: Dict[str, Any] = {
            "role": self.role.value,
            "content": self.content,
            "createdAt": self.created_at,
        }
        if self.stage is not None:
            record["stage"] = self.stage.value
        if self.state is not None:
            record["state"] = self.state.to_dict()
        if self.coach_type is not None:
            record["coachType"] = self.coach_type.value
        return record

    @classmethod
    def create_user_message(cls, content: str, created_at: int) -> "Message":
        """Create user message."""
        return cls(
            role=MessageRole.USER,
            content=content,
            created_at=created_at
        )

    @classmethod
    def create_coach_message(
        cls,
        content: str,
        created_at: int,
        state: CoachingState,
        coach_type: CoachType
    ) -> "Message":
        """Create coach message carrying the validated turn state."""
        return cls(
            role=MessageRole.COACH,
            content=content,
            created_at=created_at,
            stage=state.stage,
            state=state,
            coach_type=coach_type
        )
