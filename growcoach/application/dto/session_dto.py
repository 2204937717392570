"""Session DTOs for application layer."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class RunTurnDTO:
    """DTO for one coaching turn request."""

    user_id: str
    session_id: str
    user_text: str
    coach_type: Optional[str] = None


@dataclass
class SessionCreatedDTO:
    """DTO for a newly created session."""

    session_id: str
    stage: str
    coach_type: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sessionId": self.session_id,
            "stage": self.stage,
            "coachType": self.coach_type,
        }


@dataclass
class TurnResultDTO:
    """DTO for a completed coaching turn."""

    stage: str
    message: str
    state: Dict[str, Any]
    coach_type: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stage": self.stage,
            "message": self.message,
            "state": self.state,
            "coachType": self.coach_type,
        }


@dataclass
class HistoryDTO:
    """DTO for one page of session history, oldest message first."""

    stage: str
    coach_type: str
    messages: List[Dict[str, Any]] = field(default_factory=list)
    has_more: bool = False
    cursor: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "stage": self.stage,
            "coachType": self.coach_type,
            "messages": self.messages,
            "hasMore": self.has_more,
        }
        if self.cursor is not None:
            data["cursor"] = self.cursor
        return data


@dataclass
class SessionSummaryDTO:
    """DTO for one entry of a user's session list."""

    session_id: str
    stage: str
    coach_type: str
    created_at: Optional[int] = None
    updated_at: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sessionId": self.session_id,
            "stage": self.stage,
            "coachType": self.coach_type,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
