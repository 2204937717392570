"""Face sheet DTOs for application layer."""

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class FaceSheetDTO:
    """DTO for a stored face sheet."""

    face_sheet: Optional[Dict[str, Any]]
    created_at: Optional[int] = None
    updated_at: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"faceSheet": self.face_sheet}
        if self.created_at is not None:
            data["createdAt"] = self.created_at
        if self.updated_at is not None:
            data["updatedAt"] = self.updated_at
        return data
