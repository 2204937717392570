"""Application DTOs module."""

from .session_dto import (
    RunTurnDTO,
    SessionCreatedDTO,
    TurnResultDTO,
    HistoryDTO,
    SessionSummaryDTO,
)
from .face_sheet_dto import FaceSheetDTO

__all__ = [
    "RunTurnDTO",
    "SessionCreatedDTO",
    "TurnResultDTO",
    "HistoryDTO",
    "SessionSummaryDTO",
    "FaceSheetDTO",
]
