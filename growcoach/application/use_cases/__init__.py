"""Application use cases module."""

from .session_use_cases import (
    CreateSessionUseCase,
    RunTurnUseCase,
    GetHistoryUseCase,
    ListSessionsUseCase,
)
from .face_sheet_use_cases import GetFaceSheetUseCase, PutFaceSheetUseCase

__all__ = [
    "CreateSessionUseCase",
    "RunTurnUseCase",
    "GetHistoryUseCase",
    "ListSessionsUseCase",
    "GetFaceSheetUseCase",
    "PutFaceSheetUseCase",
]
