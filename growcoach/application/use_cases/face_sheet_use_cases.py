"""Face sheet use cases."""

import logging
import time
from typing import Any, Callable, Optional

from ...domain.exceptions import InvalidInputError, PersistenceError
from ...domain.repositories import IDocumentStore, coerce_timestamp, face_sheet_path
from ...domain.services import sanitize_face_sheet, summarize_face_sheet
from ..dto import FaceSheetDTO
from ..services import SessionCache
from .session_use_cases import require_id

logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


class GetFaceSheetUseCase:
    """Use case for reading a user's face sheet."""

    def __init__(self, store: IDocumentStore):
        self.store = store

    async def execute(self, user_id: str) -> FaceSheetDTO:
        """Get the stored face sheet, re-sanitized; faceSheet is None when absent."""
        user_id = require_id(user_id, "userId")

        try:
            document = await self.store.get(face_sheet_path(user_id))
        except Exception as e:
            logger.error(f"Failed to read face sheet for user {user_id}: {e}")
            raise PersistenceError("face sheet read", str(e)) from e

        if not document:
            return FaceSheetDTO(face_sheet=None)

        return FaceSheetDTO(
            face_sheet=sanitize_face_sheet(document.get("faceSheet")),
            created_at=coerce_timestamp(document.get("createdAt")),
            updated_at=coerce_timestamp(document.get("updatedAt"))
        )


class PutFaceSheetUseCase:
    """Use case for saving a user's face sheet."""

    def __init__(
        self,
        store: IDocumentStore,
        session_cache: SessionCache,
        clock: Optional[Callable[[], int]] = None
    ):
        self.store = store
        self.session_cache = session_cache
        self.clock = clock or _now_ms

    async def execute(self, user_id: str, payload: Any) -> FaceSheetDTO:
        """
        Sanitize and store a face sheet.

        The payload may be the sheet itself or ``{"faceSheet": {...}}``.

        Raises:
            InvalidInputError: payload is not an object
        """
        user_id = require_id(user_id, "userId")

        if isinstance(payload, dict) and isinstance(payload.get("faceSheet"), dict):
            payload = payload["faceSheet"]
        face_sheet = sanitize_face_sheet(payload)
        if face_sheet is None:
            raise InvalidInputError("faceSheet", "must be an object")

        path = face_sheet_path(user_id)
        now = self.clock()
        try:
            existing = await self.store.get(path)
            created_at = coerce_timestamp((existing or {}).get("createdAt")) or now
            await self.store.set(
                path,
                {"faceSheet": face_sheet, "createdAt": created_at, "updatedAt": now},
                merge=True
            )
        except Exception as e:
            logger.error(f"Failed to save face sheet for user {user_id}: {e}")
            raise PersistenceError("face sheet write", str(e)) from e

        refreshed = self.session_cache.refresh_face_sheet_summary(
            user_id, summarize_face_sheet(face_sheet)
        )
        logger.info(f"Face sheet saved for user {user_id} ({refreshed} cached sessions refreshed)")

        return FaceSheetDTO(face_sheet=face_sheet, created_at=created_at, updated_at=now)
