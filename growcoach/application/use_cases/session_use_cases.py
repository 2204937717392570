"""Coaching session use cases."""

import logging
from typing import Any, List, Optional

from ...domain.exceptions import (
    AIServiceError,
    InvalidInputError,
    MalformedModelOutputError,
    PersistenceError,
)
from ...domain.repositories import IDocumentStore, coerce_timestamp, sessions_collection
from ...domain.services import extract_payload, validate_state
from ...domain.value_objects import (
    CoachType,
    INITIAL_STAGE,
    DEFAULT_COACH_TYPE,
    normalize_stage,
)
from ..dto import (
    RunTurnDTO,
    SessionCreatedDTO,
    TurnResultDTO,
    HistoryDTO,
    SessionSummaryDTO,
)
from ..interfaces import IAIService
from ..prompts import build_prompt_parts, stage_index
from ..services import SessionCache

logger = logging.getLogger(__name__)

DEFAULT_MAX_USER_TEXT_LENGTH = 5000


def require_id(value: Any, field: str) -> str:
    """Validate an opaque user or session id."""
    if not isinstance(value, str) or not value.strip():
        raise InvalidInputError(field, "missing")
    value = value.strip()
    if "/" in value:
        raise InvalidInputError(field, "must not contain '/'")
    return value


def parse_requested_coach_type(value: Any) -> Optional[CoachType]:
    """Optional coach type from a request; unknown values are ignored."""
    if value is None:
        return None
    coach_type = CoachType.parse(value)
    if coach_type is None:
        logger.warning(f"Ignoring unknown coach type {value!r}")
    return coach_type


class CreateSessionUseCase:
    """Use case for starting a new coaching session."""

    def __init__(self, session_cache: SessionCache):
        self.session_cache = session_cache

    async def execute(self, user_id: str, coach_type: Optional[str] = None) -> SessionCreatedDTO:
        """Create a session in the intro stage."""
        user_id = require_id(user_id, "userId")
        entry = await self.session_cache.create(user_id, parse_requested_coach_type(coach_type))

        return SessionCreatedDTO(
            session_id=entry.session_id,
            stage=entry.stage.value,
            coach_type=entry.coach_type.value
        )


class RunTurnUseCase:
    """Use case for one coaching turn: prompt, parse, validate, commit."""

    def __init__(
        self,
        session_cache: SessionCache,
        ai_service: IAIService,
        max_user_text_length: int = DEFAULT_MAX_USER_TEXT_LENGTH
    ):
        self.session_cache = session_cache
        self.ai_service = ai_service
        self.max_user_text_length = max_user_text_length

    async def execute(self, dto: RunTurnDTO) -> TurnResultDTO:
        """
        Run one turn.

        Raises:
            InvalidInputError: bad ids or user text; nothing is touched
            AIServiceError: the generator call failed
            MalformedModelOutputError: reply has no usable message + JSON
            PersistenceError: the session could not be loaded or committed
        """
        user_id = require_id(dto.user_id, "userId")
        session_id = require_id(dto.session_id, "sessionId")
        user_text = dto.user_text.strip() if isinstance(dto.user_text, str) else ""
        if not user_text:
            raise InvalidInputError("userText", "empty")
        if len(user_text) > self.max_user_text_length:
            raise InvalidInputError(
                "userText", f"longer than {self.max_user_text_length} characters"
            )
        requested_coach_type = parse_requested_coach_type(dto.coach_type)

        async with self.session_cache.session_lock(user_id, session_id):
            entry = await self.session_cache.load(user_id, session_id)
            await self.session_cache.ensure_face_sheet_summary(entry)
            coach_type = requested_coach_type or entry.coach_type

            parts = build_prompt_parts(entry, user_text, coach_type)
            try:
                reply = await self.ai_service.generate(parts)
            except AIServiceError:
                raise
            except Exception as e:
                logger.error(f"Generator call failed for session {session_id}: {e}")
                raise AIServiceError("generate", str(e)) from e

            try:
                extracted = extract_payload(reply)
                state = validate_state(extracted.payload, fallback_stage=entry.stage)
            except MalformedModelOutputError as e:
                logger.error(f"Unusable generator reply for session {session_id}: {e}")
                raise

            if stage_index(state.stage) < stage_index(entry.stage):
                logger.info(
                    f"Session {session_id} stage moved back: "
                    f"{entry.stage.value} -> {state.stage.value}"
                )

            await self.session_cache.commit_turn(
                entry, user_text, extracted.message, state, coach_type
            )

        return TurnResultDTO(
            stage=state.stage.value,
            message=extracted.message,
            state=state.to_dict(),
            coach_type=coach_type.value
        )


class GetHistoryUseCase:
    """Use case for paging through a session's messages."""

    def __init__(
        self,
        session_cache: SessionCache,
        default_limit: int = 25,
        max_limit: int = 100
    ):
        self.session_cache = session_cache
        self.default_limit = default_limit
        self.max_limit = max_limit

    async def execute(
        self,
        user_id: str,
        session_id: str,
        limit: Optional[int] = None,
        before: Optional[float] = None
    ) -> HistoryDTO:
        """
        Get up to ``limit`` messages older than ``before``, oldest first.

        ``cursor`` is set to the oldest returned timestamp when older
        messages remain.
        """
        user_id = require_id(user_id, "userId")
        session_id = require_id(session_id, "sessionId")
        limit = self._clamp_limit(limit)
        if before is not None and (isinstance(before, bool) or not isinstance(before, (int, float))):
            raise InvalidInputError("before", "must be a timestamp")

        entry = await self.session_cache.load(user_id, session_id)

        messages = entry.messages
        if before is not None:
            messages = [message for message in messages if message.created_at < before]

        page = messages[-limit:]
        has_more = len(messages) > len(page)

        return HistoryDTO(
            stage=entry.stage.value,
            coach_type=entry.coach_type.value,
            messages=[message.to_record() for message in page],
            has_more=has_more,
            cursor=page[0].created_at if has_more else None
        )

    def _clamp_limit(self, limit: Any) -> int:
        if limit is None or isinstance(limit, bool):
            return self.default_limit
        try:
            limit = int(limit)
        except (TypeError, ValueError):
            return self.default_limit
        return min(max(limit, 1), self.max_limit)


class ListSessionsUseCase:
    """Use case for listing a user's sessions, most recently updated first."""

    def __init__(self, store: IDocumentStore, default_coach_type: CoachType = DEFAULT_COACH_TYPE):
        self.store = store
        self.default_coach_type = default_coach_type

    async def execute(self, user_id: str, limit: int = 20) -> List[SessionSummaryDTO]:
        """List sessions from the durable store."""
        user_id = require_id(user_id, "userId")
        try:
            documents = await self.store.query(
                sessions_collection(user_id),
                order_by="updatedAt",
                descending=True,
                limit=max(1, limit)
            )
        except Exception as e:
            logger.error(f"Failed to list sessions for user {user_id}: {e}")
            raise PersistenceError("session list", str(e)) from e

        return [
            SessionSummaryDTO(
                session_id=document.id,
                stage=(normalize_stage(document.data.get("stage")) or INITIAL_STAGE).value,
                coach_type=(
                    CoachType.parse(document.data.get("coachType")) or self.default_coach_type
                ).value,
                created_at=coerce_timestamp(document.data.get("createdAt")),
                updated_at=coerce_timestamp(document.data.get("updatedAt")),
            )
            for document in documents
        ]
