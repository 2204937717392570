"""
Session cache - read-through / write-through bridge between the in-memory
session view and the durable per-user store.

Load:
    memory hit  -> entry (coach type backfilled if invalid)
    memory miss -> session document + ordered messages fetched concurrently,
                   malformed message records skipped, entry cached

Commit (one turn):
    user/coach message pair built with strictly increasing timestamps,
    memory updated first, then messages + session metadata written as one
    atomic batch. A failed batch evicts the entry so the next access
    rebuilds it from the store.
"""

import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional, Set, Tuple
from uuid import uuid4

from ...domain.entities import (
    CoachingState,
    Message,
    MessageRole,
    SessionEntry,
    session_cache_key,
)
from ...domain.exceptions import PersistenceError
from ...domain.repositories import (
    IDocumentStore,
    DocumentWrite,
    StoredDocument,
    session_path,
    messages_collection,
    message_path,
    face_sheet_path,
    coerce_timestamp,
)
from ...domain.services import validate_state, sanitize_face_sheet, summarize_face_sheet
from ...domain.value_objects import (
    CoachType,
    Stage,
    INITIAL_STAGE,
    DEFAULT_COACH_TYPE,
    normalize_stage,
)
from ..interfaces import ISessionCacheBackend
from .session_locks import SessionLockRegistry

logger = logging.getLogger(__name__)

# Roles written by earlier versions of the service
LEGACY_ROLES = {"assistant": MessageRole.COACH}


def _now_ms() -> int:
    return int(time.time() * 1000)


def message_from_record(record: StoredDocument) -> Optional[Message]:
    """Rebuild a message from a stored record, or None if it is malformed."""
    data = record.data

    role_raw = data.get("role")
    if not isinstance(role_raw, str):
        return None
    role = LEGACY_ROLES.get(role_raw)
    if role is None:
        try:
            role = MessageRole(role_raw)
        except ValueError:
            return None

    content = data.get("content")
    if not isinstance(content, str) or not content.strip():
        return None

    created_at = coerce_timestamp(data.get("createdAt"))
    if created_at is None:
        return None

    stage = normalize_stage(data.get("stage"))
    state = None
    if isinstance(data.get("state"), dict):
        state = validate_state(data["state"], fallback_stage=stage)
        stage = stage or state.stage

    return Message(
        role=role,
        content=content,
        created_at=created_at,
        stage=stage,
        state=state,
        coach_type=CoachType.parse(data.get("coachType")),
    )


class SessionCache:
    """Serves and mutates the conversation view of a session."""

    def __init__(
        self,
        store: IDocumentStore,
        backend: ISessionCacheBackend,
        locks: Optional[SessionLockRegistry] = None,
        clock: Optional[Callable[[], int]] = None,
        default_coach_type: CoachType = DEFAULT_COACH_TYPE
    ):
        self.store = store
        self.backend = backend
        self.locks = locks or SessionLockRegistry()
        self.clock = clock or _now_ms
        self.default_coach_type = default_coach_type
        self._background_tasks: Set[asyncio.Task] = set()

    # ========================================================================
    # LIFECYCLE
    # ========================================================================

    def session_lock(self, user_id: str, session_id: str):
        """Single-writer lock for one session (async context manager)."""
        return self.locks.hold(session_cache_key(user_id, session_id))

    async def create(self, user_id: str, coach_type: Optional[CoachType] = None) -> SessionEntry:
        """Create a new session, persist its metadata and cache it."""
        now = self.clock()
        entry = SessionEntry(
            user_id=user_id,
            session_id=uuid4().hex,
            stage=INITIAL_STAGE,
            coach_type=coach_type or self.default_coach_type,
            face_sheet_summary=None,
            created_at=now,
            updated_at=now,
        )

        try:
            await self.store.set(
                session_path(user_id, entry.session_id),
                entry.metadata(),
                merge=True
            )
        except Exception as e:
            logger.error(f"Failed to persist new session for user {user_id}: {e}")
            raise PersistenceError("session creation", str(e)) from e

        self.backend.set(entry.cache_key, entry)
        logger.info(f"Session created: {entry.session_id} for user {user_id}")
        return entry

    async def load(self, user_id: str, session_id: str) -> SessionEntry:
        """Get the session view from memory, rebuilding it from the store on a miss."""
        key = session_cache_key(user_id, session_id)

        entry = self.backend.get(key)
        if entry is not None:
            logger.debug(f"Session cache hit: {key}")
            self._backfill_coach_type(entry)
            return entry

        logger.debug(f"Session cache miss: {key}")
        entry = await self._reconstruct(user_id, session_id)

        # Another request may have rebuilt the same session meanwhile
        existing = self.backend.get(key)
        if existing is not None:
            return existing

        self.backend.set(key, entry)
        return entry

    # ========================================================================
    # TURN COMMIT
    # ========================================================================

    async def commit_turn(
        self,
        entry: SessionEntry,
        user_text: str,
        coach_text: str,
        state: CoachingState,
        coach_type: CoachType
    ) -> Tuple[Message, Message]:
        """
        Record one user/coach exchange.

        Raises:
            PersistenceError: the durable batch failed; the entry has been
                evicted from memory
        """
        user_created_at = max(self.clock(), entry.last_created_at + 1)
        user_message = Message.create_user_message(user_text, user_created_at)
        coach_message = Message.create_coach_message(
            coach_text, user_created_at + 1, state, coach_type
        )

        entry.messages.extend([user_message, coach_message])
        entry.stage = state.stage
        entry.coach_type = coach_type
        if entry.created_at is None:
            entry.created_at = user_created_at
        entry.updated_at = coach_message.created_at
        self.backend.set(entry.cache_key, entry)

        writes = [
            DocumentWrite(
                path=message_path(entry.user_id, entry.session_id, uuid4().hex),
                data=user_message.to_record()
            ),
            DocumentWrite(
                path=message_path(entry.user_id, entry.session_id, uuid4().hex),
                data=coach_message.to_record()
            ),
            DocumentWrite(
                path=session_path(entry.user_id, entry.session_id),
                data=entry.metadata(),
                merge=True
            ),
        ]

        try:
            await self.store.commit(writes)
        except Exception as e:
            self.backend.delete(entry.cache_key)
            logger.error(
                f"Turn commit failed for session {entry.session_id}, evicted from cache: {e}"
            )
            raise PersistenceError("turn commit", str(e)) from e

        return user_message, coach_message

    # ========================================================================
    # FACE SHEET SUMMARY
    # ========================================================================

    async def ensure_face_sheet_summary(self, entry: SessionEntry) -> str:
        """Load and cache the user's face-sheet summary on the entry."""
        if entry.face_sheet_summary is not None:
            return entry.face_sheet_summary

        try:
            document = await self.store.get(face_sheet_path(entry.user_id))
        except Exception as e:
            logger.warning(f"Face sheet unavailable for user {entry.user_id}: {e}")
            return ""

        face_sheet = sanitize_face_sheet(document.get("faceSheet")) if document else None
        entry.face_sheet_summary = summarize_face_sheet(face_sheet)
        return entry.face_sheet_summary

    def refresh_face_sheet_summary(self, user_id: str, summary: str) -> int:
        """Replace the cached summary on every cached session of a user."""
        refreshed = 0
        for entry in self.backend.values():
            if entry.user_id == user_id:
                entry.face_sheet_summary = summary
                refreshed += 1
        return refreshed

    # ========================================================================
    # BACKGROUND WRITES
    # ========================================================================

    async def drain(self) -> None:
        """Wait for pending background writes."""
        while self._background_tasks:
            await asyncio.gather(*list(self._background_tasks), return_exceptions=True)

    def _schedule(self, coro: Awaitable[None]) -> None:
        task = asyncio.ensure_future(coro)
        self._background_tasks.add(task)
        task.add_done_callback(self._on_background_done)

    def _on_background_done(self, task: asyncio.Task) -> None:
        self._background_tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Background session write failed: {error}")

    def _backfill_coach_type(self, entry: SessionEntry) -> None:
        if CoachType.parse(entry.coach_type) is not None:
            return
        logger.warning(
            f"Session {entry.session_id} has invalid coach type {entry.coach_type!r}, "
            f"using {self.default_coach_type.value}"
        )
        entry.coach_type = self.default_coach_type
        self._schedule(self._persist_coach_type(entry.user_id, entry.session_id, entry.coach_type))

    async def _persist_coach_type(self, user_id: str, session_id: str, coach_type: CoachType) -> None:
        await self.store.set(
            session_path(user_id, session_id),
            {"coachType": coach_type.value},
            merge=True
        )

    # ========================================================================
    # RECONSTRUCTION
    # ========================================================================

    async def _reconstruct(self, user_id: str, session_id: str) -> SessionEntry:
        try:
            metadata, records = await asyncio.gather(
                self.store.get(session_path(user_id, session_id)),
                self.store.query(messages_collection(user_id, session_id), order_by="createdAt"),
            )
        except Exception as e:
            logger.error(f"Failed to load session {session_id} for user {user_id}: {e}")
            raise PersistenceError("session load", str(e)) from e

        messages = []
        for record in records:
            message = message_from_record(record)
            if message is None:
                logger.warning(f"Skipping malformed message record {record.id} in session {session_id}")
                continue
            messages.append(message)

        metadata = metadata or {}
        stage = normalize_stage(metadata.get("stage")) or self._last_coach_stage(messages) or INITIAL_STAGE

        coach_type = CoachType.parse(metadata.get("coachType"))
        entry = SessionEntry(
            user_id=user_id,
            session_id=session_id,
            stage=stage,
            coach_type=coach_type or self.default_coach_type,
            messages=messages,
            created_at=coerce_timestamp(metadata.get("createdAt")),
            updated_at=coerce_timestamp(metadata.get("updatedAt")),
        )

        if metadata and (coach_type is None or metadata.get("coachType") != coach_type.value):
            logger.warning(
                f"Backfilling coach type {entry.coach_type.value} on session {session_id}"
            )
            self._schedule(self._persist_coach_type(user_id, session_id, entry.coach_type))

        logger.info(
            f"Session {session_id} rebuilt from store: {len(messages)} messages, "
            f"{len(records) - len(messages)} skipped"
        )
        return entry

    @staticmethod
    def _last_coach_stage(messages) -> Optional[Stage]:
        for message in reversed(messages):
            if message.is_coach_message and message.stage is not None:
                return message.stage
        return None
