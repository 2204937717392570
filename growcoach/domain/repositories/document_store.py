"""Durable document store interface."""

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class StoredDocument:
    """A document read back from the store."""

    id: str
    data: Dict[str, Any]


@dataclass(frozen=True)
class DocumentWrite:
    """One write inside an atomic batch."""

    path: str
    data: Dict[str, Any] = field(default_factory=dict)
    merge: bool = False


class IDocumentStore(ABC):
    """
    Per-user document store.

    Documents are addressed by slash-separated paths whose segments
    alternate between collection and document id, e.g.
    ``users/{uid}/sessions/{sid}/messages/{mid}``.
    """

    @abstractmethod
    async def get(self, path: str) -> Optional[Dict[str, Any]]:
        """Get a document by path."""
        pass

    @abstractmethod
    async def query(
        self,
        collection: str,
        order_by: str = "createdAt",
        descending: bool = False,
        limit: Optional[int] = None,
        end_before: Optional[float] = None
    ) -> List[StoredDocument]:
        """
        List the direct documents of a collection ordered by a timestamp field.

        ``end_before`` keeps only documents whose ``order_by`` value is
        strictly lower. Documents without a numeric ``order_by`` value are
        left out.
        """
        pass

    @abstractmethod
    async def set(self, path: str, data: Dict[str, Any], merge: bool = False) -> None:
        """Write a document, deep-merging into the existing one when ``merge``."""
        pass

    @abstractmethod
    async def commit(self, writes: List[DocumentWrite]) -> None:
        """Apply all writes atomically."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Check store health."""
        pass


# ============================================================================
# PATHS
# ============================================================================

def session_path(user_id: str, session_id: str) -> str:
    return f"users/{user_id}/sessions/{session_id}"


def sessions_collection(user_id: str) -> str:
    return f"users/{user_id}/sessions"


def messages_collection(user_id: str, session_id: str) -> str:
    return f"{session_path(user_id, session_id)}/messages"


def message_path(user_id: str, session_id: str, message_id: str) -> str:
    return f"{messages_collection(user_id, session_id)}/{message_id}"


def face_sheet_path(user_id: str) -> str:
    return f"users/{user_id}/profile/faceSheet"


def split_path(path: str) -> tuple:
    """Split a document path into ``(collection, document_id)``."""
    collection, _, document_id = path.rpartition("/")
    return collection, document_id


def deep_merge(target: Dict[str, Any], updates: Dict[str, Any]) -> Dict[str, Any]:
    """Merge ``updates`` into a copy of ``target``; nested dicts merge, everything else replaces."""
    merged = dict(target)
    for key, value in updates.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def coerce_timestamp(value: Any) -> Optional[int]:
    """Read a stored epoch-millisecond value; anything else becomes None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and math.isfinite(value):
        return int(value)
    return None
