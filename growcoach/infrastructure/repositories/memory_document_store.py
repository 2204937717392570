"""In-memory document store implementation."""

import copy
import logging
from typing import Any, Dict, List, Optional

from ...domain.repositories import (
    IDocumentStore,
    StoredDocument,
    DocumentWrite,
    split_path,
    deep_merge,
)

logger = logging.getLogger(__name__)


class InMemoryDocumentStore(IDocumentStore):
    """
    Dict-backed document store for local runs and tests.

    Reads and writes copy data in and out so callers never share state
    with the store.
    """

    def __init__(self):
        self._documents: Dict[str, Dict[str, Any]] = {}

    async def get(self, path: str) -> Optional[Dict[str, Any]]:
        """Get a document by path."""
        data = self._documents.get(path)
        return copy.deepcopy(data) if data is not None else None

    async def query(
        self,
        collection: str,
        order_by: str = "createdAt",
        descending: bool = False,
        limit: Optional[int] = None,
        end_before: Optional[float] = None
    ) -> List[StoredDocument]:
        """List documents of a collection ordered by a timestamp field."""
        matches = []
        for path, data in self._documents.items():
            parent, document_id = split_path(path)
            if parent != collection:
                continue
            key = data.get(order_by)
            if isinstance(key, bool) or not isinstance(key, (int, float)):
                continue
            if end_before is not None and key >= end_before:
                continue
            matches.append((key, document_id, data))

        matches.sort(key=lambda item: (item[0], item[1]), reverse=descending)
        if limit is not None:
            matches = matches[:limit]

        return [
            StoredDocument(id=document_id, data=copy.deepcopy(data))
            for _, document_id, data in matches
        ]

    async def set(self, path: str, data: Dict[str, Any], merge: bool = False) -> None:
        """Write a document."""
        self._apply(DocumentWrite(path=path, data=data, merge=merge))

    async def commit(self, writes: List[DocumentWrite]) -> None:
        """Apply all writes atomically."""
        # Build the new documents first so a bad write leaves nothing applied
        staged: Dict[str, Dict[str, Any]] = {}
        for write in writes:
            current = staged.get(write.path, self._documents.get(write.path))
            staged[write.path] = self._merged(current, write)
        self._documents.update(staged)
        logger.debug(f"Committed batch of {len(writes)} writes")

    async def health_check(self) -> bool:
        """Check store health."""
        return True

    def _apply(self, write: DocumentWrite) -> None:
        self._documents[write.path] = self._merged(self._documents.get(write.path), write)

    @staticmethod
    def _merged(current: Optional[Dict[str, Any]], write: DocumentWrite) -> Dict[str, Any]:
        data = copy.deepcopy(write.data)
        if write.merge and current is not None:
            return deep_merge(current, data)
        return data
