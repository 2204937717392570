"""SQL document store implementation."""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ...domain.repositories import (
    IDocumentStore,
    StoredDocument,
    DocumentWrite,
    split_path,
    deep_merge,
)
from ..database import Base, DocumentModel, create_document_engine

logger = logging.getLogger(__name__)

ORDER_COLUMNS = {
    "createdAt": DocumentModel.created_at_ms,
    "updatedAt": DocumentModel.updated_at_ms,
}


def _order_key(data: Dict[str, Any], field: str) -> Optional[int]:
    value = data.get(field)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return int(value)


class SQLDocumentStore(IDocumentStore):
    """Document store on a single SQL table, one row per document."""

    def __init__(self, database_url: str, echo: bool = False):
        self.engine = create_document_engine(database_url, echo=echo)
        self._sessions = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False
        )

    async def create_schema(self) -> None:
        """Create the documents table if it does not exist."""
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except Exception as e:
            logger.error(f"Failed to create documents table: {e}")
            raise

        logger.info("Documents table ready")

    async def close(self) -> None:
        """Release pooled connections."""
        await self.engine.dispose()
        logger.info("Document store connections closed")

    async def get(self, path: str) -> Optional[Dict[str, Any]]:
        """Get a document by path."""
        async with self._sessions() as session:
            model = await session.get(DocumentModel, path)
            return dict(model.data) if model else None

    async def query(
        self,
        collection: str,
        order_by: str = "createdAt",
        descending: bool = False,
        limit: Optional[int] = None,
        end_before: Optional[float] = None
    ) -> List[StoredDocument]:
        """List documents of a collection ordered by a timestamp field."""
        column = ORDER_COLUMNS.get(order_by)
        if column is None:
            raise ValueError(f"Unsupported order field: {order_by}")

        stmt = select(DocumentModel).where(
            DocumentModel.collection == collection,
            column.is_not(None)
        )
        if end_before is not None:
            stmt = stmt.where(column < end_before)
        if descending:
            stmt = stmt.order_by(column.desc(), DocumentModel.document_id.desc())
        else:
            stmt = stmt.order_by(column.asc(), DocumentModel.document_id.asc())
        if limit is not None:
            stmt = stmt.limit(limit)

        async with self._sessions() as session:
            result = await session.execute(stmt)
            return [
                StoredDocument(id=model.document_id, data=dict(model.data))
                for model in result.scalars().all()
            ]

    async def set(self, path: str, data: Dict[str, Any], merge: bool = False) -> None:
        """Write a document."""
        await self.commit([DocumentWrite(path=path, data=data, merge=merge)])

    async def commit(self, writes: List[DocumentWrite]) -> None:
        """Apply all writes in one transaction."""
        async with self._sessions() as session:
            async with session.begin():
                staged: Dict[str, DocumentModel] = {}
                for write in writes:
                    model = staged.get(write.path)
                    if model is None:
                        model = await self._load_for_update(session, write.path)
                    staged[write.path] = self._apply(session, model, write)

        logger.debug(f"Committed batch of {len(writes)} writes")

    async def health_check(self) -> bool:
        """Check that the documents table answers a query."""
        try:
            async with self._sessions() as session:
                await session.execute(select(DocumentModel.path).limit(1))
            return True
        except Exception as e:
            logger.error(f"Document store health check failed: {e}")
            return False

    @staticmethod
    async def _load_for_update(session: AsyncSession, path: str) -> Optional[DocumentModel]:
        return await session.get(DocumentModel, path, with_for_update=True)

    @staticmethod
    def _apply(
        session: AsyncSession,
        model: Optional[DocumentModel],
        write: DocumentWrite
    ) -> DocumentModel:
        if model is not None and write.merge:
            data = deep_merge(dict(model.data), write.data)
        else:
            data = dict(write.data)

        if model is None:
            collection, document_id = split_path(write.path)
            model = DocumentModel(
                path=write.path,
                collection=collection,
                document_id=document_id
            )
            session.add(model)

        # Assign a fresh dict so the JSON column is marked dirty
        model.data = data
        model.created_at_ms = _order_key(data, "createdAt")
        model.updated_at_ms = _order_key(data, "updatedAt")
        return model
