"""SQLAlchemy database models."""

from sqlalchemy import Column, String, JSON, BigInteger, Index
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class DocumentModel(Base):
    """One stored document, addressed by its full path."""

    __tablename__ = "documents"

    path = Column(String(512), primary_key=True)
    collection = Column(String(512), nullable=False)
    document_id = Column(String(128), nullable=False)
    data = Column(JSON, nullable=False, default=dict)

    # Ordering keys copied out of data["createdAt"] / data["updatedAt"]
    created_at_ms = Column(BigInteger, nullable=True)
    updated_at_ms = Column(BigInteger, nullable=True)

    __table_args__ = (
        Index('idx_documents_collection_created', 'collection', 'created_at_ms'),
        Index('idx_documents_collection_updated', 'collection', 'updated_at_ms'),
    )
