"""Infrastructure repositories module."""

from .memory_document_store import InMemoryDocumentStore
from .sql_document_store import SQLDocumentStore

__all__ = [
    "InMemoryDocumentStore",
    "SQLDocumentStore",
]
