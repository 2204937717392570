"""Infrastructure database module."""

from .engine import create_document_engine
from .models import Base, DocumentModel

__all__ = [
    "Base",
    "DocumentModel",
    "create_document_engine",
]
