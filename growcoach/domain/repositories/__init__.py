"""Domain repository interfaces."""

from .document_store import (
    IDocumentStore,
    StoredDocument,
    DocumentWrite,
    session_path,
    sessions_collection,
    messages_collection,
    message_path,
    face_sheet_path,
    split_path,
    deep_merge,
    coerce_timestamp,
)

__all__ = [
    "IDocumentStore",
    "StoredDocument",
    "DocumentWrite",
    "session_path",
    "sessions_collection",
    "messages_collection",
    "message_path",
    "face_sheet_path",
    "split_path",
    "deep_merge",
    "coerce_timestamp",
]
