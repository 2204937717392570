"""Async engine for the documents table."""

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import NullPool, StaticPool


def _is_memory_sqlite(database_url: str) -> bool:
    return ":memory:" in database_url or database_url.rstrip("/").endswith("sqlite+aiosqlite:")


def create_document_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """
    Create the engine behind SQLDocumentStore.

    In-memory SQLite keeps a single shared connection, otherwise the
    table would vanish with the connection that created it. File SQLite
    opens a connection per use; other databases get the default pool.
    """
    if "sqlite" not in database_url:
        return create_async_engine(database_url, echo=echo, pool_pre_ping=True)

    poolclass = StaticPool if _is_memory_sqlite(database_url) else NullPool
    return create_async_engine(database_url, echo=echo, poolclass=poolclass)
