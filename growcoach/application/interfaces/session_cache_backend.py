"""Session cache backend interface."""

from abc import ABC, abstractmethod
from typing import Iterator, Optional

from ...domain.entities import SessionEntry


class ISessionCacheBackend(ABC):
    """Key-value storage for in-memory session entries."""

    @abstractmethod
    def get(self, key: str) -> Optional[SessionEntry]:
        """Get an entry, or None on a miss."""
        pass

    @abstractmethod
    def set(self, key: str, entry: SessionEntry) -> None:
        """Insert or replace an entry."""
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Remove an entry; returns whether it was present."""
        pass

    @abstractmethod
    def values(self) -> Iterator[SessionEntry]:
        """Iterate over a snapshot of the cached entries."""
        pass

    @abstractmethod
    def __len__(self) -> int:
        pass
