"""Bounded in-memory session cache."""

import logging
from collections import OrderedDict
from typing import Iterator, Optional

from ...application.interfaces import ISessionCacheBackend
from ...domain.entities import SessionEntry

logger = logging.getLogger(__name__)


class LRUSessionCache(ISessionCacheBackend):
    """
    Least-recently-used session cache.

    - holds at most ``max_entries`` sessions
    - ``get`` and ``set`` mark an entry as most recently used
    - evicted sessions are rebuilt from the durable store on next access
    """

    def __init__(self, max_entries: int = 1000):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.max_entries = max_entries
        self._items: "OrderedDict[str, SessionEntry]" = OrderedDict()

    def get(self, key: str) -> Optional[SessionEntry]:
        entry = self._items.get(key)
        if entry is not None:
            self._items.move_to_end(key)
        return entry

    def set(self, key: str, entry: SessionEntry) -> None:
        self._items[key] = entry
        self._items.move_to_end(key)
        while len(self._items) > self.max_entries:
            evicted_key, _ = self._items.popitem(last=False)
            logger.debug(f"Evicted session {evicted_key} from cache")

    def delete(self, key: str) -> bool:
        return self._items.pop(key, None) is not None

    def values(self) -> Iterator[SessionEntry]:
        return iter(list(self._items.values()))

    def __len__(self) -> int:
        return len(self._items)
