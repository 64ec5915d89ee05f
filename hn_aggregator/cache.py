"""
In-process cache store with per-entry absolute expiry.
"""

import logging
import math
import threading
import time
from typing import Any, Callable, Hashable, NamedTuple, Optional

from cachetools import TLRUCache
from pydantic import BaseModel, ConfigDict, model_validator

logger = logging.getLogger(__name__)


class CacheKey(NamedTuple):
    """
    Composite cache key.

    ``kind`` names the entity class ("ids", "item", "user", "maxitem"),
    ``ident`` the entity within it and ``params`` any extra arguments that
    make two lists logically different (e.g. rising-view thresholds).
    """

    kind: str
    ident: Hashable = None
    params: tuple = ()


class CachePolicy(BaseModel):
    """Time-to-live, in seconds, for each cached entity class."""

    model_config = ConfigDict(frozen=True)

    maxitem_ttl: float = 30
    list_ttl: float = 60
    item_ttl: float = 300
    user_ttl: float = 600

    @model_validator(mode="after")
    def _check_ordering(self) -> "CachePolicy":
        if not (self.maxitem_ttl <= self.list_ttl < self.item_ttl < self.user_ttl):
            raise ValueError(
                "cache TTLs must satisfy maxitem <= lists < items < users, got "
                f"{self.maxitem_ttl}/{self.list_ttl}/{self.item_ttl}/{self.user_ttl}"
            )
        return self


class _Entry(NamedTuple):
    value: Any
    ttl: float


def _time_to_use(key: Hashable, entry: _Entry, now: float) -> float:
    return now + entry.ttl


class CacheStore:
    """
    Key/value store where every entry carries its own absolute expiry.

    Writes replace whole entries, so the only locking needed is around the
    underlying structure.
    """

    def __init__(self, maxsize: Optional[int] = None, timer: Callable[[], float] = time.monotonic):
        """
        Initialize the cache store.

        Args:
            maxsize: Optional bound on the number of entries; once reached the
                     least recently used live entry is dropped. Unbounded by
                     default, so expiry is the only way an entry leaves
            timer: Clock used to compute and check expiry instants
        """
        if maxsize is None:
            maxsize = math.inf
        self._data: TLRUCache = TLRUCache(maxsize=maxsize, ttu=_time_to_use, timer=timer)
        self._lock = threading.Lock()

    def get(self, key: Hashable) -> Optional[Any]:
        """Return the cached value for key, or None on a miss or after expiry."""
        with self._lock:
            entry = self._data.get(key)
        if entry is None:
            logger.debug("Cache miss for %s", key)
            return None
        return entry.value

    def set(self, key: Hashable, value: Any, ttl: float) -> None:
        """Store value under key until ``ttl`` seconds from now."""
        with self._lock:
            self._data[key] = _Entry(value, ttl)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()

    def __contains__(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._data

    def __len__(self) -> int:
        with self._lock:
            self._data.expire()
            return len(self._data)
