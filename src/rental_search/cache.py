"""In-memory response cache for dispatched searches."""

import time
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from rental_search.models import SearchType


@dataclass(frozen=True)
class CacheEntry:
    value: Any
    timestamp: float
    search_type: SearchType | None = None


class RequestCache:
    """Fingerprint -> result map with a maximum age per search type.

    Entries are never evicted: an entry past its max age stays in the backing
    map and is reported as a miss. Entries for ``bypass`` types are stored but
    always read as misses.
    """

    def __init__(
        self,
        default_max_age: float = 120,
        max_ages: Mapping[SearchType, float] | None = None,
        bypass: Iterable[SearchType] = (),
    ):
        self._store: dict[str, CacheEntry] = {}
        self._default_max_age = default_max_age
        self._max_ages = dict(max_ages or {})
        self._bypass = frozenset(bypass)

    def max_age_for(self, search_type: SearchType | None) -> float:
        if search_type is None:
            return self._default_max_age
        return self._max_ages.get(search_type, self._default_max_age)

    def get(self, key: str) -> Any | None:
        entry = self._store.get(key)
        if entry is None or entry.search_type in self._bypass:
            return None
        if time.time() - entry.timestamp < self.max_age_for(entry.search_type):
            return entry.value
        return None

    def put(self, key: str, value: Any, search_type: SearchType | None = None) -> None:
        self._store[key] = CacheEntry(value=value, timestamp=time.time(), search_type=search_type)

    def __contains__(self, key: str) -> bool:
        return key in self._store

    def clear(self) -> None:
        self._store.clear()

    def __len__(self) -> int:
        return len(self._store)
