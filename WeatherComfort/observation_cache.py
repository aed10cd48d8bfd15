"""TTL caches for raw observations and the derived ranking snapshot."""
import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Generic, List, Optional, TypeVar

from weather_data import CityId, Observation

DEFAULT_TTL_SECONDS = 300  # 5 minutes

T = TypeVar("T")


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    """A cached value with an absolute expiry (seconds since the epoch)."""
    value: T
    expires_at: float

    def is_valid(self, now: float) -> bool:
        return now < self.expires_at


class RawObservationCache:
    """
    Per-city TTL cache of fetched observations.

    Expired entries are never evicted; they stay until the next successful
    fetch for that city overwrites them. The city list is fixed, so the
    mapping is bounded by its length.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time
    ):
        """
        Args:
            ttl_seconds: Default lifetime of an entry written by put()
            clock: Source of the current time, in seconds
        """
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: Dict[CityId, CacheEntry[Observation]] = {}
        self._hits = 0
        self._misses = 0

    def get(self, city_id: CityId) -> Optional[Observation]:
        """Return the cached observation, or None if absent or expired."""
        with self._lock:
            entry = self._entries.get(city_id)
            if entry is not None and entry.is_valid(self._clock()):
                self._hits += 1
                logging.debug(f"Raw cache hit for city {city_id}")
                return entry.value
            self._misses += 1
        logging.debug(f"Raw cache miss for city {city_id}")
        return None

    def put(self, city_id: CityId, observation: Observation, ttl: Optional[float] = None) -> None:
        """Create or overwrite the entry for a city."""
        ttl = self.ttl_seconds if ttl is None else ttl
        with self._lock:
            self._entries[city_id] = CacheEntry(observation, self._clock() + ttl)

    def keys(self) -> List[CityId]:
        with self._lock:
            return list(self._entries.keys())

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get_stats(self) -> dict:
        with self._lock:
            return {
                "keys": list(self._entries.keys()),
                "size": len(self._entries),
                "hits": self._hits,
                "misses": self._misses,
                "ttl_ms": int(self.ttl_seconds * 1000),
            }


class AggregateCache(Generic[T]):
    """Holds at most one derived snapshot with its own expiry."""

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._entry: Optional[CacheEntry[T]] = None
        self._hits = 0
        self._misses = 0

    def get(self) -> Optional[T]:
        """Return the snapshot if still valid, counting a hit or a miss."""
        with self._lock:
            if self._entry is not None and self._entry.is_valid(self._clock()):
                self._hits += 1
                return self._entry.value
            self._misses += 1
            return None

    def peek(self) -> Optional[T]:
        """Return the snapshot if still valid without touching the counters."""
        with self._lock:
            if self._entry is not None and self._entry.is_valid(self._clock()):
                return self._entry.value
            return None

    def put(self, value: T) -> None:
        with self._lock:
            self._entry = CacheEntry(value, self._clock() + self.ttl_seconds)

    def get_stats(self) -> dict:
        with self._lock:
            expires_at = self._entry.expires_at if self._entry is not None else 0.0
            return {
                "hasData": self._entry is not None,
                "expiresAt": int(expires_at * 1000),
                "isValid": self._entry is not None and self._entry.is_valid(self._clock()),
                "hits": self._hits,
                "misses": self._misses,
            }
