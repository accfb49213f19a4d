"""
Score Cache - TTL cache with hit tracking for neighborhood and match scores.

ScoreCache owns the TTL and bookkeeping rules; a CacheStore only persists
entries. Stores raise CacheUnavailable on failure; ScoreCache logs it and
degrades (miss on read, skipped write) so a caller always gets a correct,
freshly computed answer.
"""
import copy
import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)

# 24 hours in seconds
CACHE_TTL_SECONDS = 24 * 60 * 60  # 86400 seconds


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class CacheEntry:
    key: str
    payload: Dict[str, Any]
    created_at: datetime
    expires_at: datetime
    hit_count: int = 0
    last_accessed_at: Optional[datetime] = None
    projections: Dict[str, Any] = field(default_factory=dict)

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


class CacheStore(ABC):
    """Persistence for cache entries. Implementations raise CacheUnavailable on failure."""

    name = "store"

    @abstractmethod
    def fetch(self, key: str) -> Optional[CacheEntry]:
        pass

    @abstractmethod
    def upsert(self, entry: CacheEntry) -> None:
        """Insert or replace the entry for ``entry.key`` (last writer wins)."""
        pass

    @abstractmethod
    def touch(self, key: str, accessed_at: datetime) -> None:
        """Increment hit_count by one and set last_accessed_at."""
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        pass

    @abstractmethod
    def delete_prefix(self, prefix: str) -> int:
        pass

    @abstractmethod
    def delete_expired(self, now: datetime) -> int:
        pass

    @abstractmethod
    def count(self) -> int:
        pass


class InMemoryCacheStore(CacheStore):
    """Process-local store, used in tests and single-process deployments.

    Payloads are copied on the way in and out; callers never share a dict
    with the stored entry.
    """

    name = "memory"

    def __init__(self):
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def fetch(self, key: str) -> Optional[CacheEntry]:
        with self._lock:
            entry = self._entries.get(key)
            return replace(entry, payload=copy.deepcopy(entry.payload)) if entry else None

    def upsert(self, entry: CacheEntry) -> None:
        with self._lock:
            self._entries[entry.key] = replace(entry, payload=copy.deepcopy(entry.payload))

    def touch(self, key: str, accessed_at: datetime) -> None:
        with self._lock:
            entry = self._entries.get(key)
            if entry:
                entry.hit_count += 1
                entry.last_accessed_at = accessed_at

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def delete_prefix(self, prefix: str) -> int:
        with self._lock:
            doomed = [k for k in self._entries if k.startswith(prefix)]
            for k in doomed:
                del self._entries[k]
            return len(doomed)

    def delete_expired(self, now: datetime) -> int:
        with self._lock:
            doomed = [k for k, e in self._entries.items() if e.is_expired(now)]
            for k in doomed:
                del self._entries[k]
            return len(doomed)

    def count(self) -> int:
        with self._lock:
            return len(self._entries)


class ScoreCache:
    """
    TTL cache in front of the scoring engines.

    Args:
        store: CacheStore backend
        ttl_seconds: Default time-to-live for new entries (24h)
        clock: Optional callable returning the current UTC datetime
    """

    def __init__(
        self,
        store: CacheStore,
        ttl_seconds: int = CACHE_TTL_SECONDS,
        clock: Optional[Callable[[], datetime]] = None
    ):
        self.store = store
        self.ttl_seconds = ttl_seconds
        self.clock = clock or _utcnow
        self._lock = threading.Lock()
        self._counters = {"hits": 0, "misses": 0, "writes": 0, "errors": 0}

    def get(self, key: str) -> Optional[CacheEntry]:
        """Return the live entry for ``key`` (hit_count already incremented), or None."""
        now = self.clock()
        try:
            entry = self.store.fetch(key)
        except Exception as e:
            logger.warning(f"Error reading score cache for {key}: {e}")
            self._bump("errors")
            self._bump("misses")
            return None

        if entry is None or entry.is_expired(now):
            logger.debug(f"Cache miss for {key}")
            self._bump("misses")
            return None

        try:
            self.store.touch(key, now)
        except Exception as e:
            # Lost hit increments are acceptable
            logger.warning(f"Error updating hit count for {key}: {e}")
            self._bump("errors")

        logger.debug(f"Cache hit for {key}")
        self._bump("hits")
        return replace(entry, hit_count=entry.hit_count + 1, last_accessed_at=now)

    def put(
        self,
        key: str,
        payload: Dict[str, Any],
        ttl_seconds: Optional[int] = None,
        projections: Optional[Dict[str, Any]] = None
    ) -> bool:
        """Upsert ``payload`` with ``expires_at = now + ttl``. Returns False if the write failed."""
        now = self.clock()
        ttl = ttl_seconds if ttl_seconds is not None else self.ttl_seconds
        entry = CacheEntry(
            key=key,
            payload=payload,
            created_at=now,
            expires_at=now + timedelta(seconds=ttl),
            projections=dict(projections or {}),
        )
        try:
            self.store.upsert(entry)
        except Exception as e:
            logger.warning(f"Error writing score cache for {key}: {e}")
            self._bump("errors")
            return False

        logger.debug(f"Cached {key} (TTL: {ttl}s)")
        self._bump("writes")
        return True

    def delete(self, key: str) -> bool:
        try:
            return self.store.delete(key)
        except Exception as e:
            logger.warning(f"Error deleting {key} from score cache: {e}")
            self._bump("errors")
            return False

    def delete_prefix(self, prefix: str) -> int:
        try:
            return self.store.delete_prefix(prefix)
        except Exception as e:
            logger.warning(f"Error deleting {prefix}* from score cache: {e}")
            self._bump("errors")
            return 0

    def sweep(self) -> int:
        """Delete expired entries and return how many were removed."""
        try:
            removed = self.store.delete_expired(self.clock())
        except Exception as e:
            logger.warning(f"Error sweeping score cache: {e}")
            self._bump("errors")
            return 0

        logger.info(f"Swept {removed} expired score cache entries")
        return removed

    def stats(self) -> Dict[str, Any]:
        with self._lock:
            stats: Dict[str, Any] = dict(self._counters)
        lookups = stats["hits"] + stats["misses"]
        stats["hit_rate"] = round(stats["hits"] / lookups, 4) if lookups else 0.0
        stats["backend"] = self.store.name
        stats["ttl_seconds"] = self.ttl_seconds
        try:
            stats["entries"] = self.store.count()
            stats["available"] = True
        except Exception as e:
            logger.warning(f"Error counting score cache entries: {e}")
            stats["entries"] = None
            stats["available"] = False
        return stats

    def _bump(self, counter: str) -> None:
        with self._lock:
            self._counters[counter] += 1
