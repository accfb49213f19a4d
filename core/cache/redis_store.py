"""Redis cache store - one hash per cache key."""
import json
import logging
from datetime import datetime
from typing import Any, Dict, Optional
from urllib.parse import urlparse

from redis import Redis
from redis.exceptions import RedisError

from core.cache.score_cache import CacheEntry, CacheStore
from core.errors import CacheUnavailable

logger = logging.getLogger(__name__)

KEY_NAMESPACE = "fedspace:score:"

# Hit bookkeeping only for a hash that still exists; an entry that expired
# after fetch() must not come back without its payload and TTL.
TOUCH_SCRIPT = """
if redis.call('EXISTS', KEYS[1]) == 0 then
    return 0
end
redis.call('HINCRBY', KEYS[1], 'hit_count', 1)
redis.call('HSET', KEYS[1], 'last_accessed_at', ARGV[1])
return 1
"""


def _sanitize_url(url: str) -> str:
    """Remove credentials from URL for safe logging."""
    try:
        parsed = urlparse(url)
        if parsed.password:
            sanitized = parsed._replace(
                netloc=f"{parsed.username or ''}:*@{parsed.hostname}:{parsed.port or 6379}"
            )
            return sanitized.geturl()
        return url
    except ValueError:
        return url


def _parse_dt(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


class RedisCacheStore(CacheStore):
    """
    Stores each entry as a hash under ``fedspace:score:{key}``.

    Fields: payload, projections (JSON), created_at, expires_at,
    last_accessed_at (ISO-8601) and hit_count (incremented with HINCRBY).
    Redis EXPIREs the hash at expires_at, so sweep() only removes entries a
    clock skew left behind.
    """

    name = "redis"

    def __init__(self, client: Redis):
        self._redis = client
        self._touch_script = client.register_script(TOUCH_SCRIPT)

    @classmethod
    def from_url(cls, redis_url: str, password: Optional[str] = None) -> "RedisCacheStore":
        """Connect and ping. Raises CacheUnavailable when Redis cannot be reached."""
        try:
            client = Redis.from_url(
                redis_url,
                password=password,
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5
            )
            client.ping()
        except RedisError as e:
            raise CacheUnavailable(f"Redis unavailable at {_sanitize_url(redis_url)}: {e}") from e

        logger.info(f"Score cache connected to Redis at {_sanitize_url(redis_url)}")
        return cls(client)

    def _make_key(self, key: str) -> str:
        return f"{KEY_NAMESPACE}{key}"

    def fetch(self, key: str) -> Optional[CacheEntry]:
        try:
            data = self._redis.hgetall(self._make_key(key))
        except RedisError as e:
            raise CacheUnavailable(f"Redis read failed: {e}") from e

        if not data:
            return None
        return CacheEntry(
            key=key,
            payload=json.loads(data["payload"]),
            created_at=_parse_dt(data["created_at"]),
            expires_at=_parse_dt(data["expires_at"]),
            hit_count=int(data.get("hit_count", 0)),
            last_accessed_at=_parse_dt(data.get("last_accessed_at")),
            projections=json.loads(data.get("projections") or "{}"),
        )

    def upsert(self, entry: CacheEntry) -> None:
        redis_key = self._make_key(entry.key)
        mapping: Dict[str, Any] = {
            "payload": json.dumps(entry.payload),
            "projections": json.dumps(entry.projections),
            "created_at": entry.created_at.isoformat(),
            "expires_at": entry.expires_at.isoformat(),
            "hit_count": entry.hit_count,
            "last_accessed_at": entry.last_accessed_at.isoformat() if entry.last_accessed_at else "",
        }
        try:
            pipe = self._redis.pipeline()
            pipe.delete(redis_key)
            pipe.hset(redis_key, mapping=mapping)
            pipe.expireat(redis_key, entry.expires_at)
            pipe.execute()
        except RedisError as e:
            raise CacheUnavailable(f"Redis write failed: {e}") from e

    def touch(self, key: str, accessed_at: datetime) -> None:
        try:
            self._touch_script(keys=[self._make_key(key)], args=[accessed_at.isoformat()])
        except RedisError as e:
            raise CacheUnavailable(f"Redis hit update failed: {e}") from e

    def delete(self, key: str) -> bool:
        try:
            return bool(self._redis.delete(self._make_key(key)))
        except RedisError as e:
            raise CacheUnavailable(f"Redis delete failed: {e}") from e

    def _scan(self, pattern: str):
        cursor = 0
        while True:
            cursor, keys = self._redis.scan(cursor=cursor, match=pattern, count=1000)
            yield from keys
            if cursor == 0:
                break

    def delete_prefix(self, prefix: str) -> int:
        try:
            keys = list(self._scan(f"{self._make_key(prefix)}*"))
            if keys:
                self._redis.delete(*keys)
            return len(keys)
        except RedisError as e:
            raise CacheUnavailable(f"Redis delete failed: {e}") from e

    def delete_expired(self, now: datetime) -> int:
        removed = 0
        try:
            for redis_key in self._scan(f"{KEY_NAMESPACE}*"):
                expires_at = _parse_dt(self._redis.hget(redis_key, "expires_at"))
                if expires_at is not None and now >= expires_at:
                    removed += self._redis.delete(redis_key)
        except RedisError as e:
            raise CacheUnavailable(f"Redis sweep failed: {e}") from e
        return removed

    def count(self) -> int:
        try:
            return sum(1 for _ in self._scan(f"{KEY_NAMESPACE}*"))
        except RedisError as e:
            raise CacheUnavailable(f"Redis scan failed: {e}") from e
