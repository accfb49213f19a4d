"""Cache Module - Score caching with pluggable stores."""
from core.cache.keys import neighborhood_key, match_key, match_prefix
from core.cache.score_cache import (
    ScoreCache,
    CacheEntry,
    CacheStore,
    InMemoryCacheStore,
    CACHE_TTL_SECONDS
)

__all__ = [
    'ScoreCache',
    'CacheEntry',
    'CacheStore',
    'InMemoryCacheStore',
    'CACHE_TTL_SECONDS',
    'neighborhood_key',
    'match_key',
    'match_prefix',
]
