import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import OperationalError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from core.cache.redis_store import RedisCacheStore
from core.cache.score_cache import CacheStore, InMemoryCacheStore, ScoreCache
from core.config_loader import AppConfig
from core.errors import CacheUnavailable
from core.interfaces import InMemoryListingStore, InMemoryPropertySource, ListingStore, PropertyRecordSource
from core.matching.service import MatchEngine
from core.neighborhood.percentile import InMemoryReferenceDistribution, ReferenceDistribution
from core.neighborhood.service import NeighborhoodScoreEngine
from core.scoring_service import ScoringService
from core.spatial.index import SpatialIndex

logger = logging.getLogger(__name__)

DEFAULT_REDIS_URL = "redis://localhost:6379/0"


@retry(
    stop=stop_after_attempt(5),
    wait=wait_exponential(multiplier=1, max=10),
    retry=retry_if_exception_type(OperationalError),
    reraise=True
)
def _load_index(index: SpatialIndex, source: PropertyRecordSource) -> int:
    records = source.load_records()
    index.rebuild(records)
    logger.info(f"Spatial index loaded with {len(records)} federal properties (height {index.height})")
    return len(records)


@dataclass
class AppContext:
    """Application context container that holds all wired dependencies.

    Without a database section everything runs in memory (empty inventory
    and listing store unless provided), which is what tests and the CLI's
    ad-hoc scoring use.
    """
    config: AppConfig
    index: SpatialIndex
    property_source: PropertyRecordSource
    listing_store: ListingStore
    cache: Optional[ScoreCache]
    neighborhood_engine: NeighborhoodScoreEngine
    match_engine: MatchEngine
    scoring_service: ScoringService

    @classmethod
    def build(
        cls,
        config: AppConfig,
        listing_store: Optional[ListingStore] = None,
        property_source: Optional[PropertyRecordSource] = None,
        cache_store: Optional[CacheStore] = None
    ) -> "AppContext":
        """Build an AppContext from config.

        Args:
            config: Loaded application configuration
            listing_store: Overrides the configured listing store
            property_source: Overrides the configured property inventory source
            cache_store: Overrides the configured cache backend

        Returns:
            Fully wired AppContext with the spatial index loaded
        """
        reference: ReferenceDistribution
        if config.database is not None:
            from database.database import init_engine
            from database.init_db import init_db
            from database.stores import DatabaseReferenceDistribution, SqlListingStore, SqlPropertySource

            init_engine(config.database.url)
            init_db()
            listing_store = listing_store or SqlListingStore()
            property_source = property_source or SqlPropertySource()
            reference = DatabaseReferenceDistribution(config.neighborhood.model_version)
        else:
            listing_store = listing_store or InMemoryListingStore()
            property_source = property_source or InMemoryPropertySource()
            reference = InMemoryReferenceDistribution(max_samples=config.neighborhood.reference_max_samples)

        index = SpatialIndex()
        _load_index(index, property_source)

        cache = cls._build_cache(config, cache_store)
        neighborhood_engine = NeighborhoodScoreEngine(index, config.neighborhood, reference)
        match_engine = MatchEngine(config.matching)
        scoring_service = ScoringService(
            neighborhood_engine=neighborhood_engine,
            match_engine=match_engine,
            listing_store=listing_store,
            cache=cache,
            config=config
        )

        return cls(
            config=config,
            index=index,
            property_source=property_source,
            listing_store=listing_store,
            cache=cache,
            neighborhood_engine=neighborhood_engine,
            match_engine=match_engine,
            scoring_service=scoring_service
        )

    def reload_index(self) -> int:
        """Re-read the inventory and swap in a fresh index."""
        return _load_index(self.index, self.property_source)

    @staticmethod
    def _build_cache(config: AppConfig, cache_store: Optional[CacheStore]) -> Optional[ScoreCache]:
        """Build the ScoreCache; an unreachable backend degrades to the in-memory store."""
        if not config.cache.enabled:
            logger.info("Score cache disabled")
            return None

        store = cache_store
        if store is None:
            backend = config.cache.backend
            if backend == "redis":
                try:
                    store = RedisCacheStore.from_url(
                        config.cache.redis_url or DEFAULT_REDIS_URL,
                        password=config.cache.redis_password
                    )
                except CacheUnavailable as e:
                    logger.warning(f"{e}; falling back to in-memory score cache")
            elif backend == "database":
                if config.database is None:
                    logger.warning("Database cache backend requested without a database; using in-memory cache")
                else:
                    from database.stores import SqlCacheStore
                    store = SqlCacheStore()

        store = store or InMemoryCacheStore()
        logger.info(f"Score cache using {store.name} store (TTL: {config.cache.ttl_seconds}s)")
        return ScoreCache(store, ttl_seconds=config.cache.ttl_seconds)
