"""
SQL-backed implementations of the core store interfaces.

Each call runs in its own unit of work, so one adapter instance can be
shared across requests and threads.
"""
import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from core.cache.score_cache import CacheEntry, CacheStore
from core.errors import CacheUnavailable
from core.interfaces import ListingStore, PropertyRecordSource
from core.matching.models import BrokerExperience, OpportunityRequirement, PropertyListing
from core.neighborhood.percentile import DEFAULT_PERCENTILE, ReferenceDistribution, mid_rank_percentile
from core.normalizers import broker_experience_from_profile, listing_from_row, requirement_from_row
from core.spatial.models import GovernmentPropertyRecord
from database.uow import cache_uow, listing_uow, property_uow, reference_uow

logger = logging.getLogger(__name__)


class SqlListingStore(ListingStore):
    def __init__(self, session_factory: Optional[sessionmaker] = None):
        self.session_factory = session_factory

    def get_listing(self, listing_id: str) -> Optional[PropertyListing]:
        with listing_uow(self.session_factory) as repo:
            row = repo.get_listing_row(listing_id)
        return listing_from_row(row) if row else None

    def get_opportunity(self, opportunity_id: str) -> Optional[OpportunityRequirement]:
        with listing_uow(self.session_factory) as repo:
            row = repo.get_opportunity_row(opportunity_id)
        return requirement_from_row(row) if row else None

    def get_broker_experience(self, listing_id: str) -> Optional[BrokerExperience]:
        with listing_uow(self.session_factory) as repo:
            profile = repo.get_broker_profile_for_listing(listing_id)
        return broker_experience_from_profile(profile)


class SqlPropertySource(PropertyRecordSource):
    def __init__(self, session_factory: Optional[sessionmaker] = None):
        self.session_factory = session_factory

    def load_records(self) -> List[GovernmentPropertyRecord]:
        with property_uow(self.session_factory) as repo:
            return repo.load_records()


class SqlCacheStore(CacheStore):
    """Cache entries in ``score_cache_entries``. SQL errors surface as CacheUnavailable."""

    name = "database"

    def __init__(self, session_factory: Optional[sessionmaker] = None):
        self.session_factory = session_factory

    def fetch(self, key: str) -> Optional[CacheEntry]:
        try:
            with cache_uow(self.session_factory) as repo:
                return repo.fetch(key)
        except SQLAlchemyError as e:
            raise CacheUnavailable(f"Cache read failed: {e}") from e

    def upsert(self, entry: CacheEntry) -> None:
        try:
            with cache_uow(self.session_factory) as repo:
                repo.upsert(entry)
        except SQLAlchemyError as e:
            raise CacheUnavailable(f"Cache write failed: {e}") from e

    def touch(self, key: str, accessed_at: datetime) -> None:
        try:
            with cache_uow(self.session_factory) as repo:
                repo.touch(key, accessed_at)
        except SQLAlchemyError as e:
            raise CacheUnavailable(f"Cache hit update failed: {e}") from e

    def delete(self, key: str) -> bool:
        try:
            with cache_uow(self.session_factory) as repo:
                return repo.delete(key)
        except SQLAlchemyError as e:
            raise CacheUnavailable(f"Cache delete failed: {e}") from e

    def delete_prefix(self, prefix: str) -> int:
        try:
            with cache_uow(self.session_factory) as repo:
                return repo.delete_prefix(prefix)
        except SQLAlchemyError as e:
            raise CacheUnavailable(f"Cache delete failed: {e}") from e

    def delete_expired(self, now: datetime) -> int:
        try:
            with cache_uow(self.session_factory) as repo:
                return repo.delete_expired(now)
        except SQLAlchemyError as e:
            raise CacheUnavailable(f"Cache sweep failed: {e}") from e

    def count(self) -> int:
        try:
            with cache_uow(self.session_factory) as repo:
                return repo.count()
        except SQLAlchemyError as e:
            raise CacheUnavailable(f"Cache count failed: {e}") from e


class DatabaseReferenceDistribution(ReferenceDistribution):
    """
    Percentiles against every prior score of the same model version.

    Failures are logged; recording is skipped and the percentile falls back
    to DEFAULT_PERCENTILE so scoring never fails on the reference store.
    """

    def __init__(self, model_version: str, session_factory: Optional[sessionmaker] = None):
        self.model_version = model_version
        self.session_factory = session_factory

    def record_score(self, score: float) -> None:
        try:
            with reference_uow(self.session_factory) as repo:
                repo.add_sample(float(score), self.model_version)
        except SQLAlchemyError as e:
            logger.warning(f"Error recording reference score: {e}")

    def percentile_of(self, score: float) -> float:
        try:
            with reference_uow(self.session_factory) as repo:
                below, equal, total = repo.rank_counts(float(score), self.model_version)
        except SQLAlchemyError as e:
            logger.warning(f"Error reading reference distribution: {e}")
            return DEFAULT_PERCENTILE
        return mid_rank_percentile(below, equal, total)
