import contextlib
import logging
from typing import Optional

from sqlalchemy.orm import sessionmaker

from database.database import db_session_scope
from database.repositories.federal_property import FederalPropertyRepository
from database.repositories.listing import ListingRepository
from database.repositories.reference_scores import ReferenceScoreRepository
from database.repositories.score_cache import ScoreCacheRepository

logger = logging.getLogger(__name__)


@contextlib.contextmanager
def listing_uow(session_factory: Optional[sessionmaker] = None):
    """Per-unit-of-work scope yielding a ListingRepository.

    Commits on success, rolls back on exception, always closes.

    Usage:
        with listing_uow() as repo:
            row = repo.get_listing_row(listing_id)
    """
    with db_session_scope(session_factory) as session:
        yield ListingRepository(session)


@contextlib.contextmanager
def cache_uow(session_factory: Optional[sessionmaker] = None):
    with db_session_scope(session_factory) as session:
        yield ScoreCacheRepository(session)


@contextlib.contextmanager
def reference_uow(session_factory: Optional[sessionmaker] = None):
    with db_session_scope(session_factory) as session:
        yield ReferenceScoreRepository(session)


@contextlib.contextmanager
def property_uow(session_factory: Optional[sessionmaker] = None):
    with db_session_scope(session_factory) as session:
        yield FederalPropertyRepository(session)
