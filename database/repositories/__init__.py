from database.repositories.base import BaseRepository
from database.repositories.federal_property import FederalPropertyRepository
from database.repositories.listing import ListingRepository
from database.repositories.score_cache import ScoreCacheRepository
from database.repositories.reference_scores import ReferenceScoreRepository

__all__ = [
    'BaseRepository',
    'FederalPropertyRepository',
    'ListingRepository',
    'ScoreCacheRepository',
    'ReferenceScoreRepository',
]
