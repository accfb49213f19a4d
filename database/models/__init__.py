from .base import Base, JSONType
from .federal_property import FederalProperty
from .listing import BrokerListing
from .opportunity import Opportunity
from .broker import BrokerProfile
from .score_cache import ScoreCacheEntry, NeighborhoodScoreSample

__all__ = [
    'Base',
    'JSONType',
    'FederalProperty',
    'BrokerListing',
    'Opportunity',
    'BrokerProfile',
    'ScoreCacheEntry',
    'NeighborhoodScoreSample',
]
