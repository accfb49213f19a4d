"""
Store Interfaces - Read-only collaborators of the scoring core.

Listings, opportunities and the government property inventory are owned by
other services; the core only reads them through these interfaces.
"""
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional

from core.matching.models import BrokerExperience, OpportunityRequirement, PropertyListing
from core.spatial.models import GovernmentPropertyRecord


class ListingStore(ABC):
    """
    Abstract read-only access to broker listings and lease opportunities.
    """

    @abstractmethod
    def get_listing(self, listing_id: str) -> Optional[PropertyListing]:
        pass

    @abstractmethod
    def get_opportunity(self, opportunity_id: str) -> Optional[OpportunityRequirement]:
        pass

    @abstractmethod
    def get_broker_experience(self, listing_id: str) -> Optional[BrokerExperience]:
        """Experience of the broker who owns ``listing_id``, or None when no profile exists."""
        pass


class PropertyRecordSource(ABC):
    """Source of the government property inventory indexed by SpatialIndex."""

    @abstractmethod
    def load_records(self) -> List[GovernmentPropertyRecord]:
        pass


class InMemoryListingStore(ListingStore):
    def __init__(
        self,
        listings: Iterable[PropertyListing] = (),
        opportunities: Iterable[OpportunityRequirement] = (),
        experiences: Optional[Dict[str, BrokerExperience]] = None
    ):
        self.listings = {listing.id: listing for listing in listings}
        self.opportunities = {opportunity.id: opportunity for opportunity in opportunities}
        self.experiences = dict(experiences or {})

    def get_listing(self, listing_id: str) -> Optional[PropertyListing]:
        return self.listings.get(listing_id)

    def get_opportunity(self, opportunity_id: str) -> Optional[OpportunityRequirement]:
        return self.opportunities.get(opportunity_id)

    def get_broker_experience(self, listing_id: str) -> Optional[BrokerExperience]:
        return self.experiences.get(listing_id)


class InMemoryPropertySource(PropertyRecordSource):
    def __init__(self, records: Iterable[GovernmentPropertyRecord] = ()):
        self.records = list(records)

    def load_records(self) -> List[GovernmentPropertyRecord]:
        return list(self.records)
