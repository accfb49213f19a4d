import logging
from typing import Any, Dict, Optional

from sqlalchemy import select

from database.models import BrokerListing, BrokerProfile, Opportunity
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class ListingRepository(BaseRepository):
    """Read-only row access; rows are normalized by core.normalizers."""

    def get_listing_row(self, listing_id: str) -> Optional[Dict[str, Any]]:
        listing = self.db.get(BrokerListing, listing_id)
        return listing.to_row() if listing else None

    def get_opportunity_row(self, opportunity_id: str) -> Optional[Dict[str, Any]]:
        opportunity = self.db.get(Opportunity, opportunity_id)
        return opportunity.to_row() if opportunity else None

    def get_broker_profile_for_listing(self, listing_id: str) -> Optional[Dict[str, Any]]:
        stmt = (
            select(BrokerProfile)
            .join(BrokerListing, BrokerListing.broker_id == BrokerProfile.broker_id)
            .where(BrokerListing.id == listing_id)
        )
        profile = self.db.execute(stmt).scalar_one_or_none()
        return profile.to_row() if profile else None
