import logging
from typing import Iterable, List

from sqlalchemy import select, func

from core.spatial.models import GovernmentPropertyRecord, Ownership
from database.models import FederalProperty
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


def _to_record(row: FederalProperty) -> GovernmentPropertyRecord:
    return GovernmentPropertyRecord(
        id=row.id,
        latitude=row.latitude,
        longitude=row.longitude,
        ownership=Ownership(row.ownership),
        rsf=row.rsf or 0.0,
        lease_expiration=row.lease_expiration,
        agency=row.agency,
        vacant_rsf=row.vacant_rsf or 0.0,
        construction_year=row.construction_year,
        city=row.city,
        state=row.state,
    )


class FederalPropertyRepository(BaseRepository):
    def load_records(self) -> List[GovernmentPropertyRecord]:
        rows = self.db.execute(select(FederalProperty)).scalars().all()
        return [_to_record(row) for row in rows]

    def count(self) -> int:
        return self.db.execute(select(func.count()).select_from(FederalProperty)).scalar_one()

    def save_records(self, records: Iterable[GovernmentPropertyRecord]) -> int:
        """Insert or replace records by id."""
        saved = 0
        for record in records:
            self.db.merge(FederalProperty(
                id=record.id,
                latitude=record.latitude,
                longitude=record.longitude,
                ownership=record.ownership.value,
                rsf=record.rsf,
                vacant_rsf=record.vacant_rsf,
                lease_expiration=record.lease_expiration,
                construction_year=record.construction_year,
                agency=record.agency,
                city=record.city,
                state=record.state,
            ))
            saved += 1
        self.db.flush()
        logger.info(f"Saved {saved} federal property records")
        return saved
