from sqlalchemy import Column, Text, Float, Integer, Date, Index, TIMESTAMP

from .base import Base, utcnow


class FederalProperty(Base):
    """
    One IOLP owned building or leased space.

    Loaded into the in-memory SpatialIndex at startup; never queried
    spatially in SQL.
    """
    __tablename__ = 'federal_properties'

    id = Column(Text, primary_key=True)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    ownership = Column(Text, nullable=False)  # leased | owned
    rsf = Column(Float, nullable=False, default=0.0)
    vacant_rsf = Column(Float, nullable=False, default=0.0)
    lease_expiration = Column(Date, nullable=True)
    construction_year = Column(Integer, nullable=True)
    agency = Column(Text, nullable=True)
    city = Column(Text, nullable=True)
    state = Column(Text, nullable=True)
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index('idx_federal_properties_state', 'state'),
        Index('idx_federal_properties_lease_expiration', 'lease_expiration'),
    )
