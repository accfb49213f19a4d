from sqlalchemy import Column, Text, Float, Boolean, Date, Index, TIMESTAMP

from .base import Base, JSONType, utcnow


class BrokerListing(Base):
    """Broker-submitted property listing (owned by the listings service)."""
    __tablename__ = 'broker_listings'

    id = Column(Text, primary_key=True)
    broker_id = Column(Text, nullable=True)

    street_address = Column(Text)
    city = Column(Text)
    state = Column(Text)
    zipcode = Column(Text)
    latitude = Column(Float)
    longitude = Column(Float)

    total_sf = Column(Float)
    available_sf = Column(Float)
    min_divisible_sf = Column(Float)
    contiguous = Column(Boolean)

    building_class = Column(Text)
    ada_compliant = Column(Boolean, default=False)
    leed_certified = Column(Boolean, default=False)
    scif_capable = Column(Boolean, default=False)
    security_clearance = Column(Text)
    fiber_connectivity = Column(Boolean, default=False)
    backup_power = Column(Boolean, default=False)
    parking_ratio = Column(Float)

    available_date = Column(Date)
    lease_term_years = Column(Float)
    build_to_suit = Column(Boolean, default=False)
    set_aside_eligible = Column(JSONType, default=list)

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        Index('idx_broker_listings_broker', 'broker_id'),
        Index('idx_broker_listings_state', 'state'),
    )

    def to_row(self) -> dict:
        return {column.name: getattr(self, column.name) for column in self.__table__.columns}
