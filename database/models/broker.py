from sqlalchemy import Column, Text, Integer, Float, Boolean

from .base import Base, JSONType


class BrokerProfile(Base):
    """Broker track record used by the Experience category."""
    __tablename__ = 'broker_profiles'

    broker_id = Column(Text, primary_key=True)
    government_leases_count = Column(Integer, default=0)
    gsa_certified = Column(Boolean, default=False)
    years_in_business = Column(Float, default=0.0)
    total_portfolio_sqft = Column(Float, default=0.0)
    gov_references = Column(JSONType, default=list)
    agencies_served = Column(JSONType, default=list)

    def to_row(self) -> dict:
        return {column.name: getattr(self, column.name) for column in self.__table__.columns}
