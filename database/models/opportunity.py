from sqlalchemy import Column, Text, Date, Index, TIMESTAMP

from .base import Base, JSONType, utcnow


class Opportunity(Base):
    """
    Lease solicitation synced from SAM.gov.

    Structured requirements extracted from the solicitation documents live
    in ``full_data`` (camelCase keys).
    """
    __tablename__ = 'opportunities'

    id = Column(Text, primary_key=True)
    notice_id = Column(Text, nullable=True)
    title = Column(Text)
    department = Column(Text)
    pop_state_code = Column(Text)
    pop_city_name = Column(Text)
    type_of_set_aside = Column(Text)
    response_deadline = Column(Date)
    full_data = Column(JSONType, default=dict)

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        Index('idx_opportunities_notice', 'notice_id'),
    )

    def to_row(self) -> dict:
        return {column.name: getattr(self, column.name) for column in self.__table__.columns}
