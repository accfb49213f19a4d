from sqlalchemy import Column, Text, Float, Integer, Boolean, Index, TIMESTAMP

from .base import Base, JSONType, utcnow


class ScoreCacheEntry(Base):
    """
    Cached neighborhood or match score.

    ``payload`` is the full result JSON; the projection columns duplicate
    its headline values so they can be filtered and indexed.
    """
    __tablename__ = 'score_cache_entries'

    key = Column(Text, primary_key=True)
    kind = Column(Text, nullable=False)  # neighborhood | match
    payload = Column(JSONType, nullable=False)

    overall_score = Column(Float, nullable=True)
    grade = Column(Text, nullable=True)
    percentile = Column(Float, nullable=True)
    qualified = Column(Boolean, nullable=True)

    hit_count = Column(Integer, nullable=False, default=0)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)
    last_accessed_at = Column(TIMESTAMP(timezone=True), nullable=True)
    expires_at = Column(TIMESTAMP(timezone=True), nullable=False)

    __table_args__ = (
        Index('idx_score_cache_expires', 'expires_at'),
        Index('idx_score_cache_kind_score', 'kind', 'overall_score'),
    )


class NeighborhoodScoreSample(Base):
    """Prior neighborhood scores, the reference distribution for percentiles."""
    __tablename__ = 'neighborhood_score_samples'

    id = Column(Integer, primary_key=True, autoincrement=True)
    score = Column(Float, nullable=False)
    model_version = Column(Text, nullable=False)
    recorded_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        Index('idx_score_samples_version_score', 'model_version', 'score'),
    )
