#!/usr/bin/env python3
"""
Neighborhood Score Engine - 6-factor federal leasing potential (0-100).

Queries the spatial index for government properties around a point and
turns them into a weighted score:

- Density: 25%
- Lease Activity: 25%
- Expiring Leases: 20%
- Demand: 15%
- Vacancy: 10%
- Growth: 5%

Weights, curve constants and grade bands come from NeighborhoodConfig.
The engine is stateless apart from the injected reference distribution and
never raises for valid coordinates; an empty neighborhood scores 0.
"""

import logging
from datetime import date, datetime, timezone
from typing import Callable, List, Optional

from core.config_loader import NeighborhoodConfig
from core.grading import assign_grade, clamp_score
from core.neighborhood import factors as factor_calculations
from core.neighborhood.models import NeighborhoodScoreResult
from core.neighborhood.percentile import ReferenceDistribution, DEFAULT_PERCENTILE
from core.spatial.index import SpatialIndex
from core.spatial.models import GovernmentPropertyRecord

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class NeighborhoodScoreEngine:
    """
    Scores the federal leasing market around a location.

    Args:
        index: SpatialIndex over the government property inventory
        config: NeighborhoodConfig with weights and curve constants
        reference: Optional ReferenceDistribution for percentiles
        clock: Optional callable returning the current UTC datetime
    """

    def __init__(
        self,
        index: SpatialIndex,
        config: Optional[NeighborhoodConfig] = None,
        reference: Optional[ReferenceDistribution] = None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        self.index = index
        self.config = config or NeighborhoodConfig()
        self.reference = reference
        self.clock = clock or _utcnow

    def score_location(
        self,
        latitude: float,
        longitude: float,
        radius_miles: Optional[float] = None
    ) -> NeighborhoodScoreResult:
        """Query the index around (latitude, longitude) and score the result."""
        radius = radius_miles if radius_miles is not None else self.config.default_radius_miles
        records = self.index.query_radius(latitude, longitude, radius)
        logger.debug(f"Found {len(records)} federal properties within {radius} mi of ({latitude}, {longitude})")
        return self.score_records(records, latitude, longitude, radius)

    def score_records(
        self,
        records: List[GovernmentPropertyRecord],
        latitude: float,
        longitude: float,
        radius_miles: float,
        as_of: Optional[date] = None
    ) -> NeighborhoodScoreResult:
        """Score an already-queried set of records."""
        now = self.clock()
        as_of = as_of or now.date()

        metrics = factor_calculations.calculate_metrics(records, radius_miles, as_of, self.config)
        factors = factor_calculations.calculate_factors(metrics, self.config)
        score = clamp_score(factor_calculations.weighted_total(factors))
        grade = assign_grade(score, self.config.grades)
        percentile = self._percentile(score)

        logger.debug(
            f"Neighborhood ({latitude:.4f}, {longitude:.4f}) r={radius_miles}: "
            f"score={score:.1f} grade={grade} percentile={percentile:.1f}"
        )

        return NeighborhoodScoreResult(
            score=score,
            grade=grade,
            percentile=percentile,
            metrics=metrics,
            factors=factors,
            latitude=latitude,
            longitude=longitude,
            radius_miles=radius_miles,
            model_version=self.config.model_version,
            calculated_at=now,
        )

    def _percentile(self, score: float) -> float:
        if self.reference is None:
            return DEFAULT_PERCENTILE

        percentile = self.reference.percentile_of(score)
        if self.config.record_scores:
            self.reference.record_score(score)
        return percentile
