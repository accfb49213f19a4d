#!/usr/bin/env python3
"""
Neighborhood Models - Data structures for neighborhood score results.
"""

from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Dict, Any, Optional

FACTOR_NAMES = (
    "density",
    "lease_activity",
    "expiring_leases",
    "demand",
    "vacancy",
    "growth",
)


@dataclass
class FactorScore:
    """One weighted factor: raw score (0-100), weight (0-1) and contribution."""
    score: float
    weight: float
    weighted: float
    explanation: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FactorScore":
        return cls(
            score=float(data["score"]),
            weight=float(data["weight"]),
            weighted=float(data["weighted"]),
            explanation=data.get("explanation", ""),
        )


@dataclass
class NeighborhoodMetrics:
    """Raw counts derived from the properties inside the search radius."""
    total_properties: int = 0
    leased_properties: int = 0
    owned_properties: int = 0
    total_rsf: float = 0.0
    vacant_rsf: float = 0.0
    expiring_leases_count: int = 0
    expiring_leases_rsf: float = 0.0
    expiring_lease_weight: float = 0.0
    recent_construction_count: int = 0
    search_radius_miles: float = 0.0


@dataclass
class NeighborhoodScoreResult:
    """Complete neighborhood score for one (lat, lng, radius) query."""
    score: float
    grade: str
    percentile: float
    metrics: NeighborhoodMetrics
    factors: Dict[str, FactorScore]
    latitude: float
    longitude: float
    radius_miles: float
    model_version: str = ""
    calculated_at: Optional[datetime] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["calculated_at"] = self.calculated_at.isoformat() if self.calculated_at else None
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NeighborhoodScoreResult":
        calculated_at = data.get("calculated_at")
        return cls(
            score=float(data["score"]),
            grade=data["grade"],
            percentile=float(data["percentile"]),
            metrics=NeighborhoodMetrics(**data.get("metrics", {})),
            factors={name: FactorScore.from_dict(f) for name, f in data.get("factors", {}).items()},
            latitude=float(data["latitude"]),
            longitude=float(data["longitude"]),
            radius_miles=float(data["radius_miles"]),
            model_version=data.get("model_version", ""),
            calculated_at=datetime.fromisoformat(calculated_at) if calculated_at else None,
            extra=data.get("extra", {}),
        )
