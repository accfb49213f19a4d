#!/usr/bin/env python3
"""
Matching Models - Listings, requirements and match results.

PropertyListing and OpportunityRequirement are read-only inputs produced at
the collaborator boundary (see core/normalizers.py).
"""

from dataclasses import dataclass, field, asdict
from datetime import date
from typing import List, Dict, Any, Optional

CATEGORY_NAMES = ("location", "space", "building", "timeline", "experience")

# Ordered weakest to strongest
CLEARANCE_LEVELS = ("public_trust", "secret", "top_secret")

# Ordered best to worst
BUILDING_CLASSES = ("A+", "A", "B", "C")


@dataclass(frozen=True)
class DelineatedArea:
    """Circular sub-region a lease requirement must fall inside."""
    latitude: float
    longitude: float
    radius_miles: float


@dataclass(frozen=True)
class PropertyListing:
    """A broker's listed space."""
    id: str
    state: Optional[str] = None
    city: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    available_sf: float = 0.0
    total_sf: float = 0.0
    min_divisible_sf: Optional[float] = None
    contiguous: Optional[bool] = None

    building_class: Optional[str] = None
    ada_compliant: bool = False
    leed_certified: bool = False
    scif_capable: bool = False
    security_clearance: Optional[str] = None
    fiber: bool = False
    backup_power: bool = False
    parking_ratio: Optional[float] = None

    available_date: Optional[date] = None
    lease_term_years: Optional[float] = None
    build_to_suit: bool = False
    set_aside_eligible: tuple = ()

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None


@dataclass(frozen=True)
class OpportunityRequirement:
    """Space requirement extracted from a lease solicitation."""
    id: str
    notice_id: Optional[str] = None
    title: Optional[str] = None
    agency: Optional[str] = None

    state: Optional[str] = None
    city: Optional[str] = None
    delineated_area: Optional[DelineatedArea] = None

    min_sf: Optional[float] = None
    max_sf: Optional[float] = None
    target_sf: Optional[float] = None
    contiguous_required: bool = False

    building_classes: tuple = ()
    ada_required: bool = False
    scif_required: bool = False
    clearance_required: Optional[str] = None
    set_aside: Optional[str] = None

    leed_required: bool = False
    fiber: bool = False
    backup_power: bool = False
    parking_ratio: Optional[float] = None

    occupancy_date: Optional[date] = None
    lease_term_years: Optional[float] = None


@dataclass(frozen=True)
class BrokerExperience:
    """Prior federal leasing track record of the listing broker."""
    government_leases_count: int = 0
    gsa_certified: bool = False
    years_in_business: float = 0.0
    total_portfolio_sf: float = 0.0
    references: tuple = ()
    agencies_served: tuple = ()


@dataclass
class CategoryScore:
    """Score (0-100) for one match category plus its weighted contribution."""
    score: float
    weight: float
    weighted: float
    explanation: str = ""


@dataclass
class EarlyTermination:
    failed_check: str
    stopped_at_stage: int
    computation_saved_pct: float
    reason: str


@dataclass
class MatchScoreResult:
    """Complete match outcome for one (listing, requirement) pair."""
    overall_score: float
    grade: str
    qualified: bool
    competitive: bool
    category_scores: Dict[str, CategoryScore]
    disqualifiers: List[str] = field(default_factory=list)
    strengths: List[str] = field(default_factory=list)
    weaknesses: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
    passed_checks: List[str] = field(default_factory=list)
    early_termination: Optional[EarlyTermination] = None
    model_version: str = ""
    computation_time_ms: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MatchScoreResult":
        early = data.get("early_termination")
        return cls(
            overall_score=float(data["overall_score"]),
            grade=data["grade"],
            qualified=bool(data["qualified"]),
            competitive=bool(data["competitive"]),
            category_scores={
                name: CategoryScore(**c) for name, c in data.get("category_scores", {}).items()
            },
            disqualifiers=list(data.get("disqualifiers", [])),
            strengths=list(data.get("strengths", [])),
            weaknesses=list(data.get("weaknesses", [])),
            recommendations=list(data.get("recommendations", [])),
            passed_checks=list(data.get("passed_checks", [])),
            early_termination=EarlyTermination(**early) if early else None,
            model_version=data.get("model_version", ""),
            computation_time_ms=float(data.get("computation_time_ms", 0.0)),
        )
