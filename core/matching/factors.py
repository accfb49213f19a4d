#!/usr/bin/env python3
"""
Match category scorers (0-100 each).

- Location: 30%
- Space: 25%
- Building: 20%
- Timeline: 15%
- Experience: 10%

Scorers assume the pair already passed the constraint pipeline but stay
total on any input: an out-of-bounds pair scores low rather than raising.
"""

import logging
from typing import Callable, Dict, List, Optional, Tuple

from core.config_loader import MatchingConfig
from core.geo import haversine_miles
from core.grading import clamp_score
from core.matching.constraints import offered_sf, space_target
from core.matching.models import (
    BUILDING_CLASSES,
    BrokerExperience,
    CategoryScore,
    OpportunityRequirement,
    PropertyListing,
)

logger = logging.getLogger(__name__)

# Building feature weights (renormalized over the features in play)
CLASS_FEATURE_WEIGHT = 0.30
LEED_FEATURE_WEIGHT = 0.15
PARKING_FEATURE_WEIGHT = 0.15
BACKUP_POWER_FEATURE_WEIGHT = 0.15
FIBER_FEATURE_WEIGHT = 0.15
ADA_FEATURE_WEIGHT = 0.10

# Unranked class preference when the requirement allows any class
OPEN_CLASS_CREDIT = {"A+": 1.0, "A": 1.0, "B": 0.75, "C": 0.5}

# Experience component weights (sum to 1.0)
EXPERIENCE_COMPONENTS = {
    "leases": 0.45,
    "relevance": 0.10,
    "gsa": 0.20,
    "portfolio": 0.10,
    "references": 0.15,
}
FULL_REFERENCE_COUNT = 3

ScoreFn = Callable[
    [PropertyListing, OpportunityRequirement, Optional[BrokerExperience], MatchingConfig],
    Tuple[float, str]
]


def _saturate(value: float, half: float) -> float:
    """1 - 2^(-value/half), in [0, 1)."""
    if value <= 0 or half <= 0:
        return 0.0
    return 1.0 - 2.0 ** (-value / half)


def _fraction(value: float) -> float:
    return max(0.0, min(1.0, value))


# ----------------------------
# Location
# ----------------------------
def location_score(
    listing: PropertyListing,
    requirement: OpportunityRequirement,
    experience: Optional[BrokerExperience],
    config: MatchingConfig
) -> Tuple[float, str]:
    components: List[float] = []
    notes: List[str] = []

    if requirement.city:
        if listing.city and listing.city.strip().lower() == requirement.city.strip().lower():
            components.append(1.0)
            notes.append(f"In {requirement.city}")
        else:
            components.append(0.5)
            notes.append(f"Outside {requirement.city}")

    area = requirement.delineated_area
    if area is not None and listing.has_coordinates:
        distance = haversine_miles(listing.latitude, listing.longitude, area.latitude, area.longitude)
        ratio = _fraction(distance / area.radius_miles) if area.radius_miles > 0 else 0.0
        components.append(1.0 - 0.5 * ratio)
        notes.append(f"{distance:.1f} mi from delineated area center")

    if not components:
        return config.location_unstated_score, "No city or delineated area stated"

    return 100.0 * sum(components) / len(components), ", ".join(notes)


# ----------------------------
# Space
# ----------------------------
def space_score(
    listing: PropertyListing,
    requirement: OpportunityRequirement,
    experience: Optional[BrokerExperience],
    config: MatchingConfig
) -> Tuple[float, str]:
    target = space_target(requirement)
    if target <= 0:
        return 100.0, "No space requirement stated"

    offered = offered_sf(listing, requirement)
    min_sf = float(requirement.min_sf or 0.0)
    max_sf = requirement.max_sf
    floor = config.space_bound_floor

    if offered <= target:
        span = target - min_sf
        closeness = 1.0 if span <= 0 else _fraction((offered - min_sf) / span)
    else:
        span = float(max_sf) - target if max_sf is not None and max_sf > target else target
        closeness = _fraction(1.0 - (offered - target) / span)

    score = floor + (100.0 - floor) * closeness
    explanation = f"{offered:,.0f} SF offered vs {target:,.0f} SF target"

    if requirement.contiguous_required and not listing.contiguous:
        score *= config.non_contiguous_multiplier
        explanation += ", non-contiguous"

    return score, explanation


# ----------------------------
# Building
# ----------------------------
def _class_credit(listing: PropertyListing, requirement: OpportunityRequirement) -> float:
    building_class = (listing.building_class or "").strip().upper()
    allowed = [c.strip().upper() for c in requirement.building_classes if c]

    if not allowed:
        return OPEN_CLASS_CREDIT.get(building_class, 0.5)
    if building_class not in allowed:
        return 0.0

    ranked = [c for c in BUILDING_CLASSES if c in allowed]
    preferred = ranked[0] if ranked else allowed[0]
    return 1.0 if building_class == preferred else 0.5


def building_score(
    listing: PropertyListing,
    requirement: OpportunityRequirement,
    experience: Optional[BrokerExperience],
    config: MatchingConfig
) -> Tuple[float, str]:
    features: List[Tuple[str, float, float]] = [
        (f"Class {listing.building_class or '?'}", CLASS_FEATURE_WEIGHT, _class_credit(listing, requirement)),
    ]

    if requirement.leed_required:
        features.append(("LEED", LEED_FEATURE_WEIGHT, 1.0 if listing.leed_certified else 0.0))

    if requirement.parking_ratio:
        ratio = listing.parking_ratio or 0.0
        features.append(("Parking", PARKING_FEATURE_WEIGHT, _fraction(ratio / requirement.parking_ratio)))

    if requirement.backup_power:
        features.append(("Backup power", BACKUP_POWER_FEATURE_WEIGHT, 1.0 if listing.backup_power else 0.0))

    if requirement.fiber:
        features.append(("Fiber", FIBER_FEATURE_WEIGHT, 1.0 if listing.fiber else 0.0))

    if not requirement.ada_required:
        features.append(("ADA", ADA_FEATURE_WEIGHT, 1.0 if listing.ada_compliant else 0.0))

    total_weight = sum(weight for _, weight, _ in features)
    matched = sum(weight * credit for _, weight, credit in features)

    have = [label for label, _, credit in features if credit >= 1.0]
    missing = [label for label, _, credit in features if credit < 1.0]
    notes = []
    if have:
        notes.append(f"Has: {', '.join(have)}")
    if missing:
        notes.append(f"Missing/partial: {', '.join(missing)}")

    return 100.0 * matched / total_weight, "; ".join(notes)


# ----------------------------
# Timeline
# ----------------------------
def _term_compatibility(offered_years: float, required_years: float) -> float:
    diff = abs(offered_years - required_years)
    if diff == 0:
        return 1.0
    if diff <= 1:
        return 0.75
    return 0.4


def timeline_score(
    listing: PropertyListing,
    requirement: OpportunityRequirement,
    experience: Optional[BrokerExperience],
    config: MatchingConfig
) -> Tuple[float, str]:
    occupancy = requirement.occupancy_date
    available = listing.available_date
    buffer_days = max(1, config.timeline_buffer_days)

    if occupancy is None or available is None:
        score = config.timeline_unstated_score
        explanation = "No occupancy date stated" if occupancy is None else "Availability date unknown"
    else:
        margin = (occupancy - available).days
        if margin >= buffer_days:
            score = 100.0
        else:
            score = max(0.0, 50.0 + 50.0 * margin / buffer_days)
        if margin >= 0:
            explanation = f"Available {margin} days before occupancy"
        else:
            explanation = f"Available {-margin} days after occupancy"

    if listing.lease_term_years and requirement.lease_term_years:
        compat = _term_compatibility(listing.lease_term_years, requirement.lease_term_years)
        share = config.timeline_term_share
        score = (1.0 - share) * score + share * 100.0 * compat
        explanation += f", {listing.lease_term_years:g}-year term vs {requirement.lease_term_years:g} required"

    return score, explanation


# ----------------------------
# Experience
# ----------------------------
def experience_score(
    listing: PropertyListing,
    requirement: OpportunityRequirement,
    experience: Optional[BrokerExperience],
    config: MatchingConfig
) -> Tuple[float, str]:
    baseline = config.experience_baseline
    if experience is None:
        return baseline, "No broker experience on file"

    agencies = {a.strip().lower() for a in experience.agencies_served if a}
    if requirement.agency and agencies:
        relevance = 1.0 if requirement.agency.strip().lower() in agencies else 0.0
    else:
        relevance = 0.5 if agencies else 0.0

    components = {
        "leases": _saturate(experience.government_leases_count, config.experience_leases_half),
        "relevance": relevance,
        "gsa": 1.0 if experience.gsa_certified else 0.0,
        "portfolio": _saturate(experience.total_portfolio_sf, config.experience_portfolio_half_sf),
        "references": _fraction(len(experience.references) / FULL_REFERENCE_COUNT),
    }
    earned = sum(EXPERIENCE_COMPONENTS[name] * value for name, value in components.items())
    score = baseline + (100.0 - baseline) * earned

    notes = [f"{experience.government_leases_count} gov't leases"]
    if experience.gsa_certified:
        notes.append("GSA certified")
    if relevance >= 1.0:
        notes.append(f"Has served {requirement.agency}")
    if experience.references:
        notes.append(f"{len(experience.references)} references")

    return score, ", ".join(notes)


CATEGORY_FUNCTIONS: Dict[str, ScoreFn] = {
    "location": location_score,
    "space": space_score,
    "building": building_score,
    "timeline": timeline_score,
    "experience": experience_score,
}


def calculate_categories(
    listing: PropertyListing,
    requirement: OpportunityRequirement,
    experience: Optional[BrokerExperience],
    config: MatchingConfig
) -> Dict[str, CategoryScore]:
    weights = config.weights.model_dump()
    categories: Dict[str, CategoryScore] = {}
    for name, fn in CATEGORY_FUNCTIONS.items():
        raw, explanation = fn(listing, requirement, experience, config)
        score = round(clamp_score(raw), 1)
        weight = weights[name]
        categories[name] = CategoryScore(
            score=score,
            weight=weight,
            weighted=round(score * weight, 4),
            explanation=explanation,
        )
    return categories


def weighted_total(categories: Dict[str, CategoryScore]) -> float:
    return clamp_score(round(sum(c.weighted for c in categories.values()), 1))
