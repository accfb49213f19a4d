"""Strengths, weaknesses and recommendations derived from category scores."""
from typing import Dict, List, Optional

from core.config_loader import MatchingConfig
from core.matching.models import (
    BrokerExperience,
    CategoryScore,
    OpportunityRequirement,
    PropertyListing,
)

STRENGTH_MESSAGES = {
    "location": "Excellent location match",
    "space": "Space closely fits the requirement",
    "building": "Superior building quality and features",
    "timeline": "Favorable availability timeline",
    "experience": "Strong government leasing track record",
}

WEAKNESS_MESSAGES = {
    "location": "Location may not be ideal for this opportunity",
    "space": "Space size or configuration is a weak fit",
    "building": "Building lacks some desired features",
    "timeline": "Timeline may not align with occupancy needs",
    "experience": "Limited government leasing experience",
}


def strengths(categories: Dict[str, CategoryScore], config: MatchingConfig) -> List[str]:
    return [
        STRENGTH_MESSAGES[name]
        for name, category in categories.items()
        if category.score >= config.strength_threshold and name in STRENGTH_MESSAGES
    ]


def weaknesses(categories: Dict[str, CategoryScore], config: MatchingConfig) -> List[str]:
    return [
        WEAKNESS_MESSAGES[name]
        for name, category in categories.items()
        if category.score < config.weakness_threshold and name in WEAKNESS_MESSAGES
    ]


def recommendations(
    categories: Dict[str, CategoryScore],
    listing: PropertyListing,
    requirement: OpportunityRequirement,
    experience: Optional[BrokerExperience],
    config: MatchingConfig
) -> List[str]:
    """Templated advice for each weak category, specific to what the listing lacks."""
    weak = {name for name, c in categories.items() if c.score < config.weakness_threshold}
    advice: List[str] = []

    if "location" in weak:
        advice.append("Highlight transit access and proximity to the agency's current site")

    if "space" in weak:
        if requirement.contiguous_required and not listing.contiguous:
            advice.append("Offer a contiguous block to meet the space requirement")
        if not listing.build_to_suit:
            advice.append("Consider build-to-suit options to optimize space")

    if "building" in weak:
        if requirement.fiber and not listing.fiber:
            advice.append("Install fiber connectivity to increase competitiveness")
        if requirement.backup_power and not listing.backup_power:
            advice.append("Add backup power systems if feasible")
        if requirement.leed_required and not listing.leed_certified:
            advice.append("Pursue LEED certification")
        if requirement.parking_ratio and (listing.parking_ratio or 0.0) < requirement.parking_ratio:
            advice.append(f"Increase parking to {requirement.parking_ratio:g} spaces per 1,000 SF")

    if "timeline" in weak:
        advice.append("Verify availability date aligns with occupancy requirements")

    if "experience" in weak:
        if experience is None or not experience.gsa_certified:
            advice.append("Obtain GSA certification to strengthen proposal")
        advice.append("Partner with a broker experienced in federal leases")

    return advice


def disqualified_recommendations(failed_check: str) -> List[str]:
    return [
        f"Property failed the {failed_check.replace('_', ' ')} requirement",
        "Consider properties that meet all mandatory requirements",
    ]
