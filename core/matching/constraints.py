#!/usr/bin/env python3
"""
Match Constraint Pipeline - early-termination disqualification checks.

Each check is a pure binary test on a (listing, requirement) pair. The
pipeline runs them in the configured order and stops at the first failure,
so later checks and the full MatchScoreEngine are never invoked for a
disqualified pair. Checks are ordered by how often they disqualify in
practice, cheapest and most discriminating first:

1. geographic: state and delineated area
2. space_bounds: available SF within [min, max], honoring divisibility
3. building_class: membership in the allowed classes
4. timeline: available no later than the occupancy date
5. mandatory_features: ADA / SCIF / clearance, only when mandatory

``set_aside`` is registered but not part of the default order.

The order is data (MatchingConfig.constraint_order) so it can be benchmarked
and tuned independently of the check logic; ``stats()`` exposes how often each
check ran and failed.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence

from core.geo import haversine_miles
from core.matching.models import (
    CLEARANCE_LEVELS,
    OpportunityRequirement,
    PropertyListing,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CheckOutcome:
    passed: bool
    reason: str = ""


PASS = CheckOutcome(passed=True)


def _fail(reason: str) -> CheckOutcome:
    return CheckOutcome(passed=False, reason=reason)


CheckFn = Callable[[PropertyListing, OpportunityRequirement], CheckOutcome]


@dataclass(frozen=True)
class ConstraintCheck:
    name: str
    fn: CheckFn
    description: str = ""

    def __call__(self, listing: PropertyListing, requirement: OpportunityRequirement) -> CheckOutcome:
        return self.fn(listing, requirement)


# ----------------------------
# Space helpers (shared with the Space category)
# ----------------------------
def space_target(requirement: OpportunityRequirement) -> float:
    """Target SF: explicit target, else midpoint of [min, max], else min."""
    if requirement.target_sf:
        return float(requirement.target_sf)
    if requirement.min_sf and requirement.max_sf:
        return (float(requirement.min_sf) + float(requirement.max_sf)) / 2.0
    return float(requirement.min_sf or requirement.max_sf or 0.0)


def _can_divide_to(listing: PropertyListing, max_sf: float) -> bool:
    return listing.min_divisible_sf is not None and listing.min_divisible_sf <= max_sf


def offered_sf(listing: PropertyListing, requirement: OpportunityRequirement) -> float:
    """SF the listing can put forward. Divisible space larger than max is carved toward target."""
    available = float(listing.available_sf or 0.0)
    max_sf = requirement.max_sf
    if max_sf is not None and available > max_sf and _can_divide_to(listing, max_sf):
        return max(float(listing.min_divisible_sf), min(space_target(requirement), float(max_sf)))
    return available


# ----------------------------
# Checks
# ----------------------------
def check_geographic(listing: PropertyListing, requirement: OpportunityRequirement) -> CheckOutcome:
    if requirement.state:
        required_state = requirement.state.strip().upper()
        if not listing.state:
            return _fail(f"Property state unknown, opportunity requires {required_state}")
        if listing.state.strip().upper() != required_state:
            return _fail(f"Property in {listing.state.strip().upper()}, opportunity requires {required_state}")

    area = requirement.delineated_area
    if area is not None and listing.has_coordinates:
        distance = haversine_miles(listing.latitude, listing.longitude, area.latitude, area.longitude)
        if distance > area.radius_miles:
            return _fail(
                f"Property is {distance:.1f} mi from the delineated area center "
                f"(limit {area.radius_miles:g} mi)"
            )
    return PASS


def check_space_bounds(listing: PropertyListing, requirement: OpportunityRequirement) -> CheckOutcome:
    available = float(listing.available_sf or 0.0)
    min_sf = float(requirement.min_sf or 0.0)
    max_sf = requirement.max_sf

    if available < min_sf:
        return _fail(
            f"Insufficient space: property has {available:,.0f} SF available, requirement needs "
            f"at least {min_sf:,.0f} SF ({min_sf - available:,.0f} SF short)"
        )

    if max_sf is not None and available > max_sf and not _can_divide_to(listing, max_sf):
        return _fail(
            f"Excess space: property offers {available:,.0f} SF, requirement allows at most "
            f"{max_sf:,.0f} SF and the space cannot be divided"
        )
    return PASS


def check_building_class(listing: PropertyListing, requirement: OpportunityRequirement) -> CheckOutcome:
    allowed = [c.strip().upper() for c in requirement.building_classes if c]
    if not allowed:
        return PASS

    if not listing.building_class:
        return _fail(f"Building class unknown, opportunity requires class {'/'.join(allowed)}")
    if listing.building_class.strip().upper() not in allowed:
        return _fail(
            f"Class {listing.building_class.strip().upper()} building, "
            f"opportunity requires class {'/'.join(allowed)}"
        )
    return PASS


def check_timeline(listing: PropertyListing, requirement: OpportunityRequirement) -> CheckOutcome:
    occupancy = requirement.occupancy_date
    available = listing.available_date
    if occupancy is None or available is None:
        return PASS

    if available > occupancy:
        days_late = (available - occupancy).days
        return _fail(
            f"Space available {available.isoformat()}, after required occupancy "
            f"{occupancy.isoformat()} ({days_late} days late)"
        )
    return PASS


def _clearance_rank(level: Optional[str]) -> int:
    if not level:
        return 0
    normalized = level.strip().lower().replace(" ", "_").replace("-", "_")
    if normalized in CLEARANCE_LEVELS:
        return CLEARANCE_LEVELS.index(normalized)
    return 0


def check_mandatory_features(listing: PropertyListing, requirement: OpportunityRequirement) -> CheckOutcome:
    if requirement.ada_required and not listing.ada_compliant:
        return _fail("Opportunity requires ADA compliance, property is not compliant")

    if requirement.scif_required and not listing.scif_capable:
        return _fail("Opportunity requires SCIF capability, property lacks this feature")

    if requirement.clearance_required:
        if _clearance_rank(listing.security_clearance) < _clearance_rank(requirement.clearance_required):
            return _fail(f"Opportunity requires {requirement.clearance_required} clearance level")
    return PASS


def check_set_aside(listing: PropertyListing, requirement: OpportunityRequirement) -> CheckOutcome:
    if not requirement.set_aside:
        return PASS

    required = requirement.set_aside.strip().lower()
    if not any(s.strip().lower() == required for s in listing.set_aside_eligible):
        return _fail(f"Opportunity requires {requirement.set_aside} set-aside certification")
    return PASS


CONSTRAINT_REGISTRY: Dict[str, ConstraintCheck] = {
    check.name: check
    for check in (
        ConstraintCheck("geographic", check_geographic, "State and delineated area eligibility"),
        ConstraintCheck("space_bounds", check_space_bounds, "Available SF within requirement bounds"),
        ConstraintCheck("building_class", check_building_class, "Allowed building class"),
        ConstraintCheck("timeline", check_timeline, "Available by the occupancy date"),
        ConstraintCheck("mandatory_features", check_mandatory_features, "Mandatory ADA / SCIF / clearance"),
        ConstraintCheck("set_aside", check_set_aside, "Set-aside certification"),
    )
}


# ----------------------------
# Pipeline
# ----------------------------
@dataclass
class PipelineResult:
    qualified: bool
    total_checks: int
    passed_checks: List[str] = field(default_factory=list)
    failed_check: Optional[str] = None
    reason: str = ""
    stopped_at_stage: Optional[int] = None

    @property
    def computation_saved_pct(self) -> float:
        """Share of work skipped: unevaluated checks plus the scorer, out of checks + scorer."""
        if self.stopped_at_stage is None:
            return 0.0
        skipped = self.total_checks - self.stopped_at_stage
        return round(100.0 * skipped / (self.total_checks + 1), 1)


class MatchConstraintPipeline:
    """Runs ordered ConstraintChecks, stopping at the first failure."""

    def __init__(self, checks: Sequence[ConstraintCheck]):
        if not checks:
            raise ValueError("MatchConstraintPipeline needs at least one check")
        self.checks = list(checks)
        self._lock = threading.Lock()
        self._evaluated = {check.name: 0 for check in self.checks}
        self._failed = {check.name: 0 for check in self.checks}

    @classmethod
    def from_names(
        cls,
        names: Sequence[str],
        registry: Optional[Dict[str, ConstraintCheck]] = None
    ) -> "MatchConstraintPipeline":
        registry = registry if registry is not None else CONSTRAINT_REGISTRY
        unknown = [name for name in names if name not in registry]
        if unknown:
            raise ValueError(f"Unknown constraint check(s): {unknown}. Known: {sorted(registry)}")
        return cls([registry[name] for name in names])

    @property
    def names(self) -> List[str]:
        return [check.name for check in self.checks]

    def evaluate(self, listing: PropertyListing, requirement: OpportunityRequirement) -> PipelineResult:
        result = PipelineResult(qualified=True, total_checks=len(self.checks))

        for stage, check in enumerate(self.checks):
            outcome = check(listing, requirement)
            self._count(check.name, outcome.passed)

            if not outcome.passed:
                logger.debug(
                    f"Listing {listing.id} disqualified for {requirement.id} at "
                    f"stage {stage} ({check.name}): {outcome.reason}"
                )
                result.qualified = False
                result.failed_check = check.name
                result.reason = outcome.reason
                result.stopped_at_stage = stage
                return result

            result.passed_checks.append(check.name)

        return result

    def stats(self) -> Dict[str, Dict[str, int]]:
        with self._lock:
            return {
                name: {"evaluated": self._evaluated[name], "failed": self._failed[name]}
                for name in self._evaluated
            }

    def reset_stats(self) -> None:
        with self._lock:
            for name in self._evaluated:
                self._evaluated[name] = 0
                self._failed[name] = 0

    def _count(self, name: str, passed: bool) -> None:
        with self._lock:
            self._evaluated[name] += 1
            if not passed:
                self._failed[name] += 1
