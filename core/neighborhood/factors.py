#!/usr/bin/env python3
"""
Neighborhood Factors - six weighted factors for federal leasing potential.

Key behavior:
- Every factor is monotonic and saturating in [0, 100]; raw counts never
  produce unbounded scores.
- Density is damped by a sample-size confidence term so a single property in
  a tiny radius does not read as a dense federal market.
- Expiring leases are weighted by how soon they expire inside the forward
  window (1.0 for "now", ``expiring_weight_floor`` at the window edge).
- Vacancy is inverted: less vacant federal space scores higher.
"""

import math
from datetime import date
from typing import Dict, Iterable

from core.config_loader import NeighborhoodConfig
from core.geo import circle_area_sq_miles
from core.neighborhood.models import FactorScore, NeighborhoodMetrics
from core.spatial.models import GovernmentPropertyRecord

DAYS_PER_MONTH = 30.4375


def saturate(value: float, half: float) -> float:
    """100 * (1 - 2^(-value/half)): 0 at 0, 50 at ``half``, approaches 100."""
    if value <= 0 or half <= 0:
        return 0.0
    return 100.0 * (1.0 - 2.0 ** (-value / half))


def _factor(score: float, weight: float, explanation: str) -> FactorScore:
    score = round(max(0.0, min(100.0, score)), 1)
    return FactorScore(
        score=score,
        weight=weight,
        weighted=round(score * weight, 4),
        explanation=explanation,
    )


def expiring_lease_weight(
    expiration: date,
    as_of: date,
    window_months: int,
    floor: float
) -> float:
    """Weight of one lease expiring on ``expiration``; 0 outside [as_of, as_of + window]."""
    months_until = (expiration - as_of).days / DAYS_PER_MONTH
    if months_until < 0 or months_until > window_months:
        return 0.0
    return 1.0 - (1.0 - floor) * (months_until / window_months)


def calculate_metrics(
    records: Iterable[GovernmentPropertyRecord],
    radius_miles: float,
    as_of: date,
    config: NeighborhoodConfig
) -> NeighborhoodMetrics:
    """Aggregate raw counts over the records found inside the search radius."""
    metrics = NeighborhoodMetrics(search_radius_miles=radius_miles)
    recent_cutoff_year = as_of.year - config.recent_construction_years

    for record in records:
        metrics.total_properties += 1
        metrics.total_rsf += max(0.0, record.rsf or 0.0)
        metrics.vacant_rsf += max(0.0, record.vacant_rsf or 0.0)

        if record.is_leased:
            metrics.leased_properties += 1
            if record.lease_expiration is not None:
                weight = expiring_lease_weight(
                    record.lease_expiration,
                    as_of,
                    config.expiring_window_months,
                    config.expiring_weight_floor
                )
                if weight > 0:
                    metrics.expiring_leases_count += 1
                    metrics.expiring_leases_rsf += max(0.0, record.rsf or 0.0)
                    metrics.expiring_lease_weight += weight
        else:
            metrics.owned_properties += 1

        if record.construction_year and record.construction_year >= recent_cutoff_year:
            metrics.recent_construction_count += 1

    metrics.expiring_lease_weight = round(metrics.expiring_lease_weight, 4)
    return metrics


def density_score(metrics: NeighborhoodMetrics, config: NeighborhoodConfig) -> FactorScore:
    area = circle_area_sq_miles(metrics.search_radius_miles)
    per_sq_mile = metrics.total_properties / area if area > 0 else 0.0
    confidence = 1.0 - math.exp(-metrics.total_properties / config.density_confidence_scale)
    score = saturate(per_sq_mile, config.density_half_per_sq_mile) * confidence

    return _factor(
        score,
        config.weights.density,
        f"{metrics.total_properties} federal properties in {metrics.search_radius_miles:g}-mile radius "
        f"({per_sq_mile:.2f} per sq mi)"
    )


def lease_activity_score(metrics: NeighborhoodMetrics, config: NeighborhoodConfig) -> FactorScore:
    weight = config.weights.lease_activity
    if metrics.total_properties == 0:
        return _factor(0.0, weight, "No federal properties found")

    share = metrics.leased_properties / metrics.total_properties
    count_part = saturate(metrics.leased_properties, config.leased_count_half)
    score = config.lease_count_share * count_part + (1.0 - config.lease_count_share) * share * 100.0

    return _factor(
        score,
        weight,
        f"{share * 100:.1f}% leased ({metrics.leased_properties} leased, {metrics.owned_properties} owned)"
    )


def expiring_leases_score(metrics: NeighborhoodMetrics, config: NeighborhoodConfig) -> FactorScore:
    score = saturate(metrics.expiring_lease_weight, config.expiring_half)
    return _factor(
        score,
        config.weights.expiring_leases,
        f"{metrics.expiring_leases_count} leases expiring in {config.expiring_window_months} months "
        f"({metrics.expiring_leases_rsf / 1000:.0f}K RSF)"
    )


def demand_score(metrics: NeighborhoodMetrics, config: NeighborhoodConfig) -> FactorScore:
    score = saturate(metrics.total_rsf, config.demand_rsf_half)
    return _factor(
        score,
        config.weights.demand,
        f"{metrics.total_rsf / 1000:.0f}K total RSF of federal space"
    )


def vacancy_score(metrics: NeighborhoodMetrics, config: NeighborhoodConfig) -> FactorScore:
    weight = config.weights.vacancy
    if metrics.total_rsf <= 0:
        return _factor(0.0, weight, "No federal space found")

    rate = min(1.0, metrics.vacant_rsf / metrics.total_rsf)
    score = 100.0 * math.exp(-rate / config.vacancy_decay)

    return _factor(
        score,
        weight,
        f"{rate * 100:.1f}% vacant ({metrics.vacant_rsf / 1000:.0f}K RSF)"
    )


def growth_score(metrics: NeighborhoodMetrics, config: NeighborhoodConfig) -> FactorScore:
    weight = config.weights.growth
    if metrics.total_properties == 0:
        return _factor(0.0, weight, "No federal properties found")

    score = saturate(metrics.recent_construction_count, config.growth_half)
    return _factor(
        score,
        weight,
        f"{metrics.recent_construction_count} new properties in last {config.recent_construction_years} years"
    )


FACTOR_FUNCTIONS = {
    "density": density_score,
    "lease_activity": lease_activity_score,
    "expiring_leases": expiring_leases_score,
    "demand": demand_score,
    "vacancy": vacancy_score,
    "growth": growth_score,
}


def calculate_factors(metrics: NeighborhoodMetrics, config: NeighborhoodConfig) -> Dict[str, FactorScore]:
    return {name: fn(metrics, config) for name, fn in FACTOR_FUNCTIONS.items()}


def weighted_total(factors: Dict[str, FactorScore]) -> float:
    """Sum of weighted contributions, rounded to one decimal and clamped."""
    total = sum(f.score * f.weight for f in factors.values())
    return round(max(0.0, min(100.0, total)), 1)
