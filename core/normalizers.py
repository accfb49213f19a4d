#!/usr/bin/env python3
"""
Normalizers - loosely-typed rows to typed core entities.

Listing and opportunity rows come from the web application's JSON columns
(snake_case columns plus a camelCase ``full_data`` blob for opportunities);
property records come from IOLP building/lease feature attributes. Each
function fills documented defaults for missing fields so the engines never
see partially-typed input.
"""

import logging
from datetime import date
from typing import Any, Dict, Optional

from core.errors import ValidationError
from core.matching.models import (
    BrokerExperience,
    DelineatedArea,
    OpportunityRequirement,
    PropertyListing,
)
from core.spatial.models import GovernmentPropertyRecord, Ownership
from core.utils import as_bool, as_float, as_tuple, parse_date

logger = logging.getLogger(__name__)

DEFAULT_BUILDING_CLASS = "B"


def _nested(data: Dict[str, Any], *path: str) -> Any:
    for part in path:
        if not isinstance(data, dict):
            return None
        data = data.get(part)
    return data


def _upper(value: Any) -> Optional[str]:
    return str(value).strip().upper() if value else None


def listing_from_row(row: Dict[str, Any], today: Optional[date] = None) -> PropertyListing:
    """
    Build a PropertyListing from a broker listing row.

    Defaults: building class 'B', availability today, boolean features False.
    """
    if not row.get("id"):
        raise ValidationError("Listing row has no id", field="id")

    parking_ratio = as_float(row.get("parking_ratio"))
    return PropertyListing(
        id=str(row["id"]),
        state=_upper(row.get("state")),
        city=row.get("city"),
        latitude=as_float(row.get("latitude")),
        longitude=as_float(row.get("longitude")),
        available_sf=as_float(row.get("available_sf"), 0.0),
        total_sf=as_float(row.get("total_sf"), 0.0),
        min_divisible_sf=as_float(row.get("min_divisible_sf")),
        contiguous=as_bool(row.get("contiguous"), True),
        building_class=_upper(row.get("building_class")) or DEFAULT_BUILDING_CLASS,
        ada_compliant=as_bool(row.get("ada_compliant")),
        leed_certified=as_bool(row.get("leed_certified")),
        scif_capable=as_bool(row.get("scif_capable")),
        security_clearance=row.get("security_clearance"),
        fiber=as_bool(row.get("fiber_connectivity", row.get("fiber"))),
        backup_power=as_bool(row.get("backup_power")),
        parking_ratio=parking_ratio if parking_ratio else None,
        available_date=parse_date(row.get("available_date")) or today or date.today(),
        lease_term_years=as_float(row.get("lease_term_years")),
        build_to_suit=as_bool(row.get("build_to_suit")),
        set_aside_eligible=as_tuple(row.get("set_aside_eligible")),
    )


def _delineated_area(raw: Any) -> Optional[DelineatedArea]:
    if not isinstance(raw, dict):
        return None
    latitude = as_float(raw.get("latitude"))
    longitude = as_float(raw.get("longitude"))
    radius = as_float(raw.get("radiusMiles", raw.get("radius_miles")))
    if latitude is None or longitude is None or not radius:
        logger.warning(f"Ignoring incomplete delineated area: {raw}")
        return None
    return DelineatedArea(latitude=latitude, longitude=longitude, radius_miles=radius)


def requirement_from_row(row: Dict[str, Any]) -> OpportunityRequirement:
    """
    Build an OpportunityRequirement from an opportunity row.

    Column values win over ``full_data``. The occupancy date falls back to
    the response deadline, and ADA is required unless explicitly waived.
    """
    if not row.get("id"):
        raise ValidationError("Opportunity row has no id", field="id")

    full = row.get("full_data") or {}
    building_classes = full.get("buildingClass") or ()

    return OpportunityRequirement(
        id=str(row["id"]),
        notice_id=row.get("notice_id"),
        title=row.get("title"),
        agency=row.get("department") or full.get("department"),
        state=_upper(row.get("pop_state_code") or _nested(full, "placeOfPerformance", "state", "code")),
        city=row.get("pop_city_name") or _nested(full, "placeOfPerformance", "city", "name"),
        delineated_area=_delineated_area(full.get("delineatedArea")),
        min_sf=as_float(full.get("minimumRSF")),
        max_sf=as_float(full.get("maximumRSF")),
        target_sf=as_float(full.get("targetRSF")),
        contiguous_required=as_bool(full.get("contiguousRequired")),
        building_classes=tuple(c.strip().upper() for c in as_tuple(building_classes)),
        ada_required=as_bool(full.get("adaRequired"), True),
        scif_required=as_bool(full.get("scifRequired")),
        clearance_required=full.get("clearanceRequired"),
        set_aside=row.get("type_of_set_aside") or full.get("typeOfSetAside"),
        leed_required=as_bool(full.get("leedRequired")),
        fiber=as_bool(full.get("fiber")),
        backup_power=as_bool(full.get("backupPower")),
        parking_ratio=as_float(full.get("parkingRatio")),
        occupancy_date=parse_date(full.get("occupancyDate") or row.get("response_deadline")),
        lease_term_years=as_float(full.get("leaseTermYears")),
    )


def broker_experience_from_profile(profile: Optional[Dict[str, Any]]) -> Optional[BrokerExperience]:
    """Broker profile row to BrokerExperience; a missing profile stays None."""
    if not profile:
        return None
    return BrokerExperience(
        government_leases_count=int(as_float(profile.get("government_leases_count"), 0.0)),
        gsa_certified=as_bool(profile.get("gsa_certified")),
        years_in_business=as_float(profile.get("years_in_business"), 0.0),
        total_portfolio_sf=as_float(
            profile.get("total_portfolio_sqft", profile.get("total_portfolio_sf")), 0.0
        ),
        references=as_tuple(profile.get("gov_references", profile.get("references"))),
        agencies_served=as_tuple(profile.get("agencies_served")),
    )


def property_record_from_iolp(attributes: Dict[str, Any], ownership: Ownership) -> Optional[GovernmentPropertyRecord]:
    """
    IOLP building or lease feature attributes to a GovernmentPropertyRecord.

    Features without coordinates are skipped (None); they cannot be indexed.
    """
    latitude = as_float(attributes.get("LATITUDE"))
    longitude = as_float(attributes.get("LONGITUDE"))
    if latitude is None or longitude is None:
        return None

    prefix = "lease" if ownership == Ownership.LEASED else "building"
    year = as_float(attributes.get("YEAR_BUILT"))
    return GovernmentPropertyRecord(
        id=f"{prefix}_{attributes.get('OBJECTID')}",
        latitude=latitude,
        longitude=longitude,
        ownership=ownership,
        rsf=as_float(attributes.get("RSF"), 0.0),
        lease_expiration=parse_date(attributes.get("EXPIRATION_DATE")) if ownership == Ownership.LEASED else None,
        agency=attributes.get("AGENCY"),
        vacant_rsf=as_float(attributes.get("VACANT_RSF"), 0.0),
        construction_year=int(year) if year else None,
        city=attributes.get("CITY"),
        state=_upper(attributes.get("STATE")),
    )
