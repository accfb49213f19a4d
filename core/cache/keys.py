"""Normalized cache keys for both score types."""
from urllib.parse import quote

NEIGHBORHOOD_PREFIX = "neighborhood"
MATCH_PREFIX = "match"


def _coordinate(value: float, precision: int) -> str:
    rounded = round(float(value), precision)
    # -0.0 and 0.0 must share a key
    if rounded == 0:
        rounded = 0.0
    return f"{rounded:.{precision}f}"


def neighborhood_key(latitude: float, longitude: float, radius_miles: float, precision: int = 4) -> str:
    """``neighborhood:{lat}:{lng}:{radius}`` with coordinates rounded to ``precision`` decimals."""
    return (
        f"{NEIGHBORHOOD_PREFIX}:{_coordinate(latitude, precision)}:"
        f"{_coordinate(longitude, precision)}:{float(radius_miles):g}"
    )


def _component(value: str) -> str:
    # ":" separates key parts, so IDs are percent-encoded
    return quote(str(value), safe="")


def match_key(property_id: str, opportunity_id: str) -> str:
    return f"{MATCH_PREFIX}:{_component(property_id)}:{_component(opportunity_id)}"


def match_prefix(property_id: str) -> str:
    """Prefix shared by every cached match for one listing."""
    return f"{MATCH_PREFIX}:{_component(property_id)}:"
