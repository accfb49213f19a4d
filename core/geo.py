#!/usr/bin/env python3
"""
Geodesic helpers for the spatial index and location scoring.

U.S. geography only: bounding boxes are not split at the antimeridian and
no special handling is done near the poles.
"""

import math
from dataclasses import dataclass

import numpy as np

EARTH_RADIUS_MILES = 3959.0

# Keeps the longitude span finite for points very close to a pole
_MIN_COS_LAT = 1e-6


@dataclass(frozen=True)
class BoundingBox:
    min_lat: float
    min_lng: float
    max_lat: float
    max_lng: float

    def intersects(self, other: "BoundingBox") -> bool:
        return not (
            self.max_lat < other.min_lat
            or self.min_lat > other.max_lat
            or self.max_lng < other.min_lng
            or self.min_lng > other.max_lng
        )

    def contains_point(self, lat: float, lng: float) -> bool:
        return self.min_lat <= lat <= self.max_lat and self.min_lng <= lng <= self.max_lng

    def as_array(self) -> np.ndarray:
        return np.array([self.min_lat, self.min_lng, self.max_lat, self.max_lng], dtype=float)


def haversine_miles(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance in miles."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * EARTH_RADIUS_MILES * math.asin(min(1.0, math.sqrt(a)))


def haversine_miles_array(lat: float, lng: float, lats: np.ndarray, lngs: np.ndarray) -> np.ndarray:
    """Vectorized great-circle distance from one point to many (miles)."""
    phi1 = np.radians(lat)
    phi2 = np.radians(lats)
    d_phi = phi2 - phi1
    d_lambda = np.radians(lngs - lng)

    a = np.sin(d_phi / 2) ** 2 + np.cos(phi1) * np.cos(phi2) * np.sin(d_lambda / 2) ** 2
    return 2 * EARTH_RADIUS_MILES * np.arcsin(np.minimum(1.0, np.sqrt(a)))


def radius_bounding_box(lat: float, lng: float, radius_miles: float) -> BoundingBox:
    """Box enclosing a spherical cap, with longitude widened for latitude.

    Uses asin(sin(r/R) / cos(lat)) rather than the flat-earth r/R/cos(lat)
    so the box never clips points that are exactly on the circle.
    """
    angular = radius_miles / EARTH_RADIUS_MILES
    lat_delta = math.degrees(angular)
    cos_lat = max(_MIN_COS_LAT, math.cos(math.radians(lat)))
    ratio = math.sin(angular) / cos_lat
    lng_delta = 180.0 if ratio >= 1.0 else math.degrees(math.asin(ratio))

    return BoundingBox(
        min_lat=lat - lat_delta,
        min_lng=lng - lng_delta,
        max_lat=lat + lat_delta,
        max_lng=lng + lng_delta,
    )


def circle_area_sq_miles(radius_miles: float) -> float:
    return math.pi * radius_miles * radius_miles
