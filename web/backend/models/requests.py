#!/usr/bin/env python3
"""
Request models for API endpoints.

Coordinates and batch sizes are deliberately unconstrained here: range and
size checks live in ScoringService so a bad batch item fails on its own
instead of rejecting the whole request.
"""

from pydantic import BaseModel, Field
from typing import Any, List, Optional


class LocationItem(BaseModel):
    """One location in a neighborhood batch."""
    latitude: Any = Field(None, description="Latitude in degrees (-90 to 90)")
    longitude: Any = Field(None, description="Longitude in degrees (-180 to 180)")
    radius_miles: Optional[Any] = Field(None, description="Search radius in miles (0-100], default 5")


class NeighborhoodBatchRequest(BaseModel):
    """Batch of locations to score (at most 50)."""
    locations: List[LocationItem]


class MatchPair(BaseModel):
    """A (property, opportunity) pair to score."""
    property_id: Optional[str] = Field(None, description="Broker listing ID")
    opportunity_id: Optional[str] = Field(None, description="Opportunity ID")


class MatchBatchRequest(BaseModel):
    """Batch of pairs to score (at most 50)."""
    pairs: List[MatchPair]
