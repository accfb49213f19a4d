#!/usr/bin/env python3
"""
Spatial Models - Government property records held by the spatial index.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional


class Ownership(str, Enum):
    LEASED = "leased"
    OWNED = "owned"


@dataclass(frozen=True)
class GovernmentPropertyRecord:
    """One owned building or leased space from the federal inventory."""
    id: str
    latitude: float
    longitude: float
    ownership: Ownership
    rsf: float = 0.0
    lease_expiration: Optional[date] = None
    agency: Optional[str] = None
    vacant_rsf: float = 0.0
    construction_year: Optional[int] = None
    city: Optional[str] = None
    state: Optional[str] = None

    @property
    def is_leased(self) -> bool:
        return self.ownership == Ownership.LEASED
