"""Spatial Module - R-tree index over government property records."""
from core.spatial.models import GovernmentPropertyRecord, Ownership
from core.spatial.index import SpatialIndex

__all__ = ['SpatialIndex', 'GovernmentPropertyRecord', 'Ownership']
