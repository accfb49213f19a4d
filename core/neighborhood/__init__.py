#!/usr/bin/env python3
"""
Neighborhood Module - Federal neighborhood score.

Public API:
- NeighborhoodScoreEngine: queries the spatial index and scores a location
- NeighborhoodScoreResult: score, grade, percentile, metrics and factors
- ReferenceDistribution / InMemoryReferenceDistribution: percentile sources

Modules:
- models.py: result data structures
- factors.py: metrics aggregation and the six factor curves
- percentile.py: reference distributions
- service.py: NeighborhoodScoreEngine
"""

from core.neighborhood.models import FactorScore, NeighborhoodMetrics, NeighborhoodScoreResult
from core.neighborhood.percentile import ReferenceDistribution, InMemoryReferenceDistribution
from core.neighborhood.service import NeighborhoodScoreEngine

__all__ = [
    'NeighborhoodScoreEngine',
    'NeighborhoodScoreResult',
    'NeighborhoodMetrics',
    'FactorScore',
    'ReferenceDistribution',
    'InMemoryReferenceDistribution',
]
