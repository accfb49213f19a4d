#!/usr/bin/env python3
"""
Matching Module - Property to lease-opportunity matching.

Public API:
- MatchEngine: constraint pipeline + scorer, the usual entry point
- MatchScoreEngine: 5-category weighted scorer for qualified pairs
- MatchConstraintPipeline: ordered early-termination checks

Modules:
- models.py: listings, requirements, broker experience, results
- constraints.py: disqualification checks and the pipeline
- factors.py: category scorers
- insights.py: strengths, weaknesses, recommendations
- service.py: MatchScoreEngine and MatchEngine
"""

from core.matching.constraints import CONSTRAINT_REGISTRY, ConstraintCheck, MatchConstraintPipeline
from core.matching.models import (
    BrokerExperience,
    CategoryScore,
    DelineatedArea,
    EarlyTermination,
    MatchScoreResult,
    OpportunityRequirement,
    PropertyListing,
)
from core.matching.service import MatchEngine, MatchScoreEngine

__all__ = [
    'MatchEngine',
    'MatchScoreEngine',
    'MatchConstraintPipeline',
    'ConstraintCheck',
    'CONSTRAINT_REGISTRY',
    'PropertyListing',
    'OpportunityRequirement',
    'DelineatedArea',
    'BrokerExperience',
    'CategoryScore',
    'EarlyTermination',
    'MatchScoreResult',
]
