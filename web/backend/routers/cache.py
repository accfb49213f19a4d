#!/usr/bin/env python3
"""
Score cache maintenance endpoints.
"""

import logging

from fastapi import APIRouter, Depends

from core.scoring_service import ScoringService
from ..dependencies import get_scoring_service
from ..models.responses import CacheStatsResponse, SweepResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/cache", tags=["cache"])


@router.get("/stats", response_model=CacheStatsResponse)
def get_cache_stats(service: ScoringService = Depends(get_scoring_service)):
    """Hit/miss counters, backend and entry count."""
    return CacheStatsResponse(stats=service.cache_stats())


@router.post("/sweep", response_model=SweepResponse)
def sweep_cache(service: ScoringService = Depends(get_scoring_service)):
    """Delete expired entries (normally run on a schedule via ``main.py sweep``)."""
    deleted = service.sweep_cache()
    return SweepResponse(deleted=deleted)
