#!/usr/bin/env python3
"""
Neighborhood score endpoints.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from core.scoring_service import ScoringService
from ..dependencies import get_scoring_service
from ..models.requests import NeighborhoodBatchRequest
from ..models.responses import BatchResponse, ScoreResponseModel
from ..utils import BATCH_RATE_LIMIT, batch_response, limiter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/neighborhood-score", tags=["neighborhood"])


@router.get("", response_model=ScoreResponseModel)
def get_neighborhood_score(
    lat: float = Query(..., description="Latitude in degrees"),
    lng: float = Query(..., description="Longitude in degrees"),
    radius: Optional[float] = Query(default=None, description="Search radius in miles (default 5)"),
    service: ScoringService = Depends(get_scoring_service)
):
    """
    Federal neighborhood score for a location.

    Served from the 24h cache when the same rounded location and radius
    was scored recently.
    """
    response = service.neighborhood_score(lat, lng, radius)
    return ScoreResponseModel(data=response.data, cached=response.cached, hit_count=response.hit_count)


@router.post("/batch", response_model=BatchResponse)
@limiter.limit(BATCH_RATE_LIMIT)
def batch_neighborhood_scores(
    request: Request,
    body: NeighborhoodBatchRequest,
    service: ScoringService = Depends(get_scoring_service)
):
    """
    Score up to 50 locations. Invalid items fail individually.
    """
    results = service.neighborhood_batch([item.model_dump() for item in body.locations])
    return batch_response(results)
