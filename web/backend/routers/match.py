#!/usr/bin/env python3
"""
Property match endpoints - score a listing against a lease opportunity.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from core.scoring_service import ScoringService
from ..dependencies import get_scoring_service
from ..models.requests import MatchBatchRequest, MatchPair
from ..models.responses import BatchResponse, InvalidateResponse, ScoreResponseModel
from ..utils import BATCH_RATE_LIMIT, batch_response, limiter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/property-match", tags=["property-match"])


@router.get("", response_model=ScoreResponseModel)
def get_property_match(
    property_id: str = Query(..., description="Broker listing ID"),
    opportunity_id: str = Query(..., description="Opportunity ID"),
    service: ScoringService = Depends(get_scoring_service)
):
    """
    Match score for one pair, cached for 24h.

    A disqualified pair is a successful response with ``qualified: false``.
    """
    response = service.match_score(property_id, opportunity_id)
    return ScoreResponseModel(data=response.data, cached=response.cached, hit_count=response.hit_count)


@router.post("", response_model=ScoreResponseModel)
def recalculate_property_match(
    body: MatchPair,
    service: ScoringService = Depends(get_scoring_service)
):
    """Recompute a pair, bypassing and then refreshing the cache."""
    response = service.match_score(body.property_id, body.opportunity_id, use_cache=False)
    return ScoreResponseModel(data=response.data, cached=False)


@router.delete("", response_model=InvalidateResponse)
def invalidate_property_match(
    property_id: str = Query(..., description="Broker listing ID"),
    opportunity_id: Optional[str] = Query(default=None, description="Opportunity ID; omit to clear every match for the listing"),
    service: ScoringService = Depends(get_scoring_service)
):
    """Drop cached match scores after a listing or opportunity changes."""
    deleted = service.invalidate_match(property_id, opportunity_id)
    logger.info(f"Invalidated {deleted} cached matches for property {property_id}")
    return InvalidateResponse(deleted=deleted)


@router.post("/batch", response_model=BatchResponse)
@limiter.limit(BATCH_RATE_LIMIT)
def batch_property_matches(
    request: Request,
    body: MatchBatchRequest,
    service: ScoringService = Depends(get_scoring_service)
):
    """Score up to 50 pairs. Missing IDs fail individually with NotFoundError."""
    results = service.match_batch([pair.model_dump() for pair in body.pairs])
    return batch_response(results)
