#!/usr/bin/env python3
"""
Response models for API endpoints.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Dict, Any


class ScoreResponseModel(BaseModel):
    """A single neighborhood or match score."""
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": True,
                "data": {"score": 72.4, "grade": "B", "percentile": 61.5},
                "cached": False,
                "hit_count": 0
            }
        }
    )

    success: bool = True
    data: Dict[str, Any]
    cached: bool = False
    hit_count: int = 0


class BatchItemModel(BaseModel):
    """Outcome of one batch item; failures carry error and type."""
    success: bool
    item: Dict[str, Any] = Field(default_factory=dict)
    data: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    error_type: Optional[str] = None
    cached: bool = False


class BatchSummary(BaseModel):
    total: int
    succeeded: int
    failed: int
    cached: int


class BatchResponse(BaseModel):
    success: bool = True
    results: List[BatchItemModel]
    summary: BatchSummary


class InvalidateResponse(BaseModel):
    success: bool = True
    deleted: int


class SweepResponse(BaseModel):
    success: bool = True
    deleted: int


class CacheStatsResponse(BaseModel):
    success: bool = True
    stats: Dict[str, Any]
