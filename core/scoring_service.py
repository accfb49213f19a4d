#!/usr/bin/env python3
"""
Scoring Service - Cache-through orchestration of both scoring engines.

This is the validation boundary of the core: coordinates, radii, IDs and
batch sizes are checked here, before an engine runs. Engines only ever see
valid input.

Flow per request:
1. Validate input (ValidationError, never retried)
2. ScoreCache.get(key): a hit returns the cached payload
3. Miss: run the engine (index query + NeighborhoodScoreEngine, or
   constraint pipeline + MatchScoreEngine)
4. ScoreCache.put(key, payload, 24h) and return

Batches process each item independently: one failure becomes a failed
BatchItemResult and never aborts its siblings.
"""

import logging
import math
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from core.cache.keys import match_key, match_prefix, neighborhood_key
from core.cache.score_cache import ScoreCache
from core.config_loader import AppConfig
from core.errors import ComputationError, NotFoundError, ScoringError, ValidationError
from core.interfaces import ListingStore
from core.matching.models import (
    BrokerExperience,
    MatchScoreResult,
    OpportunityRequirement,
    PropertyListing,
)
from core.matching.service import MatchEngine
from core.neighborhood.service import NeighborhoodScoreEngine
from core.results import BatchItemResult, ScoreResponse

logger = logging.getLogger(__name__)


def _number(value: Any, field_name: str) -> float:
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"{field_name} must be a number", field=field_name)
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number, got {value!r}", field=field_name)
    if not math.isfinite(number):
        raise ValidationError(f"{field_name} must be finite", field=field_name)
    return number


def _identifier(value: Any, field_name: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field_name} is required", field=field_name)
    return str(value).strip()


def _batch_fields(raw: Any, fields: Sequence[str]) -> Optional[Dict[str, Any]]:
    """Pick ``fields`` from a batch item, or None when the item is not a mapping."""
    if not isinstance(raw, Mapping):
        return None
    return {name: raw.get(name) for name in fields}


def _malformed_item(raw: Any) -> BatchItemResult:
    logger.warning(f"Batch item {raw!r} is not an object")
    return BatchItemResult.failed(
        {}, ValidationError(f"Batch item must be an object, got {type(raw).__name__}", field="items")
    )


class ScoringService:
    """
    Validation, caching and batching in front of the engines.

    Args:
        neighborhood_engine: NeighborhoodScoreEngine over the loaded index
        match_engine: MatchEngine (constraint pipeline + scorer)
        listing_store: Read-only ListingStore for match lookups
        cache: Optional ScoreCache; None disables caching
        config: AppConfig for limits and batch size
    """

    def __init__(
        self,
        neighborhood_engine: NeighborhoodScoreEngine,
        match_engine: MatchEngine,
        listing_store: ListingStore,
        cache: Optional[ScoreCache] = None,
        config: Optional[AppConfig] = None
    ):
        self.neighborhood_engine = neighborhood_engine
        self.match_engine = match_engine
        self.listing_store = listing_store
        self.cache = cache
        self.config = config or AppConfig()

    # ----------------------------
    # Validation
    # ----------------------------
    def validate_location(self, latitude: Any, longitude: Any, radius_miles: Any = None) -> tuple:
        """Return (lat, lng, radius) as floats or raise ValidationError."""
        lat = _number(latitude, "latitude")
        lng = _number(longitude, "longitude")
        if not -90.0 <= lat <= 90.0:
            raise ValidationError(f"latitude must be between -90 and 90, got {lat}", field="latitude")
        if not -180.0 <= lng <= 180.0:
            raise ValidationError(f"longitude must be between -180 and 180, got {lng}", field="longitude")

        if radius_miles is None:
            radius = self.config.neighborhood.default_radius_miles
        else:
            radius = _number(radius_miles, "radius_miles")
        max_radius = self.config.limits.max_radius_miles
        if not 0.0 < radius <= max_radius:
            raise ValidationError(
                f"radius_miles must be greater than 0 and at most {max_radius:g}, got {radius}",
                field="radius_miles"
            )
        return lat, lng, radius

    def _check_batch_size(self, items: List[Any]) -> None:
        max_items = self.config.batch.max_items
        if not items:
            raise ValidationError("Batch must contain at least one item", field="items")
        if len(items) > max_items:
            raise ValidationError(
                f"Batch of {len(items)} exceeds the maximum of {max_items} items",
                field="items"
            )

    # ----------------------------
    # Cache plumbing
    # ----------------------------
    def _cached(self, key: str) -> Optional[ScoreResponse]:
        if self.cache is None:
            return None
        entry = self.cache.get(key)
        if entry is None:
            return None
        return ScoreResponse(data=entry.payload, cached=True, hit_count=entry.hit_count)

    def _store(self, key: str, payload: Dict[str, Any], projections: Dict[str, Any]) -> None:
        if self.cache is not None:
            self.cache.put(key, payload, projections=projections)

    def _compute(self, label: str, fn: Callable[[], Any]) -> Any:
        try:
            return fn()
        except ScoringError:
            raise
        except Exception as e:
            logger.error(f"Error computing {label}: {e}", exc_info=True)
            raise ComputationError(f"Failed to compute {label}: {e}") from e

    # ----------------------------
    # Neighborhood
    # ----------------------------
    def neighborhood_score(
        self,
        latitude: Any,
        longitude: Any,
        radius_miles: Any = None,
        use_cache: bool = True
    ) -> ScoreResponse:
        lat, lng, radius = self.validate_location(latitude, longitude, radius_miles)
        key = neighborhood_key(lat, lng, radius, self.config.cache.coordinate_precision)

        if use_cache:
            cached = self._cached(key)
            if cached is not None:
                return cached

        result = self._compute(
            f"neighborhood score for ({lat}, {lng})",
            lambda: self.neighborhood_engine.score_location(lat, lng, radius)
        )
        payload = result.to_dict()
        self._store(key, payload, {
            "overall_score": result.score,
            "grade": result.grade,
            "percentile": result.percentile,
        })
        return ScoreResponse(data=payload, cached=False)

    def neighborhood_batch(self, locations: List[Dict[str, Any]]) -> List[BatchItemResult]:
        """Score up to ``batch.max_items`` locations; each item succeeds or fails on its own."""
        self._check_batch_size(locations)

        results: List[BatchItemResult] = []
        for location in locations:
            item = _batch_fields(location, ("latitude", "longitude", "radius_miles"))
            if item is None:
                results.append(_malformed_item(location))
                continue
            results.append(self._batch_item(
                item,
                lambda: self.neighborhood_score(item["latitude"], item["longitude"], item["radius_miles"])
            ))

        succeeded = sum(1 for r in results if r.success)
        logger.info(f"Neighborhood batch: {succeeded}/{len(results)} succeeded")
        return results

    # ----------------------------
    # Match
    # ----------------------------
    def _load_pair(self, property_id: str, opportunity_id: str):
        listing = self.listing_store.get_listing(property_id)
        if listing is None:
            raise NotFoundError(f"Property {property_id} not found", resource="property", resource_id=property_id)

        requirement = self.listing_store.get_opportunity(opportunity_id)
        if requirement is None:
            raise NotFoundError(
                f"Opportunity {opportunity_id} not found",
                resource="opportunity",
                resource_id=opportunity_id
            )

        experience = self.listing_store.get_broker_experience(property_id)
        return listing, requirement, experience

    def match_score(self, property_id: Any, opportunity_id: Any, use_cache: bool = True) -> ScoreResponse:
        property_id = _identifier(property_id, "property_id")
        opportunity_id = _identifier(opportunity_id, "opportunity_id")
        key = match_key(property_id, opportunity_id)

        if use_cache:
            cached = self._cached(key)
            if cached is not None:
                return cached

        listing, requirement, experience = self._load_pair(property_id, opportunity_id)
        result = self._compute(
            f"match score for {property_id}/{opportunity_id}",
            lambda: self.match_engine.match(listing, requirement, experience)
        )
        payload = result.to_dict()
        self._store(key, payload, {
            "overall_score": result.overall_score,
            "grade": result.grade,
            "qualified": result.qualified,
        })
        return ScoreResponse(data=payload, cached=False)

    def score_pair(
        self,
        listing: PropertyListing,
        requirement: OpportunityRequirement,
        experience: Optional[BrokerExperience] = None
    ) -> MatchScoreResult:
        """Score an in-hand pair without the store or the cache."""
        return self._compute(
            f"match score for {listing.id}/{requirement.id}",
            lambda: self.match_engine.match(listing, requirement, experience)
        )

    def match_batch(self, pairs: List[Dict[str, Any]]) -> List[BatchItemResult]:
        self._check_batch_size(pairs)

        results: List[BatchItemResult] = []
        for pair in pairs:
            item = _batch_fields(pair, ("property_id", "opportunity_id"))
            if item is None:
                results.append(_malformed_item(pair))
                continue
            results.append(self._batch_item(
                item,
                lambda: self.match_score(item["property_id"], item["opportunity_id"])
            ))

        succeeded = sum(1 for r in results if r.success)
        logger.info(f"Match batch: {succeeded}/{len(results)} succeeded")
        return results

    def invalidate_match(self, property_id: Any, opportunity_id: Any = None) -> int:
        """Drop cached matches for one pair, or for every opportunity of a listing."""
        property_id = _identifier(property_id, "property_id")
        if self.cache is None:
            return 0
        if opportunity_id is not None and str(opportunity_id).strip():
            return int(self.cache.delete(match_key(property_id, str(opportunity_id).strip())))
        return self.cache.delete_prefix(match_prefix(property_id))

    # ----------------------------
    # Maintenance
    # ----------------------------
    def sweep_cache(self) -> int:
        if self.cache is None:
            return 0
        return self.cache.sweep()

    def cache_stats(self) -> Dict[str, Any]:
        if self.cache is None:
            return {"enabled": False}
        stats = self.cache.stats()
        stats["enabled"] = True
        return stats

    def _batch_item(self, item: Dict[str, Any], fn: Callable[[], ScoreResponse]) -> BatchItemResult:
        try:
            return BatchItemResult.ok(item, fn())
        except ScoringError as e:
            logger.warning(f"Batch item {item} failed: {e.message}")
            return BatchItemResult.failed(item, e)
        except Exception as e:
            logger.error(f"Unexpected error for batch item {item}: {e}", exc_info=True)
            return BatchItemResult.failed(item, ComputationError(str(e)))
