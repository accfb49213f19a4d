import yaml
import os
from typing import List, Optional, Dict, Literal
from pydantic import BaseModel, Field, model_validator

WEIGHT_SUM_TOLERANCE = 1e-6


def _check_weights(weights: Dict[str, float], label: str) -> None:
    if any(w < 0 for w in weights.values()):
        raise ValueError(f"{label} weights must be non-negative: {weights}")
    total = sum(weights.values())
    if abs(total - 1.0) > WEIGHT_SUM_TOLERANCE:
        raise ValueError(f"{label} weights must sum to 1.0 (got {total:.4f})")


class DatabaseConfig(BaseModel):
    url: str


class GradeBand(BaseModel):
    grade: str
    min_score: float = Field(ge=0, le=100)


class GradeScale(BaseModel):
    """Letter grade bands, evaluated highest first.

    A score equal to a band's min_score earns that band (ties favor the
    higher grade). Scores below every band get ``fallback``.
    """
    version: str = "2024.1"
    bands: List[GradeBand] = Field(default_factory=lambda: [
        GradeBand(grade="A+", min_score=95),
        GradeBand(grade="A", min_score=85),
        GradeBand(grade="B", min_score=70),
        GradeBand(grade="C", min_score=55),
        GradeBand(grade="D", min_score=40),
    ])
    fallback: str = "F"

    @model_validator(mode="after")
    def _sort_bands(self) -> "GradeScale":
        self.bands = sorted(self.bands, key=lambda b: b.min_score, reverse=True)
        return self


class NeighborhoodWeights(BaseModel):
    """Weights for each neighborhood factor (must sum to 1.0)."""
    density: float = 0.25
    lease_activity: float = 0.25
    expiring_leases: float = 0.20
    demand: float = 0.15
    vacancy: float = 0.10
    growth: float = 0.05

    @model_validator(mode="after")
    def _validate_sum(self) -> "NeighborhoodWeights":
        _check_weights(self.model_dump(), "Neighborhood")
        return self


class NeighborhoodConfig(BaseModel):
    """
    Configuration for the NeighborhoodScoreEngine.

    Every factor uses a saturating curve 100 * (1 - 2^(-x / half)); the
    *_half values are the inputs at which a factor reaches 50.
    """
    model_version: str = "neighborhood-v2"
    weights: NeighborhoodWeights = Field(default_factory=NeighborhoodWeights)
    grades: GradeScale = Field(default_factory=GradeScale)

    default_radius_miles: float = 5.0

    # Density: properties per square mile, damped by sample size
    density_half_per_sq_mile: float = 0.4
    density_confidence_scale: float = 5.0

    # Lease activity: saturating leased count blended with leased share
    leased_count_half: float = 10.0
    lease_count_share: float = 0.7

    # Expiring leases
    expiring_window_months: int = 24
    expiring_weight_floor: float = 0.25
    expiring_half: float = 3.0

    demand_rsf_half: float = 500_000.0
    vacancy_decay: float = 0.2

    recent_construction_years: int = 5
    growth_half: float = 2.0

    # Percentile reference distribution
    record_scores: bool = True
    reference_max_samples: int = 10_000


class MatchWeights(BaseModel):
    """Weights for each match category (must sum to 1.0)."""
    location: float = 0.30
    space: float = 0.25
    building: float = 0.20
    timeline: float = 0.15
    experience: float = 0.10

    @model_validator(mode="after")
    def _validate_sum(self) -> "MatchWeights":
        _check_weights(self.model_dump(), "Match")
        return self


DEFAULT_CONSTRAINT_ORDER = [
    "geographic",
    "space_bounds",
    "building_class",
    "timeline",
    "mandatory_features",
]


class MatchingConfig(BaseModel):
    """
    Configuration for the match pipeline and MatchScoreEngine.

    ``constraint_order`` lists the disqualification checks in evaluation
    order; names must exist in the constraint registry.
    """
    model_version: str = "match-v2"
    weights: MatchWeights = Field(default_factory=MatchWeights)
    grades: GradeScale = Field(default_factory=GradeScale)
    constraint_order: List[str] = Field(default_factory=lambda: list(DEFAULT_CONSTRAINT_ORDER))

    competitive_threshold: float = 75.0
    category_floor: float = 50.0
    strength_threshold: float = 80.0
    weakness_threshold: float = 60.0

    # Space
    space_bound_floor: float = 50.0
    non_contiguous_multiplier: float = 0.8

    # Timeline
    timeline_buffer_days: int = 60
    timeline_unstated_score: float = 85.0
    timeline_term_share: float = 0.2

    # Location
    location_unstated_score: float = 85.0

    # Experience
    experience_baseline: float = 20.0
    experience_leases_half: float = 3.0
    experience_portfolio_half_sf: float = 500_000.0

    @model_validator(mode="after")
    def _validate_order(self) -> "MatchingConfig":
        if not self.constraint_order:
            raise ValueError("constraint_order must name at least one check")
        if len(set(self.constraint_order)) != len(self.constraint_order):
            raise ValueError(f"constraint_order has duplicates: {self.constraint_order}")
        return self


class CacheConfig(BaseModel):
    """Score cache configuration. TTL is fixed at 24h for both score types."""
    enabled: bool = True
    backend: Literal["memory", "database", "redis"] = "memory"
    ttl_seconds: int = 24 * 60 * 60
    coordinate_precision: int = 4
    redis_url: Optional[str] = None
    redis_password: Optional[str] = None


class BatchConfig(BaseModel):
    max_items: int = 50


class ValidationLimits(BaseModel):
    max_radius_miles: float = 100.0


class WebConfig(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8080


class AppConfig(BaseModel):
    database: Optional[DatabaseConfig] = None
    neighborhood: NeighborhoodConfig = Field(default_factory=NeighborhoodConfig)
    matching: MatchingConfig = Field(default_factory=MatchingConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    batch: BatchConfig = Field(default_factory=BatchConfig)
    limits: ValidationLimits = Field(default_factory=ValidationLimits)
    web: WebConfig = Field(default_factory=WebConfig)


def load_config(config_path: str = "config.yaml") -> AppConfig:
    # If not found at relative path (e.g. running from root), try the project root
    if not os.path.exists(config_path):
        base_dir = os.path.dirname(os.path.abspath(__file__))
        config_path = os.path.join(base_dir, "..", "config.yaml")

    data = {}
    if os.path.exists(config_path):
        with open(config_path, "r") as f:
            data = yaml.safe_load(f) or {}

    # Allow env var override for DB URL
    env_db_url = os.environ.get("DATABASE_URL")
    if env_db_url:
        data.setdefault('database', {})
        if data['database'] is None:
            data['database'] = {}
        data['database']['url'] = env_db_url

    # Allow env var override for Redis URL
    env_redis_url = os.environ.get("REDIS_URL")
    if env_redis_url:
        if data.get('cache') is None:
            data['cache'] = {}
        data['cache']['redis_url'] = env_redis_url

    # Allow env var override for cache backend
    env_cache_backend = os.environ.get("SCORE_CACHE_BACKEND")
    if env_cache_backend:
        if data.get('cache') is None:
            data['cache'] = {}
        data['cache']['backend'] = env_cache_backend

    return AppConfig(**data)
