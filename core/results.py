"""Service-level result wrappers for single and batch scoring calls."""
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, Optional

from core.errors import ScoringError


@dataclass
class ScoreResponse:
    """A score payload plus where it came from."""
    data: Dict[str, Any]
    cached: bool = False
    hit_count: int = 0


@dataclass
class BatchItemResult:
    """
    Outcome of one batch item.

    A disqualified match is ``success=True`` with ``data["qualified"] is False``;
    ``success=False`` always carries an ``error`` and ``error_type``.
    """
    success: bool
    item: Dict[str, Any] = field(default_factory=dict)
    data: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    error_type: Optional[str] = None
    cached: bool = False

    @classmethod
    def ok(cls, item: Dict[str, Any], response: ScoreResponse) -> "BatchItemResult":
        return cls(success=True, item=item, data=response.data, cached=response.cached)

    @classmethod
    def failed(cls, item: Dict[str, Any], error: ScoringError) -> "BatchItemResult":
        return cls(success=False, item=item, error=error.message, error_type=error.error_type)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
