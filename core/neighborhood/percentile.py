#!/usr/bin/env python3
"""
Reference distributions for neighborhood score percentiles.

The engine only depends on the ``ReferenceDistribution`` interface, so the
backing store can be in memory, a database table of prior scores, or a
sketch, without touching the scorer.

Percentile uses the mid-rank definition: the share of reference scores
strictly below the query plus half the share equal to it. With no history
the percentile is ``DEFAULT_PERCENTILE``.
"""

import bisect
import logging
import threading
from abc import ABC, abstractmethod
from collections import deque
from typing import Iterable, Optional

logger = logging.getLogger(__name__)

DEFAULT_PERCENTILE = 50.0


def mid_rank_percentile(below: int, equal: int, total: int) -> float:
    if total <= 0:
        return DEFAULT_PERCENTILE
    return round(100.0 * (below + 0.5 * equal) / total, 1)


class ReferenceDistribution(ABC):
    """Source of prior scores used to rank a new score."""

    @abstractmethod
    def record_score(self, score: float) -> None:
        """Add a freshly computed score to the distribution."""
        pass

    @abstractmethod
    def percentile_of(self, score: float) -> float:
        """Percentile (0-100) of ``score`` among recorded scores."""
        pass


class InMemoryReferenceDistribution(ReferenceDistribution):
    """
    Sorted in-memory sample with a bounded size.

    When ``max_samples`` is reached the oldest score is evicted, so the
    distribution tracks recent market conditions.
    """

    def __init__(self, scores: Optional[Iterable[float]] = None, max_samples: int = 10_000):
        self.max_samples = max_samples
        self._lock = threading.Lock()
        self._sorted: list = []
        self._arrival: deque = deque()
        for score in scores or ():
            self.record_score(score)

    def __len__(self) -> int:
        return len(self._sorted)

    def record_score(self, score: float) -> None:
        score = float(score)
        with self._lock:
            if self.max_samples and len(self._arrival) >= self.max_samples:
                oldest = self._arrival.popleft()
                idx = bisect.bisect_left(self._sorted, oldest)
                del self._sorted[idx]
            bisect.insort(self._sorted, score)
            self._arrival.append(score)

    def percentile_of(self, score: float) -> float:
        with self._lock:
            below = bisect.bisect_left(self._sorted, score)
            equal = bisect.bisect_right(self._sorted, score) - below
            total = len(self._sorted)
        return mid_rank_percentile(below, equal, total)
