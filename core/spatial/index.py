#!/usr/bin/env python3
"""
Spatial Index - STR-packed R-tree over government property records.

Records are bulk loaded with Sort-Tile-Recursive packing: points are sorted
into longitude slabs, each slab is sorted by latitude and cut into leaves of
``max_entries``, and the same packing is repeated on node centers until a
single root remains. Every node keeps the bounds of its children in one numpy
array so a node visit is a single vectorized intersection test.

Radius queries take the bounding box of the search circle, collect candidate
records from the tree, then drop false positives by exact haversine distance.

The whole tree lives in one immutable snapshot. ``rebuild`` builds a new
snapshot and swaps the reference, so readers never observe a half-built tree.
"""

import logging
import math
import threading
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from core.geo import (
    BoundingBox,
    EARTH_RADIUS_MILES,
    haversine_miles_array,
    radius_bounding_box,
)
from core.spatial.models import GovernmentPropertyRecord

logger = logging.getLogger(__name__)

DEFAULT_MAX_ENTRIES = 16

# Half the earth's circumference; no two points are farther apart than this
_MAX_SEARCH_RADIUS_MILES = math.pi * EARTH_RADIUS_MILES


class _Node:
    __slots__ = ("bounds", "child_bounds", "children", "is_leaf")

    def __init__(self, child_bounds: np.ndarray, children: list, is_leaf: bool):
        self.child_bounds = child_bounds
        self.children = children
        self.is_leaf = is_leaf
        self.bounds = _envelope(child_bounds)


@dataclass(frozen=True)
class _Snapshot:
    root: Optional[_Node]
    records: Tuple[GovernmentPropertyRecord, ...]
    lats: np.ndarray
    lngs: np.ndarray
    height: int


def _envelope(boxes: np.ndarray) -> np.ndarray:
    return np.array([
        boxes[:, 0].min(),
        boxes[:, 1].min(),
        boxes[:, 2].max(),
        boxes[:, 3].max(),
    ])


def _str_groups(center_lats: np.ndarray, center_lngs: np.ndarray, capacity: int) -> List[np.ndarray]:
    """Partition item indices into spatially coherent groups of <= capacity."""
    n = len(center_lats)
    leaf_count = math.ceil(n / capacity)
    slab_count = math.ceil(math.sqrt(leaf_count))
    slab_size = slab_count * capacity

    order = np.argsort(center_lngs, kind="stable")
    groups = []
    for start in range(0, n, slab_size):
        slab = order[start:start + slab_size]
        slab = slab[np.argsort(center_lats[slab], kind="stable")]
        for offset in range(0, len(slab), capacity):
            groups.append(slab[offset:offset + capacity])
    return groups


class SpatialIndex:
    """
    R-tree over GovernmentPropertyRecord points.

    Usage:
        index = SpatialIndex(records)
        nearby = index.query_radius(38.9072, -77.0369, 5.0)
    """

    def __init__(
        self,
        records: Iterable[GovernmentPropertyRecord] = (),
        max_entries: int = DEFAULT_MAX_ENTRIES
    ):
        if max_entries < 2:
            raise ValueError(f"max_entries must be >= 2, got {max_entries}")
        self.max_entries = max_entries
        self._lock = threading.Lock()
        self._snapshot = self._build(tuple(records))

    def __len__(self) -> int:
        return len(self._snapshot.records)

    @property
    def size(self) -> int:
        return len(self._snapshot.records)

    @property
    def height(self) -> int:
        return self._snapshot.height

    @property
    def bounds(self) -> Optional[BoundingBox]:
        root = self._snapshot.root
        if root is None:
            return None
        return BoundingBox(*[float(v) for v in root.bounds])

    def rebuild(self, records: Iterable[GovernmentPropertyRecord]) -> None:
        """Replace the indexed records. Readers keep using the old tree until the swap."""
        snapshot = self._build(tuple(records))
        with self._lock:
            self._snapshot = snapshot
        logger.info(f"Spatial index rebuilt with {len(snapshot.records)} records (height={snapshot.height})")

    def clear(self) -> None:
        self.rebuild(())

    def query_bounds(self, bbox: BoundingBox) -> List[GovernmentPropertyRecord]:
        """All records whose point lies inside ``bbox``."""
        snapshot = self._snapshot
        return [snapshot.records[i] for i in self._candidates(snapshot, bbox.as_array())]

    def query_radius_with_distance(
        self,
        lat: float,
        lng: float,
        radius_miles: float
    ) -> List[Tuple[GovernmentPropertyRecord, float]]:
        """Records within ``radius_miles`` great-circle distance, nearest first."""
        snapshot = self._snapshot
        if snapshot.root is None:
            return []

        bbox = radius_bounding_box(lat, lng, radius_miles)
        candidates = np.array(self._candidates(snapshot, bbox.as_array()), dtype=np.intp)
        if candidates.size == 0:
            return []

        distances = haversine_miles_array(lat, lng, snapshot.lats[candidates], snapshot.lngs[candidates])
        keep = distances <= radius_miles
        candidates = candidates[keep]
        distances = distances[keep]

        order = np.lexsort((candidates, distances))
        return [(snapshot.records[candidates[i]], float(distances[i])) for i in order]

    def query_radius(self, lat: float, lng: float, radius_miles: float) -> List[GovernmentPropertyRecord]:
        """Records within ``radius_miles`` of (lat, lng). Empty when nothing is near."""
        return [record for record, _ in self.query_radius_with_distance(lat, lng, radius_miles)]

    def nearest(self, lat: float, lng: float, k: int) -> List[GovernmentPropertyRecord]:
        """The ``k`` records closest to (lat, lng), nearest first."""
        if k <= 0 or self.size == 0:
            return []

        radius = 1.0
        while True:
            found = self.query_radius_with_distance(lat, lng, radius)
            if len(found) >= k or radius >= _MAX_SEARCH_RADIUS_MILES:
                return [record for record, _ in found[:k]]
            radius = min(radius * 4, _MAX_SEARCH_RADIUS_MILES)

    # ==================== Private ====================

    def _build(self, records: Sequence[GovernmentPropertyRecord]) -> _Snapshot:
        if not records:
            return _Snapshot(root=None, records=(), lats=np.empty(0), lngs=np.empty(0), height=0)

        lats = np.array([r.latitude for r in records], dtype=float)
        lngs = np.array([r.longitude for r in records], dtype=float)
        point_bounds = np.column_stack([lats, lngs, lats, lngs])

        nodes = [
            _Node(point_bounds[group], group.tolist(), is_leaf=True)
            for group in _str_groups(lats, lngs, self.max_entries)
        ]
        height = 1

        while len(nodes) > 1:
            node_bounds = np.array([node.bounds for node in nodes])
            center_lats = (node_bounds[:, 0] + node_bounds[:, 2]) / 2
            center_lngs = (node_bounds[:, 1] + node_bounds[:, 3]) / 2
            nodes = [
                _Node(node_bounds[group], [nodes[i] for i in group], is_leaf=False)
                for group in _str_groups(center_lats, center_lngs, self.max_entries)
            ]
            height += 1

        return _Snapshot(root=nodes[0], records=tuple(records), lats=lats, lngs=lngs, height=height)

    @staticmethod
    def _candidates(snapshot: _Snapshot, query: np.ndarray) -> List[int]:
        if snapshot.root is None:
            return []

        min_lat, min_lng, max_lat, max_lng = query
        found: List[int] = []
        stack = [snapshot.root]

        while stack:
            node = stack.pop()
            cb = node.child_bounds
            mask = (
                (cb[:, 0] <= max_lat)
                & (cb[:, 2] >= min_lat)
                & (cb[:, 1] <= max_lng)
                & (cb[:, 3] >= min_lng)
            )
            hits = np.flatnonzero(mask)
            if node.is_leaf:
                found.extend(node.children[i] for i in hits)
            else:
                stack.extend(node.children[i] for i in hits)

        return found
