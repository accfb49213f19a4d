"""
Tests for the STR-packed R-tree.

Every query is checked against a brute-force scan over the same records.
"""
import pytest

from core.geo import BoundingBox, haversine_miles
from core.spatial.index import SpatialIndex
from tests.fixtures.scoring_fixtures import DC_LAT, DC_LNG, dc_records, make_record, scattered_records


def brute_force_radius(records, lat, lng, radius):
    return {r.id for r in records if haversine_miles(lat, lng, r.latitude, r.longitude) <= radius}


class TestSpatialIndex:
    """Test suite for SpatialIndex."""

    @pytest.fixture
    def records(self):
        return scattered_records(300)

    @pytest.fixture
    def index(self, records):
        return SpatialIndex(records, max_entries=8)

    def test_01_size_and_height(self, index):
        assert index.size == 300
        assert len(index) == 300
        # 300 points with 8 per node need at least 3 levels
        assert index.height >= 3

    @pytest.mark.parametrize("lat,lng,radius", [
        (39.0, -77.0, 10.0),
        (38.5, -76.2, 35.0),
        (40.9, -78.9, 60.0),
        (37.0, -74.0, 5.0),
        (39.5, -76.5, 150.0),
    ])
    def test_02_radius_matches_brute_force(self, index, records, lat, lng, radius):
        found = {r.id for r in index.query_radius(lat, lng, radius)}
        assert found == brute_force_radius(records, lat, lng, radius)

    def test_03_results_sorted_by_distance(self, index):
        found = index.query_radius_with_distance(39.0, -77.0, 80.0)
        distances = [d for _, d in found]
        assert distances == sorted(distances)
        assert all(d <= 80.0 for d in distances)

    def test_04_bounds_query_matches_brute_force(self, index, records):
        bbox = BoundingBox(38.0, -78.0, 39.5, -76.0)
        found = {r.id for r in index.query_bounds(bbox)}
        expected = {r.id for r in records if bbox.contains_point(r.latitude, r.longitude)}
        assert found == expected

    def test_05_nearest(self, index, records):
        nearest = index.nearest(39.0, -77.0, 5)
        expected = sorted(records, key=lambda r: (haversine_miles(39.0, -77.0, r.latitude, r.longitude), r.id))
        assert len(nearest) == 5
        expected_distances = [haversine_miles(39.0, -77.0, r.latitude, r.longitude) for r in expected[:5]]
        actual_distances = [haversine_miles(39.0, -77.0, r.latitude, r.longitude) for r in nearest]
        assert actual_distances == pytest.approx(expected_distances)

    def test_06_nearest_more_than_size(self):
        index = SpatialIndex(dc_records()[:3])
        assert len(index.nearest(DC_LAT, DC_LNG, 10)) == 3
        assert index.nearest(DC_LAT, DC_LNG, 0) == []

    def test_07_empty_index(self):
        index = SpatialIndex()
        assert index.size == 0
        assert index.height == 0
        assert index.bounds is None
        assert index.query_radius(DC_LAT, DC_LNG, 5.0) == []
        assert index.query_bounds(BoundingBox(-90, -180, 90, 180)) == []
        assert index.nearest(DC_LAT, DC_LNG, 3) == []

    def test_08_nothing_in_range(self, index):
        # Middle of the Pacific
        assert index.query_radius(0.0, -150.0, 50.0) == []

    def test_09_rebuild_replaces_records(self, index):
        index.rebuild(dc_records())
        assert index.size == 40
        found = index.query_radius(DC_LAT, DC_LNG, 5.0)
        assert len(found) == 40
        assert all(r.id.startswith(("lease_", "building_")) for r in found)

        index.clear()
        assert index.size == 0
        assert index.query_radius(DC_LAT, DC_LNG, 5.0) == []

    def test_10_bounds_cover_all_points(self, index, records):
        bounds = index.bounds
        assert all(bounds.contains_point(r.latitude, r.longitude) for r in records)

    def test_11_duplicate_points(self):
        records = [make_record(f"dup_{i}", DC_LAT, DC_LNG) for i in range(20)]
        index = SpatialIndex(records, max_entries=4)
        found = index.query_radius(DC_LAT, DC_LNG, 0.1)
        assert [r.id for r in found] == [r.id for r in records]

    def test_12_rejects_tiny_fanout(self):
        with pytest.raises(ValueError):
            SpatialIndex(max_entries=1)
