"""
Tests for ScoringService: validation, caching, batching and error isolation.
"""
import unittest
from unittest.mock import Mock

from core.errors import ComputationError, NotFoundError, ValidationError
from core.interfaces import InMemoryListingStore
from tests.fixtures.scoring_fixtures import (
    DC_LAT,
    DC_LNG,
    build_scoring_service as build_service,
    make_listing,
    make_requirement,
)


class TestValidation(unittest.TestCase):

    def setUp(self):
        self.service = build_service()

    def test_01_valid_location(self):
        self.assertEqual(self.service.validate_location(DC_LAT, DC_LNG, 5), (DC_LAT, DC_LNG, 5.0))
        self.assertEqual(self.service.validate_location("38.9", "-77.0")[2], 5.0)

    def test_02_out_of_range(self):
        cases = [
            (91, 0, 5, "latitude"),
            (-90.5, 0, 5, "latitude"),
            (0, 200, 5, "longitude"),
            (0, -180.1, 5, "longitude"),
            (0, 0, 0, "radius_miles"),
            (0, 0, -1, "radius_miles"),
            (0, 0, 101, "radius_miles"),
        ]
        for lat, lng, radius, field in cases:
            with self.assertRaises(ValidationError) as ctx:
                self.service.validate_location(lat, lng, radius)
            self.assertEqual(ctx.exception.field, field)

    def test_03_non_numeric(self):
        for bad in (None, "abc", True, float("nan"), float("inf")):
            with self.assertRaises(ValidationError):
                self.service.validate_location(bad, DC_LNG, 5)

    def test_04_boundaries_accepted(self):
        self.service.validate_location(90, 180, 100)
        self.service.validate_location(-90, -180, 0.01)


class TestNeighborhoodScoring(unittest.TestCase):

    def setUp(self):
        self.service = build_service()

    def test_01_second_call_is_cached(self):
        first = self.service.neighborhood_score(DC_LAT, DC_LNG, 5)
        second = self.service.neighborhood_score(DC_LAT, DC_LNG, 5)

        self.assertFalse(first.cached)
        self.assertTrue(second.cached)
        self.assertEqual(second.hit_count, 1)
        self.assertEqual(first.data, second.data)

    def test_02_use_cache_false_recomputes(self):
        self.service.neighborhood_score(DC_LAT, DC_LNG, 5)
        again = self.service.neighborhood_score(DC_LAT, DC_LNG, 5, use_cache=False)
        self.assertFalse(again.cached)

    def test_03_without_cache(self):
        service = build_service(cache=False)
        self.assertFalse(service.neighborhood_score(DC_LAT, DC_LNG, 5).cached)
        self.assertFalse(service.neighborhood_score(DC_LAT, DC_LNG, 5).cached)
        self.assertEqual(service.cache_stats(), {"enabled": False})
        self.assertEqual(service.sweep_cache(), 0)

    def test_04_batch_isolates_invalid_items(self):
        results = self.service.neighborhood_batch([
            {"latitude": DC_LAT, "longitude": DC_LNG, "radius_miles": 5},
            {"latitude": DC_LAT, "longitude": 200},
            {"latitude": 40.7128, "longitude": -74.0060, "radius_miles": 3},
        ])

        self.assertEqual([r.success for r in results], [True, False, True])
        self.assertEqual(results[1].error_type, "ValidationError")
        self.assertIn("longitude", results[1].error)
        self.assertEqual(results[2].data["metrics"]["total_properties"], 0)

    def test_05_batch_size_limits(self):
        with self.assertRaises(ValidationError):
            self.service.neighborhood_batch([])
        with self.assertRaises(ValidationError):
            self.service.neighborhood_batch([{"latitude": DC_LAT, "longitude": DC_LNG}] * 51)
        self.assertEqual(len(self.service.neighborhood_batch([{"latitude": DC_LAT, "longitude": DC_LNG}] * 50)), 50)

    def test_06_engine_failure_isolated(self):
        engine = Mock()
        engine.score_location.side_effect = [RuntimeError("index corrupted"), Mock(
            score=10.0, grade="F", percentile=50.0, to_dict=Mock(return_value={"score": 10.0})
        )]
        service = build_service(cache=False, neighborhood_engine=engine)

        results = service.neighborhood_batch([
            {"latitude": 1, "longitude": 1},
            {"latitude": 2, "longitude": 2},
        ])

        self.assertFalse(results[0].success)
        self.assertEqual(results[0].error_type, "ComputationError")
        self.assertTrue(results[1].success)
        self.assertEqual(results[1].data, {"score": 10.0})

    def test_07_single_engine_failure_raises_computation_error(self):
        engine = Mock()
        engine.score_location.side_effect = RuntimeError("boom")
        service = build_service(neighborhood_engine=engine)
        with self.assertRaises(ComputationError):
            service.neighborhood_score(DC_LAT, DC_LNG, 5)

    def test_08_batch_survives_non_object_items(self):
        ok = {"latitude": DC_LAT, "longitude": DC_LNG, "radius_miles": 5}
        results = self.service.neighborhood_batch([ok, None, ok, "38.9,-77.0"])

        self.assertEqual([r.success for r in results], [True, False, True, False])
        self.assertEqual(results[1].error_type, "ValidationError")
        self.assertIn("NoneType", results[1].error)
        self.assertEqual(results[1].item, {})
        self.assertTrue(results[2].cached)

    def test_09_mutating_a_response_leaves_cache_intact(self):
        first = self.service.neighborhood_score(DC_LAT, DC_LNG, 5)
        expected = first.data["score"]
        first.data["score"] = -1
        first.data["factors"].clear()

        second = self.service.neighborhood_score(DC_LAT, DC_LNG, 5)
        self.assertTrue(second.cached)
        self.assertEqual(second.data["score"], expected)
        self.assertTrue(second.data["factors"])

        second.data["score"] = -2
        self.assertEqual(self.service.neighborhood_score(DC_LAT, DC_LNG, 5).data["score"], expected)


class TestMatchScoring(unittest.TestCase):

    def setUp(self):
        self.service = build_service()

    def test_01_match_and_cache(self):
        first = self.service.match_score("good", "opp-1")
        second = self.service.match_score("good", "opp-1")

        self.assertTrue(first.data["qualified"])
        self.assertEqual(first.data["grade"], "A+")
        self.assertTrue(second.cached)

    def test_02_disqualified_is_success(self):
        response = self.service.match_score("small", "opp-1")
        self.assertFalse(response.data["qualified"])
        self.assertEqual(response.data["overall_score"], 0.0)
        self.assertEqual(response.data["early_termination"]["failed_check"], "space_bounds")

    def test_03_not_found(self):
        with self.assertRaises(NotFoundError) as ctx:
            self.service.match_score("missing", "opp-1")
        self.assertEqual(ctx.exception.resource, "property")

        with self.assertRaises(NotFoundError) as ctx:
            self.service.match_score("good", "missing")
        self.assertEqual(ctx.exception.resource, "opportunity")

    def test_04_blank_ids_rejected(self):
        with self.assertRaises(ValidationError):
            self.service.match_score("  ", "opp-1")

    def test_05_batch(self):
        results = self.service.match_batch([
            {"property_id": "good", "opportunity_id": "opp-1"},
            {"property_id": "small", "opportunity_id": "opp-1"},
            {"property_id": "missing", "opportunity_id": "opp-1"},
        ])
        self.assertEqual([r.success for r in results], [True, True, False])
        self.assertEqual(results[2].error_type, "NotFoundError")

    def test_06_invalidate(self):
        self.service.match_score("good", "opp-1")
        self.service.match_score("small", "opp-1")

        self.assertEqual(self.service.invalidate_match("good", "opp-1"), 1)
        self.assertFalse(self.service.match_score("good", "opp-1").cached)
        self.assertEqual(self.service.invalidate_match("small"), 1)
        self.assertEqual(self.service.invalidate_match("small"), 0)

    def test_07_score_pair_bypasses_store(self):
        result = self.service.score_pair(make_listing(id="adhoc"), make_requirement(id="adhoc-opp"))
        self.assertTrue(result.qualified)
        self.assertEqual(self.service.cache_stats()["writes"], 0)

    def test_08_cache_stats(self):
        self.service.match_score("good", "opp-1")
        self.service.match_score("good", "opp-1")
        stats = self.service.cache_stats()
        self.assertTrue(stats["enabled"])
        self.assertEqual(stats["hits"], 1)
        self.assertEqual(stats["entries"], 1)

    def test_09_ids_containing_separator_do_not_share_cache(self):
        self.service.listing_store = InMemoryListingStore(
            listings=[make_listing(id="a:b"), make_listing(id="a", available_sf=50_000)],
            opportunities=[make_requirement(id="c"), make_requirement(id="b:c")],
        )

        first = self.service.match_score("a:b", "c")
        second = self.service.match_score("a", "b:c")

        self.assertTrue(first.data["qualified"])
        self.assertFalse(second.cached)
        self.assertFalse(second.data["qualified"])
        self.assertEqual(second.data["early_termination"]["failed_check"], "space_bounds")

        # Invalidating listing "a" leaves listing "a:b" cached
        self.assertEqual(self.service.invalidate_match("a"), 1)
        self.assertTrue(self.service.match_score("a:b", "c").cached)

    def test_10_batch_survives_non_object_items(self):
        results = self.service.match_batch([
            {"property_id": "good", "opportunity_id": "opp-1"},
            None,
            ["good", "opp-1"],
            {"property_id": "small", "opportunity_id": "opp-1"},
        ])
        self.assertEqual([r.success for r in results], [True, False, False, True])
        self.assertEqual(results[1].error_type, "ValidationError")
        self.assertEqual(results[2].error_type, "ValidationError")


if __name__ == '__main__':
    unittest.main()
