"""
Tests for NeighborhoodScoreEngine.
"""
import unittest
from unittest.mock import Mock

from core.config_loader import NeighborhoodConfig
from core.grading import assign_grade
from core.neighborhood.percentile import InMemoryReferenceDistribution
from core.neighborhood.service import NeighborhoodScoreEngine
from core.spatial.index import SpatialIndex
from tests.fixtures.scoring_fixtures import DC_LAT, DC_LNG, FIXED_NOW, dc_records, fixed_clock


class TestNeighborhoodScoreEngine(unittest.TestCase):

    def setUp(self):
        self.index = SpatialIndex(dc_records())
        self.engine = NeighborhoodScoreEngine(self.index, clock=fixed_clock)

    def test_01_dc_scenario(self):
        result = self.engine.score_location(DC_LAT, DC_LNG, 5.0)

        self.assertEqual(result.metrics.total_properties, 40)
        self.assertAlmostEqual(result.factors["density"].score, 58.6, delta=0.1)
        self.assertGreater(result.factors["expiring_leases"].score, 50.0)
        self.assertGreaterEqual(result.score, 55.0)
        self.assertEqual(result.grade, "B")
        self.assertEqual(result.calculated_at, FIXED_NOW)
        self.assertEqual(result.model_version, "neighborhood-v2")

    def test_02_no_properties_scores_zero(self):
        result = self.engine.score_location(0.0, -150.0, 5.0)

        self.assertEqual(result.score, 0.0)
        self.assertEqual(result.grade, "F")
        self.assertEqual(result.metrics.total_properties, 0)
        for factor in result.factors.values():
            self.assertEqual(factor.score, 0.0)

    def test_03_deterministic(self):
        first = self.engine.score_location(DC_LAT, DC_LNG, 5.0).to_dict()
        second = self.engine.score_location(DC_LAT, DC_LNG, 5.0).to_dict()
        self.assertEqual(first, second)

    def test_04_default_radius(self):
        result = self.engine.score_location(DC_LAT, DC_LNG)
        self.assertEqual(result.radius_miles, 5.0)

    def test_05_smaller_radius_sees_fewer_properties(self):
        result = self.engine.score_location(DC_LAT, DC_LNG, 1.0)
        # Records sit at 0.5 to 3.0 miles; only the 0.5 and 1.0 mile rings fall inside
        self.assertLess(result.metrics.total_properties, 40)
        self.assertGreater(result.metrics.total_properties, 0)

    def test_06_percentile_without_reference(self):
        result = self.engine.score_location(DC_LAT, DC_LNG, 5.0)
        self.assertEqual(result.percentile, 50.0)

    def test_07_percentile_against_reference(self):
        reference = InMemoryReferenceDistribution([10.0, 20.0, 30.0, 95.0])
        engine = NeighborhoodScoreEngine(self.index, reference=reference, clock=fixed_clock)

        result = engine.score_location(DC_LAT, DC_LNG, 5.0)

        # Three of four prior scores are below the DC score
        self.assertEqual(result.percentile, 75.0)
        self.assertEqual(len(reference), 5)

    def test_08_recording_disabled(self):
        reference = Mock()
        reference.percentile_of.return_value = 42.0
        config = NeighborhoodConfig(record_scores=False)
        engine = NeighborhoodScoreEngine(self.index, config=config, reference=reference, clock=fixed_clock)

        result = engine.score_location(DC_LAT, DC_LNG, 5.0)

        self.assertEqual(result.percentile, 42.0)
        reference.record_score.assert_not_called()

    def test_09_round_trip_dict(self):
        from core.neighborhood.models import NeighborhoodScoreResult

        result = self.engine.score_location(DC_LAT, DC_LNG, 5.0)
        restored = NeighborhoodScoreResult.from_dict(result.to_dict())
        self.assertEqual(restored.score, result.score)
        self.assertEqual(restored.factors["density"].score, result.factors["density"].score)
        self.assertEqual(restored.calculated_at, result.calculated_at)


class TestGrades(unittest.TestCase):

    def test_01_boundaries_favor_higher_grade(self):
        self.assertEqual(assign_grade(95.0), "A+")
        self.assertEqual(assign_grade(94.9), "A")
        self.assertEqual(assign_grade(85.0), "A")
        self.assertEqual(assign_grade(70.0), "B")
        self.assertEqual(assign_grade(55.0), "C")
        self.assertEqual(assign_grade(40.0), "D")
        self.assertEqual(assign_grade(39.9), "F")
        self.assertEqual(assign_grade(0.0), "F")


if __name__ == '__main__':
    unittest.main()
