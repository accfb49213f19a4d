"""
Tests for MatchScoreEngine and MatchEngine.
"""
import unittest
from datetime import date
from unittest.mock import Mock

from core.config_loader import MatchingConfig
from core.matching.models import CATEGORY_NAMES, MatchScoreResult
from core.matching.service import NOT_CALCULATED, MatchEngine, MatchScoreEngine
from tests.fixtures.scoring_fixtures import DC_LAT, DC_LNG, make_experience, make_listing, make_requirement, offset_point

FAR_LAT, FAR_LNG = offset_point(DC_LAT, DC_LNG, 4.5, 45)


class TestMatchScoreEngine(unittest.TestCase):

    def setUp(self):
        self.engine = MatchScoreEngine()

    def test_01_ideal_pair(self):
        result = self.engine.score(make_listing(), make_requirement(), make_experience())

        self.assertTrue(result.qualified)
        self.assertTrue(result.competitive)
        self.assertEqual(result.category_scores["location"].score, 100.0)
        self.assertEqual(result.category_scores["space"].score, 100.0)
        self.assertEqual(result.category_scores["building"].score, 100.0)
        self.assertEqual(result.category_scores["timeline"].score, 100.0)
        self.assertEqual(result.category_scores["experience"].score, 89.0)
        self.assertEqual(result.overall_score, 98.9)
        self.assertEqual(result.grade, "A+")
        self.assertIn("Excellent location match", result.strengths)
        self.assertEqual(result.weaknesses, [])

    def test_02_overall_is_weighted_sum(self):
        pairs = [
            (make_listing(), make_requirement(), make_experience()),
            (make_listing(city="Arlington", available_sf=71_000), make_requirement(), None),
            (make_listing(building_class="B", fiber=False), make_requirement(), make_experience(gsa_certified=False)),
            (make_listing(available_date=date(2025, 5, 20), lease_term_years=5), make_requirement(), None),
            (make_listing(parking_ratio=1.0, leed_certified=False), make_requirement(), make_experience(references=())),
            (make_listing(contiguous=False), make_requirement(contiguous_required=True), make_experience()),
            (make_listing(
                city="Arlington", latitude=FAR_LAT, longitude=FAR_LNG, available_sf=70_000, building_class="B",
                leed_certified=False, fiber=False, backup_power=False, parking_ratio=None,
                available_date=date(2025, 6, 1), lease_term_years=9
            ), make_requirement(), None),
        ]
        grades = set()
        for listing, requirement, experience in pairs:
            result = self.engine.score(listing, requirement, experience)
            expected = round(sum(
                c.score * c.weight for c in result.category_scores.values()
            ), 1)
            self.assertAlmostEqual(result.overall_score, expected, delta=0.1001)
            self.assertEqual(set(result.category_scores), set(CATEGORY_NAMES))
            grades.add(result.grade)
            for category in result.category_scores.values():
                self.assertGreaterEqual(category.score, 0.0)
                self.assertLessEqual(category.score, 100.0)
        # Pairs span the grade bands from D to A+
        self.assertTrue({"A+", "A", "B", "D"} <= grades)

    def test_03_space_monotonic_toward_target(self):
        requirement = make_requirement()
        scores = [
            self.engine.score(make_listing(available_sf=sf), requirement).category_scores["space"].score
            for sf in (70_000, 71_000, 72_500, 74_000, 75_000)
        ]
        self.assertEqual(scores, sorted(scores))
        self.assertEqual(scores[0], 50.0)
        self.assertEqual(scores[-1], 100.0)

    def test_04_space_declines_past_target(self):
        requirement = make_requirement()
        at_target = self.engine.score(make_listing(available_sf=75_000), requirement)
        at_max = self.engine.score(make_listing(available_sf=80_000), requirement)
        self.assertGreater(at_target.category_scores["space"].score, at_max.category_scores["space"].score)

    def test_05_no_experience_is_baseline(self):
        result = self.engine.score(make_listing(), make_requirement(), None)
        self.assertEqual(result.category_scores["experience"].score, 20.0)
        self.assertIn("Limited government leasing experience", result.weaknesses)
        self.assertIn("Obtain GSA certification to strengthen proposal", result.recommendations)

    def test_06_competitive_requires_category_floor(self):
        # Overall stays above 75 but experience sits below the 50 floor
        result = self.engine.score(make_listing(), make_requirement(), None)
        self.assertGreaterEqual(result.overall_score, 75.0)
        self.assertFalse(result.competitive)

    def test_07_weights_come_from_config(self):
        config = MatchingConfig(weights={
            "location": 0.0, "space": 0.0, "building": 0.0, "timeline": 0.0, "experience": 1.0
        })
        result = MatchScoreEngine(config).score(make_listing(), make_requirement(), None)
        self.assertEqual(result.overall_score, 20.0)
        self.assertEqual(result.grade, "F")


class TestMatchEngine(unittest.TestCase):

    def setUp(self):
        self.engine = MatchEngine()

    def test_01_qualified_pair(self):
        result = self.engine.match(make_listing(), make_requirement(), make_experience())
        self.assertTrue(result.qualified)
        self.assertIsNone(result.early_termination)
        self.assertEqual(len(result.passed_checks), 5)
        self.assertGreaterEqual(result.computation_time_ms, 0.0)

    def test_02_disqualified_pair(self):
        result = self.engine.match(make_listing(available_sf=50_000), make_requirement())

        self.assertFalse(result.qualified)
        self.assertFalse(result.competitive)
        self.assertEqual(result.overall_score, 0.0)
        self.assertEqual(result.grade, "F")
        self.assertEqual(len(result.disqualifiers), 1)
        self.assertIn("Insufficient space", result.disqualifiers[0])
        self.assertEqual(result.passed_checks, ["geographic"])
        self.assertEqual(result.early_termination.failed_check, "space_bounds")
        self.assertEqual(result.early_termination.stopped_at_stage, 1)
        self.assertAlmostEqual(result.early_termination.computation_saved_pct, 66.7)
        for name in CATEGORY_NAMES:
            self.assertEqual(result.category_scores[name].score, 0.0)
            self.assertEqual(result.category_scores[name].explanation, NOT_CALCULATED)
        self.assertIn("Property failed the space bounds requirement", result.recommendations)

    def test_03_scorer_not_invoked_when_disqualified(self):
        scorer = Mock()
        engine = MatchEngine(scorer=scorer)
        engine.match(make_listing(state="VA"), make_requirement())
        scorer.score.assert_not_called()

    def test_04_result_round_trip(self):
        result = self.engine.match(make_listing(available_sf=50_000), make_requirement())
        restored = MatchScoreResult.from_dict(result.to_dict())
        self.assertEqual(restored.early_termination, result.early_termination)
        self.assertEqual(restored.category_scores, result.category_scores)


if __name__ == '__main__':
    unittest.main()
