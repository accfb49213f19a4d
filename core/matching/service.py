#!/usr/bin/env python3
"""
Match engines.

MatchScoreEngine scores a qualified (listing, requirement) pair across five
weighted categories. MatchEngine puts the constraint pipeline in front of it:
a pair that fails any check gets a disqualified result and the scorer is
never invoked.
"""

import logging
import time
from typing import Optional

from core.config_loader import MatchingConfig
from core.grading import assign_grade
from core.matching import factors as category_calculations
from core.matching import insights
from core.matching.constraints import MatchConstraintPipeline, PipelineResult
from core.matching.models import (
    CATEGORY_NAMES,
    BrokerExperience,
    CategoryScore,
    EarlyTermination,
    MatchScoreResult,
    OpportunityRequirement,
    PropertyListing,
)

logger = logging.getLogger(__name__)

NOT_CALCULATED = "Not calculated - early termination"


class MatchScoreEngine:
    """Weighted 5-category scorer. Stateless; safe to share across threads."""

    def __init__(self, config: Optional[MatchingConfig] = None):
        self.config = config or MatchingConfig()

    def score(
        self,
        listing: PropertyListing,
        requirement: OpportunityRequirement,
        experience: Optional[BrokerExperience] = None
    ) -> MatchScoreResult:
        categories = category_calculations.calculate_categories(listing, requirement, experience, self.config)
        overall = category_calculations.weighted_total(categories)

        competitive = overall >= self.config.competitive_threshold and all(
            c.score >= self.config.category_floor for c in categories.values()
        )

        return MatchScoreResult(
            overall_score=overall,
            grade=assign_grade(overall, self.config.grades),
            qualified=True,
            competitive=competitive,
            category_scores=categories,
            strengths=insights.strengths(categories, self.config),
            weaknesses=insights.weaknesses(categories, self.config),
            recommendations=insights.recommendations(
                categories, listing, requirement, experience, self.config
            ),
            model_version=self.config.model_version,
        )


class MatchEngine:
    """
    Constraint pipeline followed by the MatchScoreEngine.

    Args:
        config: MatchingConfig (weights, constraint_order, thresholds)
        pipeline: Optional pre-built pipeline; built from config.constraint_order otherwise
        scorer: Optional MatchScoreEngine
    """

    def __init__(
        self,
        config: Optional[MatchingConfig] = None,
        pipeline: Optional[MatchConstraintPipeline] = None,
        scorer: Optional[MatchScoreEngine] = None
    ):
        self.config = config or MatchingConfig()
        self.pipeline = pipeline or MatchConstraintPipeline.from_names(self.config.constraint_order)
        self.scorer = scorer or MatchScoreEngine(self.config)

    def match(
        self,
        listing: PropertyListing,
        requirement: OpportunityRequirement,
        experience: Optional[BrokerExperience] = None
    ) -> MatchScoreResult:
        started = time.perf_counter()

        outcome = self.pipeline.evaluate(listing, requirement)
        if outcome.qualified:
            result = self.scorer.score(listing, requirement, experience)
            result.passed_checks = list(outcome.passed_checks)
        else:
            result = self._disqualified(outcome)

        result.computation_time_ms = round((time.perf_counter() - started) * 1000.0, 3)
        logger.debug(
            f"Match {listing.id} -> {requirement.id}: qualified={result.qualified} "
            f"score={result.overall_score} grade={result.grade}"
        )
        return result

    def _disqualified(self, outcome: PipelineResult) -> MatchScoreResult:
        weights = self.config.weights.model_dump()
        return MatchScoreResult(
            overall_score=0.0,
            grade=self.config.grades.fallback,
            qualified=False,
            competitive=False,
            category_scores={
                name: CategoryScore(score=0.0, weight=weights[name], weighted=0.0, explanation=NOT_CALCULATED)
                for name in CATEGORY_NAMES
            },
            disqualifiers=[outcome.reason],
            recommendations=insights.disqualified_recommendations(outcome.failed_check),
            passed_checks=list(outcome.passed_checks),
            early_termination=EarlyTermination(
                failed_check=outcome.failed_check,
                stopped_at_stage=outcome.stopped_at_stage,
                computation_saved_pct=outcome.computation_saved_pct,
                reason=outcome.reason,
            ),
            model_version=self.config.model_version,
        )
