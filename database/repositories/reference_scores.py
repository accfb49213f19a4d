import logging
from typing import Tuple

from sqlalchemy import select, func, case

from database.models import NeighborhoodScoreSample
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class ReferenceScoreRepository(BaseRepository):
    def add_sample(self, score: float, model_version: str) -> None:
        self.db.add(NeighborhoodScoreSample(score=score, model_version=model_version))

    def rank_counts(self, score: float, model_version: str) -> Tuple[int, int, int]:
        """(below, equal, total) among samples of ``model_version``."""
        stmt = select(
            func.coalesce(func.sum(case((NeighborhoodScoreSample.score < score, 1), else_=0)), 0),
            func.coalesce(func.sum(case((NeighborhoodScoreSample.score == score, 1), else_=0)), 0),
            func.count(NeighborhoodScoreSample.id),
        ).where(NeighborhoodScoreSample.model_version == model_version)
        below, equal, total = self.db.execute(stmt).one()
        return int(below), int(equal), int(total)
