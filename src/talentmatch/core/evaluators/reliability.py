"""Reliability evaluation from ratings and completion history."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ...schemas import ProjectOutcome, ProjectRequirement, TalentProfile


@dataclass
class ReliabilityConfig:
    rating_weight: float = 0.5
    consistency_weight: float = 0.2
    completion_weight: float = 0.3
    max_rating: float = 5.0
    max_variance: float = 4.0
    neutral_score: float = 0.5


class ReliabilityEvaluator:
    """Combine overall rating, rating consistency and completion ratio."""

    method = "reliability"

    def __init__(self, *, config: ReliabilityConfig | None = None) -> None:
        self._config = config or ReliabilityConfig()

    def evaluate(
        self,
        talent: TalentProfile,
        requirement: ProjectRequirement,
        context: dict[str, Any],
    ) -> dict[str, Any]:
        rating = (
            talent.rating / self._config.max_rating
            if talent.rating is not None
            else self._config.neutral_score
        )
        consistency, variance = self._consistency(talent)
        completion = completion_ratio(talent)
        if completion is None:
            completion = self._config.neutral_score

        score = (
            rating * self._config.rating_weight
            + consistency * self._config.consistency_weight
            + completion * self._config.completion_weight
        )
        return {
            "method": self.method,
            "scores": {"reliability": round(min(max(score, 0.0), 1.0), 4)},
            "metadata": {
                "rating_score": rating,
                "rating_variance": variance,
                "consistency_score": consistency,
                "completion_ratio": completion,
            },
        }

    def _consistency(self, talent: TalentProfile) -> tuple[float, float | None]:
        ratings = [project.rating for project in talent.past_projects if project.rating is not None]
        if len(ratings) < 2:
            return self._config.neutral_score, None
        mean = sum(ratings) / len(ratings)
        variance = sum((value - mean) ** 2 for value in ratings) / len(ratings)
        return round(max(0.0, 1.0 - variance / self._config.max_variance), 4), round(variance, 4)


def completion_ratio(talent: TalentProfile) -> float | None:
    """Completed share of finished projects, ``None`` without history."""
    completed = sum(1 for p in talent.past_projects if p.outcome == ProjectOutcome.COMPLETED)
    cancelled = sum(1 for p in talent.past_projects if p.outcome == ProjectOutcome.CANCELLED)
    if completed + cancelled == 0:
        return None
    return completed / (completed + cancelled)
