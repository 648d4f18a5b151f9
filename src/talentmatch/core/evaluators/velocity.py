"""Delivery velocity evaluation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ...schemas import ProjectOutcome, ProjectRequirement, TalentProfile


@dataclass
class VelocityConfig:
    on_time_weight: float = 0.6
    duration_weight: float = 0.4
    on_time_rating: float = 4.0
    neutral_score: float = 0.5


class VelocityEvaluator:
    """Estimate delivery pace from finished projects."""

    method = "velocity"

    def __init__(self, *, config: VelocityConfig | None = None) -> None:
        self._config = config or VelocityConfig()

    def evaluate(
        self,
        talent: TalentProfile,
        requirement: ProjectRequirement,
        context: dict[str, Any],
    ) -> dict[str, Any]:
        finished = [
            project for project in talent.past_projects if project.outcome != ProjectOutcome.ONGOING
        ]
        if not finished:
            return {
                "method": self.method,
                "scores": {"velocity": self._config.neutral_score},
                "metadata": {"status": "no_history", "finished_projects": 0},
            }

        on_time = sum(
            1
            for project in finished
            if project.outcome == ProjectOutcome.COMPLETED
            and project.rating is not None
            and project.rating >= self._config.on_time_rating
        )
        on_time_ratio = on_time / len(finished)
        duration_fit = self._duration_fit(
            [project.duration_weeks for project in finished if project.duration_weeks > 0],
            requirement.duration.weeks,
        )
        score = (
            on_time_ratio * self._config.on_time_weight
            + duration_fit * self._config.duration_weight
        )
        return {
            "method": self.method,
            "scores": {"velocity": round(min(max(score, 0.0), 1.0), 4)},
            "metadata": {
                "status": "assessed",
                "finished_projects": len(finished),
                "on_time_ratio": round(on_time_ratio, 4),
                "duration_fit": duration_fit,
            },
        }

    def _duration_fit(self, durations: list[float], target_weeks: float) -> float:
        if not durations:
            return self._config.neutral_score
        average = sum(durations) / len(durations)
        longest = max(average, target_weeks)
        return round(max(0.0, 1.0 - abs(average - target_weeks) / longest), 4)
