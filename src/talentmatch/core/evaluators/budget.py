"""Hourly rate versus budget evaluation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ...schemas import BudgetRange, ProjectRequirement, TalentProfile


@dataclass
class BudgetConfig:
    """Configuration for budget fit scoring."""

    below_min_penalty: float = 0.5
    above_max_penalty: float = 2.0
    floor: float = 0.0
    neutral_score: float = 0.5


class BudgetEvaluator:
    """Compare a talent's hourly rate with the project's budget range."""

    method = "budget"

    def __init__(self, *, config: BudgetConfig | None = None) -> None:
        self._config = config or BudgetConfig()

    def evaluate(
        self,
        talent: TalentProfile,
        requirement: ProjectRequirement,
        context: dict[str, Any],
    ) -> dict[str, Any]:
        overrides = (context.get("evaluation_overrides") or {}).get("budget", {})
        above_penalty = overrides.get("above_max_penalty", self._config.above_max_penalty)
        below_penalty = overrides.get("below_min_penalty", self._config.below_min_penalty)
        budget = requirement.budget
        rate = talent.hourly_rate

        if budget.max <= 0:
            return self._build_response(
                score=self._config.neutral_score,
                status="insufficient_data",
                rate=rate,
                budget=budget,
                gap=None,
                above_penalty=above_penalty,
                below_penalty=below_penalty,
            )

        if budget.contains(rate):
            score, status, gap = 1.0, "within_range", 0.0
        elif rate > budget.max:
            gap = rate - budget.max
            score = 1.0 - above_penalty * (gap / budget.max)
            status = "above_range"
        else:
            gap = budget.min - rate
            distance = gap / budget.min if budget.min > 0 else 0.0
            score = 1.0 - below_penalty * distance
            status = "below_range"

        return self._build_response(
            score=max(self._config.floor, min(score, 1.0)),
            status=status,
            rate=rate,
            budget=budget,
            gap=gap,
            above_penalty=above_penalty,
            below_penalty=below_penalty,
            minimum_rate=talent.preferences.minimum_rate,
        )

    def _build_response(
        self,
        *,
        score: float,
        status: str,
        rate: float,
        budget: BudgetRange,
        gap: float | None,
        above_penalty: float,
        below_penalty: float,
        minimum_rate: float | None = None,
    ) -> dict[str, Any]:
        return {
            "method": self.method,
            "scores": {"budget": round(score, 4)},
            "metadata": {
                "status": status,
                "hourly_rate": rate,
                "budget_range": {"min": budget.min, "max": budget.max, "currency": budget.currency},
                "gap_amount": gap,
                "above_max_penalty": above_penalty,
                "below_min_penalty": below_penalty,
                "minimum_rate_above_budget": bool(
                    minimum_rate is not None and budget.max > 0 and minimum_rate > budget.max
                ),
            },
        }
