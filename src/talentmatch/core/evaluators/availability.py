"""Availability evaluation backed by the availability engine."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ...schemas import ProjectRequirement, TalentProfile
from ..availability import AvailabilityEngine, ProjectTimeframe


@dataclass
class AvailabilityEvaluatorConfig:
    """Configuration for the availability dimension."""

    scale: float = 100.0


class AvailabilityEvaluator:
    """Turn the engine's composite availability score into a sub-score."""

    method = "availability"

    def __init__(
        self,
        *,
        engine: AvailabilityEngine | None = None,
        config: AvailabilityEvaluatorConfig | None = None,
    ) -> None:
        self._engine = engine or AvailabilityEngine()
        self._config = config or AvailabilityEvaluatorConfig()

    def evaluate(
        self,
        talent: TalentProfile,
        requirement: ProjectRequirement,
        context: dict[str, Any],
    ) -> dict[str, Any]:
        bookings = (context.get("bookings") or {}).get(talent.id, ())
        windows = (context.get("availability") or {}).get(talent.id, talent.availability)
        match = self._engine.compute_overlap(
            windows,
            ProjectTimeframe.from_requirement(requirement),
            bookings=bookings,
            talent_timezone=talent.location.timezone,
        )
        return {
            "method": self.method,
            "scores": {"availability": round(match.availability_score / self._config.scale, 4)},
            "metadata": match.as_metadata(),
        }
