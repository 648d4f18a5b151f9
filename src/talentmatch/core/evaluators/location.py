"""Location and timezone fit evaluation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ...schemas import LocationType, ProjectRequirement, TalentProfile
from ..availability import AvailabilityEngine


@dataclass
class LocationConfig:
    """Blend weights and geography scores for on-site work."""

    hybrid_timezone_weight: float = 0.5
    onsite_timezone_weight: float = 0.2
    city_match_score: float = 1.0
    country_match_score: float = 0.7
    mismatch_score: float = 0.2
    neutral_score: float = 0.5


class LocationEvaluator:
    """Score location fit by work arrangement."""

    method = "location"

    def __init__(
        self,
        *,
        engine: AvailabilityEngine | None = None,
        config: LocationConfig | None = None,
    ) -> None:
        self._engine = engine or AvailabilityEngine()
        self._config = config or LocationConfig()

    def evaluate(
        self,
        talent: TalentProfile,
        requirement: ProjectRequirement,
        context: dict[str, Any],
    ) -> dict[str, Any]:
        arrangement = requirement.location.type
        if arrangement == LocationType.REMOTE:
            return self._build_response(1.0, arrangement, timezone_score=None, geography=None)

        timezone_score = self._timezone_score(talent, requirement)
        geography = self._geography_score(talent, requirement)
        tz_weight = (
            self._config.hybrid_timezone_weight
            if arrangement == LocationType.HYBRID
            else self._config.onsite_timezone_weight
        )
        score = timezone_score * tz_weight + geography * (1 - tz_weight)
        return self._build_response(score, arrangement, timezone_score, geography)

    def _timezone_score(self, talent: TalentProfile, requirement: ProjectRequirement) -> float:
        if not requirement.location.timezone:
            return self._config.neutral_score
        compatibility = self._engine.timezone_compatibility(
            requirement.location.timezone,
            talent.location.timezone,
            at=requirement.duration.start_date,
        )
        return compatibility / 100

    def _geography_score(self, talent: TalentProfile, requirement: ProjectRequirement) -> float:
        wanted_country = _clean(requirement.location.country)
        talent_country = _clean(talent.location.country)
        if not wanted_country or not talent_country:
            return self._config.neutral_score
        if wanted_country != talent_country:
            return self._config.mismatch_score

        wanted_city = _clean(requirement.location.city)
        if wanted_city and wanted_city == _clean(talent.location.city):
            return self._config.city_match_score
        return self._config.country_match_score

    def _build_response(
        self,
        score: float,
        arrangement: LocationType,
        timezone_score: float | None,
        geography: float | None,
    ) -> dict[str, Any]:
        return {
            "method": self.method,
            "scores": {"location": round(min(max(score, 0.0), 1.0), 4)},
            "metadata": {
                "arrangement": arrangement.value,
                "timezone_score": timezone_score,
                "geography_score": geography,
            },
        }


def _clean(value: str | None) -> str:
    return (value or "").strip().lower()
