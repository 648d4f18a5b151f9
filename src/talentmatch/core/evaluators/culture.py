"""Working-culture alignment evaluation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ...schemas import (
    CommunicationStyle,
    CompanySize,
    ProjectRequirement,
    TalentProfile,
    WorkStyle,
)

_SIZE_ORDER = (CompanySize.STARTUP, CompanySize.SMALL, CompanySize.MEDIUM, CompanySize.ENTERPRISE)


def _default_work_style_table() -> dict[str, dict[str, float]]:
    return {
        "agile": {"agile": 1.0, "hybrid": 0.7, "waterfall": 0.3},
        "hybrid": {"agile": 0.7, "hybrid": 1.0, "waterfall": 0.7},
        "waterfall": {"agile": 0.3, "hybrid": 0.7, "waterfall": 1.0},
    }


@dataclass
class CultureConfig:
    """Component weights and lookup tables for culture fit."""

    work_style_weight: float = 0.4
    communication_weight: float = 0.3
    company_size_weight: float = 0.3
    work_style_table: dict[str, dict[str, float]] = field(default_factory=_default_work_style_table)
    communication_mixed_score: float = 0.7
    communication_mismatch_score: float = 0.3
    adjacent_size_score: float = 0.6
    distant_size_score: float = 0.2
    neutral_score: float = 0.5


class CultureEvaluator:
    """Compare work style, communication and company-size preferences."""

    method = "culture"

    def __init__(self, *, config: CultureConfig | None = None) -> None:
        self._config = config or CultureConfig()

    def evaluate(
        self,
        talent: TalentProfile,
        requirement: ProjectRequirement,
        context: dict[str, Any],
    ) -> dict[str, Any]:
        preferences = talent.preferences
        work_style = self._work_style_score(requirement.work_style, preferences.work_style)
        communication = self._communication_score(
            requirement.communication_style, preferences.communication_style
        )
        company_size = self._company_size_score(
            requirement.company_size, preferences.preferred_company_size
        )
        score = (
            work_style * self._config.work_style_weight
            + communication * self._config.communication_weight
            + company_size * self._config.company_size_weight
        )
        return {
            "method": self.method,
            "scores": {"culture": round(min(max(score, 0.0), 1.0), 4)},
            "metadata": {
                "work_style_score": work_style,
                "communication_score": communication,
                "company_size_score": company_size,
            },
        }

    def _work_style_score(self, wanted: WorkStyle, preferred: WorkStyle | None) -> float:
        if preferred is None:
            return self._config.neutral_score
        row = self._config.work_style_table.get(wanted.value, {})
        return row.get(preferred.value, self._config.neutral_score)

    def _communication_score(
        self,
        wanted: CommunicationStyle,
        preferred: CommunicationStyle,
    ) -> float:
        if CommunicationStyle.UNKNOWN in (wanted, preferred):
            return self._config.neutral_score
        if wanted == preferred:
            return 1.0
        if CommunicationStyle.MIXED in (wanted, preferred):
            return self._config.communication_mixed_score
        return self._config.communication_mismatch_score

    def _company_size_score(self, wanted: CompanySize, preferred: CompanySize | None) -> float:
        if preferred is None:
            return self._config.neutral_score
        distance = abs(_SIZE_ORDER.index(wanted) - _SIZE_ORDER.index(preferred))
        if distance == 0:
            return 1.0
        if distance == 1:
            return self._config.adjacent_size_score
        return self._config.distant_size_score
