"""Context-dependent scoring weights."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

from ..schemas import (
    DIMENSIONS,
    PartialWeights,
    ProjectRequirement,
    ProjectType,
    ProjectWeights,
    Urgency,
)


def _default_base_weights() -> dict[str, float]:
    return {
        "skills": 0.35,
        "experience": 0.20,
        "availability": 0.15,
        "budget": 0.10,
        "location": 0.05,
        "culture": 0.05,
        "velocity": 0.05,
        "reliability": 0.05,
    }


def _default_project_type_multipliers() -> dict[str, dict[str, float]]:
    return {
        "development": {"skills": 1.3, "experience": 1.2, "availability": 0.9},
        "consulting": {"experience": 1.4, "culture": 1.3, "reliability": 1.2},
        "design": {"skills": 1.2, "culture": 1.1, "availability": 1.0},
        "data": {"skills": 1.4, "experience": 1.3, "reliability": 1.1},
        "other": {"skills": 1.0, "experience": 1.0, "availability": 1.0},
    }


def _default_team_size_multipliers() -> dict[str, dict[str, float]]:
    return {
        "1": {"culture": 0.8, "availability": 1.2},
        "2-5": {"culture": 1.1, "availability": 1.0},
        "6-10": {"culture": 1.3, "availability": 0.9},
        "11+": {"culture": 1.5, "availability": 0.8},
    }


def _default_industry_multipliers() -> dict[str, dict[str, float]]:
    return {
        "healthcare": {"experience": 1.3, "reliability": 1.4, "culture": 1.2},
        "finance": {"experience": 1.4, "reliability": 1.5, "skills": 1.2},
        "ecommerce": {"skills": 1.2, "velocity": 1.3, "availability": 1.1},
        "saas": {"skills": 1.3, "experience": 1.2, "culture": 1.1},
        "startup": {"availability": 1.3, "velocity": 1.4, "budget": 0.8},
        "enterprise": {"experience": 1.3, "reliability": 1.4, "culture": 1.3},
    }


@dataclass
class WeightPolicyConfig:
    """Base distribution and multiplier tables."""

    base_weights: dict[str, float] = field(default_factory=_default_base_weights)
    urgency_multipliers: dict[str, float] = field(
        default_factory=lambda: {"low": 1.0, "medium": 1.2, "high": 1.5, "critical": 2.0}
    )
    urgency_dimensions: tuple[str, ...] = ("availability", "velocity")
    project_type_multipliers: dict[str, dict[str, float]] = field(
        default_factory=_default_project_type_multipliers
    )
    team_size_multipliers: dict[str, dict[str, float]] = field(
        default_factory=_default_team_size_multipliers
    )
    industry_multipliers: dict[str, dict[str, float]] = field(
        default_factory=_default_industry_multipliers
    )
    min_score_cap: float = 0.8
    max_results_cap: int = 50


class WeightPolicy:
    """Derive normalized per-run weights from project context."""

    def __init__(self, *, config: WeightPolicyConfig | None = None) -> None:
        self._config = config or WeightPolicyConfig()
        unknown = set(self._config.base_weights) - set(DIMENSIONS)
        if unknown:
            raise ValueError(f"Unknown weight dimensions: {sorted(unknown)}")

    @property
    def base_weights(self) -> ProjectWeights:
        return self._normalize(self._base())

    def derive_weights(
        self,
        requirement: ProjectRequirement,
        overrides: PartialWeights | Mapping[str, float] | None = None,
    ) -> ProjectWeights:
        weights = self._base()

        urgency = self._config.urgency_multipliers.get(requirement.urgency.value, 1.0)
        for name in self._config.urgency_dimensions:
            weights[name] *= urgency

        self._apply(
            weights,
            self._config.project_type_multipliers.get(requirement.project_type.value, {}),
        )
        self._apply(
            weights,
            self._config.team_size_multipliers.get(self.team_size_key(requirement.team_size), {}),
        )
        self._apply(
            weights,
            self._config.industry_multipliers.get(requirement.client_industry.lower(), {}),
        )
        normalized = self._normalize(weights)

        if not overrides:
            return normalized

        custom = overrides.as_dict() if isinstance(overrides, PartialWeights) else dict(overrides)
        unknown = set(custom) - set(DIMENSIONS)
        if unknown:
            raise ValueError(f"Unknown weight dimensions: {sorted(unknown)}")
        merged = normalized.as_dict()
        merged.update({name: float(value) for name, value in custom.items()})
        return self._normalize(merged)

    @staticmethod
    def team_size_key(team_size: int) -> str:
        if team_size <= 1:
            return "1"
        if team_size <= 5:
            return "2-5"
        if team_size <= 10:
            return "6-10"
        return "11+"

    def recommended_min_score(self, requirement: ProjectRequirement) -> float:
        score = 0.6
        if requirement.urgency == Urgency.CRITICAL:
            score = 0.7
        elif requirement.urgency == Urgency.HIGH:
            score = 0.65

        if requirement.project_type in (ProjectType.CONSULTING, ProjectType.DATA):
            score += 0.05
        if requirement.client_industry.lower() in ("healthcare", "finance"):
            score += 0.05
        return round(min(score, self._config.min_score_cap), 4)

    def recommended_max_results(self, requirement: ProjectRequirement) -> int:
        limit = 20
        if requirement.urgency == Urgency.CRITICAL:
            limit = 30
        elif requirement.urgency == Urgency.HIGH:
            limit = 25

        if requirement.project_type in (ProjectType.DATA, ProjectType.CONSULTING):
            limit += 5
        if requirement.client_industry.lower() == "enterprise":
            limit += 5
        return min(limit, self._config.max_results_cap)

    def explain(self, requirement: ProjectRequirement) -> list[str]:
        """Human-readable notes on which context adjusted the weights."""
        notes: list[str] = []

        if requirement.urgency == Urgency.CRITICAL:
            notes.append("Critical urgency: Availability and velocity weights increased by 2x")
        elif requirement.urgency == Urgency.HIGH:
            notes.append("High urgency: Availability and velocity weights increased by 1.5x")

        if requirement.project_type == ProjectType.DEVELOPMENT:
            notes.append("Development project: Skills and experience weights prioritized")
        elif requirement.project_type == ProjectType.CONSULTING:
            notes.append("Consulting project: Experience and culture weights prioritized")
        elif requirement.project_type == ProjectType.DATA:
            notes.append("Data project: Skills and experience weights prioritized")

        team_key = self.team_size_key(requirement.team_size)
        if team_key == "1":
            notes.append("Solo project: Availability prioritized over culture")
        elif team_key == "11+":
            notes.append("Large team: Culture and communication prioritized")

        industry = requirement.client_industry.lower()
        if industry in ("healthcare", "finance"):
            notes.append(f"{industry} industry: Experience and reliability prioritized")
        elif industry == "startup":
            notes.append("Startup environment: Availability and velocity prioritized")

        return notes

    def _base(self) -> dict[str, float]:
        return {name: float(self._config.base_weights.get(name, 0.0)) for name in DIMENSIONS}

    @staticmethod
    def _apply(weights: dict[str, float], multipliers: Mapping[str, float]) -> None:
        for name, factor in multipliers.items():
            if name in weights:
                weights[name] *= factor

    def _normalize(self, weights: Mapping[str, float]) -> ProjectWeights:
        total = sum(weights.values())
        if total <= 0:
            fallback = _default_base_weights()
            total = sum(fallback.values())
            weights = fallback
        return ProjectWeights(**{name: weights[name] / total for name in DIMENSIONS})
