"""Core matching engine components."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from ..schemas import ProjectRequirement, TalentProfile

# NOTE: keep imports explicit for export clarity.
from .availability import (
    AvailabilityConfig,
    AvailabilityEngine,
    AvailabilityMatch,
    ProjectTimeframe,
)
from .evaluators import (
    AvailabilityEvaluator,
    BudgetEvaluator,
    CultureEvaluator,
    ExperienceEvaluator,
    LocationEvaluator,
    ReliabilityEvaluator,
    SkillsEvaluator,
    VelocityEvaluator,
)
from .fairness import (
    BiasMetric,
    DemographicProvider,
    FairnessAudit,
    FairnessAuditor,
    FairnessConfig,
    FairnessReport,
    NullDemographicProvider,
)
from .scoring import (
    CandidatePrefilter,
    EvaluationResult,
    MatchScore,
    PrefilterResult,
    Scorer,
    rank_matches,
)
from .skills import SkillCatalog, SkillResolver, SkillResolverConfig, load_default_catalog
from .weights import WeightPolicy, WeightPolicyConfig


@runtime_checkable
class Evaluator(Protocol):
    """Evaluator contract for computing one scoring dimension."""

    method: str

    def evaluate(
        self,
        talent: TalentProfile,
        requirement: ProjectRequirement,
        context: dict[str, Any],
    ) -> dict[str, Any]:
        """Return ``{"method", "scores", "metadata"}`` for a talent."""


__all__ = [
    "Evaluator",
    "AvailabilityConfig",
    "AvailabilityEngine",
    "AvailabilityMatch",
    "ProjectTimeframe",
    "SkillCatalog",
    "SkillResolver",
    "SkillResolverConfig",
    "load_default_catalog",
    "WeightPolicy",
    "WeightPolicyConfig",
    "Scorer",
    "MatchScore",
    "EvaluationResult",
    "CandidatePrefilter",
    "PrefilterResult",
    "rank_matches",
    "FairnessAuditor",
    "FairnessConfig",
    "FairnessAudit",
    "FairnessReport",
    "BiasMetric",
    "DemographicProvider",
    "NullDemographicProvider",
    "SkillsEvaluator",
    "ExperienceEvaluator",
    "AvailabilityEvaluator",
    "BudgetEvaluator",
    "LocationEvaluator",
    "CultureEvaluator",
    "VelocityEvaluator",
    "ReliabilityEvaluator",
]
