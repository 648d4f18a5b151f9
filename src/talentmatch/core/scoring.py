"""Multi-factor scoring of talents against a requirement."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Mapping, Sequence

import structlog

from ..schemas import (
    DIMENSIONS,
    ProjectRequirement,
    ProjectWeights,
    ScoreBreakdown,
    TalentProfile,
)
from .availability import AvailabilityEngine, ProjectTimeframe
from .evaluators.reliability import completion_ratio
from .explanations import build_concerns, build_reasons
from .skills import SkillResolver

logger = structlog.get_logger(__name__)


@dataclass(slots=True)
class EvaluationResult:
    """Normalized evaluator output."""

    method: str
    scores: dict[str, float]
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class MatchScore:
    """Score of one talent for one requirement.

    ``rank`` stays 0 until the ranking stage assigns 1-based positions.
    """

    talent_id: str
    total_score: float
    breakdown: ScoreBreakdown
    reasons: tuple[str, ...]
    concerns: tuple[str, ...]
    confidence: float
    predicted_success: float
    matched_skills: tuple[str, ...] = ()
    details: Mapping[str, Mapping[str, Any]] = field(default_factory=dict)
    rank: int = 0


@dataclass(frozen=True, slots=True)
class PrefilterResult:
    eligible: tuple[TalentProfile, ...]
    excluded: Mapping[str, str]

    def reason_counts(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for reason in self.excluded.values():
            counts[reason] = counts.get(reason, 0) + 1
        return counts


@dataclass
class PrefilterConfig:
    rate_ceiling_ratio: float = 1.5


class CandidatePrefilter:
    """Drop talents that cannot plausibly take the project."""

    def __init__(
        self,
        *,
        resolver: SkillResolver | None = None,
        engine: AvailabilityEngine | None = None,
        config: PrefilterConfig | None = None,
    ) -> None:
        self._resolver = resolver or SkillResolver()
        self._engine = engine or AvailabilityEngine()
        self._config = config or PrefilterConfig()

    def apply(
        self,
        requirement: ProjectRequirement,
        talents: Iterable[TalentProfile],
    ) -> PrefilterResult:
        timeframe = ProjectTimeframe.from_requirement(requirement)
        eligible: list[TalentProfile] = []
        excluded: dict[str, str] = {}
        for talent in talents:
            reason = self.exclusion_reason(requirement, talent, timeframe)
            if reason is None:
                eligible.append(talent)
            else:
                excluded[talent.id] = reason
                logger.debug("matching.prefilter_excluded", talent_id=talent.id, reason=reason)
        return PrefilterResult(eligible=tuple(eligible), excluded=excluded)

    def exclusion_reason(
        self,
        requirement: ProjectRequirement,
        talent: TalentProfile,
        timeframe: ProjectTimeframe | None = None,
    ) -> str | None:
        if not talent.is_available:
            return "unavailable"

        if requirement.required_skills and not any(
            self._resolver.has_sufficient_match(required, talent.skills)
            for required in requirement.required_skills
        ):
            return "no_required_skill_match"

        timeframe = timeframe or ProjectTimeframe.from_requirement(requirement)
        if not self._engine.has_overlap(talent.availability, timeframe):
            return "no_availability_overlap"

        ceiling = requirement.budget.max * self._config.rate_ceiling_ratio
        if requirement.budget.max > 0 and talent.hourly_rate >= ceiling:
            return "rate_above_budget"
        return None


@dataclass
class ConfidenceConfig:
    base: float = 0.4
    reviews_divisor: float = 20.0
    reviews_cap: float = 0.2
    projects_divisor: float = 10.0
    projects_cap: float = 0.2
    experience_divisor: float = 5.0
    experience_cap: float = 0.1
    skills_bonus: float = 0.1


class Scorer:
    """Coordinates dimension evaluators and aggregates weighted scores."""

    def __init__(
        self,
        evaluators: Iterable[Any],
        *,
        confidence: ConfidenceConfig | None = None,
    ) -> None:
        self._evaluators = list(evaluators)
        self._confidence = confidence or ConfidenceConfig()
        methods = {evaluator.method for evaluator in self._evaluators}
        missing = [name for name in DIMENSIONS if name not in methods]
        if missing:
            raise ValueError(f"No evaluator registered for dimensions: {missing}")

    def score(
        self,
        talent: TalentProfile,
        requirement: ProjectRequirement,
        weights: ProjectWeights,
        *,
        context: dict[str, Any] | None = None,
    ) -> MatchScore:
        evaluation_context: dict[str, Any] = dict(context or {})

        values: dict[str, float] = {}
        details: dict[str, dict[str, Any]] = {}
        for evaluator in self._evaluators:
            result = self._normalize_evaluation_result(
                evaluator.evaluate(talent, requirement, evaluation_context)
            )
            for key, value in result.scores.items():
                if key in DIMENSIONS:
                    values[key] = value
            details[result.method] = result.metadata

        breakdown = ScoreBreakdown(**values)
        skill_details = details.get("skills", {})
        return MatchScore(
            talent_id=talent.id,
            total_score=breakdown.weighted_total(weights),
            breakdown=breakdown,
            reasons=tuple(build_reasons(talent, breakdown, details)),
            concerns=tuple(build_concerns(talent, requirement, breakdown, details)),
            confidence=self.confidence(talent),
            predicted_success=self.predicted_success(
                talent, skill_details.get("matched_years_average", 0.0)
            ),
            matched_skills=tuple(skill_details.get("matched_skills") or ()),
            details=details,
        )

    def refresh_dimension(
        self,
        match: MatchScore,
        dimension: str,
        talent: TalentProfile,
        requirement: ProjectRequirement,
        weights: ProjectWeights,
        *,
        context: dict[str, Any],
    ) -> MatchScore:
        """Re-run one dimension's evaluator and recompute the weighted total."""
        evaluator = next(
            (candidate for candidate in self._evaluators if candidate.method == dimension),
            None,
        )
        if evaluator is None:
            raise ValueError(f"No evaluator registered for dimension '{dimension}'")

        result = self._normalize_evaluation_result(evaluator.evaluate(talent, requirement, context))
        breakdown = match.breakdown.model_copy(update={dimension: result.scores[dimension]})
        details = dict(match.details)
        details[dimension] = result.metadata

        concerns = build_concerns(talent, requirement, breakdown, details)
        for concern in result.metadata.get("concerns", ()):
            if concern not in concerns:
                concerns.append(concern)

        return replace(
            match,
            total_score=breakdown.weighted_total(weights),
            breakdown=breakdown,
            reasons=tuple(build_reasons(talent, breakdown, details)),
            concerns=tuple(concerns),
            details=details,
        )

    def confidence(self, talent: TalentProfile) -> float:
        config = self._confidence
        value = config.base
        value += min(talent.total_reviews / config.reviews_divisor, config.reviews_cap)
        value += min(len(talent.past_projects) / config.projects_divisor, config.projects_cap)
        value += min(len(talent.experience) / config.experience_divisor, config.experience_cap)
        if talent.skills:
            value += config.skills_bonus
        return round(min(value, 1.0), 4)

    @staticmethod
    def predicted_success(talent: TalentProfile, matched_years_average: float) -> float:
        rating = talent.rating / 5 if talent.rating is not None else 0.5
        completion = completion_ratio(talent)
        if completion is None:
            completion = 0.5
        depth = min(matched_years_average / 5, 1.0)
        return round(min(0.4 * rating + 0.3 * completion + 0.3 * depth, 1.0), 4)

    @staticmethod
    def _normalize_evaluation_result(payload: dict[str, Any]) -> EvaluationResult:
        method = payload.get("method")
        scores = payload.get("scores") or {}
        metadata = payload.get("metadata") or {}
        if method is None:
            raise ValueError("Evaluator result must include 'method'.")
        if not isinstance(scores, dict):
            raise ValueError("Evaluator result 'scores' must be a mapping.")
        return EvaluationResult(
            method=str(method),
            scores={k: min(max(float(v), 0.0), 1.0) for k, v in scores.items()},
            metadata=dict(metadata),
        )


def rank_matches(
    matches: Sequence[MatchScore],
    *,
    min_score: float = 0.0,
    max_matches: int | None = None,
) -> list[MatchScore]:
    """Stable sort by total descending, filter, cap and assign 1-based ranks."""
    ordered = sorted(matches, key=lambda match: match.total_score, reverse=True)
    kept = [match for match in ordered if match.total_score >= min_score]
    if max_matches is not None:
        kept = kept[:max_matches]
    return [replace(match, rank=index) for index, match in enumerate(kept, start=1)]
