"""Post-scoring fairness audit with bounded score corrections."""

from __future__ import annotations

import hashlib
import math
from dataclasses import dataclass, field, replace
from typing import Literal, Mapping, Protocol, Sequence, runtime_checkable

import structlog

from ..schemas import TalentProfile
from .scoring import MatchScore

logger = structlog.get_logger(__name__)

Severity = Literal["low", "medium", "high"]
MetricStatus = Literal["ok", "insufficient_data"]

_EXPERIENCE_GROUPS = ("0-2 years", "3-5 years", "6-10 years", "10+ years")


@runtime_checkable
class DemographicProvider(Protocol):
    """Source of consented demographic attributes keyed by talent id."""

    def attributes(self, talent_ids: Sequence[str]) -> Mapping[str, Mapping[str, str]]:
        """Return ``{talent_id: {attribute: group}}`` for talents with data."""


class NullDemographicProvider:
    """Provider used when no demographic data is available."""

    def attributes(self, talent_ids: Sequence[str]) -> Mapping[str, Mapping[str, str]]:
        return {}


@dataclass
class FairnessConfig:
    variance_threshold: float = 0.04
    max_deviation: float = 0.25
    cluster_threshold: float = 0.85
    cluster_fraction: float = 0.5
    min_cluster_size: int = 3
    max_perturbation: float = 0.005
    severity_thresholds: dict[str, float] = field(
        default_factory=lambda: {"low": 0.1, "medium": 0.25, "high": 0.4}
    )
    demographic_attributes: tuple[str, ...] = ("gender", "age_group", "education")


@dataclass(frozen=True, slots=True)
class BiasMetric:
    name: str
    detected: bool
    severity: Severity
    score: float
    details: str
    affected_groups: tuple[str, ...] = ()
    status: MetricStatus = "ok"


@dataclass(frozen=True, slots=True)
class FairnessReport:
    """Bias signals for human review."""

    metrics: tuple[BiasMetric, ...]
    overall_bias_score: float
    recommendations: tuple[str, ...]
    adjusted_talent_ids: tuple[str, ...]

    def metric(self, name: str) -> BiasMetric | None:
        return next((metric for metric in self.metrics if metric.name == name), None)


@dataclass(frozen=True, slots=True)
class FairnessAudit:
    adjusted_matches: tuple[MatchScore, ...]
    report: FairnessReport


class FairnessAuditor:
    """Detect score skew across a scored set and apply bounded corrections.

    Corrections only ever replace ``total_score``. Reasons, concerns and
    breakdowns are left untouched, and the order of ``matches`` is preserved.
    """

    def __init__(
        self,
        *,
        config: FairnessConfig | None = None,
        demographics: DemographicProvider | None = None,
    ) -> None:
        self._config = config or FairnessConfig()
        self._demographics = demographics or NullDemographicProvider()

    def audit(
        self,
        matches: Sequence[MatchScore],
        *,
        profiles: Mapping[str, TalentProfile] | None = None,
    ) -> FairnessAudit:
        profiles = profiles or {}
        scores = [match.total_score for match in matches]

        variance_metric = self._variance_metric(scores)
        clustering_metric = self._clustering_metric(scores)

        adjusted = list(matches)
        changed: set[str] = set()
        if variance_metric.detected:
            adjusted = self._clamp_to_mean(adjusted, changed)
        if clustering_metric.detected:
            adjusted = self._break_ties(adjusted, changed)

        metrics = [
            variance_metric,
            clustering_metric,
            self._distribution_metric(
                "location",
                self._location_distribution(matches, profiles),
            ),
            self._distribution_metric(
                "experience",
                self._experience_distribution(matches, profiles),
            ),
        ]
        metrics.extend(self._demographic_metrics(matches))

        scored = [metric.score for metric in metrics if metric.status == "ok"]
        overall = round(sum(scored) / len(scored), 4) if scored else 0.0
        adjusted_ids = tuple(match.talent_id for match in matches if match.talent_id in changed)

        report = FairnessReport(
            metrics=tuple(metrics),
            overall_bias_score=overall,
            recommendations=tuple(self._recommendations(metrics, overall)),
            adjusted_talent_ids=adjusted_ids,
        )
        logger.info(
            "matching.fairness_audited",
            candidates=len(matches),
            adjusted=len(adjusted_ids),
            overall_bias_score=overall,
            detected=[metric.name for metric in metrics if metric.detected],
        )
        return FairnessAudit(adjusted_matches=tuple(adjusted), report=report)

    def _variance_metric(self, scores: Sequence[float]) -> BiasMetric:
        if len(scores) < 2:
            return BiasMetric(
                name="score_variance",
                detected=False,
                severity="low",
                score=0.0,
                details="Fewer than two scores; variance not assessed",
                status="insufficient_data",
            )
        variance = _variance(scores)
        return BiasMetric(
            name="score_variance",
            detected=variance > self._config.variance_threshold,
            severity=self._severity(math.sqrt(variance)),
            score=round(variance, 6),
            details=f"Total score variance is {variance:.4f}",
        )

    def _clustering_metric(self, scores: Sequence[float]) -> BiasMetric:
        if not scores:
            return BiasMetric(
                name="score_clustering",
                detected=False,
                severity="low",
                score=0.0,
                details="No scores to assess",
                status="insufficient_data",
            )
        clustered = sum(1 for score in scores if score >= self._config.cluster_threshold)
        fraction = clustered / len(scores)
        detected = (
            fraction > self._config.cluster_fraction
            and clustered >= self._config.min_cluster_size
        )
        return BiasMetric(
            name="score_clustering",
            detected=detected,
            severity=self._severity(fraction),
            score=round(fraction, 4),
            details=(
                f"{clustered} of {len(scores)} candidates score at or above "
                f"{self._config.cluster_threshold:g}"
            ),
        )

    def _clamp_to_mean(self, matches: list[MatchScore], changed: set[str]) -> list[MatchScore]:
        mean = sum(match.total_score for match in matches) / len(matches)
        low = max(0.0, mean - self._config.max_deviation)
        high = min(1.0, mean + self._config.max_deviation)
        clamped: list[MatchScore] = []
        for match in matches:
            value = round(min(max(match.total_score, low), high), 4)
            if value != match.total_score:
                changed.add(match.talent_id)
                match = replace(match, total_score=value)
            clamped.append(match)
        return clamped

    def _break_ties(self, matches: list[MatchScore], changed: set[str]) -> list[MatchScore]:
        counts: dict[float, int] = {}
        for match in matches:
            if match.total_score >= self._config.cluster_threshold:
                counts[match.total_score] = counts.get(match.total_score, 0) + 1

        perturbed: list[MatchScore] = []
        for match in matches:
            if counts.get(match.total_score, 0) > 1:
                offset = self.perturbation(match.talent_id)
                value = min(max(match.total_score + offset, 0.0), 1.0)
                if value != match.total_score:
                    changed.add(match.talent_id)
                    match = replace(match, total_score=value)
            perturbed.append(match)
        return perturbed

    def perturbation(self, talent_id: str) -> float:
        """Deterministic offset in ``[-max_perturbation, max_perturbation]``."""
        digest = hashlib.sha256(talent_id.encode("utf-8")).hexdigest()
        unit = int(digest[:8], 16) / 0xFFFFFFFF
        return round((unit * 2 - 1) * self._config.max_perturbation, 6)

    @staticmethod
    def _location_distribution(
        matches: Sequence[MatchScore],
        profiles: Mapping[str, TalentProfile],
    ) -> dict[str, int]:
        distribution: dict[str, int] = {}
        for match in matches:
            profile = profiles.get(match.talent_id)
            if profile is None:
                continue
            country = profile.location.country or "unknown"
            distribution[country] = distribution.get(country, 0) + 1
        return distribution

    @staticmethod
    def _experience_distribution(
        matches: Sequence[MatchScore],
        profiles: Mapping[str, TalentProfile],
    ) -> dict[str, int]:
        distribution = {group: 0 for group in _EXPERIENCE_GROUPS}
        seen = False
        for match in matches:
            profile = profiles.get(match.talent_id)
            if profile is None:
                continue
            seen = True
            years = sum(entry.years for entry in profile.experience)
            distribution[_experience_group(years)] += 1
        return distribution if seen else {}

    def _demographic_metrics(self, matches: Sequence[MatchScore]) -> list[BiasMetric]:
        attributes = self._demographics.attributes([match.talent_id for match in matches])
        metrics: list[BiasMetric] = []
        for attribute in self._config.demographic_attributes:
            distribution: dict[str, int] = {}
            for match in matches:
                group = (attributes.get(match.talent_id) or {}).get(attribute)
                if group:
                    distribution[group] = distribution.get(group, 0) + 1
            metrics.append(self._distribution_metric(attribute, distribution))
        return metrics

    def _distribution_metric(self, name: str, distribution: Mapping[str, int]) -> BiasMetric:
        total = sum(distribution.values())
        if total == 0:
            return BiasMetric(
                name=name,
                detected=False,
                severity="low",
                score=0.0,
                details=f"No {name} data available",
                status="insufficient_data",
            )
        counts = list(distribution.values())
        expected = total / len(counts)
        variance = sum((count - expected) ** 2 for count in counts) / len(counts)
        score = round(min(variance / (total * total), 1.0), 4)
        affected = tuple(
            group for group, count in distribution.items() if count < expected * 0.5
        )
        return BiasMetric(
            name=name,
            detected=score > self._config.severity_thresholds["low"],
            severity=self._severity(score),
            score=score,
            details=f"{name.replace('_', ' ').capitalize()} distribution shows {score:.2f} bias score",
            affected_groups=affected,
        )

    def _severity(self, score: float) -> Severity:
        thresholds = self._config.severity_thresholds
        if score >= thresholds["high"]:
            return "high"
        if score >= thresholds["medium"]:
            return "medium"
        return "low"

    def _recommendations(self, metrics: Sequence[BiasMetric], overall: float) -> list[str]:
        by_name = {metric.name: metric for metric in metrics}
        notes: list[str] = []
        if overall > self._config.severity_thresholds["high"]:
            notes.append(
                "High bias detected: review matching criteria before contacting candidates"
            )
        if by_name["score_variance"].detected:
            notes.append(
                "Score variance is high: scores were pulled toward the mean, review outliers manually"
            )
        if by_name["score_clustering"].detected:
            notes.append(
                "Many candidates cluster at the top: close scores were separated deterministically, "
                "treat their order as a tie"
            )
        if by_name["location"].detected:
            notes.append("Location bias detected: consider remote options and timezone flexibility")
        if by_name["experience"].detected:
            notes.append("Experience bias detected: consider candidates with transferable skills")

        missing = [
            attribute
            for attribute in self._config.demographic_attributes
            if by_name[attribute].status == "insufficient_data"
        ]
        if missing:
            notes.append(
                f"Insufficient demographic data for {', '.join(missing)}: fairness across these "
                "attributes was not assessed"
            )
        for attribute in self._config.demographic_attributes:
            if by_name[attribute].detected:
                notes.append(
                    f"{attribute.replace('_', ' ').capitalize()} imbalance detected among matches: "
                    "review requirements for indirect criteria"
                )
        return notes


def _variance(values: Sequence[float]) -> float:
    mean = sum(values) / len(values)
    return sum((value - mean) ** 2 for value in values) / len(values)


def _experience_group(years: float) -> str:
    if years <= 2:
        return "0-2 years"
    if years <= 5:
        return "3-5 years"
    if years <= 10:
        return "6-10 years"
    return "10+ years"
