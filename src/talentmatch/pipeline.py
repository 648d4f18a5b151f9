"""Staged match generation and read-back of persisted matches."""

from __future__ import annotations

import json
import uuid
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Sequence

import pendulum
import structlog

from . import __version__
from .adapters import RecordAdapter, RecordError
from .core import (
    CandidatePrefilter,
    FairnessAuditor,
    FairnessReport,
    MatchScore,
    Scorer,
    WeightPolicy,
    rank_matches,
)
from .repositories import (
    BookingRepository,
    DeadlineScheduler,
    MatchStore,
    RequirementRepository,
    TalentRepository,
)
from .schemas import (
    RESPONDED_STATUSES,
    AvailabilityDetails,
    GeneratedMatch,
    MatchGenerationOptions,
    MatchStatistics,
    MatchStatus,
    ProjectRequirement,
    ProjectWeights,
    TalentProfile,
)


class MatchingError(Exception):
    """Base class for match generation failures."""


class RequirementNotFoundError(MatchingError):
    def __init__(self, requirement_id: str):
        super().__init__(f"Requirement not found: {requirement_id}")
        self.requirement_id = requirement_id


class RepositoryError(MatchingError):
    """A collaborator (repository, store) failed."""


class RunCancelledError(MatchingError):
    def __init__(self, stage: "RunStage"):
        super().__init__(f"Run cancelled before stage {stage.value}")
        self.stage = stage


class MatchNotFoundError(MatchingError):
    def __init__(self, match_id: str):
        super().__init__(f"Match not found: {match_id}")
        self.match_id = match_id


class RunStage(str, Enum):
    FETCHING = "fetching"
    PRE_FILTERING = "pre_filtering"
    SCORING = "scoring"
    AVAILABILITY_REFRESH = "availability_refresh"
    AUDITING = "auditing"
    RANKING = "ranking"
    PERSISTING = "persisting"
    DEADLINE_SCHEDULING = "deadline_scheduling"
    DONE = "done"


@dataclass
class MatchRun:
    """Report of one ranking run."""

    run_id: str
    requirement_id: str
    weights: ProjectWeights | None = None
    stages: list[RunStage] = field(default_factory=list)
    matches: list[GeneratedMatch] = field(default_factory=list)
    pool_size: int = 0
    excluded: dict[str, str] = field(default_factory=dict)
    skipped_records: list[str] = field(default_factory=list)
    fairness: FairnessReport | None = None
    min_score: float | None = None
    max_matches: int | None = None
    scheduling_failures: list[str] = field(default_factory=list)

    @property
    def prefilter_summary(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for reason in self.excluded.values():
            counts[reason] = counts.get(reason, 0) + 1
        return counts

    def to_dict(self) -> dict[str, Any]:
        return {
            "run_id": self.run_id,
            "requirement_id": self.requirement_id,
            "stages": [stage.value for stage in self.stages],
            "weights": self.weights.as_dict() if self.weights else None,
            "pool_size": self.pool_size,
            "prefilter": {"excluded": dict(self.excluded), "summary": self.prefilter_summary},
            "skipped_records": list(self.skipped_records),
            "min_score": self.min_score,
            "max_matches": self.max_matches,
            "fairness": _fairness_dict(self.fairness) if self.fairness else None,
            "scheduling_failures": list(self.scheduling_failures),
            "matches": [match.model_dump(mode="json") for match in self.matches],
        }


class MatchOrchestrator:
    """End-to-end match generation for a requirement."""

    def __init__(
        self,
        *,
        requirements: RequirementRepository,
        talents: TalentRepository,
        bookings: BookingRepository,
        store: MatchStore,
        scheduler: DeadlineScheduler,
        scorer: Scorer,
        weight_policy: WeightPolicy,
        auditor: FairnessAuditor,
        prefilter: CandidatePrefilter | None = None,
        adapter: RecordAdapter | None = None,
        pool_limit: int = 100,
        max_workers: int = 8,
        expiry_days: int = 7,
        now_provider: Callable[[], datetime] | None = None,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self._requirements = requirements
        self._talents = talents
        self._bookings = bookings
        self._store = store
        self._scheduler = scheduler
        self._scorer = scorer
        self._weights = weight_policy
        self._auditor = auditor
        self._prefilter = prefilter or CandidatePrefilter()
        self._adapter = adapter or RecordAdapter()
        self._pool_limit = pool_limit
        self._max_workers = max_workers
        self._expiry = timedelta(days=expiry_days)
        self._now_provider = now_provider or (lambda: pendulum.now("UTC"))
        self._id_factory = id_factory or (lambda: uuid.uuid4().hex)
        self._logger = structlog.get_logger(__name__)

    def generate_matches(
        self,
        requirement_id: str,
        options: MatchGenerationOptions | None = None,
    ) -> list[GeneratedMatch]:
        return self.run(requirement_id, options).matches

    def run(
        self,
        requirement_id: str,
        options: MatchGenerationOptions | None = None,
        *,
        cancel_check: Callable[[], bool] | None = None,
        audit_logger: "AuditLogger | None" = None,
    ) -> MatchRun:
        options = options or MatchGenerationOptions()
        report = MatchRun(run_id=self._id_factory(), requirement_id=requirement_id)

        def enter(stage: RunStage) -> None:
            if cancel_check is not None and cancel_check():
                self._logger.warning("matching.run_cancelled", stage=stage.value)
                raise RunCancelledError(stage)
            report.stages.append(stage)

        with structlog.contextvars.bound_contextvars(
            run_id=report.run_id, requirement_id=requirement_id
        ):
            self._logger.info("matching.run_started")

            enter(RunStage.FETCHING)
            requirement = self._fetch_requirement(requirement_id)
            talents = self._fetch_pool(requirement, report)

            enter(RunStage.PRE_FILTERING)
            prefiltered = self._prefilter.apply(requirement, talents)
            report.excluded = dict(prefiltered.excluded)
            self._logger.info(
                "matching.prefilter",
                eligible=len(prefiltered.eligible),
                excluded=prefiltered.reason_counts(),
            )

            enter(RunStage.SCORING)
            weights = self._weights.derive_weights(requirement, options.custom_weights)
            report.weights = weights
            profiles = {talent.id: talent for talent in prefiltered.eligible}
            scores = self._score_all(prefiltered.eligible, requirement, weights)
            self._logger.info("matching.scored", candidates=len(scores))

            if options.enable_real_time_availability:
                enter(RunStage.AVAILABILITY_REFRESH)
                scores = self._refresh_availability(scores, profiles, requirement, weights)

            scores.sort(key=lambda score: score.total_score, reverse=True)
            enter(RunStage.AUDITING)
            audit = self._auditor.audit(scores, profiles=profiles)
            report.fairness = audit.report

            enter(RunStage.RANKING)
            report.min_score = (
                options.min_score
                if options.min_score is not None
                else self._weights.recommended_min_score(requirement)
            )
            report.max_matches = options.max_matches or self._weights.recommended_max_results(
                requirement
            )
            ranked = rank_matches(
                audit.adjusted_matches,
                min_score=report.min_score,
                max_matches=report.max_matches,
            )
            self._logger.info(
                "matching.ranked",
                ranked=len(ranked),
                min_score=report.min_score,
                max_matches=report.max_matches,
            )

            enter(RunStage.PERSISTING)
            matches = self._build_matches(
                ranked,
                requirement,
                set(audit.report.adjusted_talent_ids),
                options.response_time_guarantee_hours,
            )
            self._call(self._store.save_many, matches)
            report.matches = matches
            self._logger.info("matching.persisted", matches=len(matches))

            enter(RunStage.DEADLINE_SCHEDULING)
            for match in matches:
                try:
                    self._scheduler.schedule(match.id, match.response_deadline)
                except Exception as exc:  # noqa: BLE001
                    report.scheduling_failures.append(match.id)
                    self._logger.warning(
                        "matching.deadline_schedule_failed",
                        match_id=match.id,
                        error=str(exc),
                    )

            if audit_logger:
                for match in matches:
                    audit_logger.append(
                        {
                            "run_id": report.run_id,
                            "requirement_id": requirement_id,
                            "talent_id": match.talent_id,
                            "rank": match.rank,
                            "score": match.score,
                            "breakdown": match.breakdown.as_dict(),
                            "fairness_adjusted": match.fairness_adjusted,
                            "concerns": match.concerns,
                        }
                    )

            report.stages.append(RunStage.DONE)
            self._logger.info("matching.run_completed", matches=len(matches))
        return report

    def get_matches(self, requirement_id: str) -> list[GeneratedMatch]:
        matches = self._call(self._store.find_by_requirement, requirement_id)
        return sorted(matches, key=lambda match: match.rank)

    def update_match_status(self, match_id: str, status: MatchStatus | str) -> GeneratedMatch:
        status = MatchStatus(status)
        updated = self._call(self._store.update_status, match_id, status)
        if updated is None:
            raise MatchNotFoundError(match_id)
        self._logger.info("matching.status_updated", match_id=match_id, status=status.value)
        return updated

    def get_match_statistics(self, requirement_id: str) -> MatchStatistics:
        return build_statistics(requirement_id, self.get_matches(requirement_id))

    def _fetch_requirement(self, requirement_id: str) -> ProjectRequirement:
        raw = self._call(self._requirements.fetch, requirement_id)
        if raw is None:
            raise RequirementNotFoundError(requirement_id)
        try:
            return self._adapter.to_requirement(raw)
        except RecordError as exc:
            raise MatchingError(str(exc)) from exc

    def _fetch_pool(self, requirement: ProjectRequirement, report: MatchRun) -> list[TalentProfile]:
        hints = [skill.name for skill in requirement.required_skills]
        records = self._call(self._talents.fetch_candidate_pool, hints, self._pool_limit)
        talents: list[TalentProfile] = []
        for record in records:
            try:
                talents.append(self._adapter.to_talent(record))
            except RecordError as exc:
                report.skipped_records.append(str(exc))
                self._logger.warning(
                    "matching.talent_skipped",
                    talent_id=exc.record_id,
                    reason=exc.reason,
                )
        report.pool_size = len(talents)
        self._logger.info(
            "matching.fetched",
            pool_size=len(talents),
            skipped=len(report.skipped_records),
        )
        return talents

    def _score_all(
        self,
        talents: Sequence[TalentProfile],
        requirement: ProjectRequirement,
        weights: ProjectWeights,
    ) -> list[MatchScore]:
        if not talents:
            return []
        workers = max(1, min(self._max_workers, len(talents)))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            return list(
                executor.map(
                    lambda talent: self._scorer.score(talent, requirement, weights),
                    talents,
                )
            )

    def _refresh_availability(
        self,
        scores: list[MatchScore],
        profiles: dict[str, TalentProfile],
        requirement: ProjectRequirement,
        weights: ProjectWeights,
    ) -> list[MatchScore]:
        if not scores:
            return scores
        talent_ids = [score.talent_id for score in scores]
        raw_windows = self._call(self._talents.fetch_availability, talent_ids)
        bookings = self._call(
            self._bookings.find_conflicts,
            talent_ids,
            requirement.duration.start_date,
            requirement.duration.end,
        )

        availability = {}
        for talent_id, items in raw_windows.items():
            timezone = profiles[talent_id].location.timezone if talent_id in profiles else "UTC"
            try:
                availability[talent_id] = self._adapter.to_windows(items, timezone)
            except ValueError as exc:
                self._logger.warning(
                    "matching.availability_refresh_skipped",
                    talent_id=talent_id,
                    error=str(exc),
                )

        context = {"availability": availability, "bookings": bookings}
        refreshed = [
            self._scorer.refresh_dimension(
                score,
                "availability",
                profiles[score.talent_id],
                requirement,
                weights,
                context=context,
            )
            for score in scores
        ]
        self._logger.info(
            "matching.availability_refreshed",
            candidates=len(refreshed),
            with_conflicts=sum(1 for items in bookings.values() if items),
        )
        return refreshed

    def _build_matches(
        self,
        ranked: Sequence[MatchScore],
        requirement: ProjectRequirement,
        adjusted: set[str],
        guarantee_hours: float,
    ) -> list[GeneratedMatch]:
        now = self._now_provider()
        expires_at = now + self._expiry
        deadline = now + timedelta(hours=guarantee_hours)
        matches: list[GeneratedMatch] = []
        for score in ranked:
            details = score.details.get("availability", {})
            matches.append(
                GeneratedMatch(
                    id=self._id_factory(),
                    requirement_id=requirement.id,
                    talent_id=score.talent_id,
                    score=score.total_score,
                    breakdown=score.breakdown,
                    reasons=list(score.reasons),
                    concerns=list(score.concerns),
                    rank=score.rank,
                    confidence=score.confidence,
                    predicted_success=score.predicted_success,
                    matched_skills=list(score.matched_skills),
                    fairness_adjusted=score.talent_id in adjusted,
                    availability_details=AvailabilityDetails(
                        overlap_percentage=details.get("overlap_percentage", 0.0),
                        available_hours=details.get("available_hours", 0.0),
                        conflicting_bookings=details.get("conflicting_bookings", 0),
                        immediate_availability=details.get("immediate_availability", False),
                    ),
                    created_at=now,
                    expires_at=expires_at,
                    response_deadline=deadline,
                )
            )
        return matches

    @staticmethod
    def _call(func: Callable[..., Any], *args: Any) -> Any:
        try:
            return func(*args)
        except MatchingError:
            raise
        except Exception as exc:  # noqa: BLE001
            name = getattr(func, "__qualname__", repr(func))
            raise RepositoryError(f"{name} failed: {exc}") from exc


def build_statistics(requirement_id: str, matches: Sequence[GeneratedMatch]) -> MatchStatistics:
    """Aggregate persisted matches of one requirement."""
    total = len(matches)
    breakdown: dict[str, int] = {}
    for match in matches:
        breakdown[match.status.value] = breakdown.get(match.status.value, 0) + 1
    skills = Counter(skill for match in matches for skill in match.matched_skills)
    responded = sum(1 for match in matches if match.status in RESPONDED_STATUSES)
    return MatchStatistics(
        requirement_id=requirement_id,
        total_matches=total,
        average_score=round(sum(match.score for match in matches) / total, 4) if total else 0.0,
        status_breakdown=breakdown,
        top_skill_matches=[name for name, _ in skills.most_common(5)],
        response_rate=round(responded / total * 100, 2) if total else 0.0,
    )


def _fairness_dict(report: FairnessReport) -> dict[str, Any]:
    return {
        "overall_bias_score": report.overall_bias_score,
        "recommendations": list(report.recommendations),
        "adjusted_talent_ids": list(report.adjusted_talent_ids),
        "metrics": [
            {
                "name": metric.name,
                "detected": metric.detected,
                "severity": metric.severity,
                "score": metric.score,
                "details": metric.details,
                "affected_groups": list(metric.affected_groups),
                "status": metric.status,
            }
            for metric in report.metrics
        ],
    }


class OutputWriter:
    """Persist run reports."""

    def write(self, path: Path, payload: dict | list[dict]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            json.dumps(payload, ensure_ascii=False, indent=2, default=_json_default),
            encoding="utf-8",
        )


def run_payload(report: MatchRun) -> dict[str, Any]:
    """Wrap a run report with output metadata."""
    return {
        "metadata": {
            "run_id": report.run_id,
            "requirement_id": report.requirement_id,
            "match_count": len(report.matches),
            "timestamp": pendulum.now("UTC").to_iso8601_string(),
            "app_version": __version__,
        },
        "run": report.to_dict(),
    }


def _json_default(value):  # type: ignore[override]
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class AuditLogger:
    """Append-only audit logger writing JSON lines."""

    def __init__(self, path: Path):
        self._path = path
        self._path.parent.mkdir(parents=True, exist_ok=True)

    def append(self, record: dict) -> None:
        with self._path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(record, ensure_ascii=False, default=_json_default))
            handle.write("\n")


__all__ = [
    "AuditLogger",
    "MatchNotFoundError",
    "MatchOrchestrator",
    "MatchRun",
    "MatchingError",
    "OutputWriter",
    "RepositoryError",
    "RequirementNotFoundError",
    "RunCancelledError",
    "RunStage",
    "build_statistics",
    "run_payload",
]
