"""Match result, weight and run option schemas."""

from __future__ import annotations

from enum import Enum
from typing import Mapping

from pydantic import BaseModel, ConfigDict, Field

from .common import UTCDateTime

DIMENSIONS: tuple[str, ...] = (
    "skills",
    "experience",
    "availability",
    "budget",
    "location",
    "culture",
    "velocity",
    "reliability",
)


class MatchStatus(str, Enum):
    PENDING = "pending"
    VIEWED = "viewed"
    INTERESTED = "interested"
    NOT_INTERESTED = "not_interested"
    CONTACTED = "contacted"
    HIRED = "hired"


RESPONDED_STATUSES = frozenset(
    {
        MatchStatus.INTERESTED,
        MatchStatus.NOT_INTERESTED,
        MatchStatus.CONTACTED,
        MatchStatus.HIRED,
    }
)


class ProjectWeights(BaseModel):
    """Per-dimension scoring weights."""

    skills: float = Field(ge=0)
    experience: float = Field(ge=0)
    availability: float = Field(ge=0)
    budget: float = Field(ge=0)
    location: float = Field(ge=0)
    culture: float = Field(ge=0)
    velocity: float = Field(ge=0)
    reliability: float = Field(ge=0)

    model_config = ConfigDict(frozen=True, extra="forbid")

    def as_dict(self) -> dict[str, float]:
        return {name: getattr(self, name) for name in DIMENSIONS}

    @property
    def total(self) -> float:
        return sum(self.as_dict().values())


class PartialWeights(BaseModel):
    """Caller-supplied override of any subset of the weight dimensions."""

    skills: float | None = Field(default=None, ge=0)
    experience: float | None = Field(default=None, ge=0)
    availability: float | None = Field(default=None, ge=0)
    budget: float | None = Field(default=None, ge=0)
    location: float | None = Field(default=None, ge=0)
    culture: float | None = Field(default=None, ge=0)
    velocity: float | None = Field(default=None, ge=0)
    reliability: float | None = Field(default=None, ge=0)

    model_config = ConfigDict(frozen=True, extra="forbid")

    def as_dict(self) -> dict[str, float]:
        return self.model_dump(exclude_none=True)


class ScoreBreakdown(BaseModel):
    """Eight sub-scores, each within [0, 1]."""

    skills: float = Field(default=0.0, ge=0, le=1)
    experience: float = Field(default=0.0, ge=0, le=1)
    availability: float = Field(default=0.0, ge=0, le=1)
    budget: float = Field(default=0.0, ge=0, le=1)
    location: float = Field(default=0.0, ge=0, le=1)
    culture: float = Field(default=0.0, ge=0, le=1)
    velocity: float = Field(default=0.0, ge=0, le=1)
    reliability: float = Field(default=0.0, ge=0, le=1)

    model_config = ConfigDict(frozen=True, extra="forbid")

    def as_dict(self) -> dict[str, float]:
        return {name: getattr(self, name) for name in DIMENSIONS}

    def weighted_total(self, weights: ProjectWeights) -> float:
        values = self.as_dict()
        return round(
            sum(values[name] * weight for name, weight in weights.as_dict().items()),
            4,
        )


class AvailabilityDetails(BaseModel):
    overlap_percentage: float = 0.0
    available_hours: float = 0.0
    conflicting_bookings: int = 0
    immediate_availability: bool = False

    model_config = ConfigDict(frozen=True, extra="forbid")


class GeneratedMatch(BaseModel):
    """A ranked match as persisted for a requirement."""

    id: str
    requirement_id: str
    talent_id: str
    score: float = Field(ge=0, le=1)
    breakdown: ScoreBreakdown
    reasons: list[str] = Field(default_factory=list)
    concerns: list[str] = Field(default_factory=list)
    rank: int = Field(ge=1)
    confidence: float = Field(ge=0, le=1)
    predicted_success: float = Field(ge=0, le=1)
    matched_skills: list[str] = Field(default_factory=list)
    status: MatchStatus = MatchStatus.PENDING
    fairness_adjusted: bool = False
    availability_details: AvailabilityDetails | None = None
    created_at: UTCDateTime
    expires_at: UTCDateTime
    response_deadline: UTCDateTime

    model_config = ConfigDict(extra="forbid")


class MatchGenerationOptions(BaseModel):
    """Per-run knobs accepted by ``generate_matches``."""

    max_matches: int | None = Field(default=None, ge=1)
    min_score: float | None = Field(default=None, ge=0, le=1)
    enable_real_time_availability: bool = True
    response_time_guarantee_hours: float = Field(default=24.0, gt=0)
    custom_weights: PartialWeights | None = None

    model_config = ConfigDict(frozen=True, extra="forbid")


class MatchStatistics(BaseModel):
    """Aggregate view over persisted matches of one requirement."""

    requirement_id: str
    total_matches: int
    average_score: float
    status_breakdown: dict[str, int]
    top_skill_matches: list[str]
    response_rate: float


def weights_from_mapping(values: Mapping[str, float]) -> ProjectWeights:
    """Build normalized weights from a complete mapping of dimensions."""
    missing = [name for name in DIMENSIONS if name not in values]
    if missing:
        raise ValueError(f"weights missing dimensions: {missing}")
    total = sum(float(values[name]) for name in DIMENSIONS)
    if total <= 0:
        raise ValueError("weights must have a positive sum")
    return ProjectWeights(**{name: float(values[name]) / total for name in DIMENSIONS})
