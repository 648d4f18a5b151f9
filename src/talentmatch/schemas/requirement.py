"""Project requirement schema."""

from __future__ import annotations

from datetime import datetime, timedelta

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .common import (
    CommunicationStyle,
    CompanySize,
    LocationType,
    ProjectType,
    SkillLevel,
    Urgency,
    UTCDateTime,
    WorkStyle,
)


class SkillRequirement(BaseModel):
    """A single skill asked for by a project."""

    name: str
    level: SkillLevel = SkillLevel.MID
    weight: int = Field(default=5, ge=1, le=10)
    years_required: float | None = Field(default=None, ge=0)
    is_required: bool = False

    model_config = ConfigDict(frozen=True, extra="forbid")


class BudgetRange(BaseModel):
    """Hourly budget range."""

    min: float = Field(default=0.0, ge=0)
    max: float = Field(default=0.0, ge=0)
    currency: str = "USD"

    model_config = ConfigDict(frozen=True, extra="forbid")

    @model_validator(mode="after")
    def _order_bounds(self) -> "BudgetRange":
        if self.max and self.min > self.max:
            raise ValueError("budget min must not exceed max")
        return self

    def contains(self, rate: float) -> bool:
        return self.min <= rate <= self.max


class Duration(BaseModel):
    """Project timeframe."""

    weeks: float = Field(gt=0)
    start_date: UTCDateTime
    end_date: UTCDateTime | None = None

    model_config = ConfigDict(frozen=True, extra="forbid")

    @model_validator(mode="after")
    def _check_order(self) -> "Duration":
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("duration end_date precedes start_date")
        return self

    @property
    def end(self) -> datetime:
        if self.end_date is not None:
            return self.end_date
        return self.start_date + timedelta(weeks=self.weeks)


class LocationRequirement(BaseModel):
    """Where the work happens."""

    type: LocationType = LocationType.REMOTE
    timezone: str | None = None
    country: str | None = None
    city: str | None = None

    model_config = ConfigDict(frozen=True, extra="forbid")


class ProjectRequirement(BaseModel):
    """Normalized, read-only project requirement."""

    id: str
    title: str = ""
    description: str = ""
    required_skills: tuple[SkillRequirement, ...] = ()
    preferred_skills: tuple[SkillRequirement, ...] = ()
    budget: BudgetRange = Field(default_factory=BudgetRange)
    duration: Duration
    location: LocationRequirement = Field(default_factory=LocationRequirement)
    urgency: Urgency = Urgency.MEDIUM
    project_type: ProjectType = ProjectType.DEVELOPMENT
    team_size: int = Field(default=1, ge=1)
    client_industry: str = "technology"
    company_size: CompanySize = CompanySize.MEDIUM
    work_style: WorkStyle = WorkStyle.HYBRID
    communication_style: CommunicationStyle = CommunicationStyle.UNKNOWN
    hours_per_week: float = Field(default=40.0, gt=0, le=168)

    model_config = ConfigDict(frozen=True, extra="forbid")

    @property
    def all_skills(self) -> tuple[SkillRequirement, ...]:
        return self.required_skills + self.preferred_skills

    @property
    def hard_skills(self) -> tuple[SkillRequirement, ...]:
        return tuple(skill for skill in self.required_skills if skill.is_required)
