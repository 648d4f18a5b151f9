"""Talent profile schema."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .common import (
    CommunicationStyle,
    CompanySize,
    LocationType,
    SkillLevel,
    UTCDateTime,
    WorkStyle,
)


class RecurrenceFrequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class WindowStatus(str, Enum):
    AVAILABLE = "available"
    BOOKED = "booked"
    TENTATIVE = "tentative"
    BLOCKED = "blocked"


class ProjectOutcome(str, Enum):
    COMPLETED = "completed"
    ONGOING = "ongoing"
    CANCELLED = "cancelled"


class CandidateSkill(BaseModel):
    """Skill held by a talent."""

    name: str
    level: SkillLevel = SkillLevel.MID
    years_of_experience: float = Field(default=0.0, ge=0)
    category: str = "other"

    model_config = ConfigDict(frozen=True, extra="forbid")


class RecurrenceRule(BaseModel):
    """Repeat pattern for an availability window.

    ``days_of_week`` uses 0-6 with Sunday as 0.
    """

    frequency: RecurrenceFrequency
    interval: int = Field(default=1, ge=1)
    days_of_week: tuple[int, ...] | None = None
    end_date: UTCDateTime | None = None

    model_config = ConfigDict(frozen=True, extra="forbid")

    @model_validator(mode="after")
    def _check_days(self) -> "RecurrenceRule":
        if self.days_of_week and any(day < 0 or day > 6 for day in self.days_of_week):
            raise ValueError("days_of_week entries must be within 0-6")
        return self


class AvailabilityWindow(BaseModel):
    """Span of time a talent can work, possibly recurring."""

    start: UTCDateTime
    end: UTCDateTime
    capacity: float = Field(default=100.0, ge=0, le=100)
    timezone: str = "UTC"
    status: WindowStatus = WindowStatus.AVAILABLE
    recurrence: RecurrenceRule | None = None

    model_config = ConfigDict(frozen=True, extra="forbid")

    @model_validator(mode="after")
    def _check_order(self) -> "AvailabilityWindow":
        if self.end < self.start:
            raise ValueError("availability window ends before it starts")
        return self

    @property
    def is_recurring(self) -> bool:
        return self.recurrence is not None


class Booking(BaseModel):
    """Existing engagement of a talent."""

    talent_id: str
    start: UTCDateTime
    end: UTCDateTime
    status: str = "confirmed"
    hours_per_week: float | None = None

    model_config = ConfigDict(frozen=True, extra="forbid")


class ExperienceEntry(BaseModel):
    """Employment history entry."""

    company: str = ""
    role: str = ""
    industry: str | None = None
    company_size: CompanySize | None = None
    years: float = Field(default=0.0, ge=0)
    technologies: tuple[str, ...] = ()
    achievements: tuple[str, ...] = ()

    model_config = ConfigDict(frozen=True, extra="forbid")


class PastProject(BaseModel):
    """Delivered or ongoing project."""

    title: str = ""
    project_type: str | None = None
    duration_weeks: float = Field(default=0.0, ge=0)
    technologies: tuple[str, ...] = ()
    outcome: ProjectOutcome = ProjectOutcome.COMPLETED
    rating: float | None = Field(default=None, ge=1, le=5)

    model_config = ConfigDict(frozen=True, extra="forbid")


class TalentLocation(BaseModel):
    """Where the talent lives and how they prefer to work."""

    country: str | None = None
    city: str | None = None
    timezone: str = "UTC"
    remote_preference: LocationType = LocationType.REMOTE

    model_config = ConfigDict(frozen=True, extra="forbid")


class Certification(BaseModel):
    name: str
    issuer: str | None = None
    issue_date: UTCDateTime | None = None
    expiry_date: UTCDateTime | None = None

    model_config = ConfigDict(frozen=True, extra="forbid")


class TalentPreferences(BaseModel):
    """Working preferences."""

    preferred_company_size: CompanySize | None = None
    work_style: WorkStyle | None = None
    communication_style: CommunicationStyle = CommunicationStyle.UNKNOWN
    preferred_rate: float | None = None
    minimum_rate: float | None = None

    model_config = ConfigDict(frozen=True, extra="forbid")


class TalentProfile(BaseModel):
    """Normalized, read-only talent profile."""

    id: str
    name: str = ""
    skills: tuple[CandidateSkill, ...] = ()
    experience: tuple[ExperienceEntry, ...] = ()
    availability: tuple[AvailabilityWindow, ...] = ()
    hourly_rate: float = Field(default=0.0, ge=0)
    location: TalentLocation = Field(default_factory=TalentLocation)
    languages: tuple[str, ...] = ()
    certifications: tuple[Certification, ...] = ()
    past_projects: tuple[PastProject, ...] = ()
    rating: float | None = Field(default=None, ge=0, le=5)
    total_reviews: int = Field(default=0, ge=0)
    preferences: TalentPreferences = Field(default_factory=TalentPreferences)
    is_available: bool = True

    model_config = ConfigDict(frozen=True, extra="forbid")
