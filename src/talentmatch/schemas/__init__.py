"""Pydantic schema definitions for the matching domain."""

from __future__ import annotations

from .common import (
    CommunicationStyle,
    CompanySize,
    LocationType,
    ProjectType,
    SkillLevel,
    Urgency,
    WorkStyle,
)
from .config import AppConfig, load_config
from .match import (
    DIMENSIONS,
    AvailabilityDetails,
    GeneratedMatch,
    MatchGenerationOptions,
    MatchStatistics,
    MatchStatus,
    PartialWeights,
    ProjectWeights,
    RESPONDED_STATUSES,
    ScoreBreakdown,
    weights_from_mapping,
)
from .requirement import (
    BudgetRange,
    Duration,
    LocationRequirement,
    ProjectRequirement,
    SkillRequirement,
)
from .talent import (
    AvailabilityWindow,
    Booking,
    CandidateSkill,
    Certification,
    ExperienceEntry,
    PastProject,
    ProjectOutcome,
    RecurrenceFrequency,
    RecurrenceRule,
    TalentLocation,
    TalentPreferences,
    TalentProfile,
    WindowStatus,
)

__all__ = [
    "DIMENSIONS",
    "RESPONDED_STATUSES",
    "AppConfig",
    "AvailabilityDetails",
    "AvailabilityWindow",
    "Booking",
    "BudgetRange",
    "CandidateSkill",
    "Certification",
    "CommunicationStyle",
    "CompanySize",
    "Duration",
    "ExperienceEntry",
    "GeneratedMatch",
    "LocationRequirement",
    "LocationType",
    "MatchGenerationOptions",
    "MatchStatistics",
    "MatchStatus",
    "PartialWeights",
    "PastProject",
    "ProjectOutcome",
    "ProjectRequirement",
    "ProjectType",
    "ProjectWeights",
    "RecurrenceFrequency",
    "RecurrenceRule",
    "ScoreBreakdown",
    "SkillLevel",
    "SkillRequirement",
    "TalentLocation",
    "TalentPreferences",
    "TalentProfile",
    "Urgency",
    "WindowStatus",
    "WorkStyle",
    "load_config",
    "weights_from_mapping",
]
