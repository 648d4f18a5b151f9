"""Shared enums and field types."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Annotated

from pydantic import AfterValidator


def _ensure_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    # Rebuilt as a plain datetime; pendulum instances drop a stdlib tzinfo on arithmetic.
    return datetime(
        value.year,
        value.month,
        value.day,
        value.hour,
        value.minute,
        value.second,
        value.microsecond,
        tzinfo=timezone.utc,
    )


UTCDateTime = Annotated[datetime, AfterValidator(_ensure_utc)]


class SkillLevel(str, Enum):
    JUNIOR = "junior"
    MID = "mid"
    SENIOR = "senior"
    EXPERT = "expert"

    @property
    def rank(self) -> int:
        return _LEVEL_RANKS[self]


_LEVEL_RANKS = {
    SkillLevel.JUNIOR: 0,
    SkillLevel.MID: 1,
    SkillLevel.SENIOR: 2,
    SkillLevel.EXPERT: 3,
}


class Urgency(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ProjectType(str, Enum):
    DEVELOPMENT = "development"
    CONSULTING = "consulting"
    DESIGN = "design"
    DATA = "data"
    OTHER = "other"


class LocationType(str, Enum):
    REMOTE = "remote"
    HYBRID = "hybrid"
    ONSITE = "onsite"


class CompanySize(str, Enum):
    STARTUP = "startup"
    SMALL = "small"
    MEDIUM = "medium"
    ENTERPRISE = "enterprise"


class WorkStyle(str, Enum):
    AGILE = "agile"
    WATERFALL = "waterfall"
    HYBRID = "hybrid"


class CommunicationStyle(str, Enum):
    FORMAL = "formal"
    CASUAL = "casual"
    MIXED = "mixed"
    UNKNOWN = "unknown"


__all__ = [
    "UTCDateTime",
    "SkillLevel",
    "Urgency",
    "ProjectType",
    "LocationType",
    "CompanySize",
    "WorkStyle",
    "CommunicationStyle",
]
