"""Normalization of loosely-typed requirement and talent records."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, Mapping

import pendulum
from rapidfuzz import fuzz

from ..core.skills import SkillCatalog, load_default_catalog
from ..schemas import (
    AvailabilityWindow,
    Certification,
    CommunicationStyle,
    ExperienceEntry,
    PastProject,
    ProjectRequirement,
    ProjectType,
    SkillLevel,
    SkillRequirement,
    TalentPreferences,
    TalentProfile,
    WorkStyle,
)

_DURATION_PATTERN = re.compile(r"(\d+(?:\.\d+)?)\s*(year|month|week|day)s?", re.IGNORECASE)


class RecordError(ValueError):
    """Raised when a raw record cannot be normalized."""

    def __init__(self, kind: str, record_id: str | None, reason: str):
        super().__init__(f"{kind} record {record_id or '<unknown>'}: {reason}")
        self.kind = kind
        self.record_id = record_id
        self.reason = reason


def _default_project_type_aliases() -> dict[str, str]:
    return {
        "short-term": "development",
        "long-term": "development",
        "full-time": "development",
        "development": "development",
        "frontend": "development",
        "backend": "development",
        "fullstack": "development",
        "contract": "consulting",
        "consulting": "consulting",
        "design": "design",
        "ui-ux": "design",
        "data-science": "data",
        "analytics": "data",
        "machine-learning": "data",
        "ai": "data",
    }


def _default_communication_aliases() -> dict[str, str]:
    return {
        "formal": "formal",
        "professional": "formal",
        "structured": "formal",
        "casual": "casual",
        "informal": "casual",
        "collaborative": "casual",
        "mixed": "mixed",
        "flexible": "mixed",
        "independent": "mixed",
    }


def _default_work_style_by_communication() -> dict[str, str]:
    return {
        "formal": "waterfall",
        "casual": "agile",
        "collaborative": "agile",
        "independent": "hybrid",
    }


def _default_level_aliases() -> dict[str, str]:
    return {
        "beginner": "junior",
        "entry": "junior",
        "junior": "junior",
        "intermediate": "mid",
        "mid": "mid",
        "middle": "mid",
        "advanced": "senior",
        "senior": "senior",
        "lead": "senior",
        "expert": "expert",
        "principal": "expert",
    }


@dataclass
class RecordAdapterConfig:
    """Alias tables and defaults used during normalization."""

    project_type_aliases: dict[str, str] = field(default_factory=_default_project_type_aliases)
    communication_aliases: dict[str, str] = field(default_factory=_default_communication_aliases)
    work_style_by_communication: dict[str, str] = field(
        default_factory=_default_work_style_by_communication
    )
    level_aliases: dict[str, str] = field(default_factory=_default_level_aliases)
    priority_weights: dict[str, int] = field(
        default_factory=lambda: {"required": 10, "preferred": 7, "nice": 4}
    )
    unit_weeks: dict[str, float] = field(
        default_factory=lambda: {"days": 1 / 7, "weeks": 1.0, "months": 4.33}
    )
    min_similarity: int = 85
    default_duration_weeks: float = 12.0
    default_budget_max: float = 1000.0
    default_hourly_rate: float = 50.0
    default_industry: str = "technology"


class RecordAdapter:
    """Convert raw repository records into frozen domain models."""

    def __init__(
        self,
        *,
        catalog: SkillCatalog | None = None,
        config: RecordAdapterConfig | None = None,
    ) -> None:
        self._catalog = catalog or load_default_catalog()
        self._config = config or RecordAdapterConfig()

    def to_requirement(self, raw: Mapping[str, Any]) -> ProjectRequirement:
        record_id = _optional_str(raw.get("id"))
        if not record_id:
            raise RecordError("requirement", None, "missing id")

        try:
            start = self._parse_datetime(raw.get("start_date"))
            if start is None:
                raise RecordError("requirement", record_id, "missing start_date")
            end = self._parse_datetime(raw.get("end_date"))
            duration = raw.get("duration") or {}
            weeks = self.duration_to_weeks(
                duration.get("value", self._config.default_duration_weeks),
                duration.get("unit", "weeks"),
            )
            city, country = self.split_location(raw.get("location"))
            required, preferred = self._split_skills(raw.get("required_skills") or [])
            preferred.extend(self._skill(item) for item in raw.get("preferred_skills") or [])
            budget = raw.get("budget") or {}
            communication = raw.get("communication_style")

            return ProjectRequirement(
                id=record_id,
                title=raw.get("title") or "",
                description=raw.get("description") or "",
                required_skills=tuple(required),
                preferred_skills=tuple(preferred),
                budget={
                    "min": budget.get("min") or 0.0,
                    "max": budget.get("max") or self._config.default_budget_max,
                    "currency": budget.get("currency") or "USD",
                },
                duration={"weeks": weeks, "start_date": start, "end_date": end},
                location={
                    "type": raw.get("remote_preference") or "remote",
                    "timezone": raw.get("timezone"),
                    "country": country,
                    "city": city,
                },
                urgency=raw.get("urgency") or "medium",
                project_type=self.project_type(raw.get("project_type")),
                team_size=int(raw.get("team_size") or 1),
                client_industry=(raw.get("industry") or self._config.default_industry).lower(),
                company_size=raw.get("company_size") or "medium",
                work_style=raw.get("work_style") or self.work_style(communication),
                communication_style=self.communication_style(communication),
                hours_per_week=raw.get("hours_per_week") or 40.0,
            )
        except RecordError:
            raise
        except (KeyError, ValueError) as exc:
            raise RecordError("requirement", record_id, str(exc)) from exc

    def to_talent(self, raw: Mapping[str, Any]) -> TalentProfile:
        record_id = _optional_str(raw.get("id"))
        if not record_id:
            raise RecordError("talent", None, "missing id")

        timezone = raw.get("timezone") or "UTC"
        city, country = self.split_location(raw.get("location"))
        rate = raw.get("rate") or {}
        raw_preferences = raw.get("preferences") or {}
        preferences = {
            key: value
            for key, value in raw_preferences.items()
            if key in TalentPreferences.model_fields
        }
        preferences.setdefault("preferred_rate", rate.get("max"))
        preferences.setdefault("minimum_rate", rate.get("min"))
        preferences["communication_style"] = self.communication_style(
            preferences.get("communication_style")
        )
        hourly_rate = raw.get("hourly_rate")
        if hourly_rate is None:
            hourly_rate = rate.get("min", self._config.default_hourly_rate)

        try:
            return TalentProfile(
                id=record_id,
                name=raw.get("name") or "",
                skills=tuple(self._candidate_skill(item) for item in raw.get("skills") or []),
                experience=tuple(self._experience(item) for item in raw.get("experience") or []),
                availability=self.to_windows(raw.get("availability") or [], timezone),
                hourly_rate=hourly_rate,
                location={
                    "country": country,
                    "city": city,
                    "timezone": timezone,
                    "remote_preference": raw.get("remote_preference") or "remote",
                },
                languages=tuple(raw.get("languages") or ()),
                certifications=tuple(
                    Certification(
                        name=item.get("name", ""),
                        issuer=item.get("issuer"),
                        issue_date=self._parse_datetime(item.get("issue_date")),
                        expiry_date=self._parse_datetime(item.get("expiry_date")),
                    )
                    for item in raw.get("certifications") or []
                ),
                past_projects=tuple(
                    self._past_project(item) for item in raw.get("past_projects") or []
                ),
                rating=raw.get("rating"),
                total_reviews=int(raw.get("review_count") or raw.get("total_reviews") or 0),
                preferences={
                    key: value for key, value in preferences.items() if value is not None
                },
                is_available=bool(raw.get("is_available", False)),
            )
        except (KeyError, ValueError) as exc:
            raise RecordError("talent", record_id, str(exc)) from exc

    def duration_to_weeks(self, value: Any, unit: str | None) -> float:
        factor = self._config.unit_weeks.get((unit or "weeks").strip().lower(), 1.0)
        return round(float(value) * factor, 4)

    @staticmethod
    def split_location(value: str | None) -> tuple[str | None, str | None]:
        """Split ``"City, Country"`` into its parts."""
        if not value:
            return None, None
        parts = [part.strip() for part in str(value).split(",")]
        city = parts[0] or None
        country = parts[1] if len(parts) > 1 and parts[1] else None
        return city, country

    def project_type(self, value: str | None) -> ProjectType:
        if not value:
            return ProjectType.DEVELOPMENT
        mapped = self._lookup(value, self._config.project_type_aliases)
        if mapped is None:
            try:
                return ProjectType(_normalize_label(value))
            except ValueError:
                return ProjectType.OTHER
        return ProjectType(mapped)

    def communication_style(self, value: str | CommunicationStyle | None) -> CommunicationStyle:
        if isinstance(value, CommunicationStyle):
            return value
        if not value:
            return CommunicationStyle.UNKNOWN
        mapped = self._lookup(value, self._config.communication_aliases)
        return CommunicationStyle(mapped) if mapped else CommunicationStyle.UNKNOWN

    def work_style(self, communication: str | None) -> WorkStyle:
        if not communication:
            return WorkStyle.HYBRID
        mapped = self._config.work_style_by_communication.get(_normalize_label(communication))
        return WorkStyle(mapped) if mapped else WorkStyle.HYBRID

    def skill_level(self, value: str | None) -> SkillLevel:
        if not value:
            return SkillLevel.MID
        mapped = self._config.level_aliases.get(_normalize_label(value))
        return SkillLevel(mapped) if mapped else SkillLevel.MID

    def _lookup(self, value: str, aliases: Mapping[str, str]) -> str | None:
        label = _normalize_label(value)
        normalized = {_normalize_label(key): target for key, target in aliases.items()}
        if label in normalized:
            return normalized[label]

        best: tuple[float, str] | None = None
        for alias, target in normalized.items():
            ratio = fuzz.token_set_ratio(label.replace("-", " "), alias.replace("-", " "))
            if ratio >= self._config.min_similarity and (best is None or ratio > best[0]):
                best = (ratio, target)
        return best[1] if best else None

    def _split_skills(
        self,
        items: list[Mapping[str, Any]],
    ) -> tuple[list[SkillRequirement], list[SkillRequirement]]:
        required: list[SkillRequirement] = []
        preferred: list[SkillRequirement] = []
        for item in items:
            skill = self._skill(item)
            (required if skill.is_required else preferred).append(skill)
        return required, preferred

    def _skill(self, item: Mapping[str, Any]) -> SkillRequirement:
        priority = str(item.get("priority") or "preferred").lower()
        weight = item.get("weight") or self._config.priority_weights.get(priority, 4)
        return SkillRequirement(
            name=item["name"],
            level=self.skill_level(item.get("level")),
            weight=weight,
            years_required=item.get("years_required"),
            is_required=priority == "required",
        )

    def _candidate_skill(self, item: Mapping[str, Any]) -> dict[str, Any]:
        name = item["name"]
        return {
            "name": name,
            "level": self.skill_level(item.get("level")),
            "years_of_experience": item.get("years") or item.get("years_of_experience") or 0.0,
            "category": item.get("category") or self._catalog.category_of(name) or "other",
        }

    def _experience(self, item: Mapping[str, Any]) -> ExperienceEntry:
        years = item.get("years")
        if years is None:
            years = parse_duration_years(item.get("duration"))
        industry = item.get("industry")
        return ExperienceEntry(
            company=item.get("company") or "",
            role=item.get("role") or "",
            industry=industry.lower() if industry else None,
            company_size=item.get("company_size"),
            years=years,
            technologies=tuple(item.get("technologies") or ()),
            achievements=tuple(item.get("achievements") or ()),
        )

    def _past_project(self, item: Mapping[str, Any]) -> PastProject:
        project_type = item.get("project_type")
        return PastProject(
            title=item.get("title") or "",
            project_type=self.project_type(project_type).value if project_type else None,
            duration_weeks=item.get("duration_weeks") or 0.0,
            technologies=tuple(item.get("technologies") or ()),
            outcome=item.get("outcome") or "completed",
            rating=item.get("rating"),
        )

    def to_windows(
        self,
        items: Iterable[Mapping[str, Any]],
        timezone: str = "UTC",
    ) -> tuple[AvailabilityWindow, ...]:
        return tuple(self._window(item, timezone) for item in items)

    def _window(self, item: Mapping[str, Any], timezone: str) -> AvailabilityWindow:
        recurrence = item.get("recurrence")
        if recurrence:
            recurrence = dict(recurrence)
            recurrence["end_date"] = self._parse_datetime(recurrence.get("end_date"))
            if recurrence.get("days_of_week") is not None:
                recurrence["days_of_week"] = tuple(recurrence["days_of_week"])
        return AvailabilityWindow(
            start=self._parse_datetime(item.get("start_date") or item.get("start")),
            end=self._parse_datetime(item.get("end_date") or item.get("end")),
            capacity=item.get("capacity", 100),
            timezone=item.get("timezone") or timezone,
            status=item.get("status") or "available",
            recurrence=recurrence,
        )

    @staticmethod
    def _parse_datetime(value: Any) -> datetime | None:
        if value is None or value == "":
            return None
        if isinstance(value, datetime):
            return value
        return pendulum.parse(str(value))


def parse_duration_years(value: str | None) -> float:
    """Parse strings such as ``"3 years"`` or ``"6 months"`` into years."""
    if not value:
        return 0.0
    matched = _DURATION_PATTERN.search(str(value))
    if not matched:
        return 0.0
    amount = float(matched.group(1))
    unit = matched.group(2).lower()
    divisor = {"year": 1, "month": 12, "week": 52, "day": 365}[unit]
    return round(amount / divisor, 4)


def _normalize_label(value: str) -> str:
    return str(value).strip().lower().replace("_", "-").replace(" ", "-")


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None
