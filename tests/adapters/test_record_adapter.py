from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import pytest

from talentmatch.adapters import (
    RecordAdapter,
    RecordAdapterConfig,
    RecordError,
    RecordNormalizer,
    parse_duration_years,
)
from talentmatch.schemas import (
    CommunicationStyle,
    LocationType,
    ProjectType,
    SkillLevel,
    Urgency,
    WorkStyle,
)


def build_requirement_record(**kwargs: Any) -> dict[str, Any]:
    record: dict[str, Any] = {
        "id": "REQ-001",
        "title": "Checkout rebuild",
        "required_skills": [
            {"name": "React", "level": "advanced", "priority": "required", "years_required": 3},
            {"name": "TypeScript", "level": "intermediate", "priority": "preferred"},
        ],
        "preferred_skills": [{"name": "GraphQL", "level": "beginner", "priority": "nice"}],
        "budget": {"min": 60, "max": 120, "currency": "EUR"},
        "duration": {"value": 3, "unit": "months"},
        "start_date": "2025-03-03",
        "remote_preference": "hybrid",
        "timezone": "Europe/Berlin",
        "location": "Berlin, Germany",
        "urgency": "high",
        "project_type": "frontend",
        "team_size": 4,
        "industry": "FinTech",
        "communication_style": "Professional",
    }
    record.update(kwargs)
    return record


def build_talent_record(**kwargs: Any) -> dict[str, Any]:
    record: dict[str, Any] = {
        "id": "T-001",
        "name": "Ada",
        "skills": [
            {"name": "React", "level": "expert", "years": 6},
            {"name": "Figma", "level": "wizard"},
        ],
        "experience": [
            {
                "company": "Acme",
                "role": "Engineer",
                "industry": "FinTech",
                "duration": "18 months",
                "technologies": ["React"],
            }
        ],
        "availability": [
            {
                "start_date": "2025-03-01T00:00:00Z",
                "end_date": "2025-06-01T00:00:00Z",
                "capacity": 80,
                "recurrence": {"frequency": "weekly", "days_of_week": [1, 2, 3]},
            }
        ],
        "rate": {"min": 70, "max": 110},
        "location": "Lisbon, Portugal",
        "timezone": "WET",
        "preferences": {"communication_style": "informal"},
        "past_projects": [
            {"title": "Forecasting", "project_type": "machine learning", "rating": 4.5}
        ],
        "rating": 4.7,
        "review_count": 12,
    }
    record.update(kwargs)
    return record


@pytest.fixture
def adapter() -> RecordAdapter:
    return RecordAdapter()


def test_adapter_satisfies_protocol(adapter: RecordAdapter) -> None:
    assert isinstance(adapter, RecordNormalizer)


def test_requirement_normalization(adapter: RecordAdapter) -> None:
    requirement = adapter.to_requirement(build_requirement_record())

    assert [skill.name for skill in requirement.required_skills] == ["React"]
    react = requirement.required_skills[0]
    assert react.is_required and react.level == SkillLevel.SENIOR
    assert react.weight == 10 and react.years_required == 3
    assert [(skill.name, skill.weight) for skill in requirement.preferred_skills] == [
        ("TypeScript", 7),
        ("GraphQL", 4),
    ]
    assert requirement.preferred_skills[1].level == SkillLevel.JUNIOR
    assert requirement.budget.currency == "EUR"
    assert requirement.duration.weeks == pytest.approx(12.99)
    assert requirement.duration.start_date == datetime(2025, 3, 3, tzinfo=timezone.utc)
    assert requirement.location.type == LocationType.HYBRID
    assert (requirement.location.city, requirement.location.country) == ("Berlin", "Germany")
    assert requirement.urgency == Urgency.HIGH
    assert requirement.project_type == ProjectType.DEVELOPMENT
    assert requirement.client_industry == "fintech"
    assert requirement.communication_style == CommunicationStyle.FORMAL
    assert requirement.team_size == 4


def test_requirement_defaults(adapter: RecordAdapter) -> None:
    requirement = adapter.to_requirement(
        {"id": "REQ-002", "start_date": "2025-03-03T00:00:00Z"}
    )

    assert requirement.budget.max == 1000.0
    assert requirement.duration.weeks == 12.0
    assert requirement.location.type == LocationType.REMOTE
    assert requirement.client_industry == "technology"
    assert requirement.work_style == WorkStyle.HYBRID
    assert requirement.required_skills == ()


def test_work_style_follows_communication(adapter: RecordAdapter) -> None:
    requirement = adapter.to_requirement(build_requirement_record(communication_style="formal"))

    assert requirement.work_style == WorkStyle.WATERFALL


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("frontend", ProjectType.DEVELOPMENT),
        ("Data Science", ProjectType.DATA),
        ("Machine Learning Platform", ProjectType.DATA),
        ("consultng", ProjectType.CONSULTING),
        ("design", ProjectType.DESIGN),
        ("gardening", ProjectType.OTHER),
        (None, ProjectType.DEVELOPMENT),
    ],
)
def test_project_type_aliases(adapter: RecordAdapter, raw: str | None, expected: ProjectType) -> None:
    assert adapter.project_type(raw) == expected


def test_fuzzy_threshold_is_configurable() -> None:
    strict = RecordAdapter(config=RecordAdapterConfig(min_similarity=100))

    assert strict.project_type("consultng") == ProjectType.OTHER


@pytest.mark.parametrize(
    ("record", "reason"),
    [
        ({"start_date": "2025-03-03"}, "missing id"),
        ({"id": "REQ-9"}, "missing start_date"),
    ],
)
def test_requirement_errors(adapter: RecordAdapter, record: dict[str, Any], reason: str) -> None:
    with pytest.raises(RecordError) as excinfo:
        adapter.to_requirement(record)

    assert excinfo.value.kind == "requirement"
    assert excinfo.value.reason == reason


def test_requirement_validation_errors_are_wrapped(adapter: RecordAdapter) -> None:
    with pytest.raises(RecordError) as excinfo:
        adapter.to_requirement(build_requirement_record(budget={"min": 200, "max": 100}))

    assert excinfo.value.record_id == "REQ-001"


def test_talent_normalization(adapter: RecordAdapter) -> None:
    talent = adapter.to_talent(build_talent_record())

    assert talent.is_available is False
    assert talent.hourly_rate == 70
    assert talent.preferences.preferred_rate == 110
    assert talent.preferences.minimum_rate == 70
    assert talent.preferences.communication_style == CommunicationStyle.CASUAL
    assert [(skill.name, skill.level) for skill in talent.skills] == [
        ("React", SkillLevel.EXPERT),
        ("Figma", SkillLevel.MID),
    ]
    assert talent.skills[0].category == "frontend"
    assert talent.skills[1].category == "design"
    assert talent.experience[0].years == pytest.approx(1.5)
    assert talent.experience[0].industry == "fintech"
    assert (talent.location.city, talent.location.country) == ("Lisbon", "Portugal")
    window = talent.availability[0]
    assert window.timezone == "WET"
    assert window.capacity == 80
    assert window.recurrence is not None
    assert window.recurrence.days_of_week == (1, 2, 3)
    assert talent.past_projects[0].project_type == "data"
    assert talent.total_reviews == 12


def test_talent_rate_defaults(adapter: RecordAdapter) -> None:
    talent = adapter.to_talent(build_talent_record(rate=None, is_available=True))

    assert talent.hourly_rate == 50
    assert talent.is_available is True


def test_unrecognized_preferences_are_ignored(adapter: RecordAdapter) -> None:
    record = build_talent_record(
        preferences={"work_style": "agile", "timezone_flexibility": True, "pets": ["cat"]}
    )

    talent = adapter.to_talent(record)

    assert talent.preferences.work_style == WorkStyle.AGILE
    assert talent.preferences.preferred_rate == 110
    assert talent.preferences.communication_style == CommunicationStyle.UNKNOWN


def test_requirement_dates_are_plain_utc_datetimes(adapter: RecordAdapter) -> None:
    requirement = adapter.to_requirement(build_requirement_record(start_date="2025-03-03T00:00:00Z"))

    start = requirement.duration.start_date
    assert type(start) is datetime
    assert requirement.duration.end.tzinfo is not None
    assert requirement.duration.end > start


def test_invalid_talent_record_raises(adapter: RecordAdapter) -> None:
    record = build_talent_record(
        availability=[{"start_date": "2025-06-01", "end_date": "2025-03-01"}]
    )

    with pytest.raises(RecordError) as excinfo:
        adapter.to_talent(record)

    assert excinfo.value.kind == "talent"
    assert excinfo.value.record_id == "T-001"


def test_to_windows_accepts_short_keys(adapter: RecordAdapter) -> None:
    windows = adapter.to_windows(
        [{"start": "2025-03-01T00:00:00+02:00", "end": "2025-03-02T00:00:00+02:00"}],
        "EET",
    )

    assert windows[0].start == datetime(2025, 2, 28, 22, tzinfo=timezone.utc)
    assert windows[0].timezone == "EET"
    assert windows[0].capacity == 100


def test_location_and_duration_helpers(adapter: RecordAdapter) -> None:
    assert adapter.split_location("Berlin") == ("Berlin", None)
    assert adapter.split_location(None) == (None, None)
    assert adapter.duration_to_weeks(10, "days") == pytest.approx(1.4286)
    assert adapter.duration_to_weeks(6, None) == 6.0


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("2 years", 2.0), ("6 months", 0.5), ("26 weeks", 0.5), ("", 0.0), ("soon", 0.0)],
)
def test_parse_duration_years(raw: str, expected: float) -> None:
    assert parse_duration_years(raw) == pytest.approx(expected)
