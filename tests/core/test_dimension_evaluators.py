from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import pytest

from talentmatch.core import (
    AvailabilityEngine,
    AvailabilityEvaluator,
    BudgetEvaluator,
    CultureEvaluator,
    ExperienceEvaluator,
    LocationEvaluator,
    ReliabilityEvaluator,
    SkillsEvaluator,
    VelocityEvaluator,
)
from talentmatch.core.evaluators.budget import BudgetConfig
from talentmatch.core.evaluators.reliability import completion_ratio
from talentmatch.schemas import Booking, ProjectRequirement, TalentProfile


def utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


def build_requirement(**kwargs: Any) -> ProjectRequirement:
    defaults: dict[str, Any] = {
        "id": "REQ-001",
        "required_skills": [{"name": "React", "level": "senior", "is_required": True}],
        "budget": {"min": 50, "max": 100},
        "duration": {"weeks": 12, "start_date": utc(2025, 3, 3)},
    }
    defaults.update(kwargs)
    return ProjectRequirement(**defaults)


def build_talent(**kwargs: Any) -> TalentProfile:
    defaults: dict[str, Any] = {"id": "T-001", "hourly_rate": 80}
    defaults.update(kwargs)
    return TalentProfile(**defaults)


def score_of(payload: dict[str, Any]) -> float:
    (value,) = payload["scores"].values()
    return value


@pytest.mark.parametrize(
    ("rate", "expected", "status"),
    [
        (80, 1.0, "within_range"),
        (100, 1.0, "within_range"),
        (125, 0.5, "above_range"),
        (200, 0.0, "above_range"),
        (25, 0.75, "below_range"),
    ],
)
def test_budget_scores_relative_to_range(rate: float, expected: float, status: str) -> None:
    result = BudgetEvaluator().evaluate(build_talent(hourly_rate=rate), build_requirement(), {})

    assert result["method"] == "budget"
    assert score_of(result) == pytest.approx(expected)
    assert result["metadata"]["status"] == status


def test_budget_without_maximum_is_neutral() -> None:
    requirement = build_requirement(budget={"min": 0, "max": 0})

    result = BudgetEvaluator().evaluate(build_talent(), requirement, {})

    assert score_of(result) == pytest.approx(0.5)
    assert result["metadata"]["status"] == "insufficient_data"


def test_budget_overrides_from_context() -> None:
    evaluator = BudgetEvaluator(config=BudgetConfig(above_max_penalty=4.0))
    context = {"evaluation_overrides": {"budget": {"above_max_penalty": 1.0}}}

    result = evaluator.evaluate(build_talent(hourly_rate=150), build_requirement(), context)

    assert score_of(result) == pytest.approx(0.5)
    assert result["metadata"]["above_max_penalty"] == 1.0


def test_skills_evaluator_reports_matches_and_gaps() -> None:
    requirement = build_requirement(
        required_skills=[
            {"name": "React", "level": "senior", "is_required": True},
            {"name": "Rust", "level": "mid", "is_required": True},
        ]
    )
    talent = build_talent(
        skills=[{"name": "ReactJS", "level": "expert", "years_of_experience": 4}]
    )

    result = SkillsEvaluator().evaluate(talent, requirement, {})
    metadata = result["metadata"]

    assert 0.0 < score_of(result) < 0.5
    assert metadata["matched_skills"] == ["React"]
    assert metadata["matched_years_average"] == pytest.approx(4.0)
    assert metadata["missing_critical"] == ["Rust"]
    assert "Rust" in metadata["gaps"]
    assert metadata["results"][0]["match_type"] == "synonym"


def test_skills_evaluator_without_requirements_is_neutral() -> None:
    result = SkillsEvaluator().evaluate(
        build_talent(), build_requirement(required_skills=[]), {}
    )

    assert score_of(result) == pytest.approx(0.5)


def test_experience_full_relevance() -> None:
    requirement = build_requirement(client_industry="fintech")
    talent = build_talent(
        experience=[
            {
                "industry": "fintech",
                "company_size": "medium",
                "years": 4,
                "technologies": ["ReactJS"],
            }
        ],
        past_projects=[{"project_type": "development"}],
    )

    result = ExperienceEvaluator().evaluate(talent, requirement, {})

    assert score_of(result) == pytest.approx(1.0)
    assert result["metadata"]["covered_technologies"] == ["React"]
    assert result["metadata"]["total_years"] == pytest.approx(4.0)


def test_experience_without_history_is_neutral() -> None:
    result = ExperienceEvaluator().evaluate(build_talent(), build_requirement(), {})

    assert score_of(result) == pytest.approx(0.5)


def test_experience_mismatch() -> None:
    talent = build_talent(
        experience=[{"industry": "retail", "company_size": "startup", "technologies": ["Go"]}],
        past_projects=[{"project_type": "design"}],
    )

    result = ExperienceEvaluator().evaluate(talent, build_requirement(), {})

    assert score_of(result) == pytest.approx(0.3 * 0.3 + 0.3 * 0.15 + 0.3 * 0.15)


def test_availability_evaluator_scales_engine_score() -> None:
    engine = AvailabilityEngine(now_provider=lambda: utc(2025, 3, 1))
    talent = build_talent(
        availability=[{"start": utc(2025, 3, 1), "end": utc(2025, 7, 1), "capacity": 75}]
    )
    booking = Booking(talent_id="T-001", start=utc(2025, 3, 10), end=utc(2025, 3, 20))
    evaluator = AvailabilityEvaluator(engine=engine)

    plain = evaluator.evaluate(talent, build_requirement(), {})
    booked = evaluator.evaluate(talent, build_requirement(), {"bookings": {"T-001": [booking]}})
    emptied = evaluator.evaluate(talent, build_requirement(), {"availability": {"T-001": ()}})

    assert score_of(plain) == pytest.approx(0.7)
    assert plain["metadata"]["overlap_percentage"] == 75.0
    assert score_of(booked) == pytest.approx(0.55)
    assert booked["metadata"]["conflicting_bookings"] == 1
    assert emptied["metadata"]["overlap_percentage"] == 0.0


def test_location_remote_is_perfect() -> None:
    result = LocationEvaluator().evaluate(build_talent(), build_requirement(), {})

    assert score_of(result) == pytest.approx(1.0)


def test_location_onsite_blends_timezone_and_geography() -> None:
    requirement = build_requirement(
        location={"type": "onsite", "timezone": "CET", "country": "Germany", "city": "Berlin"}
    )
    local = build_talent(location={"country": "germany", "city": "Berlin", "timezone": "CET"})
    same_country = build_talent(location={"country": "Germany", "city": "Munich", "timezone": "CET"})
    abroad = build_talent(location={"country": "Japan", "city": "Tokyo", "timezone": "JST"})
    evaluator = LocationEvaluator()

    assert score_of(evaluator.evaluate(local, requirement, {})) == pytest.approx(1.0)
    assert score_of(evaluator.evaluate(same_country, requirement, {})) == pytest.approx(
        0.2 + 0.7 * 0.8
    )
    assert score_of(evaluator.evaluate(abroad, requirement, {})) == pytest.approx(
        0.4 * 0.2 + 0.2 * 0.8
    )


def test_location_hybrid_without_data_is_neutral() -> None:
    requirement = build_requirement(location={"type": "hybrid"})

    result = LocationEvaluator().evaluate(build_talent(), requirement, {})

    assert score_of(result) == pytest.approx(0.5)


def test_culture_alignment_and_mismatch() -> None:
    requirement = build_requirement(
        work_style="agile", communication_style="casual", company_size="medium"
    )
    aligned = build_talent(
        preferences={
            "work_style": "agile",
            "communication_style": "casual",
            "preferred_company_size": "medium",
        }
    )
    opposed = build_talent(
        preferences={
            "work_style": "waterfall",
            "communication_style": "formal",
            "preferred_company_size": "startup",
        }
    )
    evaluator = CultureEvaluator()

    assert score_of(evaluator.evaluate(aligned, requirement, {})) == pytest.approx(1.0)
    assert score_of(evaluator.evaluate(opposed, requirement, {})) == pytest.approx(0.27)
    assert score_of(evaluator.evaluate(build_talent(), requirement, {})) == pytest.approx(0.5)


def test_velocity_from_finished_projects() -> None:
    talent = build_talent(
        past_projects=[
            {"duration_weeks": 12, "outcome": "completed", "rating": 5},
            {"duration_weeks": 12, "outcome": "completed", "rating": 4.5},
            {"duration_weeks": 40, "outcome": "ongoing"},
        ]
    )
    evaluator = VelocityEvaluator()

    result = evaluator.evaluate(talent, build_requirement(), {})

    assert score_of(result) == pytest.approx(1.0)
    assert result["metadata"]["finished_projects"] == 2
    assert score_of(evaluator.evaluate(build_talent(), build_requirement(), {})) == 0.5


def test_velocity_penalizes_late_and_mismatched_projects() -> None:
    talent = build_talent(
        past_projects=[
            {"duration_weeks": 24, "outcome": "completed", "rating": 3},
            {"duration_weeks": 24, "outcome": "cancelled"},
        ]
    )

    result = VelocityEvaluator().evaluate(talent, build_requirement(), {})

    assert score_of(result) == pytest.approx(0.5 * 0.4)


def test_reliability_combines_rating_consistency_and_completion() -> None:
    steady = build_talent(
        rating=5.0,
        past_projects=[
            {"outcome": "completed", "rating": 5},
            {"outcome": "completed", "rating": 5},
        ],
    )
    evaluator = ReliabilityEvaluator()

    assert score_of(evaluator.evaluate(steady, build_requirement(), {})) == pytest.approx(1.0)
    assert score_of(evaluator.evaluate(build_talent(), build_requirement(), {})) == pytest.approx(
        0.5
    )


def test_completion_ratio_ignores_ongoing_projects() -> None:
    talent = build_talent(
        past_projects=[
            {"outcome": "completed"},
            {"outcome": "cancelled"},
            {"outcome": "ongoing"},
        ]
    )

    assert completion_ratio(talent) == pytest.approx(0.5)
    assert completion_ratio(build_talent()) is None
