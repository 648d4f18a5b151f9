from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import pytest

from talentmatch.core import CandidatePrefilter
from talentmatch.core.scoring import PrefilterConfig
from talentmatch.schemas import ProjectRequirement, TalentProfile


def utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


def build_requirement(**kwargs: Any) -> ProjectRequirement:
    defaults: dict[str, Any] = {
        "id": "REQ-001",
        "required_skills": [{"name": "React", "level": "senior", "is_required": True}],
        "budget": {"min": 50, "max": 100},
        "duration": {"weeks": 4, "start_date": utc(2025, 3, 3)},
    }
    defaults.update(kwargs)
    return ProjectRequirement(**defaults)


def build_talent(**kwargs: Any) -> TalentProfile:
    defaults: dict[str, Any] = {
        "id": "T-001",
        "skills": [{"name": "React", "level": "expert", "years_of_experience": 6}],
        "availability": [{"start": utc(2025, 3, 1), "end": utc(2025, 6, 1), "capacity": 75}],
        "hourly_rate": 80,
        "is_available": True,
    }
    defaults.update(kwargs)
    return TalentProfile(**defaults)


@pytest.fixture
def prefilter() -> CandidatePrefilter:
    return CandidatePrefilter()


def test_eligible_talent_passes(prefilter: CandidatePrefilter) -> None:
    assert prefilter.exclusion_reason(build_requirement(), build_talent()) is None


def test_talent_missing_required_skill_is_excluded(prefilter: CandidatePrefilter) -> None:
    requirement = build_requirement(
        required_skills=[{"name": "Rust", "level": "mid", "is_required": True}]
    )

    assert prefilter.exclusion_reason(requirement, build_talent()) == "no_required_skill_match"


def test_under_levelled_skill_is_excluded(prefilter: CandidatePrefilter) -> None:
    talent = build_talent(skills=[{"name": "React", "level": "junior"}])

    assert prefilter.exclusion_reason(build_requirement(), talent) == "no_required_skill_match"


def test_one_satisfied_required_skill_is_enough(prefilter: CandidatePrefilter) -> None:
    requirement = build_requirement(
        required_skills=[
            {"name": "Rust", "level": "mid", "is_required": True},
            {"name": "React", "level": "mid", "is_required": True},
        ]
    )

    assert prefilter.exclusion_reason(requirement, build_talent()) is None


def test_unavailable_flag_is_checked_first(prefilter: CandidatePrefilter) -> None:
    talent = build_talent(is_available=False, skills=[])

    assert prefilter.exclusion_reason(build_requirement(), talent) == "unavailable"


def test_talent_without_overlap_is_excluded(prefilter: CandidatePrefilter) -> None:
    talent = build_talent(
        availability=[{"start": utc(2025, 5, 1), "end": utc(2025, 6, 1)}],
    )

    assert prefilter.exclusion_reason(build_requirement(), talent) == "no_availability_overlap"


@pytest.mark.parametrize(
    ("rate", "expected"),
    [(149, None), (150, "rate_above_budget"), (200, "rate_above_budget")],
)
def test_rate_ceiling_is_one_and_a_half_budget(
    prefilter: CandidatePrefilter, rate: float, expected: str | None
) -> None:
    talent = build_talent(hourly_rate=rate)

    assert prefilter.exclusion_reason(build_requirement(), talent) == expected


def test_rate_ceiling_is_configurable() -> None:
    prefilter = CandidatePrefilter(config=PrefilterConfig(rate_ceiling_ratio=1.2))

    assert prefilter.exclusion_reason(build_requirement(), build_talent(hourly_rate=125)) == (
        "rate_above_budget"
    )


def test_apply_partitions_and_counts(prefilter: CandidatePrefilter) -> None:
    talents = [
        build_talent(id="T-1"),
        build_talent(id="T-2", is_available=False),
        build_talent(id="T-3", hourly_rate=300),
        build_talent(id="T-4", hourly_rate=60),
    ]

    result = prefilter.apply(build_requirement(), talents)

    assert [talent.id for talent in result.eligible] == ["T-1", "T-4"]
    assert result.excluded == {"T-2": "unavailable", "T-3": "rate_above_budget"}
    assert result.reason_counts() == {"unavailable": 1, "rate_above_budget": 1}
