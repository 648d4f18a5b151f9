from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import pytest

from talentmatch.repositories import (
    BookingRepository,
    FixtureLoader,
    FixtureLoadError,
    InMemoryBookingRepository,
    InMemoryMatchStore,
    InMemoryRequirementRepository,
    InMemoryTalentRepository,
    MatchStore,
    TalentRepository,
)
from talentmatch.schemas import Booking, GeneratedMatch, MatchStatus, ScoreBreakdown

NOW = datetime(2025, 3, 1, tzinfo=timezone.utc)


def utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


def build_match(**kwargs: Any) -> GeneratedMatch:
    defaults: dict[str, Any] = {
        "id": "M-001",
        "requirement_id": "REQ-001",
        "talent_id": "T-001",
        "score": 0.8,
        "breakdown": ScoreBreakdown(),
        "rank": 1,
        "confidence": 0.7,
        "predicted_success": 0.7,
        "created_at": NOW,
        "expires_at": NOW,
        "response_deadline": NOW,
    }
    defaults.update(kwargs)
    return GeneratedMatch(**defaults)


def test_in_memory_implementations_satisfy_protocols() -> None:
    assert isinstance(InMemoryTalentRepository(), TalentRepository)
    assert isinstance(InMemoryBookingRepository(), BookingRepository)
    assert isinstance(InMemoryMatchStore(), MatchStore)


def test_requirement_repository_returns_copies() -> None:
    repository = InMemoryRequirementRepository([{"id": "REQ-001", "title": "Build"}])

    record = repository.fetch("REQ-001")
    assert record is not None
    record["title"] = "Changed"

    assert repository.fetch("REQ-001") == {"id": "REQ-001", "title": "Build"}
    assert repository.fetch("REQ-404") is None
    assert repository.ids() == ["REQ-001"]


def test_candidate_pool_lists_hinted_talents_first_and_caps() -> None:
    repository = InMemoryTalentRepository(
        [
            {"id": "T-1", "skills": [{"name": "Go"}]},
            {"id": "T-2", "skills": [{"name": "react"}]},
            {"id": "T-3", "skills": []},
            {"id": "T-4", "skills": [{"name": "React"}]},
        ]
    )

    pool = repository.fetch_candidate_pool(["React"], limit=3)

    assert [record["id"] for record in pool] == ["T-2", "T-4", "T-1"]


def test_availability_lookup_and_update() -> None:
    repository = InMemoryTalentRepository([{"id": "T-1", "availability": [{"capacity": 50}]}])

    repository.update_availability("T-1", [{"capacity": 25}])

    assert repository.fetch_availability(["T-1", "T-404"]) == {"T-1": [{"capacity": 25}]}


def test_booking_conflicts_are_grouped_and_inclusive() -> None:
    repository = InMemoryBookingRepository(
        [
            Booking(talent_id="T-1", start=utc(2025, 2, 1), end=utc(2025, 3, 3)),
            Booking(talent_id="T-1", start=utc(2025, 5, 1), end=utc(2025, 5, 5)),
            Booking(talent_id="T-2", start=utc(2025, 3, 10), end=utc(2025, 3, 12)),
            Booking(talent_id="T-3", start=utc(2025, 3, 10), end=utc(2025, 3, 12)),
        ]
    )

    conflicts = repository.find_conflicts(["T-1", "T-2", "T-9"], utc(2025, 3, 3), utc(2025, 3, 31))

    assert {key: len(value) for key, value in conflicts.items()} == {"T-1": 1, "T-2": 1, "T-9": 0}


def test_match_store_save_many_is_all_or_nothing() -> None:
    store = InMemoryMatchStore()
    store.save(build_match(id="M-001"))

    with pytest.raises(ValueError):
        store.save_many([build_match(id="M-002"), build_match(id="M-001")])

    assert store.get("M-002") is None
    assert len(store.find_by_requirement("REQ-001")) == 1


def test_match_store_status_update() -> None:
    store = InMemoryMatchStore()
    store.save(build_match())

    updated = store.update_status("M-001", MatchStatus.HIRED)

    assert updated is not None and updated.status == MatchStatus.HIRED
    assert store.get("M-001").status == MatchStatus.HIRED
    assert store.update_status("M-404", MatchStatus.HIRED) is None


def write_json(path: Path, payload: object) -> None:
    path.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")


def test_fixture_loader_reads_all_sections(tmp_path: Path) -> None:
    path = tmp_path / "fixtures.json"
    write_json(
        path,
        {
            "requirements": [{"id": "REQ-001"}],
            "talents": [{"id": "T-1"}, {"id": "T-2"}],
            "bookings": [
                {"talent_id": "T-1", "start": "2025-03-01T00:00:00Z", "end": "2025-03-05T00:00:00Z"}
            ],
        },
    )

    fixtures = FixtureLoader().load(path)

    assert fixtures.requirements.ids() == ["REQ-001"]
    assert set(fixtures.talents.fetch_availability(["T-1", "T-2"])) == {"T-1", "T-2"}
    assert fixtures.bookings.find_conflicts(["T-1"], utc(2025, 3, 2), utc(2025, 3, 3))["T-1"]


def test_fixture_loader_collects_errors_with_partial_result(tmp_path: Path) -> None:
    path = tmp_path / "fixtures.json"
    write_json(
        path,
        {
            "requirements": [{"title": "no id"}],
            "talents": [{"id": "T-1"}],
            "bookings": [{"talent_id": "T-1"}],
        },
    )

    with pytest.raises(FixtureLoadError) as excinfo:
        FixtureLoader().load(path)

    assert len(excinfo.value.errors) == 2
    assert excinfo.value.errors[0] == "requirements[1]: missing id"
    assert excinfo.value.errors[1].startswith("bookings[1]:")
    assert excinfo.value.partial.talents.fetch_availability(["T-1"]) == {"T-1": []}


def test_fixture_loader_rejects_non_object_documents(tmp_path: Path) -> None:
    path = tmp_path / "fixtures.json"
    write_json(path, [1, 2, 3])

    with pytest.raises(ValueError):
        FixtureLoader().load(path)
