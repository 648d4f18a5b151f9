"""Repository contracts and in-memory implementations."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable, Mapping, Protocol, Sequence, runtime_checkable

from pydantic import ValidationError

from .schemas import Booking, GeneratedMatch, MatchStatus


@runtime_checkable
class RequirementRepository(Protocol):
    def fetch(self, requirement_id: str) -> dict[str, Any] | None:
        """Return the raw requirement record or ``None`` when absent."""


@runtime_checkable
class TalentRepository(Protocol):
    def fetch_candidate_pool(
        self,
        filter_hints: Sequence[str],
        limit: int,
    ) -> list[dict[str, Any]]:
        """Return at most ``limit`` raw talent records."""

    def fetch_availability(self, talent_ids: Sequence[str]) -> dict[str, list[dict[str, Any]]]:
        """Return current raw availability windows for every requested talent."""


@runtime_checkable
class BookingRepository(Protocol):
    def find_conflicts(
        self,
        talent_ids: Sequence[str],
        start: datetime,
        end: datetime,
    ) -> dict[str, list[Booking]]:
        """Return bookings intersecting ``[start, end]`` grouped by talent id."""


@runtime_checkable
class MatchStore(Protocol):
    def save(self, match: GeneratedMatch) -> None: ...

    def save_many(self, matches: Sequence[GeneratedMatch]) -> None:
        """Persist every match or none of them."""

    def find_by_requirement(self, requirement_id: str) -> list[GeneratedMatch]: ...

    def get(self, match_id: str) -> GeneratedMatch | None: ...

    def update_status(self, match_id: str, status: MatchStatus) -> GeneratedMatch | None: ...


@runtime_checkable
class DeadlineScheduler(Protocol):
    def schedule(self, match_id: str, deadline: datetime) -> None: ...


class InMemoryRequirementRepository:
    def __init__(self, records: Iterable[Mapping[str, Any]] = ()) -> None:
        self._records = {str(record["id"]): dict(record) for record in records}

    def add(self, record: Mapping[str, Any]) -> None:
        self._records[str(record["id"])] = dict(record)

    def fetch(self, requirement_id: str) -> dict[str, Any] | None:
        record = self._records.get(requirement_id)
        return dict(record) if record is not None else None

    def ids(self) -> list[str]:
        return list(self._records)


class InMemoryTalentRepository:
    """Talent records kept in insertion order.

    ``fetch_candidate_pool`` lists records holding a hinted skill name first so
    the pool cap drops unrelated talents before related ones.
    """

    def __init__(self, records: Iterable[Mapping[str, Any]] = ()) -> None:
        self._records = {str(record["id"]): dict(record) for record in records}

    def add(self, record: Mapping[str, Any]) -> None:
        self._records[str(record["id"])] = dict(record)

    def fetch_candidate_pool(
        self,
        filter_hints: Sequence[str],
        limit: int,
    ) -> list[dict[str, Any]]:
        hints = {hint.strip().lower() for hint in filter_hints}
        hinted: list[dict[str, Any]] = []
        others: list[dict[str, Any]] = []
        for record in self._records.values():
            names = {
                str(skill.get("name", "")).strip().lower() for skill in record.get("skills") or []
            }
            (hinted if hints & names else others).append(dict(record))
        return (hinted + others)[:limit]

    def fetch_availability(self, talent_ids: Sequence[str]) -> dict[str, list[dict[str, Any]]]:
        return {
            talent_id: list(self._records[talent_id].get("availability") or [])
            for talent_id in talent_ids
            if talent_id in self._records
        }

    def update_availability(self, talent_id: str, windows: Sequence[Mapping[str, Any]]) -> None:
        self._records[talent_id]["availability"] = [dict(window) for window in windows]


class InMemoryBookingRepository:
    def __init__(self, bookings: Iterable[Booking] = ()) -> None:
        self._bookings = list(bookings)

    def add(self, booking: Booking) -> None:
        self._bookings.append(booking)

    def find_conflicts(
        self,
        talent_ids: Sequence[str],
        start: datetime,
        end: datetime,
    ) -> dict[str, list[Booking]]:
        wanted = set(talent_ids)
        conflicts: dict[str, list[Booking]] = {talent_id: [] for talent_id in talent_ids}
        for booking in self._bookings:
            if booking.talent_id in wanted and booking.start <= end and booking.end >= start:
                conflicts[booking.talent_id].append(booking)
        return conflicts


class InMemoryMatchStore:
    def __init__(self) -> None:
        self._matches: dict[str, GeneratedMatch] = {}

    def save(self, match: GeneratedMatch) -> None:
        self._matches[match.id] = match

    def save_many(self, matches: Sequence[GeneratedMatch]) -> None:
        staged = dict(self._matches)
        for match in matches:
            if match.id in staged:
                raise ValueError(f"Duplicate match id: {match.id}")
            staged[match.id] = match
        self._matches = staged

    def find_by_requirement(self, requirement_id: str) -> list[GeneratedMatch]:
        return [
            match for match in self._matches.values() if match.requirement_id == requirement_id
        ]

    def get(self, match_id: str) -> GeneratedMatch | None:
        return self._matches.get(match_id)

    def update_status(self, match_id: str, status: MatchStatus) -> GeneratedMatch | None:
        match = self._matches.get(match_id)
        if match is None:
            return None
        updated = match.model_copy(update={"status": status})
        self._matches[match_id] = updated
        return updated


class InMemoryDeadlineScheduler:
    def __init__(self) -> None:
        self.scheduled: list[tuple[str, datetime]] = []

    def schedule(self, match_id: str, deadline: datetime) -> None:
        self.scheduled.append((match_id, deadline))


class FixtureLoadError(ValueError):
    """Raised when fixture loading encounters invalid records."""

    def __init__(self, errors: list[str], partial: "Fixtures"):
        super().__init__("Fixture loading failed")
        self.errors = errors
        self.partial = partial

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"Fixture loading failed: {self.errors}"


@dataclass
class Fixtures:
    requirements: InMemoryRequirementRepository = field(
        default_factory=InMemoryRequirementRepository
    )
    talents: InMemoryTalentRepository = field(default_factory=InMemoryTalentRepository)
    bookings: InMemoryBookingRepository = field(default_factory=InMemoryBookingRepository)


class FixtureLoader:
    """Load requirement, talent and booking records from one JSON document."""

    def load(self, path: Path) -> Fixtures:
        with path.open("r", encoding="utf-8") as handle:
            try:
                data = json.load(handle)
            except json.JSONDecodeError as exc:
                raise ValueError(f"Invalid fixture JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise ValueError("Fixture document must be a JSON object")

        fixtures = Fixtures()
        errors: list[str] = []

        for idx, record in enumerate(data.get("requirements") or [], start=1):
            if not isinstance(record, dict) or not record.get("id"):
                errors.append(f"requirements[{idx}]: missing id")
                continue
            fixtures.requirements.add(record)

        for idx, record in enumerate(data.get("talents") or [], start=1):
            if not isinstance(record, dict) or not record.get("id"):
                errors.append(f"talents[{idx}]: missing id")
                continue
            fixtures.talents.add(record)

        for idx, record in enumerate(data.get("bookings") or [], start=1):
            try:
                fixtures.bookings.add(Booking.model_validate(record))
            except ValidationError as exc:
                errors.append(f"bookings[{idx}]: {exc.errors()[0]['msg']}")

        if errors:
            raise FixtureLoadError(errors, fixtures)
        return fixtures
