"""Availability overlap and conflict evaluation."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Callable, Iterable, Sequence

import pendulum

from ..schemas import (
    AvailabilityWindow,
    Booking,
    ProjectRequirement,
    RecurrenceFrequency,
    RecurrenceRule,
    Urgency,
    WindowStatus,
)

_OFFSET_PATTERN = re.compile(r"^(?:UTC|GMT)?\s*([+-])(\d{1,2})(?::?(\d{2}))?$", re.IGNORECASE)


@dataclass
class AvailabilityConfig:
    """Thresholds and tables for availability scoring."""

    timezone_offsets: dict[str, float] = field(
        default_factory=lambda: {
            "UTC": 0.0,
            "GMT": 0.0,
            "EST": -5.0,
            "CST": -6.0,
            "MST": -7.0,
            "PST": -8.0,
            "CET": 1.0,
            "EET": 2.0,
            "IST": 5.5,
            "JST": 9.0,
            "AEST": 10.0,
        }
    )
    conflict_statuses: tuple[str, ...] = ("confirmed", "active")
    conflict_penalty: float = 15.0
    overlap_weight: float = 0.4
    timezone_weight: float = 0.2
    capacity_sweet_spot: tuple[float, float] = (60.0, 80.0)
    grace_period_days: int = 7
    max_occurrences: int = 2000
    low_overlap_threshold: float = 50.0
    timeline_shift_threshold: float = 80.0
    min_available_hours: float = 40.0


@dataclass(frozen=True, slots=True)
class ProjectTimeframe:
    """Interval and working-pattern the availability is checked against."""

    start: datetime
    end: datetime
    hours_per_week: float = 40.0
    timezone: str = "UTC"
    urgency: Urgency = Urgency.MEDIUM

    @classmethod
    def from_requirement(cls, requirement: ProjectRequirement) -> "ProjectTimeframe":
        return cls(
            start=requirement.duration.start_date,
            end=requirement.duration.end,
            hours_per_week=requirement.hours_per_week,
            timezone=requirement.location.timezone or "UTC",
            urgency=requirement.urgency,
        )

    @property
    def seconds(self) -> float:
        return max((self.end - self.start).total_seconds(), 0.0)


@dataclass(frozen=True, slots=True)
class AvailabilityMatch:
    """Availability fit of one talent for one timeframe."""

    overlap_percentage: float
    available_hours: float
    conflicting_bookings: int
    immediate_availability: bool
    capacity_utilization: float
    timezone_compatibility: float
    availability_score: float
    concerns: tuple[str, ...] = ()
    recommendations: tuple[str, ...] = ()

    def as_metadata(self) -> dict[str, Any]:
        return {
            "overlap_percentage": self.overlap_percentage,
            "available_hours": self.available_hours,
            "conflicting_bookings": self.conflicting_bookings,
            "immediate_availability": self.immediate_availability,
            "capacity_utilization": self.capacity_utilization,
            "timezone_compatibility": self.timezone_compatibility,
            "availability_score": self.availability_score,
            "concerns": list(self.concerns),
            "recommendations": list(self.recommendations),
        }


class AvailabilityEngine:
    """Expand availability windows and score them against a project timeframe."""

    def __init__(
        self,
        *,
        config: AvailabilityConfig | None = None,
        now_provider: Callable[[], datetime] | None = None,
    ) -> None:
        self._config = config or AvailabilityConfig()
        self._now_provider = now_provider or (lambda: pendulum.now("UTC"))

    def compute_overlap(
        self,
        windows: Sequence[AvailabilityWindow],
        timeframe: ProjectTimeframe,
        *,
        bookings: Iterable[Booking] = (),
        talent_timezone: str | None = None,
    ) -> AvailabilityMatch:
        expanded = self.expand(windows, timeframe)
        available = [window for window in expanded if window.status == WindowStatus.AVAILABLE]

        percentage, hours = self._overlap(available, timeframe)
        conflicts = self.find_conflicts(bookings, timeframe)
        tz_name = talent_timezone or (expanded[0].timezone if expanded else "UTC")
        tz_score = self.timezone_compatibility(timeframe.timezone, tz_name, at=timeframe.start)
        utilization = self._capacity_utilization(available)

        score = self._composite_score(
            overlap_percentage=percentage,
            conflicts=len(conflicts),
            capacity_utilization=utilization,
            timezone_compatibility=tz_score,
            urgency=timeframe.urgency,
        )

        return AvailabilityMatch(
            overlap_percentage=percentage,
            available_hours=hours,
            conflicting_bookings=len(conflicts),
            immediate_availability=self.immediate_availability(available, timeframe.start),
            capacity_utilization=utilization,
            timezone_compatibility=tz_score,
            availability_score=score,
            concerns=self._concerns(percentage, hours, len(conflicts), utilization),
            recommendations=self._recommendations(percentage, hours, timeframe, available),
        )

    def has_overlap(
        self,
        windows: Sequence[AvailabilityWindow],
        timeframe: ProjectTimeframe,
    ) -> bool:
        available = [
            window
            for window in self.expand(windows, timeframe)
            if window.status == WindowStatus.AVAILABLE
        ]
        percentage, _ = self._overlap(available, timeframe)
        return percentage > 0

    def expand(
        self,
        windows: Sequence[AvailabilityWindow],
        timeframe: ProjectTimeframe,
    ) -> list[AvailabilityWindow]:
        """Flatten recurring windows into concrete ones bounded by ``timeframe``."""
        expanded: list[AvailabilityWindow] = []
        for window in windows:
            if window.recurrence is None:
                expanded.append(window)
                continue
            expanded.extend(self._expand_window(window, window.recurrence, timeframe))
        return expanded

    def _expand_window(
        self,
        window: AvailabilityWindow,
        rule: RecurrenceRule,
        timeframe: ProjectTimeframe,
    ) -> list[AvailabilityWindow]:
        span = window.end - window.start
        limit = timeframe.end
        if rule.end_date is not None and rule.end_date < limit:
            limit = rule.end_date
        origin = pendulum.instance(window.start)

        index = 0
        if rule.frequency != RecurrenceFrequency.MONTHLY:
            step = self._fixed_step(rule.frequency, rule.interval)
            lag = (timeframe.start - span).timestamp() - origin.timestamp()
            if lag > step.total_seconds():
                index = int(lag // step.total_seconds())

        occurrences: list[AvailabilityWindow] = []
        walked = 0
        current = self._occurrence(origin, rule.frequency, rule.interval, index)
        while current <= limit and walked < self._config.max_occurrences:
            if self._matches_days(current, rule.days_of_week):
                occurrences.append(
                    window.model_copy(
                        update={"start": current, "end": current + span, "recurrence": None}
                    )
                )
            walked += 1
            index += 1
            current = self._occurrence(origin, rule.frequency, rule.interval, index)
        return occurrences

    @staticmethod
    def _fixed_step(frequency: RecurrenceFrequency, interval: int) -> timedelta:
        if frequency == RecurrenceFrequency.WEEKLY:
            return timedelta(days=7 * interval)
        return timedelta(days=interval)

    def _occurrence(
        self,
        origin: pendulum.DateTime,
        frequency: RecurrenceFrequency,
        interval: int,
        index: int,
    ) -> pendulum.DateTime:
        if frequency == RecurrenceFrequency.MONTHLY:
            return origin.add(months=interval * index)
        return origin + self._fixed_step(frequency, interval) * index

    @staticmethod
    def _matches_days(moment: datetime, days_of_week: tuple[int, ...] | None) -> bool:
        if not days_of_week:
            return True
        return moment.isoweekday() % 7 in days_of_week

    @staticmethod
    def _overlap(
        windows: Iterable[AvailabilityWindow],
        timeframe: ProjectTimeframe,
    ) -> tuple[float, float]:
        project_seconds = timeframe.seconds
        total = 0.0
        for window in windows:
            start = max(window.start, timeframe.start)
            end = min(window.end, timeframe.end)
            if start < end:
                total += (end - start).total_seconds() * (window.capacity / 100)
        percentage = (total / project_seconds) * 100 if project_seconds > 0 else 0.0
        return min(100.0, round(percentage, 2)), round(total / 3600, 2)

    def find_conflicts(
        self,
        bookings: Iterable[Booking],
        timeframe: ProjectTimeframe,
    ) -> list[Booking]:
        statuses = {status.lower() for status in self._config.conflict_statuses}
        return [
            booking
            for booking in bookings
            if booking.status.lower() in statuses
            and booking.start <= timeframe.end
            and booking.end >= timeframe.start
        ]

    def utc_offset(self, name: str | None, *, at: datetime | None = None) -> float | None:
        """Resolve a timezone label to hours from UTC."""
        if not name:
            return None
        label = name.strip()
        fixed = self._config.timezone_offsets.get(label.upper())
        if fixed is not None:
            return fixed
        matched = _OFFSET_PATTERN.match(label)
        if matched:
            sign, hours, minutes = matched.groups()
            value = int(hours) + int(minutes or 0) / 60
            return -value if sign == "-" else value
        try:
            zone = pendulum.timezone(label)
        except (ValueError, LookupError):
            return None
        reference = pendulum.instance(at) if at is not None else pendulum.datetime(2000, 1, 1)
        return reference.in_timezone(zone).offset_hours

    def timezone_compatibility(
        self,
        project_timezone: str | None,
        talent_timezone: str | None,
        *,
        at: datetime | None = None,
    ) -> float:
        project_offset = self.utc_offset(project_timezone, at=at) or 0.0
        talent_offset = self.utc_offset(talent_timezone, at=at) or 0.0
        difference = abs(project_offset - talent_offset)
        if difference <= 2:
            return 100.0
        if difference <= 4:
            return 80.0
        if difference <= 6:
            return 60.0
        if difference <= 8:
            return 40.0
        return 20.0

    @staticmethod
    def _capacity_utilization(windows: Sequence[AvailabilityWindow]) -> float:
        if not windows:
            return 0.0
        return round(sum(window.capacity for window in windows) / len(windows), 2)

    def _composite_score(
        self,
        *,
        overlap_percentage: float,
        conflicts: int,
        capacity_utilization: float,
        timezone_compatibility: float,
        urgency: Urgency,
    ) -> float:
        low, high = self._config.capacity_sweet_spot
        score = overlap_percentage * self._config.overlap_weight
        score -= conflicts * self._config.conflict_penalty

        if low <= capacity_utilization <= high:
            score += 20
        elif capacity_utilization < low:
            score += capacity_utilization * 0.3
        else:
            score += max(0.0, 100 - capacity_utilization) * 0.2

        score += timezone_compatibility * self._config.timezone_weight

        if urgency == Urgency.CRITICAL:
            score += 10 if overlap_percentage > 80 else -20
        elif urgency == Urgency.HIGH:
            score += 5 if overlap_percentage > 60 else -10

        return max(0.0, min(100.0, round(score, 2)))

    def immediate_availability(
        self,
        windows: Iterable[AvailabilityWindow],
        project_start: datetime,
    ) -> bool:
        horizon = self._now_provider() + timedelta(days=self._config.grace_period_days)
        return any(
            window.status == WindowStatus.AVAILABLE
            and window.start <= horizon
            and window.end >= project_start
            for window in windows
        )

    def _concerns(
        self,
        percentage: float,
        hours: float,
        conflicts: int,
        utilization: float,
    ) -> tuple[str, ...]:
        concerns: list[str] = []
        if percentage < self._config.low_overlap_threshold:
            concerns.append(
                f"Limited availability - only {percentage}% overlap with project timeline"
            )
        if conflicts > 0:
            plural = "s" if conflicts > 1 else ""
            concerns.append(f"{conflicts} conflicting engagement{plural} during project period")
        if utilization > self._config.capacity_sweet_spot[1]:
            concerns.append(f"High capacity utilization ({utilization}%) - may be overbooked")
        if hours < self._config.min_available_hours:
            concerns.append(f"Limited available hours ({hours}h) for project requirements")
        return tuple(concerns)

    def _recommendations(
        self,
        percentage: float,
        hours: float,
        timeframe: ProjectTimeframe,
        windows: Sequence[AvailabilityWindow],
    ) -> tuple[str, ...]:
        recommendations: list[str] = []
        if percentage < self._config.timeline_shift_threshold:
            recommendations.append(
                "Consider adjusting project timeline for better availability match"
            )

        if windows and not any(window.start <= timeframe.start for window in windows):
            upcoming = min(windows, key=lambda window: window.start)
            days = math.ceil((upcoming.start - timeframe.start).total_seconds() / 86400)
            recommendations.append(f"Talent available in {days} days - consider delayed start")

        if timeframe.hours_per_week > hours:
            recommendations.append(
                "Consider reducing weekly hour requirements or extending project duration"
            )
        return tuple(recommendations)
