"""Adapters from raw repository records to domain models."""

from __future__ import annotations

from typing import Any, Mapping, Protocol, runtime_checkable

from ..schemas import ProjectRequirement, TalentProfile
from .records import RecordAdapter, RecordAdapterConfig, RecordError, parse_duration_years


@runtime_checkable
class RecordNormalizer(Protocol):
    """Record normalization contract.

    Implementations transform loosely-typed repository records into the frozen
    requirement and talent models the matching core consumes.
    """

    def to_requirement(self, raw: Mapping[str, Any]) -> ProjectRequirement:
        """Return a normalized requirement or raise ``RecordError``."""

    def to_talent(self, raw: Mapping[str, Any]) -> TalentProfile:
        """Return a normalized talent profile or raise ``RecordError``."""


__all__ = [
    "RecordNormalizer",
    "RecordAdapter",
    "RecordAdapterConfig",
    "RecordError",
    "parse_duration_years",
]
