"""Pydantic configuration schema for CLI YAML input."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, ValidationError


class CoreConfig(BaseModel):
    pool_limit: int | None = Field(default=None, ge=1)
    max_workers: int | None = Field(default=None, ge=1)
    expiry_days: int | None = Field(default=None, ge=1)


class WeightsConfig(BaseModel):
    base_weights: dict[str, float] | None = None
    urgency_multipliers: dict[str, float] | None = None
    project_type_multipliers: dict[str, dict[str, float]] | None = None
    team_size_multipliers: dict[str, dict[str, float]] | None = None
    industry_multipliers: dict[str, dict[str, float]] | None = None
    urgency_dimensions: tuple[str, ...] | None = None
    min_score_cap: float | None = Field(default=None, ge=0, le=1)
    max_results_cap: int | None = Field(default=None, ge=1)


class EvaluatorConfig(BaseModel):
    skills: dict[str, Any] | None = None
    experience: dict[str, Any] | None = None
    availability: dict[str, Any] | None = None
    budget: dict[str, Any] | None = None
    location: dict[str, Any] | None = None
    culture: dict[str, Any] | None = None
    velocity: dict[str, Any] | None = None
    reliability: dict[str, Any] | None = None


class AppConfig(BaseModel):
    core: CoreConfig = Field(default_factory=CoreConfig)
    weights: WeightsConfig = Field(default_factory=WeightsConfig)
    evaluators: EvaluatorConfig = Field(default_factory=EvaluatorConfig)
    skills: dict[str, Any] | None = None
    availability: dict[str, Any] | None = None
    prefilter: dict[str, Any] | None = None
    fairness: dict[str, Any] | None = None
    adapter: dict[str, Any] | None = None
    catalog: str | None = None

    def to_settings(self) -> dict[str, Any]:
        settings: dict[str, Any] = {}
        for section in ("core", "weights", "evaluators"):
            dumped = getattr(self, section).model_dump(exclude_none=True)
            if dumped:
                settings[section] = dumped
        for section in ("skills", "availability", "prefilter", "fairness", "adapter"):
            value = getattr(self, section)
            if value:
                settings[section] = dict(value)
        if self.catalog:
            settings["catalog"] = self.catalog
        return settings


def load_config(raw: Any) -> AppConfig:
    if not isinstance(raw, dict):
        raise ValidationError.from_exception_data(
            "AppConfig",
            [{"type": "dict_type", "loc": ("config",), "input": raw}],
        )
    return AppConfig.model_validate(raw)
