"""Dependency injection container for the matching system."""

from __future__ import annotations

from dependency_injector import containers, providers

from .adapters import RecordAdapter, RecordAdapterConfig
from .core import (
    AvailabilityConfig,
    AvailabilityEngine,
    AvailabilityEvaluator,
    BudgetEvaluator,
    CandidatePrefilter,
    CultureEvaluator,
    ExperienceEvaluator,
    FairnessAuditor,
    FairnessConfig,
    LocationEvaluator,
    NullDemographicProvider,
    ReliabilityEvaluator,
    Scorer,
    SkillResolver,
    SkillResolverConfig,
    SkillsEvaluator,
    VelocityEvaluator,
    WeightPolicy,
    WeightPolicyConfig,
    load_default_catalog,
)
from .core.evaluators.availability import AvailabilityEvaluatorConfig
from .core.evaluators.budget import BudgetConfig
from .core.evaluators.culture import CultureConfig
from .core.evaluators.experience import ExperienceConfig
from .core.evaluators.location import LocationConfig
from .core.evaluators.reliability import ReliabilityConfig
from .core.evaluators.skills import SkillsConfig
from .core.evaluators.velocity import VelocityConfig
from .core.scoring import PrefilterConfig
from .core.skills import load_catalog
from .pipeline import MatchOrchestrator
from .repositories import (
    InMemoryBookingRepository,
    InMemoryDeadlineScheduler,
    InMemoryMatchStore,
    InMemoryRequirementRepository,
    InMemoryTalentRepository,
)

CORE_DEFAULTS = {"pool_limit": 100, "max_workers": 8, "expiry_days": 7}


class MatchingContainer(containers.DeclarativeContainer):
    """Dependency-injector container definition."""

    config = providers.Configuration(default=CORE_DEFAULTS)

    catalog = providers.Singleton(load_default_catalog)
    skill_resolver = providers.Singleton(SkillResolver, catalog=catalog)
    availability_engine = providers.Singleton(AvailabilityEngine)
    weight_policy = providers.Singleton(WeightPolicy)
    record_adapter = providers.Singleton(RecordAdapter, catalog=catalog)

    skills_evaluator = providers.Singleton(SkillsEvaluator, resolver=skill_resolver)
    experience_evaluator = providers.Singleton(ExperienceEvaluator, resolver=skill_resolver)
    availability_evaluator = providers.Singleton(AvailabilityEvaluator, engine=availability_engine)
    budget_evaluator = providers.Singleton(BudgetEvaluator)
    location_evaluator = providers.Singleton(LocationEvaluator, engine=availability_engine)
    culture_evaluator = providers.Singleton(CultureEvaluator)
    velocity_evaluator = providers.Singleton(VelocityEvaluator)
    reliability_evaluator = providers.Singleton(ReliabilityEvaluator)

    evaluators = providers.List(
        skills_evaluator,
        experience_evaluator,
        availability_evaluator,
        budget_evaluator,
        location_evaluator,
        culture_evaluator,
        velocity_evaluator,
        reliability_evaluator,
    )

    scorer = providers.Singleton(Scorer, evaluators=evaluators)
    prefilter = providers.Singleton(
        CandidatePrefilter,
        resolver=skill_resolver,
        engine=availability_engine,
    )

    demographics = providers.Singleton(NullDemographicProvider)
    fairness_auditor = providers.Singleton(FairnessAuditor, demographics=demographics)

    requirement_repository = providers.Singleton(InMemoryRequirementRepository)
    talent_repository = providers.Singleton(InMemoryTalentRepository)
    booking_repository = providers.Singleton(InMemoryBookingRepository)
    match_store = providers.Singleton(InMemoryMatchStore)
    deadline_scheduler = providers.Singleton(InMemoryDeadlineScheduler)

    orchestrator = providers.Factory(
        MatchOrchestrator,
        requirements=requirement_repository,
        talents=talent_repository,
        bookings=booking_repository,
        store=match_store,
        scheduler=deadline_scheduler,
        scorer=scorer,
        weight_policy=weight_policy,
        auditor=fairness_auditor,
        prefilter=prefilter,
        adapter=record_adapter,
        pool_limit=config.pool_limit,
        max_workers=config.max_workers,
        expiry_days=config.expiry_days,
    )


_EVALUATORS = {
    "skills": ("skills_evaluator", SkillsEvaluator, SkillsConfig, "resolver"),
    "experience": ("experience_evaluator", ExperienceEvaluator, ExperienceConfig, "resolver"),
    "availability": (
        "availability_evaluator",
        AvailabilityEvaluator,
        AvailabilityEvaluatorConfig,
        "engine",
    ),
    "budget": ("budget_evaluator", BudgetEvaluator, BudgetConfig, None),
    "location": ("location_evaluator", LocationEvaluator, LocationConfig, "engine"),
    "culture": ("culture_evaluator", CultureEvaluator, CultureConfig, None),
    "velocity": ("velocity_evaluator", VelocityEvaluator, VelocityConfig, None),
    "reliability": ("reliability_evaluator", ReliabilityEvaluator, ReliabilityConfig, None),
}


def create_container(*, settings: dict | None = None) -> MatchingContainer:
    """Instantiate container with optional overrides."""

    container = MatchingContainer()

    if not settings or not isinstance(settings, dict):
        return container

    core_settings = settings.get("core", {})
    if core_settings:
        container.config.from_dict({**CORE_DEFAULTS, **core_settings})

    if settings.get("catalog"):
        container.catalog.override(providers.Singleton(load_catalog, settings["catalog"]))

    if "skills" in settings:
        resolver_config = SkillResolverConfig(**settings["skills"])
        container.skill_resolver.override(
            providers.Singleton(SkillResolver, catalog=container.catalog, config=resolver_config)
        )

    if "availability" in settings:
        engine_config = AvailabilityConfig(**settings["availability"])
        container.availability_engine.override(
            providers.Singleton(AvailabilityEngine, config=engine_config)
        )

    if "weights" in settings:
        weight_config = WeightPolicyConfig(**settings["weights"])
        container.weight_policy.override(providers.Singleton(WeightPolicy, config=weight_config))

    if "prefilter" in settings:
        prefilter_config = PrefilterConfig(**settings["prefilter"])
        container.prefilter.override(
            providers.Singleton(
                CandidatePrefilter,
                resolver=container.skill_resolver,
                engine=container.availability_engine,
                config=prefilter_config,
            )
        )

    if "fairness" in settings:
        fairness_config = FairnessConfig(**settings["fairness"])
        container.fairness_auditor.override(
            providers.Singleton(
                FairnessAuditor,
                config=fairness_config,
                demographics=container.demographics,
            )
        )

    if "adapter" in settings:
        adapter_config = RecordAdapterConfig(**settings["adapter"])
        container.record_adapter.override(
            providers.Singleton(RecordAdapter, catalog=container.catalog, config=adapter_config)
        )

    evaluator_settings = settings.get("evaluators", {})
    for name, values in evaluator_settings.items():
        if name not in _EVALUATORS:
            raise ValueError(f"Unknown evaluator section: {name}")
        provider_name, evaluator_cls, config_cls, dependency = _EVALUATORS[name]
        kwargs = {"config": config_cls(**values)}
        if dependency == "resolver":
            kwargs["resolver"] = container.skill_resolver
        elif dependency == "engine":
            kwargs["engine"] = container.availability_engine
        getattr(container, provider_name).override(providers.Singleton(evaluator_cls, **kwargs))

    return container
