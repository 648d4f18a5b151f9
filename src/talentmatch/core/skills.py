"""Skill compatibility resolution.

Resolves whether a talent's skills satisfy a project's skill requirements using,
in order of precedence, exact names, synonym tables and technology stacks. When
a hard-required skill is missing, prerequisites from the dependency graph earn
partial ("bridge") credit.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterable, Literal, Mapping, Sequence

from ..config import ConfigManager
from ..schemas import CandidateSkill, SkillLevel, SkillRequirement

MatchType = Literal["exact", "synonym", "stack"]

_MATCH_PRIORITY: dict[str, int] = {"exact": 0, "synonym": 1, "stack": 2}


@dataclass(frozen=True, slots=True)
class SkillDependency:
    """Edge of the skill-dependency graph."""

    skill: str
    importance: float
    type: str = "prerequisite"


def _norm(name: str) -> str:
    return name.strip().lower()


@dataclass(frozen=True)
class SkillCatalog:
    """Immutable lookup tables for skill resolution.

    Every key and member is stored lower-cased. ``synonyms`` maps a canonical
    name to its aliases; ``alias_index`` is the reverse direction.
    """

    synonyms: Mapping[str, frozenset[str]]
    tech_stacks: Mapping[str, frozenset[str]]
    dependencies: Mapping[str, tuple[SkillDependency, ...]]
    categories: Mapping[str, frozenset[str]]
    alternatives: Mapping[str, tuple[str, ...]]
    learning_weeks: Mapping[str, float]
    learning_resources: Mapping[str, tuple[str, ...]]
    alias_index: Mapping[str, frozenset[str]] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "SkillCatalog":
        synonyms = {
            _norm(key): frozenset(_norm(alias) for alias in values or [])
            for key, values in (data.get("synonyms") or {}).items()
        }
        alias_index: dict[str, set[str]] = {}
        for canonical, aliases in synonyms.items():
            for alias in aliases:
                alias_index.setdefault(alias, set()).add(canonical)

        dependencies = {
            _norm(key): tuple(
                SkillDependency(
                    skill=str(item["skill"]),
                    importance=float(item.get("importance", 0.0)),
                    type=str(item.get("type", "prerequisite")),
                )
                for item in values or []
            )
            for key, values in (data.get("dependencies") or {}).items()
        }

        return cls(
            synonyms=MappingProxyType(synonyms),
            tech_stacks=MappingProxyType(
                {
                    _norm(key): frozenset(_norm(member) for member in values or [])
                    for key, values in (data.get("tech_stacks") or {}).items()
                }
            ),
            dependencies=MappingProxyType(dependencies),
            categories=MappingProxyType(
                {
                    _norm(key): frozenset(_norm(member) for member in values or [])
                    for key, values in (data.get("categories") or {}).items()
                }
            ),
            alternatives=MappingProxyType(
                {
                    _norm(key): tuple(_norm(alt) for alt in values or [])
                    for key, values in (data.get("alternatives") or {}).items()
                }
            ),
            learning_weeks=MappingProxyType(
                {_norm(key): float(value) for key, value in (data.get("learning_weeks") or {}).items()}
            ),
            learning_resources=MappingProxyType(
                {
                    _norm(key): tuple(values or [])
                    for key, values in (data.get("learning_resources") or {}).items()
                }
            ),
            alias_index=MappingProxyType(
                {alias: frozenset(canonicals) for alias, canonicals in alias_index.items()}
            ),
        )

    def are_synonyms(self, first: str, second: str) -> bool:
        a, b = _norm(first), _norm(second)
        return b in self.synonyms.get(a, ()) or a in self.synonyms.get(b, ())

    def stack_members(self, name: str) -> frozenset[str]:
        return self.tech_stacks.get(_norm(name), frozenset())

    def category_of(self, name: str) -> str | None:
        key = _norm(name)
        for category, members in self.categories.items():
            if key in members:
                return category
        return None


def load_catalog(path: str | Path | None = None) -> SkillCatalog:
    """Load a catalog from ``path`` or the packaged default."""
    if path is None:
        return load_default_catalog()
    return SkillCatalog.from_mapping(ConfigManager().load_path(path))


@lru_cache(maxsize=1)
def load_default_catalog() -> SkillCatalog:
    return SkillCatalog.from_mapping(ConfigManager().load("skill_catalog"))


@dataclass
class SkillResolverConfig:
    """Scoring constants for skill resolution."""

    level_gap_penalty: float = 0.2
    level_floor: float = 0.3
    default_years_required: float = 3.0
    max_experience_ratio: float = 1.5
    experience_bonus_scale: float = 0.2
    exact_name_bonus: float = 0.1
    bridge_factor: float = 0.35
    required_multiplier: float = 1.75
    missing_critical_penalty: float = 0.5
    min_learnability: float = 0.3
    level_multipliers: dict[str, float] = field(
        default_factory=lambda: {
            "junior": 0.8,
            "mid": 1.0,
            "senior": 1.2,
            "expert": 1.5,
        }
    )


@dataclass(frozen=True, slots=True)
class SkillGap:
    skill: str
    gap: float
    learnability: float
    alternatives: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class LearningStep:
    skill: str
    prerequisites: tuple[str, ...]
    estimated_weeks: int
    resources: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class SkillMatchResult:
    """Outcome of resolving one requirement against a talent's skills."""

    requirement: SkillRequirement
    matched: bool
    score: float
    matched_skill: CandidateSkill | None = None
    match_type: MatchType | None = None
    level_compatibility: float = 0.0
    experience_depth: float = 0.0
    bridge_score: float = 0.0
    gap: SkillGap | None = None
    transferable: tuple[str, ...] = ()
    learning_step: LearningStep | None = None


@dataclass(frozen=True, slots=True)
class SkillAssessment:
    """Aggregate skill fit of one talent across every requirement."""

    overall_score: float
    results: tuple[SkillMatchResult, ...]
    missing_critical: tuple[str, ...]
    gaps: tuple[SkillGap, ...]
    transferable_skills: tuple[str, ...]
    learning_path: tuple[LearningStep, ...]

    @property
    def matched(self) -> tuple[SkillMatchResult, ...]:
        return tuple(result for result in self.results if result.matched)

    @property
    def gap_scores(self) -> dict[str, float]:
        return {gap.skill: gap.gap for gap in self.gaps}


class SkillResolver:
    """Resolve skill requirements against candidate skills."""

    def __init__(
        self,
        *,
        catalog: SkillCatalog | None = None,
        config: SkillResolverConfig | None = None,
    ) -> None:
        self._catalog = catalog or load_default_catalog()
        self._config = config or SkillResolverConfig()

    @property
    def catalog(self) -> SkillCatalog:
        return self._catalog

    def match_type(self, required_name: str, candidate_name: str) -> MatchType | None:
        """Return how ``candidate_name`` satisfies ``required_name``, if at all."""
        required = _norm(required_name)
        candidate = _norm(candidate_name)
        if not required or not candidate:
            return None
        if required == candidate:
            return "exact"
        if self._catalog.are_synonyms(required, candidate):
            return "synonym"
        if candidate in self._catalog.stack_members(required):
            return "stack"
        return None

    def names_match(self, required_name: str, candidate_name: str) -> bool:
        return self.match_type(required_name, candidate_name) is not None

    def find_matches(
        self,
        required: SkillRequirement,
        candidate_skills: Sequence[CandidateSkill],
    ) -> list[tuple[CandidateSkill, MatchType]]:
        matches: list[tuple[CandidateSkill, MatchType]] = []
        for skill in candidate_skills:
            kind = self.match_type(required.name, skill.name)
            if kind is not None:
                matches.append((skill, kind))
        return matches

    def has_sufficient_match(
        self,
        required: SkillRequirement,
        candidate_skills: Sequence[CandidateSkill],
    ) -> bool:
        """True when a directly matching skill meets the required level."""
        return any(
            skill.level.rank >= required.level.rank
            for skill, _ in self.find_matches(required, candidate_skills)
        )

    def resolve(
        self,
        required: SkillRequirement,
        candidate_skills: Sequence[CandidateSkill],
    ) -> SkillMatchResult:
        matches = self.find_matches(required, candidate_skills)
        if matches:
            best, kind = self._best_match(matches)
            level_score = self.level_compatibility(required.level, best.level)
            depth = self._experience_depth(required, best)
            return SkillMatchResult(
                requirement=required,
                matched=True,
                score=self._detailed_score(required, best, kind),
                matched_skill=best,
                match_type=kind,
                level_compatibility=level_score,
                experience_depth=depth,
            )

        bridge = 0.0
        if required.is_required:
            bridge = self.bridge_score(required, candidate_skills)
        gap = SkillGap(
            skill=required.name,
            gap=self._skill_gap(required, candidate_skills),
            learnability=self._learnability(required, candidate_skills),
            alternatives=self._alternatives(required, candidate_skills),
        )
        return SkillMatchResult(
            requirement=required,
            matched=False,
            score=round(bridge * self._config.bridge_factor, 4),
            bridge_score=bridge,
            gap=gap,
            transferable=self._transferable(required, candidate_skills),
            learning_step=self._learning_step(gap),
        )

    def assess(
        self,
        required_skills: Iterable[SkillRequirement],
        preferred_skills: Iterable[SkillRequirement],
        candidate_skills: Sequence[CandidateSkill],
    ) -> SkillAssessment:
        """Aggregate resolution across required and preferred skills."""
        results: list[SkillMatchResult] = []
        weighted_sum = 0.0
        total_weight = 0.0
        missing: list[str] = []
        hard_total = 0

        for required in list(required_skills) + list(preferred_skills):
            result = self.resolve(required, candidate_skills)
            results.append(result)
            weight = self.requirement_weight(required)
            weighted_sum += result.score * weight
            total_weight += weight
            if required.is_required:
                hard_total += 1
                if not result.matched:
                    missing.append(required.name)

        overall = weighted_sum / total_weight if total_weight > 0 else 0.0
        if hard_total:
            overall *= 1.0 - self._config.missing_critical_penalty * (len(missing) / hard_total)

        transferable: list[str] = []
        for result in results:
            for name in result.transferable:
                if name not in transferable:
                    transferable.append(name)

        return SkillAssessment(
            overall_score=round(min(max(overall, 0.0), 1.0), 4),
            results=tuple(results),
            missing_critical=tuple(missing),
            gaps=tuple(result.gap for result in results if result.gap is not None),
            transferable_skills=tuple(transferable),
            learning_path=tuple(
                result.learning_step for result in results if result.learning_step is not None
            ),
        )

    def requirement_weight(self, required: SkillRequirement) -> float:
        weight = required.weight / 10
        weight *= self._config.level_multipliers.get(required.level.value, 1.0)
        if required.is_required:
            weight *= self._config.required_multiplier
        return weight

    def level_compatibility(self, required: SkillLevel, actual: SkillLevel) -> float:
        gap = required.rank - actual.rank
        if gap <= 0:
            return 1.0
        return max(self._config.level_floor, 1.0 - gap * self._config.level_gap_penalty)

    def bridge_score(
        self,
        required: SkillRequirement,
        candidate_skills: Sequence[CandidateSkill],
    ) -> float:
        held = self._held_importance(required, candidate_skills)
        return round(min(held, 1.0), 4)

    def _detailed_score(
        self,
        required: SkillRequirement,
        skill: CandidateSkill,
        kind: MatchType,
    ) -> float:
        score = self.level_compatibility(required.level, skill.level)
        score += self._experience_depth(required, skill) * self._config.experience_bonus_scale
        if kind == "exact":
            score += self._config.exact_name_bonus
        return round(min(max(score, 0.0), 1.0), 4)

    def _experience_depth(self, required: SkillRequirement, skill: CandidateSkill) -> float:
        years_required = required.years_required or self._config.default_years_required
        return min(skill.years_of_experience / years_required, self._config.max_experience_ratio)

    @staticmethod
    def _best_match(
        matches: list[tuple[CandidateSkill, MatchType]],
    ) -> tuple[CandidateSkill, MatchType]:
        # max() keeps the first of equal keys, so input order breaks remaining ties.
        return max(
            matches,
            key=lambda item: (
                item[0].level.rank,
                item[0].years_of_experience,
                -_MATCH_PRIORITY[item[1]],
            ),
        )

    def _held_importance(
        self,
        required: SkillRequirement,
        candidate_skills: Sequence[CandidateSkill],
    ) -> float:
        total = 0.0
        for dependency in self._catalog.dependencies.get(_norm(required.name), ()):
            if any(self.names_match(dependency.skill, skill.name) for skill in candidate_skills):
                total += dependency.importance
        return total

    def _skill_gap(
        self,
        required: SkillRequirement,
        candidate_skills: Sequence[CandidateSkill],
    ) -> float:
        held = self._held_importance(required, candidate_skills)
        return round(max(0.0, 1.0 - held * 0.3), 4)

    def _learnability(
        self,
        required: SkillRequirement,
        candidate_skills: Sequence[CandidateSkill],
    ) -> float:
        learnability = 0.5 + self._held_importance(required, candidate_skills) * 0.2
        learnability += len(self._same_category(required, candidate_skills)) * 0.1
        return round(min(learnability, 1.0), 4)

    def _same_category(
        self,
        required: SkillRequirement,
        candidate_skills: Sequence[CandidateSkill],
    ) -> list[str]:
        category = self._catalog.category_of(required.name)
        if category is None:
            return []
        members = self._catalog.categories[category]
        required_key = _norm(required.name)
        similar: list[str] = []
        for skill in candidate_skills:
            key = _norm(skill.name)
            in_category = key in members or _norm(skill.category) == category
            if in_category and key != required_key and skill.name not in similar:
                similar.append(skill.name)
        return similar

    def _alternatives(
        self,
        required: SkillRequirement,
        candidate_skills: Sequence[CandidateSkill],
    ) -> tuple[str, ...]:
        held = {_norm(skill.name) for skill in candidate_skills}
        return tuple(
            alt for alt in self._catalog.alternatives.get(_norm(required.name), ()) if alt in held
        )

    def _transferable(
        self,
        required: SkillRequirement,
        candidate_skills: Sequence[CandidateSkill],
    ) -> tuple[str, ...]:
        names = self._same_category(required, candidate_skills)
        for dependency in self._catalog.dependencies.get(_norm(required.name), ()):
            for skill in candidate_skills:
                if self.names_match(dependency.skill, skill.name) and skill.name not in names:
                    names.append(skill.name)
        return tuple(names)

    def _learning_step(self, gap: SkillGap) -> LearningStep | None:
        if gap.learnability <= self._config.min_learnability:
            return None
        key = _norm(gap.skill)
        weeks = self._catalog.learning_weeks.get(key, self._catalog.learning_weeks.get("default", 4.0))
        resources = self._catalog.learning_resources.get(
            key, self._catalog.learning_resources.get("default", ())
        )
        prerequisites = tuple(
            dependency.skill
            for dependency in self._catalog.dependencies.get(key, ())
            if dependency.type == "prerequisite"
        )
        return LearningStep(
            skill=gap.skill,
            prerequisites=prerequisites,
            estimated_weeks=max(1, round(weeks * (1 - gap.learnability * 0.5))),
            resources=tuple(resources),
        )
