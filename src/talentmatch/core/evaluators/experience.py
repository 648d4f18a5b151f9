"""Domain experience evaluation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ...schemas import ProjectRequirement, TalentProfile
from ..skills import SkillResolver


@dataclass
class ExperienceConfig:
    """Component weights and fallbacks for experience relevance."""

    industry_weight: float = 0.30
    project_type_weight: float = 0.15
    company_size_weight: float = 0.15
    technology_weight: float = 0.40
    mismatch_score: float = 0.3
    neutral_score: float = 0.5


class ExperienceEvaluator:
    """Score relevance of past employment and projects to the requirement."""

    method = "experience"

    def __init__(
        self,
        *,
        resolver: SkillResolver | None = None,
        config: ExperienceConfig | None = None,
    ) -> None:
        self._resolver = resolver or SkillResolver()
        self._config = config or ExperienceConfig()

    def evaluate(
        self,
        talent: TalentProfile,
        requirement: ProjectRequirement,
        context: dict[str, Any],
    ) -> dict[str, Any]:
        industry = self._industry_score(talent, requirement)
        project_type = self._project_type_score(talent, requirement)
        company_size = self._company_size_score(talent, requirement)
        technology, covered = self._technology_score(talent, requirement)

        score = (
            industry * self._config.industry_weight
            + project_type * self._config.project_type_weight
            + company_size * self._config.company_size_weight
            + technology * self._config.technology_weight
        )
        return {
            "method": self.method,
            "scores": {"experience": round(min(max(score, 0.0), 1.0), 4)},
            "metadata": {
                "industry_score": industry,
                "project_type_score": project_type,
                "company_size_score": company_size,
                "technology_score": technology,
                "covered_technologies": covered,
                "industry_match": industry == 1.0,
                "total_years": sum(entry.years for entry in talent.experience),
            },
        }

    def _industry_score(self, talent: TalentProfile, requirement: ProjectRequirement) -> float:
        industries = {
            entry.industry.strip().lower() for entry in talent.experience if entry.industry
        }
        if not industries:
            return self._config.neutral_score
        if requirement.client_industry.strip().lower() in industries:
            return 1.0
        return self._config.mismatch_score

    def _project_type_score(self, talent: TalentProfile, requirement: ProjectRequirement) -> float:
        kinds = {
            project.project_type.strip().lower()
            for project in talent.past_projects
            if project.project_type
        }
        if not kinds:
            return self._config.neutral_score
        if requirement.project_type.value in kinds:
            return 1.0
        return self._config.mismatch_score

    def _company_size_score(self, talent: TalentProfile, requirement: ProjectRequirement) -> float:
        sizes = {entry.company_size for entry in talent.experience if entry.company_size}
        if not sizes:
            return self._config.neutral_score
        if requirement.company_size in sizes:
            return 1.0
        return self._config.mismatch_score

    def _technology_score(
        self,
        talent: TalentProfile,
        requirement: ProjectRequirement,
    ) -> tuple[float, list[str]]:
        wanted = [skill.name for skill in requirement.all_skills]
        technologies = [tech for entry in talent.experience for tech in entry.technologies]
        technologies.extend(tech for project in talent.past_projects for tech in project.technologies)
        if not wanted or not technologies:
            return self._config.neutral_score, []

        covered = [
            name
            for name in wanted
            if any(self._resolver.names_match(name, tech) for tech in technologies)
        ]
        return round(len(covered) / len(wanted), 4), covered
