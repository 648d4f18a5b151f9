"""Skill coverage evaluation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ...schemas import ProjectRequirement, TalentProfile
from ..skills import SkillAssessment, SkillMatchResult, SkillResolver


@dataclass
class SkillsConfig:
    """Configuration for the skills dimension."""

    empty_requirement_score: float = 0.5


class SkillsEvaluator:
    """Score how well a talent's skills cover required and preferred skills."""

    method = "skills"

    def __init__(
        self,
        *,
        resolver: SkillResolver | None = None,
        config: SkillsConfig | None = None,
    ) -> None:
        self._resolver = resolver or SkillResolver()
        self._config = config or SkillsConfig()

    def evaluate(
        self,
        talent: TalentProfile,
        requirement: ProjectRequirement,
        context: dict[str, Any],
    ) -> dict[str, Any]:
        if not requirement.all_skills:
            return {
                "method": self.method,
                "scores": {"skills": self._config.empty_requirement_score},
                "metadata": {"status": "no_requirements", "matched_skills": []},
            }

        assessment = self._resolver.assess(
            requirement.required_skills,
            requirement.preferred_skills,
            talent.skills,
        )
        return {
            "method": self.method,
            "scores": {"skills": assessment.overall_score},
            "metadata": self._metadata(assessment),
        }

    def _metadata(self, assessment: SkillAssessment) -> dict[str, Any]:
        matched = assessment.matched
        years = [
            result.matched_skill.years_of_experience
            for result in matched
            if result.matched_skill is not None
        ]
        return {
            "status": "assessed",
            "matched_skills": [result.requirement.name for result in matched],
            "matched_years_average": sum(years) / len(years) if years else 0.0,
            "missing_critical": list(assessment.missing_critical),
            "gaps": {
                gap.skill: {
                    "gap": gap.gap,
                    "learnability": gap.learnability,
                    "alternatives": list(gap.alternatives),
                }
                for gap in assessment.gaps
            },
            "transferable_skills": list(assessment.transferable_skills),
            "learning_path": [
                {
                    "skill": step.skill,
                    "prerequisites": list(step.prerequisites),
                    "estimated_weeks": step.estimated_weeks,
                    "resources": list(step.resources),
                }
                for step in assessment.learning_path
            ],
            "results": [self._result_entry(result) for result in assessment.results],
        }

    @staticmethod
    def _result_entry(result: SkillMatchResult) -> dict[str, Any]:
        return {
            "skill": result.requirement.name,
            "required": result.requirement.is_required,
            "matched": result.matched,
            "score": result.score,
            "match_type": result.match_type,
            "matched_skill": result.matched_skill.name if result.matched_skill else None,
            "level_compatibility": result.level_compatibility,
            "bridge_score": result.bridge_score,
        }
