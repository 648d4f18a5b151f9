"""Reason and concern text for scored matches.

Both builders read only the talent's own inputs and its score breakdown, so
the explanation of one candidate never depends on another.
"""

from __future__ import annotations

from typing import Any, Mapping

from ..schemas import ProjectRequirement, ScoreBreakdown, TalentProfile

STRONG_THRESHOLD = 0.8
WEAK_THRESHOLD = 0.4
LOW_RATING = 3.5
MIN_PROJECTS = 3

_CONCERN_TEXT: dict[str, str] = {
    "skills": "Weak skill match for the required skills",
    "experience": "Limited relevant experience",
    "availability": "Limited availability for the project timeline",
    "budget": "Rate outside the budget range",
    "location": "Location or timezone mismatch",
    "culture": "Possible mismatch in working style",
    "velocity": "Limited record of on-time delivery",
    "reliability": "Limited reliability history",
}


def build_reasons(
    talent: TalentProfile,
    breakdown: ScoreBreakdown,
    details: Mapping[str, Mapping[str, Any]],
) -> list[str]:
    scores = breakdown.as_dict()
    reasons: list[str] = []

    if scores["skills"] > STRONG_THRESHOLD:
        matched = details.get("skills", {}).get("matched_skills") or []
        if matched:
            reasons.append(f"Strong skill match: {', '.join(matched)}")
        else:
            reasons.append("Strong skill match")
    if scores["experience"] > STRONG_THRESHOLD:
        years = details.get("experience", {}).get("total_years")
        if years:
            reasons.append(f"Highly relevant experience ({years:g} years)")
        else:
            reasons.append("Highly relevant experience")
    if scores["availability"] > STRONG_THRESHOLD:
        overlap = details.get("availability", {}).get("overlap_percentage")
        if overlap is not None:
            reasons.append(f"Excellent availability ({overlap:g}% overlap with timeline)")
        else:
            reasons.append("Excellent availability")
    if scores["budget"] > STRONG_THRESHOLD:
        reasons.append(f"Rate of {talent.hourly_rate:g}/h fits the budget")
    if scores["location"] > STRONG_THRESHOLD:
        reasons.append("Good location and timezone fit")
    if scores["culture"] > STRONG_THRESHOLD:
        reasons.append("Working style aligns with the team")
    if scores["velocity"] > STRONG_THRESHOLD:
        reasons.append("Track record of on-time delivery")
    if scores["reliability"] > STRONG_THRESHOLD:
        if talent.rating is not None:
            reasons.append(f"Highly reliable ({talent.rating:g}/5 rating)")
        else:
            reasons.append("Highly reliable delivery history")
    return reasons


def build_concerns(
    talent: TalentProfile,
    requirement: ProjectRequirement,
    breakdown: ScoreBreakdown,
    details: Mapping[str, Mapping[str, Any]],
) -> list[str]:
    scores = breakdown.as_dict()
    concerns: list[str] = []
    above_budget = requirement.budget.max > 0 and talent.hourly_rate > requirement.budget.max

    for name, text in _CONCERN_TEXT.items():
        if scores[name] >= WEAK_THRESHOLD:
            continue
        if name == "budget" and above_budget:
            continue
        concerns.append(text)

    missing = details.get("skills", {}).get("missing_critical") or []
    if missing:
        concerns.append(f"Missing critical skills: {', '.join(missing)}")
    if talent.rating is not None and talent.rating < LOW_RATING:
        concerns.append(f"Below-average rating ({talent.rating:g}/5)")
    if len(talent.past_projects) < MIN_PROJECTS:
        concerns.append(f"Limited project history ({len(talent.past_projects)} past projects)")
    if above_budget:
        concerns.append(
            f"Rate above budget ({talent.hourly_rate:g}/h vs max {requirement.budget.max:g}/h)"
        )
    return concerns
