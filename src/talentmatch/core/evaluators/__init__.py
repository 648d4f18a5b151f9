"""Evaluator implementations for the scoring dimensions."""

from .skills import SkillsEvaluator
from .experience import ExperienceEvaluator
from .availability import AvailabilityEvaluator
from .budget import BudgetEvaluator
from .location import LocationEvaluator
from .culture import CultureEvaluator
from .velocity import VelocityEvaluator
from .reliability import ReliabilityEvaluator

__all__ = [
    "SkillsEvaluator",
    "ExperienceEvaluator",
    "AvailabilityEvaluator",
    "BudgetEvaluator",
    "LocationEvaluator",
    "CultureEvaluator",
    "VelocityEvaluator",
    "ReliabilityEvaluator",
]
