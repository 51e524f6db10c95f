"""Criterion evaluator implementations, one per scoring criterion."""

from .seniority import SeniorityEvaluator
from .time_in_grade import TimeInGradeEvaluator
from .education import EducationEvaluator
from .training import TrainingEvaluator
from .performance import PerformanceEvaluator
from .awards import AwardsEvaluator
from .disciplinary import DisciplinaryEvaluator


def default_evaluators() -> list:
    """One evaluator instance per known criterion."""
    return [
        SeniorityEvaluator(),
        TimeInGradeEvaluator(),
        EducationEvaluator(),
        TrainingEvaluator(),
        PerformanceEvaluator(),
        AwardsEvaluator(),
        DisciplinaryEvaluator(),
    ]


__all__ = [
    "AwardsEvaluator",
    "DisciplinaryEvaluator",
    "EducationEvaluator",
    "PerformanceEvaluator",
    "SeniorityEvaluator",
    "TimeInGradeEvaluator",
    "TrainingEvaluator",
    "default_evaluators",
]
