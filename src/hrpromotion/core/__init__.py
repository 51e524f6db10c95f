"""Core promotion scoring engine components."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

# NOTE: keep imports explicit for export clarity.
from ..errors import ComparisonHarnessError, InvalidRecord, PolicyMisconfigured
from .audit import AuditGenerator, AuditLine, AuditRecord, explain
from .engine import PromotionEngine, resolve_as_of
from .evaluators import (
    AwardsEvaluator,
    DisciplinaryEvaluator,
    EducationEvaluator,
    PerformanceEvaluator,
    SeniorityEvaluator,
    TimeInGradeEvaluator,
    TrainingEvaluator,
    default_evaluators,
)
from .models import (
    AlgorithmMetadata,
    CriterionScore,
    PromotionScore,
    RankedRoster,
    RejectedRecord,
)
from .ranking import Ranker
from .scoring import CompositeScorer, evaluate, score_record


@runtime_checkable
class Evaluator(Protocol):
    """Evaluator contract for computing one criterion sub-score."""

    method: str

    def evaluate(self, record: Any, context: dict) -> dict:
        """Return the criterion result for a personnel record under the given context."""


__all__ = [
    "AlgorithmMetadata",
    "AuditGenerator",
    "AuditLine",
    "AuditRecord",
    "AwardsEvaluator",
    "ComparisonHarnessError",
    "CompositeScorer",
    "CriterionScore",
    "DisciplinaryEvaluator",
    "EducationEvaluator",
    "Evaluator",
    "InvalidRecord",
    "PerformanceEvaluator",
    "PolicyMisconfigured",
    "PromotionEngine",
    "PromotionScore",
    "RankedRoster",
    "Ranker",
    "RejectedRecord",
    "SeniorityEvaluator",
    "TimeInGradeEvaluator",
    "TrainingEvaluator",
    "default_evaluators",
    "evaluate",
    "explain",
    "resolve_as_of",
    "score_record",
]
