"""Training completion evaluation."""

from __future__ import annotations

from typing import Any

from ...schemas import PersonnelRecord
from .common import bounded


class TrainingEvaluator:
    """Score completed trainings against the number required for the next rank.

    Completion earns up to ``100 - bonus_cap``; each training beyond the
    requirement adds a fixed increment up to ``bonus_cap``.
    """

    method = "training"

    def evaluate(self, record: PersonnelRecord, context: dict[str, Any]) -> dict[str, Any]:
        policy = context["policy"]
        rules = policy.training

        if record.required_trainings is not None:
            required = record.required_trainings
            source = "record"
        else:
            requirement = policy.requirement_for(record.rank)
            if requirement is not None:
                required = requirement.required_trainings
                source = "rank_table"
            else:
                required = rules.default_required
                source = "policy_default"

        completed = record.completed_training_count
        base_ceiling = 100.0 - rules.bonus_cap
        if required == 0:
            completion_ratio = 1.0
        else:
            completion_ratio = min(completed / required, 1.0)
        extra = max(completed - required, 0)
        bonus = min(extra * rules.bonus_per_extra, rules.bonus_cap)

        scored = [entry.score for entry in record.trainings if entry.score is not None]
        average_training_score = sum(scored) / len(scored) if scored else None

        return {
            "method": self.method,
            "scores": {self.method: bounded(completion_ratio * base_ceiling + bonus)},
            "raw": {"completed_trainings": completed, "required_trainings": required},
            "metadata": {
                "required_source": source,
                "completion_ratio": completion_ratio,
                "extra_trainings": extra,
                "bonus": bonus,
                "average_training_score": average_training_score,
            },
        }
