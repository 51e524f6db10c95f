"""Disciplinary record evaluation."""

from __future__ import annotations

from collections import Counter
from typing import Any

from ...schemas import PersonnelRecord
from .common import bounded


class DisciplinaryEvaluator:
    """Deduct severity points per recorded action from a clean-record score of 100."""

    method = "disciplinary"

    def evaluate(self, record: PersonnelRecord, context: dict[str, Any]) -> dict[str, Any]:
        rules = context["policy"].disciplinary

        penalty = 0.0
        severities: Counter[str] = Counter()
        for action in record.disciplinary_actions:
            severities[action.severity] += 1
            penalty += rules.severity_points.get(action.severity, rules.default_points)

        return {
            "method": self.method,
            "scores": {self.method: bounded(100.0 - penalty)},
            "raw": {
                "action_count": len(record.disciplinary_actions),
                "severities": dict(sorted(severities.items())),
            },
            "metadata": {"penalty_points": penalty},
        }
