"""Performance appraisal evaluation."""

from __future__ import annotations

from typing import Any

from ...schemas import PersonnelRecord
from .common import bounded


class PerformanceEvaluator:
    """Carry the latest appraisal score through unchanged."""

    method = "performance"

    def evaluate(self, record: PersonnelRecord, context: dict[str, Any]) -> dict[str, Any]:
        appraisal = record.performance_score
        return {
            "method": self.method,
            "scores": {self.method: bounded(appraisal) if appraisal is not None else 0.0},
            "raw": {"performance_score": appraisal},
            "metadata": {"status": "ok" if appraisal is not None else "missing_performance_score"},
        }
