"""Time-in-grade evaluation."""

from __future__ import annotations

from typing import Any

from ...schemas import PersonnelRecord
from .common import bounded, iso, months_between


class TimeInGradeEvaluator:
    """Score months since last promotion against the rank's minimum service in grade.

    Personnel below the minimum score zero. Meeting the minimum earns the base
    score and each further month adds a fixed increment up to the ceiling.
    """

    method = "time_in_grade"

    def evaluate(self, record: PersonnelRecord, context: dict[str, Any]) -> dict[str, Any]:
        policy = context["policy"]
        rules = policy.time_in_grade
        as_of = context["as_of"]

        requirement = policy.requirement_for(record.rank)
        minimum = requirement.minimum_months if requirement else rules.default_minimum_months
        metadata: dict[str, Any] = {
            "minimum_months": minimum,
            "rank_in_table": requirement is not None,
        }

        if record.last_promotion_date is None:
            metadata.update(status="missing_last_promotion_date", meets_minimum=False)
            return {
                "method": self.method,
                "scores": {self.method: 0.0},
                "raw": {"last_promotion_date": None, "months_in_grade": None},
                "metadata": metadata,
            }

        months = months_between(record.last_promotion_date, as_of)
        meets_minimum = months >= minimum
        if meets_minimum:
            score = rules.base_score + rules.points_per_month * (months - minimum)
        else:
            score = 0.0
        metadata.update(
            status="ok",
            meets_minimum=meets_minimum,
            months_over_minimum=max(months - minimum, 0),
        )
        return {
            "method": self.method,
            "scores": {self.method: bounded(score)},
            "raw": {"last_promotion_date": iso(record.last_promotion_date), "months_in_grade": months},
            "metadata": metadata,
        }
