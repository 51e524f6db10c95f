"""Seniority evaluation based on total service."""

from __future__ import annotations

from typing import Any

from ...schemas import PersonnelRecord
from .common import bounded, iso, months_between


class SeniorityEvaluator:
    """Score total service since commission or enlistment, capped at the policy ceiling."""

    method = "seniority"

    def evaluate(self, record: PersonnelRecord, context: dict[str, Any]) -> dict[str, Any]:
        rules = context["policy"].seniority
        as_of = context["as_of"]

        if record.commission_date is None:
            return {
                "method": self.method,
                "scores": {self.method: 0.0},
                "raw": {"commission_date": None, "service_months": None},
                "metadata": {"status": "missing_commission_date", "ceiling_months": rules.ceiling_months},
            }

        months = months_between(record.commission_date, as_of)
        ratio = min(months / rules.ceiling_months, 1.0)
        return {
            "method": self.method,
            "scores": {self.method: bounded(ratio * 100.0)},
            "raw": {"commission_date": iso(record.commission_date), "service_months": months},
            "metadata": {
                "status": "ok",
                "ceiling_months": rules.ceiling_months,
                "capped": months >= rules.ceiling_months,
            },
        }
