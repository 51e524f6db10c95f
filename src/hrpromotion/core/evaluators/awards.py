"""Awards and commendations evaluation."""

from __future__ import annotations

from collections import Counter
from typing import Any

from ...schemas import PersonnelRecord
from .common import bounded


class AwardsEvaluator:
    """Sum award category points, capped so one criterion cannot dominate."""

    method = "awards"

    def evaluate(self, record: PersonnelRecord, context: dict[str, Any]) -> dict[str, Any]:
        rules = context["policy"].awards

        total = 0.0
        categories: Counter[str] = Counter()
        for award in record.awards:
            category = award.category or "uncategorized"
            categories[category] += 1
            total += rules.category_points.get(category, rules.default_points)

        return {
            "method": self.method,
            "scores": {self.method: bounded(min(total, rules.cap))},
            "raw": {"award_count": len(record.awards), "categories": dict(sorted(categories.items()))},
            "metadata": {"uncapped_points": total, "cap": rules.cap, "capped": total > rules.cap},
        }
