"""Result value types produced by the promotion engine."""

from __future__ import annotations

import datetime as dt
from dataclasses import asdict, dataclass, field
from typing import Any, Literal

from .evaluators.common import iso

Verdict = Literal["compliant", "non_compliant"]
Recommendation = Literal["immediate", "priority", "recommended", "eligible", "not_eligible"]

COMPLIANT: Verdict = "compliant"
NON_COMPLIANT: Verdict = "non_compliant"
RECOMMENDATION_TIERS: tuple[str, ...] = ("immediate", "priority", "recommended", "eligible", "not_eligible")


@dataclass(frozen=True, slots=True)
class CriterionScore:
    """One criterion's raw inputs, normalized sub-score and weighted contribution."""

    criterion: str
    raw: dict[str, Any]
    score: float
    weight: float
    contribution: float
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class PromotionScore:
    """Per-individual scoring result.

    ``position`` and ``eligible_position`` stay ``None`` until the ranker
    produces a finalized copy.
    """

    personnel_id: str
    name: str | None
    rank: str
    next_rank: str | None
    criteria: tuple[CriterionScore, ...]
    composite: float
    verdict: Verdict
    recommendation: Recommendation
    policy_version: str
    policy_basis: str
    minimum_eligible: float
    last_promotion_date: dt.date | None = None
    commission_date: dt.date | None = None
    position: int | None = None
    eligible_position: int | None = None

    @property
    def is_compliant(self) -> bool:
        return self.verdict == COMPLIANT

    def criterion(self, name: str) -> CriterionScore | None:
        for item in self.criteria:
            if item.criterion == name:
                return item
        return None

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["last_promotion_date"] = iso(self.last_promotion_date)
        payload["commission_date"] = iso(self.commission_date)
        payload["criteria"] = [asdict(item) for item in self.criteria]
        return payload


@dataclass(frozen=True, slots=True)
class RejectedRecord:
    """A roster entry excluded from scoring, with the reasons."""

    index: int | None
    personnel_id: str | None
    errors: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class AlgorithmMetadata:
    """Traceability fields tying a result to the rules that produced it."""

    algorithm_version: str
    policy_version: str
    policy_basis: str
    as_of: dt.date
    namespace: str = "production"


@dataclass(frozen=True, slots=True)
class RankedRoster:
    """Ordered scoring result for one engine invocation.

    ``scored`` holds every individual; ``eligible`` is the compliant subset
    in the same order.
    """

    scored: tuple[PromotionScore, ...]
    eligible: tuple[PromotionScore, ...]
    rejected: tuple[RejectedRecord, ...]
    compliant_count: int
    mean_score: float
    metadata: AlgorithmMetadata

    @property
    def total(self) -> int:
        return len(self.scored)

    def get(self, personnel_id: str) -> PromotionScore | None:
        for score in self.scored:
            if score.personnel_id == personnel_id:
                return score
        return None

    def recommendation_counts(self) -> dict[str, int]:
        """Number of scored individuals in each recommendation tier."""
        counts = dict.fromkeys(RECOMMENDATION_TIERS, 0)
        for score in self.scored:
            counts[score.recommendation] += 1
        return counts

    def to_dict(self) -> dict[str, Any]:
        metadata = asdict(self.metadata)
        metadata["as_of"] = self.metadata.as_of.isoformat()
        return {
            "metadata": metadata,
            "summary": {
                "total": self.total,
                "compliant_count": self.compliant_count,
                "non_compliant_count": self.total - self.compliant_count,
                "rejected_count": len(self.rejected),
                "mean_score": self.mean_score,
                "recommendations": self.recommendation_counts(),
            },
            "scored": [score.to_dict() for score in self.scored],
            "eligible": [score.personnel_id for score in self.eligible],
            "rejected": [
                {"index": item.index, "personnel_id": item.personnel_id, "errors": list(item.errors)}
                for item in self.rejected
            ],
        }


__all__ = [
    "AlgorithmMetadata",
    "COMPLIANT",
    "CriterionScore",
    "NON_COMPLIANT",
    "PromotionScore",
    "RECOMMENDATION_TIERS",
    "RankedRoster",
    "Recommendation",
    "RejectedRecord",
    "Verdict",
]
