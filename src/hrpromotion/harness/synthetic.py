"""Synthetic roster generation for the comparison harness."""

from __future__ import annotations

import datetime as dt
import random
from typing import Any

import pendulum

from ..errors import ComparisonHarnessError
from ..schemas import DEFAULT_POLICY, PromotionPolicy

SYNTHETIC_PREFIX = "SYN-"
SYNTHETIC_NAMESPACE = "synthetic"

_COMPANIES = ("Alpha", "Bravo", "Charlie", "Delta", "Headquarters")
_EDUCATION_LEVELS = (
    ("high_school", 30),
    ("vocational", 15),
    ("associate", 10),
    ("bachelor", 35),
    ("master", 8),
    ("doctorate", 2),
)
_AWARD_CATEGORIES = (("commendation", 45), ("letter", 25), ("citation", 15), ("badge", 10), ("medal", 5))
_SEVERITIES = (("minor", 70), ("major", 25), ("grave", 5))
_TRAINING_TITLES = (
    "Basic Leadership Course",
    "Marksmanship Qualification",
    "Disaster Response Training",
    "Officer Correspondence Course",
    "Staff Duties Seminar",
    "First Aid Certification",
    "Annual Active Duty Training",
)


class RosterSynthesizer:
    """Generate randomized-but-plausible personnel payloads.

    Every identifier carries the ``SYN-`` prefix so synthetic rosters cannot
    be mistaken for production records.
    """

    def __init__(
        self,
        *,
        seed: int | None = None,
        policy: PromotionPolicy | None = None,
        missing_rate: float = 0.05,
    ) -> None:
        self._seed = seed
        self._random = random.Random(seed)
        self._policy = policy or DEFAULT_POLICY
        self._missing_rate = missing_rate

    @property
    def seed(self) -> int | None:
        return self._seed

    def generate(self, size: int, *, as_of: dt.date) -> list[dict[str, Any]]:
        if size < 1:
            raise ComparisonHarnessError(f"Sample size must be at least 1, got {size}")
        if not self._policy.ranks:
            raise ComparisonHarnessError("Policy rank table is empty; cannot draw synthetic ranks")
        reference = pendulum.date(as_of.year, as_of.month, as_of.day)
        return [self._build(index, reference) for index in range(1, size + 1)]

    def _build(self, index: int, reference: pendulum.Date) -> dict[str, Any]:
        rng = self._random
        requirement = rng.choice(self._policy.ranks)

        service_months = rng.randint(12, 300)
        months_in_grade = min(rng.randint(0, requirement.minimum_months * 2 + 12), service_months)
        commission = reference.subtract(months=service_months)
        last_promotion = reference.subtract(months=months_in_grade)

        trainings = [
            {
                "title": rng.choice(_TRAINING_TITLES),
                "completed_on": reference.subtract(days=rng.randint(1, 30 * service_months)).isoformat(),
                "score": round(rng.uniform(60.0, 100.0), 1),
            }
            for _ in range(rng.randint(0, requirement.required_trainings + 4))
        ]
        awards = [
            {
                "title": f"Award {n + 1}",
                "category": _weighted(rng, _AWARD_CATEGORIES),
                "awarded_on": reference.subtract(days=rng.randint(1, 30 * service_months)).isoformat(),
            }
            for n in range(rng.choices((0, 1, 2, 3, 4, 5), weights=(35, 25, 18, 12, 6, 4))[0])
        ]
        disciplinary = [
            {"description": "Recorded infraction", "severity": _weighted(rng, _SEVERITIES)}
            for _ in range(rng.choices((0, 1, 2), weights=(80, 15, 5))[0])
        ]

        payload: dict[str, Any] = {
            "personnel_id": f"{SYNTHETIC_PREFIX}{index:05d}",
            "name": f"Synthetic Member {index}",
            "rank": requirement.rank,
            "company": rng.choice(_COMPANIES),
            "commission_date": commission.isoformat(),
            "last_promotion_date": last_promotion.isoformat(),
            "education_level": _weighted(rng, _EDUCATION_LEVELS),
            "certificate_of_capacity": rng.random() < 0.6,
            "correspondence_courses": rng.randint(0, 4),
            "trainings": trainings,
            "awards": awards,
            "disciplinary_actions": disciplinary,
            "performance_score": round(rng.triangular(50.0, 100.0, 82.0), 1),
            "efficiency_rating": rng.choices((1, 2, 3, 4, 5), weights=(5, 10, 35, 35, 15))[0],
            "active_training_days": rng.randint(0, 60),
            "leadership_roles": rng.choices((0, 1, 2, 3, 4), weights=(40, 30, 18, 8, 4))[0],
        }
        for optional in (
            "commission_date",
            "last_promotion_date",
            "education_level",
            "performance_score",
            "efficiency_rating",
            "active_training_days",
        ):
            if rng.random() < self._missing_rate:
                payload[optional] = None
        return payload


def _weighted(rng: random.Random, options: tuple[tuple[str, int], ...]) -> str:
    values = [value for value, _ in options]
    weights = [weight for _, weight in options]
    return rng.choices(values, weights=weights)[0]


__all__ = ["RosterSynthesizer", "SYNTHETIC_NAMESPACE", "SYNTHETIC_PREFIX"]
