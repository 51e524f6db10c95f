"""Scoring methods the comparison harness can run side by side."""

from __future__ import annotations

import datetime as dt
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable, Mapping, Protocol, runtime_checkable

from .. import ALGORITHM_VERSION
from ..core import CompositeScorer, PromotionEngine, Ranker
from ..core.evaluators.common import quantize, round_score, to_decimal
from ..core.models import (
    COMPLIANT,
    NON_COMPLIANT,
    AlgorithmMetadata,
    CriterionScore,
    PromotionScore,
    RankedRoster,
    Recommendation,
    RejectedRecord,
)
from ..errors import InvalidRecord
from ..schemas import (
    BUILTIN_POLICIES,
    DEFAULT_POLICY,
    LEGACY_POLICY,
    PersonnelRecord,
    PromotionPolicy,
    RankRequirement,
)
from .synthetic import SYNTHETIC_NAMESPACE


@runtime_checkable
class ScoringMethod(Protocol):
    """A named way of turning a roster into a ranked roster."""

    name: str

    def score_roster(
        self,
        roster: Iterable[Mapping[str, Any]],
        *,
        as_of: dt.date,
        namespace: str = SYNTHETIC_NAMESPACE,
    ) -> RankedRoster:
        """Score and rank ``roster`` as of the given date."""


class PolicyMethod:
    """The promotion engine under a specific policy version."""

    def __init__(self, policy: PromotionPolicy | None = None, *, name: str | None = None) -> None:
        self._policy = policy or DEFAULT_POLICY
        self.name = name or self._policy.version

    @property
    def policy(self) -> PromotionPolicy:
        return self._policy

    def score_roster(
        self,
        roster: Iterable[Mapping[str, Any]],
        *,
        as_of: dt.date,
        namespace: str = SYNTHETIC_NAMESPACE,
    ) -> RankedRoster:
        engine = PromotionEngine(scorer=CompositeScorer(policy=self._policy))
        return engine.run(roster, as_of=as_of, namespace=namespace)


class _StandaloneMethod:
    """Roster scoring shared by methods that score records without a policy."""

    name: str
    policy_basis: str
    precision = 0

    def score_roster(
        self,
        roster: Iterable[Mapping[str, Any]],
        *,
        as_of: dt.date,
        namespace: str = SYNTHETIC_NAMESPACE,
    ) -> RankedRoster:
        scores: list[PromotionScore] = []
        rejected: list[RejectedRecord] = []
        for index, item in enumerate(roster):
            try:
                record = PersonnelRecord.from_payload(item, index=index)
            except InvalidRecord as exc:
                rejected.append(RejectedRecord(index=index, personnel_id=exc.personnel_id, errors=tuple(exc.errors)))
                continue
            scores.append(self.score(record, as_of=as_of))

        metadata = AlgorithmMetadata(
            algorithm_version=ALGORITHM_VERSION,
            policy_version=self.name,
            policy_basis=self.policy_basis,
            as_of=as_of,
            namespace=namespace,
        )
        return Ranker(precision=self.precision).rank(scores, metadata=metadata, rejected=rejected)

    def score(self, record: PersonnelRecord, *, as_of: dt.date) -> PromotionScore:
        raise NotImplementedError

    @staticmethod
    def _criterion(name: str, score: float, weight: float, **raw: Any) -> CriterionScore:
        score = round_score(score, 2)
        return CriterionScore(
            criterion=name,
            raw=raw,
            score=score,
            weight=float(quantize(weight, 6)),
            contribution=float(quantize(score, 2) * quantize(weight, 6)),
        )


class LegacyBasisMethod(_StandaloneMethod):
    """Training-completion and time-in-rank basis score used before EO 212 scoring.

    Training completion against the rank requirement is floored at 50 and
    capped at 100, weighted 90%. Time in rank contributes between 5 and 10
    points, reaching 10 after two years. Personnel qualify at 80 or above.
    """

    name = "legacy-basis"
    policy_basis = "Training completion and time in rank"
    qualifying_score = 80.0
    unknown_rank_requirement = 999
    training_weight = 0.9
    time_weight = 0.1

    def __init__(self, *, rank_source: PromotionPolicy | None = None) -> None:
        self._ranks = rank_source or DEFAULT_POLICY

    def score(self, record: PersonnelRecord, *, as_of: dt.date) -> PromotionScore:
        requirement = self._ranks.requirement_for(record.rank)
        required = requirement.required_trainings if requirement else self.unknown_rank_requirement
        completed = record.completed_training_count

        ratio_score = completed / required * 100.0 if required else 100.0
        training_score = max(50.0, min(100.0, ratio_score))

        started = record.last_promotion_date or record.commission_date
        days_in_rank = max((as_of - started).days, 0) if started else 0
        time_points = max(5.0, min(10.0, days_in_rank / 730 * 10))
        time_score = time_points * 10.0

        criteria = (
            self._criterion("training", training_score, self.training_weight, completed=completed, required=required),
            self._criterion("time_in_rank", time_score, self.time_weight, days_in_rank=days_in_rank),
        )
        composite = round_score(sum(quantize(item.contribution, 6) for item in criteria), 0)
        verdict = COMPLIANT if composite >= self.qualifying_score else NON_COMPLIANT
        return PromotionScore(
            personnel_id=record.personnel_id,
            name=record.name,
            rank=record.rank,
            next_rank=requirement.next_rank if requirement else None,
            criteria=criteria,
            composite=composite,
            verdict=verdict,
            recommendation="eligible" if verdict == COMPLIANT else "not_eligible",
            policy_version=self.name,
            policy_basis=self.policy_basis,
            minimum_eligible=self.qualifying_score,
            last_promotion_date=record.last_promotion_date,
            commission_date=record.commission_date,
        )


class OriginalEO212Method(_StandaloneMethod):
    """The first five-criterion EO 212 algorithm, kept as a comparison baseline.

    Seniority is service against a 240 month scale. Performance adds bonuses
    for efficiency rating (1-5), awards and leadership roles to the appraisal
    score. Time in grade scores 60 at the rank minimum plus 2 per month over.
    Education is 50 for the certificate of capacity, 15 per correspondence
    course up to 30 and 2 per completed training up to 20. Training scores 70
    at 21 active-duty days plus half a point per further day up to 30.
    Months are counted as 30-day periods and the composite is rounded half up
    to whole points.
    """

    name = "eo212-original"
    policy_basis = "Executive Order No. 212 (1939)"
    weights = {
        "seniority": 0.30,
        "performance": 0.25,
        "time_in_grade": 0.20,
        "education": 0.15,
        "training": 0.10,
    }
    minimum_eligible = 60.0
    service_ceiling_months = 240
    minimum_active_duty_days = 21
    # appraisal assumed when the record carries none
    default_performance = 75.0

    def __init__(self, *, rank_source: PromotionPolicy | None = None) -> None:
        self._ranks = rank_source or DEFAULT_POLICY
        self._tiers = LEGACY_POLICY.tiers

    def score(self, record: PersonnelRecord, *, as_of: dt.date) -> PromotionScore:
        requirement = self._ranks.requirement_for(record.rank)
        scores = {
            "seniority": self._seniority(record, as_of),
            "performance": self._performance(record),
            "time_in_grade": self._time_in_grade(record, as_of, requirement),
            "education": self._education(record),
            "training": self._training(record),
        }
        criteria = tuple(
            self._criterion(name, value, self.weights[name], **raw) for name, (value, raw) in scores.items()
        )
        total = sum(to_decimal(value) * to_decimal(self.weights[name]) for name, (value, _) in scores.items())
        composite = float(total.quantize(Decimal(1), rounding=ROUND_HALF_UP))
        verdict = COMPLIANT if composite >= self.minimum_eligible else NON_COMPLIANT
        return PromotionScore(
            personnel_id=record.personnel_id,
            name=record.name,
            rank=record.rank,
            next_rank=requirement.next_rank if requirement else None,
            criteria=criteria,
            composite=composite,
            verdict=verdict,
            recommendation=self._recommend(composite, verdict),
            policy_version=self.name,
            policy_basis=self.policy_basis,
            minimum_eligible=self.minimum_eligible,
            last_promotion_date=record.last_promotion_date,
            commission_date=record.commission_date,
        )

    def _seniority(self, record: PersonnelRecord, as_of: dt.date) -> tuple[float, dict[str, Any]]:
        months = _months(record.commission_date, as_of)
        ratio = min(months / self.service_ceiling_months, 1.0)
        return min(ratio * 90.0 + ratio * 10.0, 100.0), {"service_months": months}

    def _performance(self, record: PersonnelRecord) -> tuple[float, dict[str, Any]]:
        base = record.performance_score if record.performance_score is not None else self.default_performance
        rating = record.efficiency_rating if record.efficiency_rating is not None else _derive_rating(base)
        awards = len(record.awards)
        bonus = (rating - 1) * 5 + min(awards * 2, 10) + min(record.leadership_roles * 3, 10)
        raw = {
            "performance_score": base,
            "efficiency_rating": rating,
            "awards": awards,
            "leadership_roles": record.leadership_roles,
        }
        return min(base + bonus, 100.0), raw

    @staticmethod
    def _time_in_grade(
        record: PersonnelRecord,
        as_of: dt.date,
        requirement: RankRequirement | None,
    ) -> tuple[float, dict[str, Any]]:
        months = _months(record.last_promotion_date, as_of)
        raw = {"months_in_grade": months, "minimum_months": requirement.minimum_months if requirement else None}
        if requirement is None or record.last_promotion_date is None or months < requirement.minimum_months:
            return 0.0, raw
        return min(60.0 + min((months - requirement.minimum_months) * 2, 40), 100.0), raw

    @staticmethod
    def _education(record: PersonnelRecord) -> tuple[float, dict[str, Any]]:
        score = 50.0 if record.certificate_of_capacity else 0.0
        score += min(record.correspondence_courses * 15, 30)
        score += min(record.completed_training_count * 2, 20)
        raw = {
            "certificate_of_capacity": record.certificate_of_capacity,
            "correspondence_courses": record.correspondence_courses,
            "completed_trainings": record.completed_training_count,
        }
        return min(score, 100.0), raw

    def _training(self, record: PersonnelRecord) -> tuple[float, dict[str, Any]]:
        days = record.active_training_days
        if days is None:
            # four days per completed training, never below the statutory minimum
            days = max(record.completed_training_count * 4, self.minimum_active_duty_days)
        score = 0.0
        if days >= self.minimum_active_duty_days:
            score = 70.0 + min((days - self.minimum_active_duty_days) * 0.5, 30.0)
        return min(score, 100.0), {"active_training_days": days}

    def _recommend(self, composite: float, verdict: str) -> Recommendation:
        if verdict == NON_COMPLIANT:
            return "not_eligible"
        if composite >= self._tiers.immediate:
            return "immediate"
        if composite >= self._tiers.priority:
            return "priority"
        if composite >= self._tiers.recommended:
            return "recommended"
        return "eligible"


def _months(start: dt.date | None, end: dt.date) -> int:
    return max((end - start).days, 0) // 30 if start else 0


def _derive_rating(performance: float) -> int:
    if performance >= 90:
        return 5
    if performance >= 80:
        return 4
    if performance >= 70:
        return 3
    if performance >= 60:
        return 2
    return 1


def resolve_method(name: str | None) -> ScoringMethod | None:
    """Map a baseline name to a scoring method.

    ``legacy`` selects :class:`LegacyBasisMethod`, ``original`` selects
    :class:`OriginalEO212Method`, built-in policy versions select
    :class:`PolicyMethod` and ``none`` disables the baseline.
    """
    if name is None or name.lower() == "none":
        return None
    if name.lower() in {"legacy", LegacyBasisMethod.name}:
        return LegacyBasisMethod()
    if name.lower() in {"original", OriginalEO212Method.name}:
        return OriginalEO212Method()
    if name in BUILTIN_POLICIES:
        return PolicyMethod(BUILTIN_POLICIES[name])
    raise KeyError(f"Unknown scoring method: {name!r}")


__all__ = ["LegacyBasisMethod", "OriginalEO212Method", "PolicyMethod", "ScoringMethod", "resolve_method"]
