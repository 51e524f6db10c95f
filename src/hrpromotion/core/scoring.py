"""Composite scoring of a single personnel record."""

from __future__ import annotations

import datetime as dt
from typing import Any, Iterable

import structlog

from ..schemas import DEFAULT_POLICY, PersonnelRecord, PromotionPolicy
from .evaluators import default_evaluators
from .evaluators.common import bounded, quantize, round_score
from .models import COMPLIANT, NON_COMPLIANT, CriterionScore, PromotionScore, Recommendation, Verdict


class CompositeScorer:
    """Coordinates criterion evaluators and combines them under one policy.

    The policy is checked once at construction; a misconfigured policy raises
    :class:`~hrpromotion.errors.PolicyMisconfigured` before any record is seen.
    """

    def __init__(
        self,
        evaluators: Iterable[Any] | None = None,
        *,
        policy: PromotionPolicy | None = None,
    ) -> None:
        self._policy = (policy or DEFAULT_POLICY).ensure_valid()
        registry = {evaluator.method: evaluator for evaluator in (evaluators or default_evaluators())}
        missing = [name for name in self._policy.active_criteria if name not in registry]
        if missing:
            raise ValueError(f"No evaluator registered for criteria: {', '.join(missing)}")
        self._evaluators = registry
        self._logger = structlog.get_logger(__name__)

    @property
    def policy(self) -> PromotionPolicy:
        return self._policy

    def evaluate(self, record: PersonnelRecord, criterion: str, *, as_of: dt.date) -> CriterionScore:
        """Evaluate one criterion for ``record`` under the scorer's policy."""
        try:
            evaluator = self._evaluators[criterion]
        except KeyError as exc:
            raise KeyError(f"Unknown criterion: {criterion!r}") from exc
        context = {"policy": self._policy, "as_of": as_of}
        payload = evaluator.evaluate(record, context)
        return self._normalize_evaluation_result(payload, criterion, self._policy)

    def score(self, record: PersonnelRecord, *, as_of: dt.date) -> PromotionScore:
        policy = self._policy
        criteria = tuple(
            self.evaluate(record, name, as_of=as_of) for name in policy.active_criteria
        )
        composite = round_score(
            sum(quantize(item.score, policy.precision) * quantize(item.weight, 6) for item in criteria),
            policy.precision,
        )
        verdict = self._decide(composite)
        requirement = policy.requirement_for(record.rank)

        result = PromotionScore(
            personnel_id=record.personnel_id,
            name=record.name,
            rank=record.rank,
            next_rank=requirement.next_rank if requirement else None,
            criteria=criteria,
            composite=composite,
            verdict=verdict,
            recommendation=self._recommend(composite, verdict),
            policy_version=policy.version,
            policy_basis=policy.policy_basis,
            minimum_eligible=policy.minimum_eligible,
            last_promotion_date=record.last_promotion_date,
            commission_date=record.commission_date,
        )
        self._logger.debug(
            "scoring.result",
            personnel_id=record.personnel_id,
            composite=composite,
            verdict=verdict,
            policy_version=policy.version,
        )
        return result

    @staticmethod
    def _normalize_evaluation_result(
        payload: dict[str, Any],
        criterion: str,
        policy: PromotionPolicy,
    ) -> CriterionScore:
        method = payload.get("method")
        scores = payload.get("scores") or {}
        if method != criterion:
            raise ValueError(f"Evaluator returned method {method!r} for criterion {criterion!r}.")
        if criterion not in scores:
            raise ValueError(f"Evaluator result for {criterion!r} is missing its score.")
        score = round_score(bounded(scores[criterion]), policy.precision)
        weight = float(quantize(policy.weights.get(criterion, 0.0), 6))
        return CriterionScore(
            criterion=criterion,
            raw=dict(payload.get("raw") or {}),
            score=score,
            weight=weight,
            contribution=float(quantize(score, policy.precision) * quantize(weight, 6)),
            metadata=dict(payload.get("metadata") or {}),
        )

    def _decide(self, composite: float) -> Verdict:
        return COMPLIANT if composite >= self._policy.minimum_eligible else NON_COMPLIANT

    def _recommend(self, composite: float, verdict: Verdict) -> Recommendation:
        if verdict == NON_COMPLIANT:
            return "not_eligible"
        tiers = self._policy.tiers
        if composite >= tiers.immediate:
            return "immediate"
        if composite >= tiers.priority:
            return "priority"
        if composite >= tiers.recommended:
            return "recommended"
        return "eligible"


def score_record(
    record: PersonnelRecord,
    *,
    policy: PromotionPolicy | None = None,
    as_of: dt.date,
) -> PromotionScore:
    """Score one record under ``policy`` with the default evaluators."""
    return CompositeScorer(policy=policy).score(record, as_of=as_of)


def evaluate(
    record: PersonnelRecord,
    criterion: str,
    *,
    policy: PromotionPolicy | None = None,
    as_of: dt.date,
) -> CriterionScore:
    """Evaluate a single criterion for ``record``."""
    return CompositeScorer(policy=policy).evaluate(record, criterion, as_of=as_of)


__all__ = ["CompositeScorer", "evaluate", "score_record"]
