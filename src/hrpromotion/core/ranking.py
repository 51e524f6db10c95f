"""Deterministic ranking of promotion scores."""

from __future__ import annotations

import dataclasses
import datetime as dt
import statistics
from typing import Iterable, Sequence

from .evaluators.common import round_score
from .models import AlgorithmMetadata, PromotionScore, RankedRoster, RejectedRecord

# Missing dates sort after every real date so absent data never wins a tie.
_LATEST = dt.date.max


class Ranker:
    """Order a roster by composite score with documented tie-breaks.

    Ties on composite are broken, in order, by earlier last promotion date
    (longer wait ranks higher), earlier commission date and finally the
    personnel identifier, so the result is always a total order.
    """

    def __init__(self, *, precision: int = 2) -> None:
        self._precision = precision

    @staticmethod
    def sort_key(score: PromotionScore) -> tuple:
        return (
            -score.composite,
            score.last_promotion_date or _LATEST,
            score.commission_date or _LATEST,
            score.personnel_id,
        )

    def rank(
        self,
        scores: Iterable[PromotionScore],
        *,
        metadata: AlgorithmMetadata,
        rejected: Sequence[RejectedRecord] = (),
    ) -> RankedRoster:
        ordered = sorted(scores, key=self.sort_key)
        seen: set[str] = set()
        for score in ordered:
            if score.personnel_id in seen:
                raise ValueError(f"Duplicate personnel id in roster: {score.personnel_id!r}")
            seen.add(score.personnel_id)

        finalized: list[PromotionScore] = []
        eligible: list[PromotionScore] = []
        for position, score in enumerate(ordered, start=1):
            eligible_position = len(eligible) + 1 if score.is_compliant else None
            ranked = dataclasses.replace(
                score,
                position=position,
                eligible_position=eligible_position,
            )
            finalized.append(ranked)
            if ranked.is_compliant:
                eligible.append(ranked)

        mean = statistics.fmean(item.composite for item in finalized) if finalized else 0.0
        return RankedRoster(
            scored=tuple(finalized),
            eligible=tuple(eligible),
            rejected=tuple(rejected),
            compliant_count=len(eligible),
            mean_score=round_score(mean, self._precision),
            metadata=metadata,
        )


__all__ = ["Ranker"]
