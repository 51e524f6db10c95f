"""End-to-end scoring run: validate, score, rank."""

from __future__ import annotations

import datetime as dt
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Iterable, Mapping

import pendulum
import structlog

from .. import ALGORITHM_VERSION
from ..errors import InvalidRecord
from ..schemas import PersonnelRecord, PromotionPolicy, parse_date
from .audit import AuditGenerator, AuditRecord
from .models import AlgorithmMetadata, PromotionScore, RankedRoster, RejectedRecord
from .ranking import Ranker
from .scoring import CompositeScorer


class PromotionEngine:
    """Promotion scoring pipeline over one immutable roster snapshot."""

    def __init__(
        self,
        *,
        scorer: CompositeScorer,
        ranker: Ranker | None = None,
        auditor: AuditGenerator | None = None,
        max_workers: int | None = None,
    ) -> None:
        self._scorer = scorer
        self._ranker = ranker or Ranker(precision=scorer.policy.precision)
        self._auditor = auditor or AuditGenerator(policy=scorer.policy)
        self._max_workers = max_workers
        self._logger = structlog.get_logger(__name__)

    @property
    def policy(self) -> PromotionPolicy:
        return self._scorer.policy

    def run(
        self,
        roster: Iterable[PersonnelRecord | Mapping[str, Any]],
        *,
        as_of: dt.date | str | None = None,
        namespace: str = "production",
        max_workers: int | None = None,
    ) -> RankedRoster:
        policy = self.policy.ensure_valid()
        reference_date = resolve_as_of(as_of)
        log = self._logger.bind(namespace=namespace, policy_version=policy.version)

        records, rejected = self._validate(roster, log)
        log.info(
            "engine.run_started",
            as_of=reference_date.isoformat(),
            accepted=len(records),
            rejected=len(rejected),
        )

        scores = self._score_all(records, reference_date, max_workers or self._max_workers)
        metadata = AlgorithmMetadata(
            algorithm_version=ALGORITHM_VERSION,
            policy_version=policy.version,
            policy_basis=policy.policy_basis,
            as_of=reference_date,
            namespace=namespace,
        )
        roster_result = self._ranker.rank(scores, metadata=metadata, rejected=rejected)
        log.info(
            "engine.run_completed",
            total=roster_result.total,
            compliant=roster_result.compliant_count,
            mean_score=roster_result.mean_score,
        )
        return roster_result

    def score(self, record: PersonnelRecord | Mapping[str, Any], *, as_of: dt.date | str | None = None) -> PromotionScore:
        """Score a single record without ranking it."""
        return self._scorer.score(PersonnelRecord.from_payload(record), as_of=resolve_as_of(as_of))

    def explain(self, score: PromotionScore, *, rationale: str | None = None) -> AuditRecord:
        return self._auditor.explain(score, rationale=rationale)

    def explain_roster(
        self,
        roster: RankedRoster,
        *,
        rationales: dict[str, str] | None = None,
    ) -> list[AuditRecord]:
        return self._auditor.explain_all(roster, rationales=rationales)

    def _validate(
        self,
        roster: Iterable[PersonnelRecord | Mapping[str, Any]],
        log: Any,
    ) -> tuple[list[PersonnelRecord], list[RejectedRecord]]:
        records: list[PersonnelRecord] = []
        rejected: list[RejectedRecord] = []
        seen: set[str] = set()
        for index, item in enumerate(roster):
            try:
                record = PersonnelRecord.from_payload(item, index=index)
                if record.personnel_id in seen:
                    raise InvalidRecord(
                        ["personnel_id: duplicate identifier in roster"],
                        personnel_id=record.personnel_id,
                        index=index,
                    )
            except InvalidRecord as exc:
                rejected.append(
                    RejectedRecord(index=index, personnel_id=exc.personnel_id, errors=tuple(exc.errors))
                )
                log.warning(
                    "engine.record_rejected",
                    index=index,
                    personnel_id=exc.personnel_id,
                    errors=exc.errors,
                )
                continue
            seen.add(record.personnel_id)
            records.append(record)
        return records, rejected

    def _score_all(
        self,
        records: list[PersonnelRecord],
        as_of: dt.date,
        max_workers: int | None,
    ) -> list[PromotionScore]:
        if not max_workers or max_workers <= 1 or len(records) < 2:
            return [self._scorer.score(record, as_of=as_of) for record in records]
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            return list(pool.map(lambda record: self._scorer.score(record, as_of=as_of), records))


def resolve_as_of(value: dt.date | str | None) -> dt.date:
    """Resolve the scoring reference date, defaulting to today."""
    if value is None:
        today = pendulum.today()
        return dt.date(today.year, today.month, today.day)
    try:
        parsed = parse_date(value)
    except ValueError as exc:
        raise ValueError(f"Invalid reference date: {value!r}") from exc
    if parsed is None:
        raise ValueError(f"Invalid reference date: {value!r}")
    return parsed


__all__ = ["PromotionEngine", "resolve_as_of"]
