"""Side-by-side comparison of scoring methods over a synthetic roster."""

from __future__ import annotations

import datetime as dt
import statistics
from dataclasses import asdict, dataclass
from typing import Any

import pendulum
import structlog

from ..core import resolve_as_of
from ..core.evaluators.common import round_score
from ..core.models import RankedRoster
from ..errors import ComparisonHarnessError
from ..schemas import PromotionPolicy
from .methods import PolicyMethod, ScoringMethod, resolve_method
from .synthetic import SYNTHETIC_NAMESPACE, SYNTHETIC_PREFIX, RosterSynthesizer


@dataclass(frozen=True, slots=True)
class MethodSummary:
    """Roster-level statistics for one scoring method."""

    name: str
    policy_version: str
    total: int
    compliant_count: int
    compliant_pct: float
    mean: float
    median: float
    minimum: float
    maximum: float
    stdev: float

    @classmethod
    def from_roster(cls, name: str, roster: RankedRoster) -> "MethodSummary":
        composites = [score.composite for score in roster.scored]
        total = len(composites)
        return cls(
            name=name,
            policy_version=roster.metadata.policy_version,
            total=total,
            compliant_count=roster.compliant_count,
            compliant_pct=round_score(roster.compliant_count / total * 100.0, 2) if total else 0.0,
            mean=round_score(statistics.fmean(composites), 2) if composites else 0.0,
            median=round_score(statistics.median(composites), 2) if composites else 0.0,
            minimum=min(composites, default=0.0),
            maximum=max(composites, default=0.0),
            stdev=round_score(statistics.pstdev(composites), 2) if composites else 0.0,
        )


@dataclass(frozen=True, slots=True)
class RankDifference:
    """Position change for an individual whose composite differs between methods."""

    personnel_id: str
    current_position: int
    baseline_position: int
    position_delta: int
    current_composite: float
    baseline_composite: float
    current_verdict: str
    baseline_verdict: str


@dataclass(frozen=True, slots=True)
class ComparisonReport:
    """Advisory comparison output; never a production promotion decision."""

    sample_size: int
    seed: int | None
    as_of: dt.date
    namespace: str
    generated_at: str
    current: MethodSummary
    baseline: MethodSummary | None
    rank_differences: tuple[RankDifference, ...]
    verdict_changes: int
    displaced_unchanged: int

    @property
    def changed_count(self) -> int:
        return len(self.rank_differences)

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["as_of"] = self.as_of.isoformat()
        payload["rank_differences"] = [asdict(item) for item in self.rank_differences]
        payload["changed_count"] = self.changed_count
        return payload

    def to_markdown(self) -> str:
        lines = [
            "# Promotion Algorithm Comparison Report",
            "",
            f"- Generated: {self.generated_at}",
            f"- Namespace: {self.namespace} (advisory only)",
            f"- Sample size: {self.sample_size}",
            f"- Seed: {self.seed if self.seed is not None else 'random'}",
            f"- Reference date: {self.as_of.isoformat()}",
            "",
            "## Summary",
            "",
            "| Method | Policy | Compliant | Compliant % | Mean | Median | Min | Max | Std dev |",
            "|---|---|---|---|---|---|---|---|---|",
        ]
        for summary in filter(None, (self.current, self.baseline)):
            lines.append(
                f"| {summary.name} | {summary.policy_version} | {summary.compliant_count}/{summary.total}"
                f" | {summary.compliant_pct:.2f} | {summary.mean:.2f} | {summary.median:.2f}"
                f" | {summary.minimum:.2f} | {summary.maximum:.2f} | {summary.stdev:.2f} |"
            )
        if self.baseline is None:
            lines.extend(["", "No baseline method was run."])
            return "\n".join(lines) + "\n"

        lines.extend(
            [
                "",
                "## Rank-order differences",
                "",
                f"- Individuals with differing composite: {self.changed_count}",
                f"- Verdict changes: {self.verdict_changes}",
                f"- Displaced with unchanged composite: {self.displaced_unchanged}",
                "",
                "| Personnel | Current pos | Baseline pos | Delta | Current score | Baseline score | Current verdict | Baseline verdict |",
                "|---|---|---|---|---|---|---|---|",
            ]
        )
        for diff in self.rank_differences:
            lines.append(
                f"| {diff.personnel_id} | {diff.current_position} | {diff.baseline_position} | {diff.position_delta:+d}"
                f" | {diff.current_composite:.2f} | {diff.baseline_composite:.2f}"
                f" | {diff.current_verdict} | {diff.baseline_verdict} |"
            )
        return "\n".join(lines) + "\n"


class ComparisonHarness:
    """Run the current engine and an optional baseline over one synthetic roster."""

    def __init__(
        self,
        *,
        current: ScoringMethod | None = None,
        baseline: ScoringMethod | None = None,
        seed: int | None = None,
    ) -> None:
        self._current = current or PolicyMethod()
        self._baseline = baseline
        self._seed = seed
        self._logger = structlog.get_logger(__name__)

    def run(self, sample_size: int, *, as_of: dt.date | str | None = None) -> ComparisonReport:
        reference_date = resolve_as_of(as_of)
        policy = getattr(self._current, "policy", None)
        synthesizer = RosterSynthesizer(seed=self._seed, policy=policy)
        try:
            roster = synthesizer.generate(sample_size, as_of=reference_date)
        except ComparisonHarnessError:
            raise
        except Exception as exc:  # noqa: BLE001
            raise ComparisonHarnessError(f"Synthetic roster generation failed: {exc}") from exc
        _ensure_synthetic(roster)

        current = self._current.score_roster(roster, as_of=reference_date, namespace=SYNTHETIC_NAMESPACE)
        baseline: RankedRoster | None = None
        if self._baseline is not None:
            try:
                baseline = self._baseline.score_roster(roster, as_of=reference_date, namespace=SYNTHETIC_NAMESPACE)
            except Exception as exc:  # noqa: BLE001
                raise ComparisonHarnessError(
                    f"Baseline method {self._baseline.name!r} failed: {exc}"
                ) from exc

        differences, verdict_changes, displaced = _diff(current, baseline)
        report = ComparisonReport(
            sample_size=sample_size,
            seed=self._seed,
            as_of=reference_date,
            namespace=SYNTHETIC_NAMESPACE,
            generated_at=pendulum.now("UTC").to_iso8601_string(),
            current=MethodSummary.from_roster(self._current.name, current),
            baseline=MethodSummary.from_roster(self._baseline.name, baseline) if baseline is not None else None,
            rank_differences=differences,
            verdict_changes=verdict_changes,
            displaced_unchanged=displaced,
        )
        self._logger.info(
            "harness.completed",
            sample_size=sample_size,
            current=self._current.name,
            baseline=self._baseline.name if self._baseline else None,
            changed=report.changed_count,
            verdict_changes=verdict_changes,
        )
        return report


def _ensure_synthetic(roster: list[dict[str, Any]]) -> None:
    for payload in roster:
        if not str(payload.get("personnel_id", "")).startswith(SYNTHETIC_PREFIX):
            raise ComparisonHarnessError(
                f"Non-synthetic identifier in harness roster: {payload.get('personnel_id')!r}"
            )


def _diff(
    current: RankedRoster,
    baseline: RankedRoster | None,
) -> tuple[tuple[RankDifference, ...], int, int]:
    if baseline is None:
        return (), 0, 0
    baseline_by_id = {score.personnel_id: score for score in baseline.scored}
    differences: list[RankDifference] = []
    verdict_changes = 0
    displaced = 0
    for score in current.scored:
        other = baseline_by_id.get(score.personnel_id)
        if other is None:
            continue
        if score.verdict != other.verdict:
            verdict_changes += 1
        if score.composite == other.composite:
            if score.position != other.position:
                displaced += 1
            continue
        differences.append(
            RankDifference(
                personnel_id=score.personnel_id,
                current_position=score.position,
                baseline_position=other.position,
                position_delta=other.position - score.position,
                current_composite=score.composite,
                baseline_composite=other.composite,
                current_verdict=score.verdict,
                baseline_verdict=other.verdict,
            )
        )
    return tuple(differences), verdict_changes, displaced


def run_comparison(
    sample_size: int,
    *,
    policy: PromotionPolicy | None = None,
    baseline: ScoringMethod | str | None = "legacy",
    seed: int | None = None,
    as_of: dt.date | str | None = None,
) -> ComparisonReport:
    """Compare the engine under ``policy`` against ``baseline`` on a synthetic roster."""
    if isinstance(baseline, str):
        try:
            baseline_method = resolve_method(baseline)
        except KeyError as exc:
            raise ComparisonHarnessError(str(exc)) from exc
    else:
        baseline_method = baseline
    harness = ComparisonHarness(current=PolicyMethod(policy), baseline=baseline_method, seed=seed)
    return harness.run(sample_size, as_of=as_of)


__all__ = [
    "ComparisonHarness",
    "ComparisonReport",
    "MethodSummary",
    "RankDifference",
    "run_comparison",
]
