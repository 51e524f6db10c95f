"""Audit trail generation for promotion scores."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Iterable

from ..schemas import PromotionPolicy
from .models import PromotionScore, RankedRoster


@dataclass(frozen=True, slots=True)
class AuditLine:
    """Input -> sub-score -> weighted contribution for one criterion."""

    criterion: str
    raw: dict[str, Any]
    score: float
    weight: float
    contribution: float


@dataclass(frozen=True, slots=True)
class AuditRecord:
    """Structured and narrative explanation of one promotion score."""

    personnel_id: str
    name: str | None
    rank: str
    next_rank: str | None
    policy_version: str
    policy_basis: str
    lines: tuple[AuditLine, ...]
    composite: float
    verdict: str
    recommendation: str
    minimum_eligible: float
    position: int | None = None
    eligible_position: int | None = None
    override_rationale: str | None = None

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["lines"] = [asdict(line) for line in self.lines]
        return payload

    def to_text(self) -> str:
        header = self.name or self.personnel_id
        lines = [
            f"PROMOTION AUDIT TRAIL - {header} ({self.personnel_id})",
            f"Policy Basis: {self.policy_basis}",
            f"Policy Version: {self.policy_version}",
            f"Current Rank: {self.rank} -> {self.next_rank or 'Next Rank'}",
            "",
            "SCORING BREAKDOWN:",
        ]
        for line in self.lines:
            label = line.criterion.replace("_", " ").title()
            inputs = ", ".join(f"{key}={_render(value)}" for key, value in line.raw.items()) or "none"
            lines.append(
                f"- {label} ({line.weight * 100:g}%): {line.score:.2f}/100"
                f" -> {line.contribution:.4f} [inputs: {inputs}]"
            )
        recommendation = _RECOMMENDATION_TEXT[self.recommendation].format(next_rank=self.next_rank or "next rank")
        lines.extend(
            [
                "",
                f"TOTAL SCORE: {self.composite:.2f}/100",
                f"MINIMUM ELIGIBLE: {self.minimum_eligible:g}",
                f"VERDICT: {self.verdict.upper()}",
                f"RECOMMENDATION: {recommendation}",
            ]
        )
        if self.position is not None:
            standing = f"RANK ORDER: {self.position}"
            if self.eligible_position is not None:
                standing += f" (eligible list #{self.eligible_position})"
            lines.append(standing)
        if self.override_rationale:
            lines.extend(["", "MANUAL OVERRIDE RATIONALE:", self.override_rationale])
        return "\n".join(lines) + "\n"


_RECOMMENDATION_TEXT = {
    "immediate": "IMMEDIATE PROMOTION RECOMMENDED: exceptional record warrants advancement to {next_rank}",
    "priority": "PRIORITY PROMOTION: fast-track to promotion board for {next_rank}",
    "recommended": "RECOMMENDED FOR PROMOTION: schedule for promotion board review for {next_rank}",
    "eligible": "ELIGIBLE FOR CONSIDERATION: meets minimum requirements for {next_rank}, pending board evaluation",
    "not_eligible": "NOT CURRENTLY ELIGIBLE: additional development required before promotion consideration",
}


def _render(value: Any) -> str:
    if isinstance(value, dict):
        return "{" + ", ".join(f"{k}: {v}" for k, v in value.items()) + "}"
    return str(value)


class AuditGenerator:
    """Explain promotion scores from the exact values the scorer produced.

    Policy basis and threshold are copied from the score itself. When bound
    to a policy, scores produced under any other version are refused.
    """

    def __init__(self, *, policy: PromotionPolicy | None = None) -> None:
        self._policy = policy

    def explain(self, score: PromotionScore, *, rationale: str | None = None) -> AuditRecord:
        if self._policy is not None and score.policy_version != self._policy.version:
            raise ValueError(
                f"Score produced under policy {score.policy_version!r}, "
                f"auditor configured for {self._policy.version!r}."
            )
        return AuditRecord(
            personnel_id=score.personnel_id,
            name=score.name,
            rank=score.rank,
            next_rank=score.next_rank,
            policy_version=score.policy_version,
            policy_basis=score.policy_basis,
            lines=tuple(
                AuditLine(
                    criterion=item.criterion,
                    raw=dict(item.raw),
                    score=item.score,
                    weight=item.weight,
                    contribution=item.contribution,
                )
                for item in score.criteria
            ),
            composite=score.composite,
            verdict=score.verdict,
            recommendation=score.recommendation,
            minimum_eligible=score.minimum_eligible,
            position=score.position,
            eligible_position=score.eligible_position,
            override_rationale=rationale,
        )

    def explain_all(
        self,
        scores: Iterable[PromotionScore] | RankedRoster,
        *,
        rationales: dict[str, str] | None = None,
    ) -> list[AuditRecord]:
        items = scores.scored if isinstance(scores, RankedRoster) else scores
        rationales = rationales or {}
        return [self.explain(score, rationale=rationales.get(score.personnel_id)) for score in items]

    def render_report(self, records: Iterable[AuditRecord]) -> str:
        return "\n".join(record.to_text() for record in records)


def explain(
    score: PromotionScore,
    *,
    policy: PromotionPolicy | None = None,
    rationale: str | None = None,
) -> AuditRecord:
    """Build the audit record for ``score``, optionally checking it against ``policy``."""
    return AuditGenerator(policy=policy).explain(score, rationale=rationale)


__all__ = ["AuditGenerator", "AuditLine", "AuditRecord", "explain"]
