"""Versioned promotion policy configuration."""

from __future__ import annotations

import hashlib
import json
import math
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..errors import PolicyMisconfigured

CRITERIA: tuple[str, ...] = (
    "seniority",
    "time_in_grade",
    "education",
    "training",
    "performance",
    "awards",
    "disciplinary",
)

WEIGHT_EPSILON = 1e-6


class RankRequirement(BaseModel):
    """Minimum service in grade and training load for one rank."""

    rank: str
    minimum_months: int = Field(ge=0)
    next_rank: str | None = None
    required_trainings: int = Field(default=4, ge=0)

    model_config = ConfigDict(extra="forbid", frozen=True)


class RecommendationTiers(BaseModel):
    """Score bands above the minimum eligibility threshold."""

    recommended: float = 70.0
    priority: float = 80.0
    immediate: float = 90.0

    model_config = ConfigDict(extra="forbid", frozen=True)


class SeniorityRules(BaseModel):
    ceiling_months: int = 240

    model_config = ConfigDict(extra="forbid", frozen=True)


class TimeInGradeRules(BaseModel):
    base_score: float = 60.0
    points_per_month: float = 2.0
    default_minimum_months: int = 24

    model_config = ConfigDict(extra="forbid", frozen=True)


class EducationRules(BaseModel):
    level_points: dict[str, float] = Field(
        default_factory=lambda: {
            "none": 0.0,
            "elementary": 20.0,
            "high_school": 40.0,
            "vocational": 50.0,
            "associate": 60.0,
            "bachelor": 75.0,
            "master": 90.0,
            "doctorate": 100.0,
        }
    )
    certificate_points: float = 10.0
    course_points: float = 5.0
    course_cap: float = 15.0

    model_config = ConfigDict(extra="forbid", frozen=True)


class TrainingRules(BaseModel):
    default_required: int = 4
    bonus_per_extra: float = 2.5
    bonus_cap: float = 10.0

    model_config = ConfigDict(extra="forbid", frozen=True)


class AwardRules(BaseModel):
    category_points: dict[str, float] = Field(
        default_factory=lambda: {
            "medal": 25.0,
            "citation": 15.0,
            "commendation": 10.0,
            "badge": 5.0,
            "letter": 5.0,
        }
    )
    default_points: float = 5.0
    cap: float = 100.0

    model_config = ConfigDict(extra="forbid", frozen=True)


class DisciplinaryRules(BaseModel):
    severity_points: dict[str, float] = Field(
        default_factory=lambda: {
            "minor": 10.0,
            "major": 25.0,
            "grave": 50.0,
        }
    )
    default_points: float = 10.0

    model_config = ConfigDict(extra="forbid", frozen=True)


def _default_ranks() -> tuple[RankRequirement, ...]:
    rows = [
        ("Private", 12, "Private First Class", 2),
        ("Private First Class", 12, "Corporal", 3),
        ("Corporal", 18, "Sergeant", 4),
        ("Sergeant", 24, "Staff Sergeant", 5),
        ("Staff Sergeant", 36, "Technical Sergeant", 6),
        ("Technical Sergeant", 36, "Master Sergeant", 7),
        ("Third Lieutenant", 24, "Second Lieutenant", 5),
        ("Second Lieutenant", 36, "First Lieutenant", 6),
        ("First Lieutenant", 48, "Captain", 7),
        ("Captain", 60, "Major", 8),
        ("Major", 72, "Lieutenant Colonel", 9),
        ("Lieutenant Colonel", 84, "Colonel", 10),
        ("Colonel", 96, "Brigadier General", 12),
    ]
    return tuple(
        RankRequirement(rank=rank, minimum_months=months, next_rank=next_rank, required_trainings=trainings)
        for rank, months, next_rank, trainings in rows
    )


class PromotionPolicy(BaseModel):
    """Named, immutable set of weights, thresholds and caps for one scoring run."""

    version: str = "eo212-v2"
    policy_basis: str = "Executive Order No. 212 (1939)"
    description: str = "Seven-criterion weighted scoring derived from EO 212 promotion principles."
    weights: dict[str, float] = Field(
        default_factory=lambda: {
            "seniority": 0.25,
            "performance": 0.20,
            "time_in_grade": 0.20,
            "education": 0.10,
            "training": 0.10,
            "awards": 0.10,
            "disciplinary": 0.05,
        }
    )
    minimum_eligible: float = 60.0
    tiers: RecommendationTiers = Field(default_factory=RecommendationTiers)
    precision: int = 2
    seniority: SeniorityRules = Field(default_factory=SeniorityRules)
    time_in_grade: TimeInGradeRules = Field(default_factory=TimeInGradeRules)
    education: EducationRules = Field(default_factory=EducationRules)
    training: TrainingRules = Field(default_factory=TrainingRules)
    awards: AwardRules = Field(default_factory=AwardRules)
    disciplinary: DisciplinaryRules = Field(default_factory=DisciplinaryRules)
    ranks: tuple[RankRequirement, ...] = Field(default_factory=_default_ranks)

    model_config = ConfigDict(extra="forbid", frozen=True)

    @property
    def active_criteria(self) -> tuple[str, ...]:
        """Criteria with a positive weight, in canonical evaluation order."""
        return tuple(name for name in CRITERIA if self.weights.get(name, 0.0) > 0.0)

    def requirement_for(self, rank: str | None) -> RankRequirement | None:
        if not rank:
            return None
        wanted = rank.strip().lower()
        for requirement in self.ranks:
            if requirement.rank.lower() == wanted:
                return requirement
        return None

    def rank_names(self) -> list[str]:
        return [requirement.rank for requirement in self.ranks]

    def with_overrides(self, overrides: Mapping[str, Any]) -> "PromotionPolicy":
        """Return a new policy with ``overrides`` merged over this one.

        Unless the overrides name a ``version``, the result is versioned
        ``<base>+<digest>`` so scores stay traceable to the merged rules.
        Malformed overrides raise :class:`PolicyMisconfigured`.
        """
        overrides = dict(overrides)
        merged = _deep_merge(self.model_dump(mode="python"), overrides)
        if overrides and "version" not in overrides:
            merged["version"] = f"{self.version}+{_digest(overrides)}"
        try:
            return PromotionPolicy.model_validate(merged)
        except ValidationError as exc:
            error = exc.errors()[0]
            constant = ".".join(str(part) for part in error["loc"]) or "policy"
            raise PolicyMisconfigured(constant, error.get("input"), error["msg"]) from exc

    def ensure_valid(self) -> "PromotionPolicy":
        """Check policy integrity, raising :class:`PolicyMisconfigured` on the first fault."""
        unknown = sorted(set(self.weights) - set(CRITERIA))
        if unknown:
            raise PolicyMisconfigured("weights", unknown, "unknown criteria in weight table")
        for name, weight in self.weights.items():
            if not math.isfinite(weight) or weight < 0.0 or weight > 1.0:
                raise PolicyMisconfigured(f"weights.{name}", weight, "weight must be within [0, 1]")
        if not self.active_criteria:
            raise PolicyMisconfigured("weights", dict(self.weights), "no active criteria")
        total = math.fsum(self.weights.values())
        if abs(total - 1.0) > WEIGHT_EPSILON:
            raise PolicyMisconfigured("weights", round(total, 9), "weights must sum to 1.0")

        thresholds = {
            "minimum_eligible": self.minimum_eligible,
            "tiers.recommended": self.tiers.recommended,
            "tiers.priority": self.tiers.priority,
            "tiers.immediate": self.tiers.immediate,
        }
        for name, value in thresholds.items():
            if not 0.0 <= value <= 100.0:
                raise PolicyMisconfigured(name, value, "threshold must be within [0, 100]")
        ordered = list(thresholds.values())
        if ordered != sorted(ordered):
            raise PolicyMisconfigured("tiers", ordered, "thresholds must be non-decreasing")

        if not 0 <= self.precision <= 6:
            raise PolicyMisconfigured("precision", self.precision, "precision must be within [0, 6]")

        if self.seniority.ceiling_months <= 0:
            raise PolicyMisconfigured(
                "seniority.ceiling_months", self.seniority.ceiling_months, "ceiling must be positive"
            )
        if not 0.0 < self.awards.cap <= 100.0:
            raise PolicyMisconfigured("awards.cap", self.awards.cap, "cap must be within (0, 100]")
        if not 0.0 <= self.training.bonus_cap < 100.0:
            raise PolicyMisconfigured("training.bonus_cap", self.training.bonus_cap, "bonus cap must be within [0, 100)")
        if not 0.0 <= self.time_in_grade.base_score <= 100.0:
            raise PolicyMisconfigured(
                "time_in_grade.base_score", self.time_in_grade.base_score, "base score must be within [0, 100]"
            )

        seen: set[str] = set()
        for requirement in self.ranks:
            key = requirement.rank.lower()
            if key in seen:
                raise PolicyMisconfigured("ranks", requirement.rank, "duplicate rank in rank table")
            seen.add(key)
        return self

    def describe(self) -> dict[str, Any]:
        return {
            "policy_version": self.version,
            "policy_basis": self.policy_basis,
            "description": self.description,
            "weights": {name: self.weights[name] for name in self.active_criteria},
            "minimum_eligible": self.minimum_eligible,
            "tiers": self.tiers.model_dump(),
            "precision": self.precision,
        }


def _digest(overrides: Mapping[str, Any]) -> str:
    canonical = json.dumps(overrides, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:8]


def _deep_merge(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in overrides.items():
        if key == "weights":
            # weight tables replace rather than merge so criteria can be dropped
            merged[key] = dict(value)
        elif isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = _deep_merge(dict(merged[key]), dict(value))
        else:
            merged[key] = value
    return merged


DEFAULT_POLICY = PromotionPolicy()

LEGACY_POLICY = PromotionPolicy(
    version="eo212-v1",
    description="Original five-criterion EO 212 weighting.",
    weights={
        "seniority": 0.30,
        "performance": 0.25,
        "time_in_grade": 0.20,
        "education": 0.15,
        "training": 0.10,
    },
    precision=0,
)

BUILTIN_POLICIES: dict[str, PromotionPolicy] = {
    DEFAULT_POLICY.version: DEFAULT_POLICY,
    LEGACY_POLICY.version: LEGACY_POLICY,
}


__all__ = [
    "AwardRules",
    "BUILTIN_POLICIES",
    "CRITERIA",
    "DEFAULT_POLICY",
    "DisciplinaryRules",
    "EducationRules",
    "LEGACY_POLICY",
    "PromotionPolicy",
    "RankRequirement",
    "RecommendationTiers",
    "SeniorityRules",
    "TimeInGradeRules",
    "TrainingRules",
    "WEIGHT_EPSILON",
]
