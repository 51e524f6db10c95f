"""Pydantic schema definitions for engine inputs and configuration."""

from __future__ import annotations

from .personnel import (
    AwardEntry,
    DisciplinaryAction,
    PersonnelRecord,
    TrainingEntry,
    parse_date,
)
from .policy import (
    BUILTIN_POLICIES,
    CRITERIA,
    DEFAULT_POLICY,
    LEGACY_POLICY,
    PromotionPolicy,
    RankRequirement,
)

__all__ = [
    "AwardEntry",
    "BUILTIN_POLICIES",
    "CRITERIA",
    "DEFAULT_POLICY",
    "DisciplinaryAction",
    "LEGACY_POLICY",
    "PersonnelRecord",
    "PromotionPolicy",
    "RankRequirement",
    "TrainingEntry",
    "parse_date",
]
