"""Test and comparison harness for validating policy or algorithm changes."""

from __future__ import annotations

from .comparison import (
    ComparisonHarness,
    ComparisonReport,
    MethodSummary,
    RankDifference,
    run_comparison,
)
from .methods import LegacyBasisMethod, OriginalEO212Method, PolicyMethod, ScoringMethod, resolve_method
from .synthetic import SYNTHETIC_NAMESPACE, SYNTHETIC_PREFIX, RosterSynthesizer

__all__ = [
    "ComparisonHarness",
    "ComparisonReport",
    "LegacyBasisMethod",
    "MethodSummary",
    "OriginalEO212Method",
    "PolicyMethod",
    "RankDifference",
    "RosterSynthesizer",
    "SYNTHETIC_NAMESPACE",
    "SYNTHETIC_PREFIX",
    "ScoringMethod",
    "resolve_method",
    "run_comparison",
]
