from __future__ import annotations

import math

import pytest

from hrpromotion.errors import PolicyMisconfigured
from hrpromotion.schemas import BUILTIN_POLICIES, CRITERIA, DEFAULT_POLICY, LEGACY_POLICY


def test_builtin_policies_are_valid_and_conserve_weight():
    for policy in BUILTIN_POLICIES.values():
        assert policy.ensure_valid() is policy
        assert math.fsum(policy.weights.values()) == pytest.approx(1.0)
        assert set(policy.active_criteria) <= set(CRITERIA)


def test_active_criteria_follow_canonical_order_and_skip_zero_weights():
    assert DEFAULT_POLICY.active_criteria == CRITERIA
    assert LEGACY_POLICY.active_criteria == ("seniority", "time_in_grade", "education", "training", "performance")

    policy = DEFAULT_POLICY.with_overrides(
        {"weights": {"seniority": 0.5, "performance": 0.5, "awards": 0.0}}
    )
    assert policy.active_criteria == ("seniority", "performance")


def test_requirement_lookup_is_case_insensitive():
    requirement = DEFAULT_POLICY.requirement_for("first lieutenant")
    assert requirement is not None
    assert requirement.next_rank == "Captain"
    assert DEFAULT_POLICY.requirement_for("Admiral") is None
    assert DEFAULT_POLICY.requirement_for(None) is None


def test_with_overrides_merges_nested_sections():
    policy = DEFAULT_POLICY.with_overrides({"version": "custom", "awards": {"cap": 50}})
    assert policy.version == "custom"
    assert policy.awards.cap == 50
    assert policy.awards.category_points == DEFAULT_POLICY.awards.category_points
    assert DEFAULT_POLICY.awards.cap == 100


@pytest.mark.parametrize(
    ("overrides", "constant"),
    [
        ({"weights": {"seniority": 0.6, "performance": 0.6}}, "weights"),
        ({"weights": {"seniority": 0.99, "performance": 0.009}}, "weights"),
        ({"weights": {"seniority": 1.2, "performance": -0.2}}, "weights.seniority"),
        ({"weights": {"seniority": 0.5, "charisma": 0.5}}, "weights"),
        ({"weights": {"seniority": 0.0}}, "weights"),
        ({"weights": {"seniority": float("nan"), "performance": 1.0}}, "weights.seniority"),
        ({"minimum_eligible": 101}, "minimum_eligible"),
        ({"minimum_eligible": -5}, "minimum_eligible"),
        ({"tiers": {"priority": 95}}, "tiers"),
        ({"precision": 9}, "precision"),
        ({"seniority": {"ceiling_months": 0}}, "seniority.ceiling_months"),
        ({"awards": {"cap": 0}}, "awards.cap"),
        ({"training": {"bonus_cap": 100}}, "training.bonus_cap"),
        ({"time_in_grade": {"base_score": 120}}, "time_in_grade.base_score"),
    ],
)
def test_ensure_valid_rejects_misconfiguration(overrides, constant):
    policy = DEFAULT_POLICY.with_overrides(overrides)
    with pytest.raises(PolicyMisconfigured) as excinfo:
        policy.ensure_valid()
    assert excinfo.value.constant == constant


def test_ensure_valid_rejects_duplicate_ranks():
    ranks = [requirement.model_dump() for requirement in DEFAULT_POLICY.ranks]
    ranks.append({"rank": "captain", "minimum_months": 12})
    with pytest.raises(PolicyMisconfigured) as excinfo:
        DEFAULT_POLICY.with_overrides({"ranks": ranks}).ensure_valid()
    assert excinfo.value.constant == "ranks"


def test_describe_reports_traceability_fields():
    summary = LEGACY_POLICY.describe()
    assert summary["policy_version"] == "eo212-v1"
    assert summary["policy_basis"] == "Executive Order No. 212 (1939)"
    assert summary["weights"] == {
        "seniority": 0.30,
        "time_in_grade": 0.20,
        "education": 0.15,
        "training": 0.10,
        "performance": 0.25,
    }
    assert summary["precision"] == 0


def test_overrides_without_version_get_a_derived_version():
    first = DEFAULT_POLICY.with_overrides({"minimum_eligible": 65})
    again = DEFAULT_POLICY.with_overrides({"minimum_eligible": 65})
    other = DEFAULT_POLICY.with_overrides({"minimum_eligible": 66})

    assert first.version.startswith("eo212-v2+")
    assert first.version != DEFAULT_POLICY.version
    assert first.version == again.version
    assert other.version not in {first.version, DEFAULT_POLICY.version}
    assert DEFAULT_POLICY.with_overrides({}).version == DEFAULT_POLICY.version


@pytest.mark.parametrize(
    ("overrides", "constant", "value"),
    [
        ({"weights": {"seniority": "abc"}}, "weights.seniority", "abc"),
        ({"bogus": 1}, "bogus", 1),
        ({"tiers": {"priority": "high"}}, "tiers.priority", "high"),
        ({"precision": "two"}, "precision", "two"),
    ],
)
def test_malformed_overrides_raise_policy_misconfigured(overrides, constant, value):
    with pytest.raises(PolicyMisconfigured) as excinfo:
        DEFAULT_POLICY.with_overrides(overrides)
    assert excinfo.value.constant == constant
    assert excinfo.value.value == value
