from __future__ import annotations

import datetime as dt
import json

import pytest

from hrpromotion.errors import ComparisonHarnessError
from hrpromotion.harness import (
    SYNTHETIC_PREFIX,
    ComparisonHarness,
    LegacyBasisMethod,
    OriginalEO212Method,
    PolicyMethod,
    RosterSynthesizer,
    resolve_method,
    run_comparison,
)
from hrpromotion.schemas import DEFAULT_POLICY, LEGACY_POLICY, PersonnelRecord

AS_OF = dt.date(2025, 1, 1)


def test_synthesizer_is_reproducible_and_prefixed():
    first = RosterSynthesizer(seed=5).generate(25, as_of=AS_OF)
    second = RosterSynthesizer(seed=5).generate(25, as_of=AS_OF)

    assert first == second
    assert len(first) == 25
    assert all(payload["personnel_id"].startswith(SYNTHETIC_PREFIX) for payload in first)
    assert len({payload["personnel_id"] for payload in first}) == 25
    for index, payload in enumerate(first):
        PersonnelRecord.from_payload(payload, index=index)
    assert any(payload["efficiency_rating"] is not None for payload in first)
    assert any(payload["leadership_roles"] > 0 for payload in first)


def test_synthesizer_rejects_empty_sample():
    with pytest.raises(ComparisonHarnessError):
        RosterSynthesizer(seed=1).generate(0, as_of=AS_OF)


def test_synthesizer_rejects_empty_rank_table():
    policy = DEFAULT_POLICY.with_overrides({"ranks": []})
    with pytest.raises(ComparisonHarnessError):
        RosterSynthesizer(seed=1, policy=policy).generate(5, as_of=AS_OF)


def test_comparison_against_legacy_baseline_on_hundred_records():
    report = run_comparison(100, seed=2024, as_of=AS_OF)

    assert report.sample_size == 100
    assert report.namespace == "synthetic"
    assert 0 <= report.current.compliant_count <= 100
    assert report.current.total == 100
    assert report.baseline is not None
    assert report.baseline.name == "legacy-basis"
    assert 0 <= report.baseline.compliant_count <= 100

    for diff in report.rank_differences:
        assert diff.personnel_id.startswith(SYNTHETIC_PREFIX)
        assert diff.current_composite != diff.baseline_composite
        assert diff.position_delta == diff.baseline_position - diff.current_position
    assert report.changed_count + report.displaced_unchanged <= 100


def test_comparison_is_reproducible_with_seed():
    first = run_comparison(30, seed=9, as_of=AS_OF)
    second = run_comparison(30, seed=9, as_of=AS_OF)
    assert first.rank_differences == second.rank_differences
    assert first.current == second.current


def test_identical_methods_report_no_differences():
    harness = ComparisonHarness(current=PolicyMethod(), baseline=PolicyMethod(), seed=3)
    report = harness.run(40, as_of=AS_OF)
    assert report.rank_differences == ()
    assert report.verdict_changes == 0
    assert report.displaced_unchanged == 0
    assert report.current == report.baseline


def test_comparison_without_baseline():
    report = run_comparison(10, baseline="none", seed=1, as_of=AS_OF)
    assert report.baseline is None
    assert report.rank_differences == ()
    assert "No baseline method was run." in report.to_markdown()


def test_policy_version_baseline():
    report = run_comparison(20, baseline="eo212-v1", seed=4, as_of=AS_OF)
    assert report.baseline.policy_version == "eo212-v1"
    assert report.current.policy_version == "eo212-v2"


def test_unknown_baseline_raises_harness_error():
    with pytest.raises(ComparisonHarnessError):
        run_comparison(10, baseline="bogus", seed=1, as_of=AS_OF)


def test_failing_baseline_is_wrapped():
    class Broken:
        name = "broken"

        def score_roster(self, roster, *, as_of, namespace="synthetic"):
            raise RuntimeError("boom")

    harness = ComparisonHarness(baseline=Broken(), seed=1)
    with pytest.raises(ComparisonHarnessError, match="broken"):
        harness.run(5, as_of=AS_OF)


def test_zero_sample_size_raises_harness_error():
    with pytest.raises(ComparisonHarnessError):
        run_comparison(0, seed=1, as_of=AS_OF)


def test_report_serialization():
    report = run_comparison(15, seed=12, as_of=AS_OF)
    payload = report.to_dict()
    assert payload["as_of"] == "2025-01-01"
    assert payload["changed_count"] == len(payload["rank_differences"])
    json.dumps(payload)

    markdown = report.to_markdown()
    assert markdown.startswith("# Promotion Algorithm Comparison Report")
    assert "| legacy-basis |" in markdown


def test_resolve_method_names():
    assert resolve_method(None) is None
    assert resolve_method("None") is None
    assert isinstance(resolve_method("legacy"), LegacyBasisMethod)
    assert isinstance(resolve_method("original"), OriginalEO212Method)
    assert isinstance(resolve_method("eo212-original"), OriginalEO212Method)
    assert resolve_method("eo212-v1").policy is LEGACY_POLICY
    with pytest.raises(KeyError):
        resolve_method("unknown")


def test_legacy_basis_scoring():
    method = LegacyBasisMethod()
    record = PersonnelRecord.model_validate(
        {
            "personnel_id": "SYN-00001",
            "rank": "Sergeant",
            "last_promotion_date": "2022-01-01",
            "trainings": [{"title": f"Course {n}"} for n in range(4)],
        }
    )
    score = method.score(record, as_of=AS_OF)

    # 4 of 5 trainings -> 80; 1096 days in rank -> 10 points
    assert score.criterion("training").score == 80.0
    assert score.criterion("time_in_rank").score == 100.0
    assert score.composite == 82.0
    assert score.verdict == "compliant"
    assert score.policy_version == "legacy-basis"


def test_legacy_basis_floors_training_and_unknown_ranks():
    method = LegacyBasisMethod()
    record = PersonnelRecord.model_validate({"personnel_id": "SYN-00002", "rank": "Admiral"})
    score = method.score(record, as_of=AS_OF)

    assert score.criterion("training").raw["required"] == 999
    assert score.criterion("training").score == 50.0
    assert score.criterion("time_in_rank").score == 50.0
    assert score.composite == 50.0
    assert score.verdict == "non_compliant"
    assert score.next_rank is None


def build_original_record(**kwargs) -> PersonnelRecord:
    payload = {
        "personnel_id": "SYN-00010",
        "rank": "Captain",
        "commission_date": "2010-01-01",
        "last_promotion_date": "2018-01-01",
        "certificate_of_capacity": True,
        "correspondence_courses": 2,
        "trainings": [{"title": f"Course {n}"} for n in range(8)],
        "performance_score": 88,
        "efficiency_rating": 4,
        "awards": [{"title": "Gold Cross", "category": "medal"}, {"title": "Letter", "category": "commendation"}],
        "leadership_roles": 1,
        "active_training_days": 41,
    }
    payload.update(kwargs)
    return PersonnelRecord.model_validate(payload)


def test_original_method_reproduces_five_criterion_formulas():
    score = OriginalEO212Method().score(build_original_record(), as_of=AS_OF)

    # 5479 days of service -> 182 thirty-day months of a 240 month scale
    assert score.criterion("seniority").score == 75.83
    # 88 + (4 - 1) * 5 + 2 awards * 2 + 1 role * 3, capped at 100
    assert score.criterion("performance").score == 100.0
    # 85 months in grade, 25 over the captain minimum; bonus capped at 40
    assert score.criterion("time_in_grade").score == 100.0
    # certificate 50 + two courses 30 + eight trainings 16
    assert score.criterion("education").score == 96.0
    # 21 day minimum earns 70, twenty further days add 10
    assert score.criterion("training").score == 80.0
    # 22.75 + 25 + 20 + 14.4 + 8 = 90.15
    assert score.composite == 90.0
    assert score.verdict == "compliant"
    assert score.recommendation == "immediate"
    assert score.policy_version == "eo212-original"
    assert score.minimum_eligible == 60.0


def test_original_method_fills_gaps_like_the_source_system():
    record = PersonnelRecord.model_validate({"personnel_id": "SYN-00011", "rank": "Sergeant"})
    score = OriginalEO212Method().score(record, as_of=AS_OF)

    performance = score.criterion("performance")
    assert performance.raw["performance_score"] == 75.0
    assert performance.raw["efficiency_rating"] == 3
    assert performance.score == 85.0
    assert score.criterion("training").raw["active_training_days"] == 21
    assert score.criterion("training").score == 70.0
    assert score.criterion("seniority").score == 0.0
    assert score.criterion("time_in_grade").score == 0.0
    assert score.criterion("education").score == 0.0
    # 21.25 + 7 = 28.25
    assert score.composite == 28.0
    assert score.recommendation == "not_eligible"


def test_original_method_requires_minimum_active_duty_days():
    record = build_original_record(active_training_days=20)
    score = OriginalEO212Method().score(record, as_of=AS_OF)
    assert score.criterion("training").score == 0.0

    capped = OriginalEO212Method().score(build_original_record(active_training_days=200), as_of=AS_OF)
    assert capped.criterion("training").score == 100.0


def test_comparison_against_original_baseline():
    report = run_comparison(30, baseline="original", seed=8, as_of=AS_OF)
    assert report.baseline.name == "eo212-original"
    assert report.baseline.total == 30
    for diff in report.rank_differences:
        assert diff.current_composite != diff.baseline_composite
