from __future__ import annotations

import datetime as dt
from typing import Any

import pytest

from hrpromotion.core.evaluators import (
    AwardsEvaluator,
    DisciplinaryEvaluator,
    EducationEvaluator,
    PerformanceEvaluator,
    SeniorityEvaluator,
    TimeInGradeEvaluator,
    TrainingEvaluator,
)
from hrpromotion.core.evaluators.common import months_between
from hrpromotion.schemas import DEFAULT_POLICY, PersonnelRecord

AS_OF = dt.date(2025, 1, 1)


def build_record(**kwargs: Any) -> PersonnelRecord:
    defaults: dict[str, Any] = {"personnel_id": "P-001", "rank": "Captain"}
    defaults.update(kwargs)
    return PersonnelRecord.model_validate(defaults)


def run(evaluator, record: PersonnelRecord, policy=DEFAULT_POLICY) -> dict[str, Any]:
    return evaluator.evaluate(record, {"policy": policy, "as_of": AS_OF})


def test_months_between_counts_whole_months_and_clamps_future():
    assert months_between(dt.date(2010, 1, 1), AS_OF) == 180
    assert months_between(dt.date(2024, 12, 15), AS_OF) == 0
    assert months_between(dt.date(2026, 1, 1), AS_OF) == 0


def test_seniority_scales_with_service_and_caps():
    result = run(SeniorityEvaluator(), build_record(commission_date="2010-01-01"))
    assert result["method"] == "seniority"
    assert result["scores"]["seniority"] == pytest.approx(75.0)
    assert result["raw"]["service_months"] == 180

    capped = run(SeniorityEvaluator(), build_record(commission_date="1990-01-01"))
    assert capped["scores"]["seniority"] == pytest.approx(100.0)
    assert capped["metadata"]["capped"] is True


def test_seniority_missing_or_future_commission_scores_zero():
    missing = run(SeniorityEvaluator(), build_record())
    assert missing["scores"]["seniority"] == 0.0
    assert missing["metadata"]["status"] == "missing_commission_date"

    future = run(SeniorityEvaluator(), build_record(commission_date="2030-01-01"))
    assert future["scores"]["seniority"] == 0.0


def test_time_in_grade_below_minimum_scores_zero():
    result = run(TimeInGradeEvaluator(), build_record(last_promotion_date="2022-01-01"))
    assert result["raw"]["months_in_grade"] == 36
    assert result["metadata"]["minimum_months"] == 60
    assert result["metadata"]["meets_minimum"] is False
    assert result["scores"]["time_in_grade"] == 0.0


def test_time_in_grade_above_minimum_earns_increment():
    result = run(TimeInGradeEvaluator(), build_record(last_promotion_date="2019-07-01"))
    # 66 months against a 60 month minimum
    assert result["scores"]["time_in_grade"] == pytest.approx(72.0)

    long_wait = run(TimeInGradeEvaluator(), build_record(last_promotion_date="2010-01-01"))
    assert long_wait["scores"]["time_in_grade"] == pytest.approx(100.0)


def test_time_in_grade_unknown_rank_uses_default_minimum():
    record = build_record(rank="Field Marshal", last_promotion_date="2023-01-01")
    result = run(TimeInGradeEvaluator(), record)
    assert result["metadata"]["rank_in_table"] is False
    assert result["metadata"]["minimum_months"] == 24
    assert result["scores"]["time_in_grade"] == pytest.approx(60.0)


def test_time_in_grade_missing_date_scores_zero():
    result = run(TimeInGradeEvaluator(), build_record())
    assert result["scores"]["time_in_grade"] == 0.0
    assert result["metadata"]["status"] == "missing_last_promotion_date"


def test_education_combines_level_certificate_and_courses():
    record = build_record(education_level="Bachelor", certificate_of_capacity=True, correspondence_courses=2)
    result = run(EducationEvaluator(), record)
    assert result["scores"]["education"] == pytest.approx(95.0)
    assert result["metadata"]["course_points"] == pytest.approx(10.0)


def test_education_caps_courses_and_bounds_total():
    record = build_record(education_level="doctorate", certificate_of_capacity=True, correspondence_courses=9)
    result = run(EducationEvaluator(), record)
    assert result["metadata"]["course_points"] == pytest.approx(15.0)
    assert result["scores"]["education"] == pytest.approx(100.0)


def test_education_unknown_level_scores_only_extras():
    result = run(EducationEvaluator(), build_record(education_level="PhD", correspondence_courses=1))
    assert result["metadata"]["status"] == "unknown_education_level"
    assert result["scores"]["education"] == pytest.approx(5.0)


def test_training_uses_rank_requirement():
    trainings = [{"title": f"Course {n}"} for n in range(4)]
    result = run(TrainingEvaluator(), build_record(trainings=trainings))
    assert result["raw"] == {"completed_trainings": 4, "required_trainings": 8}
    assert result["metadata"]["required_source"] == "rank_table"
    assert result["scores"]["training"] == pytest.approx(45.0)


def test_training_extra_courses_earn_capped_bonus():
    trainings = [{"title": f"Course {n}"} for n in range(7)]
    result = run(TrainingEvaluator(), build_record(trainings=trainings, required_trainings=4))
    assert result["metadata"]["required_source"] == "record"
    assert result["metadata"]["bonus"] == pytest.approx(7.5)
    assert result["scores"]["training"] == pytest.approx(97.5)

    many = [{"title": f"Course {n}"} for n in range(20)]
    capped = run(TrainingEvaluator(), build_record(trainings=many, required_trainings=4))
    assert capped["scores"]["training"] == pytest.approx(100.0)


def test_training_zero_requirement_counts_as_complete():
    result = run(TrainingEvaluator(), build_record(required_trainings=0))
    assert result["scores"]["training"] == pytest.approx(90.0)


def test_training_without_trainings_scores_zero():
    result = run(TrainingEvaluator(), build_record())
    assert result["scores"]["training"] == 0.0


def test_performance_carries_appraisal_through():
    assert run(PerformanceEvaluator(), build_record(performance_score=88))["scores"]["performance"] == 88.0
    missing = run(PerformanceEvaluator(), build_record())
    assert missing["scores"]["performance"] == 0.0
    assert missing["metadata"]["status"] == "missing_performance_score"


def test_awards_sum_category_points_with_cap():
    awards = [{"title": "Gold Cross", "category": "Medal"}, {"title": "Letter", "category": "commendation"}]
    result = run(AwardsEvaluator(), build_record(awards=awards))
    assert result["scores"]["awards"] == pytest.approx(35.0)
    assert result["raw"]["categories"] == {"commendation": 1, "medal": 1}

    many = [{"title": "Medal", "category": "medal"} for _ in range(5)]
    capped = run(AwardsEvaluator(), build_record(awards=many))
    assert capped["scores"]["awards"] == pytest.approx(100.0)
    assert capped["metadata"]["capped"] is True


def test_awards_uncategorized_use_default_points():
    result = run(AwardsEvaluator(), build_record(awards=[{"title": "Unlabelled"}]))
    assert result["raw"]["categories"] == {"uncategorized": 1}
    assert result["scores"]["awards"] == pytest.approx(5.0)


def test_disciplinary_deducts_by_severity_with_floor():
    assert run(DisciplinaryEvaluator(), build_record())["scores"]["disciplinary"] == pytest.approx(100.0)

    actions = [{"severity": "Major"}, {"severity": "grave"}]
    result = run(DisciplinaryEvaluator(), build_record(disciplinary_actions=actions))
    assert result["scores"]["disciplinary"] == pytest.approx(25.0)

    severe = [{"severity": "grave"} for _ in range(3)]
    floored = run(DisciplinaryEvaluator(), build_record(disciplinary_actions=severe))
    assert floored["scores"]["disciplinary"] == 0.0
    assert floored["metadata"]["penalty_points"] == pytest.approx(150.0)
