from __future__ import annotations

import json

import pytest

from hrpromotion.adapters import PersonnelStoreAdapter
from hrpromotion.schemas import PersonnelRecord


@pytest.fixture
def adapter() -> PersonnelStoreAdapter:
    return PersonnelStoreAdapter()


def sample_document() -> dict:
    return {
        "_id": {"$oid": "64b0c0ffee0c0ffee0c0ffee"},
        "firstName": "Juan",
        "lastName": "Dela Cruz",
        "currentRank": "Cpl.",
        "company": "64b0c0ffee0c0ffee0c0ffe1",
        "serviceNumber": "O-1234",
        "dateJoined": "2015-06-01",
        "currentRankDate": "2021-03-01",
        "educationLevel": "Bachelor",
        "completedTrainings": [
            {"title": "Officer Correspondence Course", "type": "course", "completedAt": "2020-02-10", "score": 88},
            "First Aid Certification",
        ],
        "awards": [{"title": "Gold Cross", "category": "Medal", "date": "2019-11-20"}],
        "commendations": 2,
        "disciplinaryActions": [{"offense": "Tardiness", "severity": "minor", "date": "2018-01-05"}],
        "performanceScore": 91,
        "efficiencyRating": 4,
        "activeTrainingDays": 30,
        "leadershipRoles": 2,
    }


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("Capt.", "Captain"),
        ("ltc", "Lieutenant Colonel"),
        ("staff sergeant", "Staff Sergeant"),
        ("Sargeant", "Sergeant"),
        ("Lieutenant  Colonell", "Lieutenant Colonel"),
        ("Admiral", "Admiral"),
    ],
)
def test_normalize_rank(adapter: PersonnelStoreAdapter, raw: str, expected: str):
    assert adapter.normalize_rank(raw) == expected


def test_normalize_rank_leaves_missing_values(adapter: PersonnelStoreAdapter):
    assert adapter.normalize_rank(None) is None
    assert adapter.normalize_rank("  ") == "  "


def test_parse_record_maps_store_document(adapter: PersonnelStoreAdapter):
    payload = adapter.parse_record(sample_document())

    assert payload["personnel_id"] == "64b0c0ffee0c0ffee0c0ffee"
    assert payload["name"] == "Juan Dela Cruz"
    assert payload["rank"] == "Corporal"
    assert payload["company"] is None
    assert payload["service_id"] == "O-1234"
    assert payload["certificate_of_capacity"] is True
    assert payload["correspondence_courses"] == 1
    assert [award["category"] for award in payload["awards"]] == ["Medal", "commendation", "commendation"]

    record = PersonnelRecord.from_payload(payload)
    assert record.completed_training_count == 2
    assert record.awards[0].category == "medal"
    assert record.disciplinary_actions[0].description == "Tardiness"
    assert record.performance_score == 91
    assert record.efficiency_rating == 4
    assert record.active_training_days == 30
    assert record.leadership_roles == 2


def test_parse_record_accepts_json_text(adapter: PersonnelStoreAdapter):
    document = sample_document()
    document["company"] = {"name": "Alpha Company"}
    payload = adapter.parse_record(json.dumps(document).encode("utf-8"))
    assert payload["company"] == "Alpha Company"


def test_parse_record_rejects_non_object(adapter: PersonnelStoreAdapter):
    with pytest.raises(ValueError):
        adapter.parse_record("[1, 2, 3]")
    with pytest.raises(ValueError):
        adapter.parse_record("{not json")


def test_can_handle(adapter: PersonnelStoreAdapter):
    assert adapter.can_handle({}, {"source": "personnel_store"})
    assert not adapter.can_handle({"_id": "x"}, {"source": "other"})
    assert adapter.can_handle(json.dumps({"serviceNumber": "O-1"}), {})
    assert not adapter.can_handle("not json", {})
