"""Adapter for documents exported by the personnel record store."""

from __future__ import annotations

import json
import re
from typing import Any, Iterable

from rapidfuzz import fuzz, process

from ..schemas import DEFAULT_POLICY

OBJECT_ID_RE = re.compile(r"^[0-9a-fA-F]{24}$")

RANK_ABBREVIATIONS: dict[str, str] = {
    "pvt": "Private",
    "pfc": "Private First Class",
    "cpl": "Corporal",
    "sgt": "Sergeant",
    "ssg": "Staff Sergeant",
    "tsg": "Technical Sergeant",
    "msg": "Master Sergeant",
    "3lt": "Third Lieutenant",
    "2lt": "Second Lieutenant",
    "1lt": "First Lieutenant",
    "cpt": "Captain",
    "capt": "Captain",
    "maj": "Major",
    "ltc": "Lieutenant Colonel",
    "col": "Colonel",
}


class PersonnelStoreAdapter:
    """Convert personnel-store documents into PersonnelRecord payloads."""

    source = "personnel_store"

    def __init__(self, *, known_ranks: Iterable[str] | None = None, rank_similarity: float = 85.0) -> None:
        self._known_ranks = list(known_ranks or DEFAULT_POLICY.rank_names())
        self._rank_similarity = rank_similarity

    def can_handle(self, blob: bytes | str | dict[str, Any], metadata: dict[str, Any]) -> bool:
        source = metadata.get("source")
        if source:
            return str(source).lower() == self.source
        try:
            data = self._load(blob)
        except ValueError:
            return False
        return "_id" in data or "serviceNumber" in data

    def parse_record(self, blob: bytes | str | dict[str, Any]) -> dict[str, Any]:
        data = self._load(blob)
        trainings = [self._training(item) for item in data.get("completedTrainings") or []]
        titles = " ".join(
            f"{entry['title']} {entry.get('category') or ''}".lower() for entry in trainings
        )

        record: dict[str, Any] = {
            "personnel_id": self._identifier(data),
            "name": data.get("name") or _join_name(data),
            "rank": self.normalize_rank(data.get("rank") or data.get("currentRank")),
            "company": self._company(data.get("company")),
            "service_id": data.get("serviceNumber") or data.get("serviceId"),
            "commission_date": data.get("commissionDate") or data.get("dateJoined"),
            "last_promotion_date": data.get("currentRankDate") or data.get("lastPromotionDate"),
            "education_level": data.get("educationLevel") or data.get("education"),
            "certificate_of_capacity": bool(data.get("requiredCertificates"))
            or "certificate" in titles
            or "certification" in titles,
            "correspondence_courses": int(
                data.get("correspondenceCourses")
                or sum(1 for entry in trainings if _is_course(entry))
            ),
            "required_trainings": data.get("requiredTrainings"),
            "trainings": trainings,
            "awards": self._awards(data),
            "disciplinary_actions": [self._disciplinary(item) for item in data.get("disciplinaryActions") or []],
            "performance_score": data.get("performanceScore", data.get("score")),
            "efficiency_rating": data.get("efficiencyRating"),
            "active_training_days": data.get("activeTrainingDays"),
            "leadership_roles": int(data.get("leadershipRoles") or 0),
        }
        return record

    def normalize_rank(self, rank: Any) -> Any:
        """Map abbreviations and near-miss spellings onto the known rank table."""
        if not isinstance(rank, str) or not rank.strip():
            return rank
        text = " ".join(rank.split())
        abbreviation = RANK_ABBREVIATIONS.get(text.lower().replace(".", ""))
        if abbreviation:
            return abbreviation
        for known in self._known_ranks:
            if known.lower() == text.lower():
                return known
        match = process.extractOne(
            text,
            self._known_ranks,
            scorer=fuzz.ratio,
            processor=str.lower,
            score_cutoff=self._rank_similarity,
        )
        return match[0] if match else text

    @staticmethod
    def _identifier(data: dict[str, Any]) -> Any:
        identifier = data.get("_id", data.get("id"))
        if isinstance(identifier, dict):
            identifier = identifier.get("$oid")
        return str(identifier) if identifier not in (None, "") else None

    @staticmethod
    def _company(company: Any) -> str | None:
        if isinstance(company, dict):
            return company.get("name")
        if isinstance(company, str) and company and not OBJECT_ID_RE.match(company):
            return company
        return None

    @staticmethod
    def _training(item: Any) -> dict[str, Any]:
        if isinstance(item, str):
            return {"title": item}
        return {
            "title": item.get("title", ""),
            "completed_on": item.get("completedAt") or item.get("endDate") or item.get("date"),
            "score": item.get("score"),
            "category": item.get("type"),
        }

    @staticmethod
    def _awards(data: dict[str, Any]) -> list[dict[str, Any]]:
        awards: list[dict[str, Any]] = []
        for item in data.get("awards") or []:
            if isinstance(item, str):
                awards.append({"title": item})
            else:
                awards.append(
                    {
                        "title": item.get("title", ""),
                        "awarded_on": item.get("date") or item.get("awardedOn"),
                        "category": item.get("category") or item.get("type"),
                    }
                )
        commendations = data.get("commendations")
        if isinstance(commendations, int) and commendations > 0:
            awards.extend({"title": "Commendation", "category": "commendation"} for _ in range(commendations))
        return awards

    @staticmethod
    def _disciplinary(item: Any) -> dict[str, Any]:
        if isinstance(item, str):
            return {"description": item}
        return {
            "description": item.get("description") or item.get("offense", ""),
            "severity": item.get("severity"),
            "recorded_on": item.get("date") or item.get("recordedOn"),
        }

    @staticmethod
    def _load(blob: bytes | str | dict[str, Any]) -> dict[str, Any]:
        if isinstance(blob, dict):
            return blob
        if isinstance(blob, bytes):
            blob = blob.decode("utf-8")
        try:
            data = json.loads(blob)
        except json.JSONDecodeError as exc:
            raise ValueError("Invalid personnel store payload") from exc
        if not isinstance(data, dict):
            raise ValueError("Personnel store payload must be an object")
        return data


def _join_name(data: dict[str, Any]) -> str | None:
    parts = [data.get("firstName"), data.get("middleName"), data.get("lastName")]
    joined = " ".join(part for part in parts if part)
    return joined or None


def _is_course(entry: dict[str, Any]) -> bool:
    title = (entry.get("title") or "").lower()
    category = (entry.get("category") or "").lower()
    return "correspondence" in title or "course" in title or "course" in category
