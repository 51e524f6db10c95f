"""Personnel record schema consumed by the promotion engine."""

from __future__ import annotations

import datetime as dt
from typing import Any, Mapping

import pendulum
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..errors import InvalidRecord

_DATE_FIELDS = ("commission_date", "last_promotion_date")


def parse_date(value: Any) -> dt.date | None:
    """Coerce ISO strings, ``YYYY-MM`` strings and datetimes into a date."""
    if value is None or value == "":
        return None
    if isinstance(value, dt.datetime):
        return dt.date(value.year, value.month, value.day)
    if isinstance(value, dt.date):
        return dt.date(value.year, value.month, value.day)
    if isinstance(value, str):
        text = value.strip()
        if len(text) == 7 and text[4] == "-":
            return dt.date(int(text[:4]), int(text[5:7]), 1)
        parsed = pendulum.parse(text, exact=True)
        # durations, intervals and bare times parse but carry no calendar date
        if not isinstance(parsed, dt.date):
            raise ValueError(f"not a calendar date: {value!r}")
        return dt.date(parsed.year, parsed.month, parsed.day)
    raise ValueError(f"unsupported date value: {value!r}")


class TrainingEntry(BaseModel):
    """Completed training course."""

    title: str = ""
    completed_on: dt.date | None = None
    score: float | None = Field(default=None, ge=0.0, le=100.0)
    category: str | None = None

    model_config = ConfigDict(extra="forbid", frozen=True)

    @field_validator("completed_on", mode="before")
    @classmethod
    def _coerce_date(cls, value: Any) -> dt.date | None:
        return parse_date(value)


class AwardEntry(BaseModel):
    """Award or commendation on file."""

    title: str = ""
    awarded_on: dt.date | None = None
    category: str | None = None

    model_config = ConfigDict(extra="forbid", frozen=True)

    @field_validator("awarded_on", mode="before")
    @classmethod
    def _coerce_date(cls, value: Any) -> dt.date | None:
        return parse_date(value)

    @field_validator("category", mode="before")
    @classmethod
    def _normalize_category(cls, value: Any) -> str | None:
        if value is None:
            return None
        return str(value).strip().lower() or None


class DisciplinaryAction(BaseModel):
    """Recorded disciplinary action."""

    description: str = ""
    severity: str = "minor"
    recorded_on: dt.date | None = None

    model_config = ConfigDict(extra="forbid", frozen=True)

    @field_validator("recorded_on", mode="before")
    @classmethod
    def _coerce_date(cls, value: Any) -> dt.date | None:
        return parse_date(value)

    @field_validator("severity", mode="before")
    @classmethod
    def _normalize_severity(cls, value: Any) -> str:
        if value is None:
            return "minor"
        return str(value).strip().lower()


class PersonnelRecord(BaseModel):
    """Immutable personnel record owned by the external personnel store.

    Identity fields (``personnel_id`` and ``rank``) are required; every other
    field is optional and degrades to the lowest sub-score when absent.
    """

    personnel_id: str = Field(validation_alias=AliasChoices("personnel_id", "id"))
    rank: str
    name: str | None = None
    company: str | None = None
    service_id: str | None = None
    commission_date: dt.date | None = None
    last_promotion_date: dt.date | None = None
    education_level: str | None = None
    certificate_of_capacity: bool = False
    correspondence_courses: int = Field(default=0, ge=0)
    required_trainings: int | None = Field(default=None, ge=0)
    trainings: tuple[TrainingEntry, ...] = ()
    awards: tuple[AwardEntry, ...] = ()
    disciplinary_actions: tuple[DisciplinaryAction, ...] = ()
    performance_score: float | None = Field(default=None, ge=0.0, le=100.0)
    efficiency_rating: float | None = Field(default=None, ge=1.0, le=5.0)
    active_training_days: int | None = Field(default=None, ge=0)
    leadership_roles: int = Field(default=0, ge=0)

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    @field_validator("personnel_id", "rank", mode="before")
    @classmethod
    def _require_identity(cls, value: Any) -> str:
        if value is None:
            raise ValueError("required identity field is missing")
        text = str(value).strip()
        if not text:
            raise ValueError("required identity field is blank")
        return text

    @field_validator(*_DATE_FIELDS, mode="before")
    @classmethod
    def _coerce_date(cls, value: Any) -> dt.date | None:
        return parse_date(value)

    @field_validator("education_level", mode="before")
    @classmethod
    def _normalize_education(cls, value: Any) -> str | None:
        if value is None:
            return None
        text = str(value).strip().lower().replace(" ", "_").replace("-", "_")
        return text or None

    @property
    def completed_training_count(self) -> int:
        return len(self.trainings)

    @classmethod
    def from_payload(
        cls,
        payload: "PersonnelRecord | Mapping[str, Any]",
        *,
        index: int | None = None,
    ) -> "PersonnelRecord":
        """Validate a roster entry, raising :class:`InvalidRecord` on failure."""
        if isinstance(payload, cls):
            return payload
        if not isinstance(payload, Mapping):
            raise InvalidRecord(
                [f"record must be a mapping, got {type(payload).__name__}"],
                index=index,
            )
        raw_id = payload.get("personnel_id", payload.get("id"))
        personnel_id = str(raw_id).strip() if raw_id not in (None, "") else None
        try:
            return cls.model_validate(dict(payload))
        except ValidationError as exc:
            errors = [
                f"{'.'.join(str(part) for part in error['loc']) or 'record'}: {error['msg']}"
                for error in exc.errors()
            ]
            raise InvalidRecord(errors, personnel_id=personnel_id or None, index=index) from exc


__all__ = [
    "AwardEntry",
    "DisciplinaryAction",
    "PersonnelRecord",
    "TrainingEntry",
    "parse_date",
]
