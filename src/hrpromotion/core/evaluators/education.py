"""Education evaluation."""

from __future__ import annotations

from typing import Any

from ...schemas import PersonnelRecord
from .common import bounded


class EducationEvaluator:
    """Combine education level, certificate of capacity and correspondence courses."""

    method = "education"

    def evaluate(self, record: PersonnelRecord, context: dict[str, Any]) -> dict[str, Any]:
        rules = context["policy"].education

        level = record.education_level
        if level is None:
            status = "missing_education_level"
            level_points = 0.0
        elif level in rules.level_points:
            status = "ok"
            level_points = rules.level_points[level]
        else:
            status = "unknown_education_level"
            level_points = 0.0

        certificate_points = rules.certificate_points if record.certificate_of_capacity else 0.0
        course_points = min(record.correspondence_courses * rules.course_points, rules.course_cap)

        return {
            "method": self.method,
            "scores": {self.method: bounded(level_points + certificate_points + course_points)},
            "raw": {
                "education_level": level,
                "certificate_of_capacity": record.certificate_of_capacity,
                "correspondence_courses": record.correspondence_courses,
            },
            "metadata": {
                "status": status,
                "level_points": level_points,
                "certificate_points": certificate_points,
                "course_points": course_points,
            },
        }
