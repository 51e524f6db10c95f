"""Shared helpers for criterion evaluators."""

from __future__ import annotations

import datetime as dt
from decimal import ROUND_HALF_EVEN, Decimal

import pendulum

SCORE_FLOOR = 0.0
SCORE_CEILING = 100.0


def months_between(start: dt.date, end: dt.date) -> int:
    """Whole calendar months from ``start`` to ``end``; zero when ``end`` is not later."""
    if end <= start:
        return 0
    begin = pendulum.date(start.year, start.month, start.day)
    finish = pendulum.date(end.year, end.month, end.day)
    return begin.diff(finish).in_months()


def bounded(value: float) -> float:
    return min(max(float(value), SCORE_FLOOR), SCORE_CEILING)


def to_decimal(value: float | int | Decimal) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() keeps the shortest round-tripping repr so equal floats map to equal decimals
    return Decimal(str(value))


def quantize(value: float | int | Decimal, precision: int) -> Decimal:
    """Round with ROUND_HALF_EVEN to ``precision`` decimal places."""
    return to_decimal(value).quantize(Decimal(1).scaleb(-precision), rounding=ROUND_HALF_EVEN)


def round_score(value: float | int | Decimal, precision: int) -> float:
    return float(quantize(value, precision))


def iso(value: dt.date | None) -> str | None:
    return value.isoformat() if value else None
