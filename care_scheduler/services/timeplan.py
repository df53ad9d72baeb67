"""Interval and calendar helpers shared by the constraint, conflict and metric code."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Optional

from care_scheduler.config import WEEK_STARTS


def calculate_hours(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / 3600.0


def intervals_overlap(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    """Half-open overlap test: ranges that only touch do not overlap."""
    return a_start < b_end and b_start < a_end


def rest_gap_hours(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> Optional[float]:
    """
    Hours between two intervals, whichever comes first.

    Returns:
        Gap in hours (0.0 for back-to-back), or None when the intervals overlap
    """
    if intervals_overlap(a_start, a_end, b_start, b_end):
        return None
    if b_start >= a_end:
        return calculate_hours(a_end, b_start)
    return calculate_hours(b_end, a_start)


def week_start_for(moment: datetime, week_start: str = "sunday") -> date:
    """
    First day of the canonical week containing ``moment``.

    Every shift is attributed to the week its start time falls in, so a night
    shift crossing midnight into a new week still counts toward the week it
    began in.
    """
    first_weekday = WEEK_STARTS[week_start]
    day = moment.date()
    offset = (day.weekday() - first_weekday) % 7
    return day - timedelta(days=offset)
