"""Schedule metrics and the single 0-100 optimization score."""

from __future__ import annotations

from typing import Iterable, List

from care_scheduler.config import OptimizationConstraints
from care_scheduler.domain.entities import (
    SEVERITY_HIGH,
    SEVERITY_LOW,
    SEVERITY_MEDIUM,
    Conflict,
    ScheduleMetrics,
    Shift,
    Staff,
)

from .state import WorkingState


CONFLICT_PENALTIES = {SEVERITY_HIGH: 10.0, SEVERITY_MEDIUM: 5.0, SEVERITY_LOW: 2.0}


def calculate_utilization_rate(total_shifts: int, unassigned_shifts: int) -> float:
    if total_shifts == 0:
        return 100.0
    return (total_shifts - unassigned_shifts) / total_shifts * 100


def calculate_overtime_hours(
    schedule: Iterable[Shift],
    max_hours_per_week: float,
    week_start: str = "sunday",
) -> float:
    """Hours above the weekly cap, summed over every (staff member, week) pair."""
    state = WorkingState.from_schedule(schedule, week_start)
    return sum(
        max(0.0, hours - max_hours_per_week)
        for _, hours in sorted(state.hours_by_staff_week().items())
    )


def calculate_certification_compliance(
    schedule: Iterable[Shift],
    staff: Iterable[Staff],
    constraints: OptimizationConstraints,
) -> float:
    """
    Percentage of assigned, requirement-bearing shifts whose staff holds every
    required certification (valid on the shift date).

    Unassigned shifts and shifts without requirements are left out of the
    denominator. Assignments to staff missing from the roster count as
    non-compliant. Returns 100 when no shift qualifies.
    """
    roster = {member.id: member for member in staff}
    compliant = 0
    with_requirements = 0
    for shift in schedule:
        required = constraints.required_certifications(shift.shift_type)
        if not required or shift.staff_id is None:
            continue
        with_requirements += 1
        member = roster.get(shift.staff_id)
        if member is not None and all(member.holds_valid(c, shift.start_time) for c in required):
            compliant += 1
    if with_requirements == 0:
        return 100.0
    return compliant / with_requirements * 100


def calculate_metrics(
    schedule: List[Shift],
    staff: Iterable[Staff],
    constraints: OptimizationConstraints,
) -> ScheduleMetrics:
    unassigned = sum(1 for shift in schedule if shift.staff_id is None)
    return ScheduleMetrics(
        utilization_rate=calculate_utilization_rate(len(schedule), unassigned),
        overtime_hours=calculate_overtime_hours(
            schedule, constraints.max_hours_per_week, constraints.week_start
        ),
        unassigned_shifts=unassigned,
        certification_compliance=calculate_certification_compliance(
            schedule, staff, constraints
        ),
    )


def calculate_optimization_score(metrics: ScheduleMetrics, conflicts: Iterable[Conflict]) -> float:
    """
    Combine metrics and conflicts into one comparable score.

    Returns:
        Score clamped to [0, 100]
    """
    score = 100.0
    score -= metrics.unassigned_shifts * 5
    score -= metrics.overtime_hours * 2
    score += (metrics.utilization_rate - 80) / 2
    score += (metrics.certification_compliance - 90) / 2
    for conflict in conflicts:
        score -= CONFLICT_PENALTIES.get(conflict.severity, 0.0)
    return max(0.0, min(100.0, score))
