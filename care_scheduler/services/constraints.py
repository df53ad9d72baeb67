"""Hard-constraint predicates deciding whether a staff member may take a shift."""

from __future__ import annotations

from typing import Iterable, List

from care_scheduler.config import OptimizationConstraints
from care_scheduler.domain.entities import Shift, Staff, TimeOffRequest

from .state import WorkingState
from .timeplan import intervals_overlap, rest_gap_hours


def has_required_certifications(staff: Staff, shift: Shift, constraints: OptimizationConstraints) -> bool:
    """Every certification required for the shift type is held, valid and unexpired."""
    return all(
        staff.holds_valid(cert_type, shift.start_time)
        for cert_type in constraints.required_certifications(shift.shift_type)
    )


def has_time_off_conflict(
    staff_id: str,
    shift: Shift,
    time_off_requests: Iterable[TimeOffRequest],
) -> bool:
    return any(
        request.staff_id == staff_id
        and request.is_approved
        and intervals_overlap(request.start_time, request.end_time, shift.start_time, shift.end_time)
        for request in time_off_requests
    )


def has_adequate_rest(
    staff_id: str,
    shift: Shift,
    state: WorkingState,
    min_rest_hours: float,
) -> bool:
    """
    Check rest against every shift already held by the staff member.

    Overlapping shifts always fail. Otherwise the gap, in whichever order the
    two shifts fall, must be at least ``min_rest_hours``.
    """
    for other in state.shifts_for(staff_id):
        if other.id == shift.id:
            continue
        gap = rest_gap_hours(other.start_time, other.end_time, shift.start_time, shift.end_time)
        if gap is None or gap < min_rest_hours:
            return False
    return True


def within_weekly_hours(
    staff_id: str,
    shift: Shift,
    state: WorkingState,
    max_hours_per_week: float,
) -> bool:
    return state.projected_weekly_hours(staff_id, shift) <= max_hours_per_week


def is_eligible(
    staff: Staff,
    shift: Shift,
    state: WorkingState,
    constraints: OptimizationConstraints,
    time_off_requests: Iterable[TimeOffRequest],
) -> bool:
    """
    Check if a staff member can take a shift under every hard constraint.

    Checks run cheapest first: certification lookup, time off, rest, weekly
    hours. Order only affects short-circuiting, not the outcome.

    Args:
        staff: Candidate staff member
        shift: Open shift being filled
        state: Current working state (pre-existing plus committed assignments)
        constraints: Run constraints
        time_off_requests: Approved time-off requests for the run

    Returns:
        True if the staff member may be assigned, False otherwise
    """
    if not has_required_certifications(staff, shift, constraints):
        return False
    if has_time_off_conflict(staff.id, shift, time_off_requests):
        return False
    if not has_adequate_rest(staff.id, shift, state, constraints.min_rest_between_shifts):
        return False
    if not within_weekly_hours(staff.id, shift, state, constraints.max_hours_per_week):
        return False
    return True


def filter_eligible_staff(
    staff: Iterable[Staff],
    shift: Shift,
    state: WorkingState,
    constraints: OptimizationConstraints,
    time_off_requests: Iterable[TimeOffRequest],
) -> List[Staff]:
    """Eligible staff for ``shift``, keeping the iteration order of ``staff``."""
    time_off_requests = list(time_off_requests)
    return [
        member
        for member in staff
        if is_eligible(member, shift, state, constraints, time_off_requests)
    ]
