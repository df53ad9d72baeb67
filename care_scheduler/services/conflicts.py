"""Post-assignment conflict sweep over the final schedule."""

from __future__ import annotations

from collections import defaultdict
from typing import Dict, Iterable, List

from care_scheduler.config import OptimizationConstraints
from care_scheduler.domain.entities import (
    SEVERITY_HIGH,
    SEVERITY_MEDIUM,
    Conflict,
    Shift,
    TimeOffRequest,
)

from .timeplan import intervals_overlap, rest_gap_hours


OVERLAP = "OVERLAP"
INSUFFICIENT_REST = "INSUFFICIENT_REST"
TIME_OFF_CONFLICT = "TIME_OFF_CONFLICT"


def _shifts_by_staff(schedule: Iterable[Shift]) -> Dict[str, List[Shift]]:
    by_staff: Dict[str, List[Shift]] = defaultdict(list)
    for shift in schedule:
        if shift.staff_id is not None:
            by_staff[shift.staff_id].append(shift)
    return {
        staff_id: sorted(shifts, key=lambda s: (s.start_time, s.id))
        for staff_id, shifts in sorted(by_staff.items())
    }


def find_overlaps(schedule: Iterable[Shift]) -> List[Conflict]:
    conflicts: List[Conflict] = []
    for staff_id, shifts in _shifts_by_staff(schedule).items():
        for i, a in enumerate(shifts):
            for b in shifts[i + 1:]:
                if intervals_overlap(a.start_time, a.end_time, b.start_time, b.end_time):
                    conflicts.append(Conflict(
                        type=OVERLAP,
                        description=(
                            f"Staff {staff_id} has overlapping shifts {a.id} "
                            f"({a.start_time} - {a.end_time}) and {b.id} ({b.start_time} - {b.end_time})"
                        ),
                        severity=SEVERITY_HIGH,
                        staff_id=staff_id,
                        shift_ids=(a.id, b.id),
                    ))
    return conflicts


def find_rest_violations(schedule: Iterable[Shift], min_rest_hours: float) -> List[Conflict]:
    """
    Same-staff pairs closer than ``min_rest_hours``.

    Overlapping pairs leave no rest at all, so they are reported here as well
    as by ``find_overlaps``, whatever the minimum.
    """
    conflicts: List[Conflict] = []
    for staff_id, shifts in _shifts_by_staff(schedule).items():
        for i, a in enumerate(shifts):
            for b in shifts[i + 1:]:
                gap = rest_gap_hours(a.start_time, a.end_time, b.start_time, b.end_time)
                if gap is not None and gap >= min_rest_hours:
                    continue
                rest = "shifts overlap" if gap is None else f"{gap:.1f}h < {min_rest_hours:g}h"
                conflicts.append(Conflict(
                    type=INSUFFICIENT_REST,
                    description=f"Staff {staff_id} has insufficient rest between shifts {a.id} and {b.id}: {rest}",
                    severity=SEVERITY_MEDIUM,
                    staff_id=staff_id,
                    shift_ids=(a.id, b.id),
                ))
    return conflicts


def find_time_off_conflicts(
    schedule: Iterable[Shift],
    time_off_requests: Iterable[TimeOffRequest],
) -> List[Conflict]:
    requests_by_staff: Dict[str, List[TimeOffRequest]] = defaultdict(list)
    for request in time_off_requests:
        if request.is_approved:
            requests_by_staff[request.staff_id].append(request)

    conflicts: List[Conflict] = []
    for staff_id, shifts in _shifts_by_staff(schedule).items():
        for shift in shifts:
            if any(
                intervals_overlap(r.start_time, r.end_time, shift.start_time, shift.end_time)
                for r in requests_by_staff.get(staff_id, [])
            ):
                conflicts.append(Conflict(
                    type=TIME_OFF_CONFLICT,
                    description=f"Staff {staff_id} is scheduled on shift {shift.id} during approved time off",
                    severity=SEVERITY_HIGH,
                    staff_id=staff_id,
                    shift_ids=(shift.id,),
                ))
    return conflicts


def identify_conflicts(
    schedule: Iterable[Shift],
    constraints: OptimizationConstraints,
    time_off_requests: Iterable[TimeOffRequest],
) -> List[Conflict]:
    """
    Sweep the complete schedule for hard-constraint violations.

    Runs regardless of who produced each assignment, so violations already
    present in pre-existing assignments are reported too.

    Returns:
        Overlaps, then rest violations, then time-off conflicts; each group
        ordered by staff id and shift start
    """
    schedule = list(schedule)
    return (
        find_overlaps(schedule)
        + find_rest_violations(schedule, constraints.min_rest_between_shifts)
        + find_time_off_conflicts(schedule, time_off_requests)
    )
