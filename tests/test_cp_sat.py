"""Tests for the CP-SAT assigner."""

import datetime as dt

from care_scheduler.config import OptimizationConstraints
from care_scheduler.domain.entities import Certification, Shift, Staff, TimeOffRequest
from care_scheduler.engine.cp_sat import CPSatAssigner
from care_scheduler.engine.greedy import GreedyAssigner
from care_scheduler.engine.orchestrator import make_assigner, optimize_schedule


def _shift(shift_id, day, start_hour, hours, shift_type="MORNING", staff_id=None):
    start = dt.datetime(2025, 9, day, start_hour)
    return Shift(id=shift_id, start_time=start, end_time=start + dt.timedelta(hours=hours),
                 shift_type=shift_type, staff_id=staff_id)


def _staff(staff_id, *certs):
    return Staff(id=staff_id, certifications=[Certification(c) for c in certs])


def _by_id(result):
    return {shift.id: shift.staff_id for shift in result.schedule}


def test_make_assigner():
    assert isinstance(make_assigner("greedy"), GreedyAssigner)
    assigner = make_assigner("cp_sat", time_limit_seconds=5)
    assert isinstance(assigner, CPSatAssigner)
    assert assigner.time_limit_seconds == 5


def test_cp_sat_fills_more_than_greedy():
    """Greedy gives the X shift to A (tie), stranding the overlapping Y shift only A can cover."""
    constraints = OptimizationConstraints(
        max_hours_per_week=40,
        min_rest_between_shifts=11,
        certification_requirements={"WARD_X": ["X"], "WARD_Y": ["Y"]},
    )
    staff = [_staff("A", "X", "Y"), _staff("B", "X")]
    shifts = [
        _shift("t1", 8, 8, 8, "WARD_X"),
        _shift("t2", 8, 10, 8, "WARD_Y"),
    ]

    greedy = optimize_schedule(staff, shifts, constraints)
    exact = optimize_schedule(staff, shifts, constraints, assigner=CPSatAssigner(time_limit_seconds=10))

    assert _by_id(greedy) == {"t1": "A", "t2": None}
    assert _by_id(exact) == {"t1": "B", "t2": "A"}
    assert exact.score > greedy.score


def test_cp_sat_respects_hard_constraints(constraints):
    staff = [_staff("A", "CPR", "FIRST_AID"), _staff("B", "CPR"), _staff("C")]
    shifts = []
    for day in range(8, 13):
        shifts.append(_shift(f"m{day}", day, 7, 8, "MORNING"))
        shifts.append(_shift(f"n{day}", day, 22, 8, "NIGHT"))
    time_off = [TimeOffRequest(staff_id="C", start_time=dt.datetime(2025, 9, 10), end_time=dt.datetime(2025, 9, 11))]

    result = optimize_schedule(staff, shifts, constraints, time_off, assigner=CPSatAssigner(time_limit_seconds=10))

    assert result.conflicts == []
    assignments = _by_id(result)
    assert all(assignments[f"n{day}"] in (None, "A") for day in range(8, 13))
    assert assignments["m10"] != "C"


def test_cp_sat_weekly_cap():
    constraints = OptimizationConstraints(max_hours_per_week=16, min_rest_between_shifts=0)
    shifts = [_shift(f"d{day}", day, 8, 8) for day in (8, 9, 10)]

    result = optimize_schedule([_staff("A")], shifts, constraints, assigner=CPSatAssigner(time_limit_seconds=10))

    assert len(result.assignments) == 2
    assert result.metrics.unassigned_shifts == 1
    assert result.metrics.overtime_hours == 0.0


def test_cp_sat_without_candidates(constraints):
    result = optimize_schedule([_staff("B", "CPR")], [_shift("n1", 8, 22, 8, "NIGHT")], constraints,
                               assigner=CPSatAssigner(time_limit_seconds=10))
    assert result.assignments == []
    assert _by_id(result) == {"n1": None}


def test_cp_sat_is_repeatable(constraints):
    staff = [_staff("A"), _staff("B"), _staff("C")]
    shifts = [_shift(f"d{day}", day, 8, 8) for day in range(8, 13)]

    first = optimize_schedule(staff, shifts, constraints, assigner=CPSatAssigner(time_limit_seconds=10))
    second = optimize_schedule(staff, shifts, constraints, assigner=CPSatAssigner(time_limit_seconds=10))

    assert first.assignments == second.assignments
    assert first.score == second.score
