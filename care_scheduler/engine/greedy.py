"""Greedy difficulty-first assignment engine."""

from __future__ import annotations

from typing import Iterable, List, Optional, Tuple

from care_scheduler.config import OptimizationConstraints
from care_scheduler.domain.entities import Shift, Staff, TimeOffRequest
from care_scheduler.services.constraints import filter_eligible_staff
from care_scheduler.services.scoring import select_best_staff
from care_scheduler.services.state import WorkingState

from .base import AssignmentOutcome, BaseAssigner, check_deadline, copy_schedule, order_open_shifts, order_staff


class GreedyAssigner(BaseAssigner):
    """
    Fill open shifts one at a time, hardest first.

    For each open shift the eligible staff are filtered against the current
    working state and the best scorer is committed immediately, so later
    shifts see the new hours and rest windows. A shift with no eligible staff
    stays open. Each open shift is visited exactly once.
    """

    name = "greedy"

    def assign(
        self,
        staff: Iterable[Staff],
        shifts: Iterable[Shift],
        constraints: OptimizationConstraints,
        time_off_requests: Iterable[TimeOffRequest],
        deadline: Optional[float] = None,
    ) -> AssignmentOutcome:
        roster = order_staff(staff)
        time_off_requests = [r for r in time_off_requests if r.is_approved]
        schedule = copy_schedule(shifts)
        state = WorkingState.from_schedule(schedule, constraints.week_start)

        open_shifts = order_open_shifts(
            [shift for shift in schedule if shift.staff_id is None], constraints
        )
        assignments: List[Tuple[str, str]] = []

        for shift in open_shifts:
            check_deadline(deadline)
            eligible = filter_eligible_staff(roster, shift, state, constraints, time_off_requests)
            if not eligible:
                continue

            chosen = select_best_staff(eligible, shift, state, constraints)
            shift.staff_id = chosen.id
            state.commit(chosen.id, shift)
            assignments.append((shift.id, chosen.id))

        return AssignmentOutcome(schedule=schedule, assignments=assignments)
