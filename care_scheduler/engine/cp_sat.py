"""CP-SAT assigner that fills open shifts over the same hard constraints as the greedy engine."""

from __future__ import annotations

import math
import time
from collections import defaultdict
from datetime import date
from typing import Dict, Iterable, List, Optional, Tuple

from ortools.sat.python import cp_model

from care_scheduler.config import OptimizationConstraints
from care_scheduler.domain.entities import Shift, Staff, TimeOffRequest
from care_scheduler.errors import OptimizationTimeout
from care_scheduler.services.constraints import is_eligible
from care_scheduler.services.scoring import calculate_staff_score
from care_scheduler.services.state import WorkingState
from care_scheduler.services.timeplan import rest_gap_hours

from .base import AssignmentOutcome, BaseAssigner, check_deadline, copy_schedule, order_open_shifts, order_staff


class CPSatAssigner(BaseAssigner):
    """
    Exact assignment with Google OR-Tools CP-SAT.

    One boolean per (open shift, staff member eligible against the
    pre-existing schedule). The model enforces:
    - at most one staff member per shift
    - no overlapping or under-rested pair of new shifts per staff member
    - per staff member and week, new minutes within the remaining weekly budget

    The objective maximizes the number of filled shifts first, then the sum
    of staff scores. A single worker with a fixed seed keeps runs repeatable
    as long as the time limit is not hit.
    """

    name = "cp_sat"

    def __init__(self, time_limit_seconds: Optional[float] = 30.0, random_seed: int = 0):
        self.time_limit_seconds = time_limit_seconds
        self.random_seed = random_seed

    def assign(
        self,
        staff: Iterable[Staff],
        shifts: Iterable[Shift],
        constraints: OptimizationConstraints,
        time_off_requests: Iterable[TimeOffRequest],
        deadline: Optional[float] = None,
    ) -> AssignmentOutcome:
        roster = order_staff(staff)
        staff_by_id = {member.id: member for member in roster}
        time_off_requests = [r for r in time_off_requests if r.is_approved]
        schedule = copy_schedule(shifts)
        state = WorkingState.from_schedule(schedule, constraints.week_start)
        open_shifts = order_open_shifts(
            [shift for shift in schedule if shift.staff_id is None], constraints
        )

        model = cp_model.CpModel()
        variables, weights = self._create_variables(
            model, roster, open_shifts, state, constraints, time_off_requests
        )
        if not variables:
            print("[INFO] CP-SAT: no open shift has an eligible candidate")
            return AssignmentOutcome(schedule=schedule, assignments=[])

        self._add_single_staff_constraints(model, variables)
        self._add_rest_constraints(model, variables, open_shifts, constraints)
        self._add_weekly_hours_constraints(model, variables, open_shifts, state, constraints)
        self._build_objective(model, variables, weights)

        solver = cp_model.CpSolver()
        solver.parameters.num_workers = 1
        solver.parameters.random_seed = self.random_seed
        time_limit = self._time_limit(deadline)
        if time_limit is not None:
            solver.parameters.max_time_in_seconds = time_limit

        print(f"[INFO] Solving CP-SAT model ({len(variables)} candidate assignments)...")
        status = solver.Solve(model)
        if status == cp_model.UNKNOWN:
            raise OptimizationTimeout("CP-SAT solver hit its time limit without a solution")
        if status not in (cp_model.OPTIMAL, cp_model.FEASIBLE):
            raise RuntimeError(
                f"CP-SAT solver failed to find solution (status: {solver.StatusName(status)})"
            )
        if status == cp_model.FEASIBLE:
            print("[WARN] CP-SAT returned a feasible but not proven optimal solution")

        chosen = {
            shift_id: staff_id
            for (shift_id, staff_id), var in variables.items()
            if solver.Value(var) == 1
        }

        # Replay through the evaluator so every commit passes the hard constraints in order
        assignments: List[Tuple[str, str]] = []
        for shift in open_shifts:
            staff_id = chosen.get(shift.id)
            if staff_id is None:
                continue
            member = staff_by_id[staff_id]
            if not is_eligible(member, shift, state, constraints, time_off_requests):
                raise RuntimeError(
                    f"CP-SAT assignment of staff {staff_id} to shift {shift.id} violates a hard constraint"
                )
            shift.staff_id = staff_id
            state.commit(staff_id, shift)
            assignments.append((shift.id, staff_id))

        return AssignmentOutcome(schedule=schedule, assignments=assignments)

    def _time_limit(self, deadline: Optional[float]) -> Optional[float]:
        check_deadline(deadline)
        limits = []
        if self.time_limit_seconds is not None:
            limits.append(float(self.time_limit_seconds))
        if deadline is not None:
            limits.append(max(0.0, deadline - time.monotonic()))
        return min(limits) if limits else None

    def _create_variables(
        self,
        model: cp_model.CpModel,
        roster: List[Staff],
        open_shifts: List[Shift],
        state: WorkingState,
        constraints: OptimizationConstraints,
        time_off_requests: List[TimeOffRequest],
    ) -> Tuple[Dict[Tuple[str, str], cp_model.IntVar], Dict[Tuple[str, str], int]]:
        """
        Create decision variables for candidates eligible against the pre-existing schedule.

        Returns:
            (variables, weights)
            variables: {(shift_id, staff_id): BoolVar}
            weights: {(shift_id, staff_id): staff score scaled to an integer}
        """
        variables = {}
        weights = {}
        for shift in open_shifts:
            for member in roster:
                if not is_eligible(member, shift, state, constraints, time_off_requests):
                    continue
                key = (shift.id, member.id)
                variables[key] = model.NewBoolVar(f"assign_s{shift.id}_e{member.id}")
                score = calculate_staff_score(member, shift, state, constraints)
                weights[key] = max(0, int(round(score * 100)))
        return variables, weights

    def _add_single_staff_constraints(self, model: cp_model.CpModel, variables: Dict) -> None:
        by_shift = defaultdict(list)
        for (shift_id, _), var in variables.items():
            by_shift[shift_id].append(var)
        for shift_vars in by_shift.values():
            if len(shift_vars) > 1:
                model.Add(sum(shift_vars) <= 1)

    def _add_rest_constraints(
        self,
        model: cp_model.CpModel,
        variables: Dict,
        open_shifts: List[Shift],
        constraints: OptimizationConstraints,
    ) -> None:
        """Two new shifts that overlap or leave too little rest cannot go to the same person."""
        shifts_by_id = {shift.id: shift for shift in open_shifts}
        by_staff = defaultdict(list)
        for (shift_id, staff_id) in variables:
            by_staff[staff_id].append(shifts_by_id[shift_id])

        for staff_id, candidates in by_staff.items():
            candidates.sort(key=lambda s: (s.start_time, s.id))
            for i, a in enumerate(candidates):
                for b in candidates[i + 1:]:
                    gap = rest_gap_hours(a.start_time, a.end_time, b.start_time, b.end_time)
                    if gap is None or gap < constraints.min_rest_between_shifts:
                        model.Add(variables[(a.id, staff_id)] + variables[(b.id, staff_id)] <= 1)

    def _add_weekly_hours_constraints(
        self,
        model: cp_model.CpModel,
        variables: Dict,
        open_shifts: List[Shift],
        state: WorkingState,
        constraints: OptimizationConstraints,
    ) -> None:
        """Per staff member and week, new minutes fit in what the cap leaves after pre-existing shifts."""
        shifts_by_id = {shift.id: shift for shift in open_shifts}
        cap_minutes = int(math.floor(constraints.max_hours_per_week * 60 + 1e-6))

        terms: Dict[Tuple[str, date], List] = defaultdict(list)
        existing: Dict[Tuple[str, date], int] = {}
        for (shift_id, staff_id), var in variables.items():
            shift = shifts_by_id[shift_id]
            key = (staff_id, state.week_of(shift.start_time))
            terms[key].append((var, int(round(shift.hours * 60))))
            existing[key] = int(round(state.weekly_hours(staff_id, shift.start_time) * 60))

        for key, week_terms in terms.items():
            budget = max(0, cap_minutes - existing[key])
            model.Add(sum(var * minutes for var, minutes in week_terms) <= budget)

    def _build_objective(self, model: cp_model.CpModel, variables: Dict, weights: Dict) -> None:
        # One extra filled shift always outweighs any combination of scores
        fill_weight = sum(weights.values()) + 1
        model.Maximize(sum(var * (fill_weight + weights[key]) for key, var in variables.items()))
