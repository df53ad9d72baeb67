"""Orchestrator - runs the optimization pipeline and the load/compute/commit service around it."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlalchemy.orm import Session

from care_scheduler.config import OptimizationConstraints, SchedulerConfig, validate_constraints
from care_scheduler.domain.entities import OptimizationResult, Shift, Staff, TimeOffRequest
from care_scheduler.domain.repositories import ShiftStore, StaffDirectory, TimeOffStore
from care_scheduler.errors import CommitError
from care_scheduler.services.conflicts import identify_conflicts
from care_scheduler.services.metrics import calculate_metrics, calculate_optimization_score

from .base import BaseAssigner, copy_schedule
from .cache import ResultCache
from .cp_sat import CPSatAssigner
from .greedy import GreedyAssigner


def make_assigner(solver: str = "greedy", time_limit_seconds: Optional[float] = None) -> BaseAssigner:
    """Assigner for a configured solver name."""
    if solver == "greedy":
        return GreedyAssigner()
    if solver == "cp_sat":
        return CPSatAssigner(time_limit_seconds=time_limit_seconds)
    raise ValueError(f"Unknown solver {solver!r}")


def _approved(constraints: OptimizationConstraints, time_off_requests: Optional[Iterable[TimeOffRequest]]) -> List[TimeOffRequest]:
    if time_off_requests is None:
        time_off_requests = constraints.time_off_requests or []
    return [request for request in time_off_requests if request.is_approved]


def _evaluate(
    schedule: List[Shift],
    staff: List[Staff],
    constraints: OptimizationConstraints,
    time_off_requests: List[TimeOffRequest],
    assignments: List[Tuple[str, str]],
    started: float,
) -> OptimizationResult:
    metrics = calculate_metrics(schedule, staff, constraints)
    conflicts = identify_conflicts(schedule, constraints, time_off_requests)
    return OptimizationResult(
        schedule=schedule,
        score=calculate_optimization_score(metrics, conflicts),
        conflicts=conflicts,
        metrics=metrics,
        assignments=assignments,
        duration_ms=(time.perf_counter() - started) * 1000,
    )


def optimize_schedule(
    staff: Iterable[Staff],
    shifts: Iterable[Shift],
    constraints: OptimizationConstraints,
    time_off_requests: Optional[Iterable[TimeOffRequest]] = None,
    assigner: Optional[BaseAssigner] = None,
    deadline: Optional[float] = None,
) -> OptimizationResult:
    """
    Assign open shifts and score the resulting schedule.

    Pure with respect to its inputs: shifts are copied, nothing is persisted.
    Conflicts, metrics and score are computed over the complete final
    schedule, pre-existing assignments included.

    Args:
        staff: Active staff roster with certifications
        shifts: Every shift in the window, assigned and open
        constraints: Run constraints (validated here before any assignment)
        time_off_requests: Approved time off; defaults to ``constraints.time_off_requests``
        assigner: Assignment strategy (default: greedy)
        deadline: Optional ``time.monotonic()`` value after which the run aborts

    Returns:
        OptimizationResult

    Raises:
        ConstraintValidationError: If the constraints are invalid
        OptimizationTimeout: If the deadline passes mid-run
    """
    validate_constraints(constraints)
    started = time.perf_counter()
    staff = list(staff)
    approved = _approved(constraints, time_off_requests)
    assigner = assigner or GreedyAssigner()

    outcome = assigner.assign(staff, list(shifts), constraints, approved, deadline)
    return _evaluate(outcome.schedule, staff, constraints, approved, outcome.assignments, started)


def audit_schedule(
    staff: Iterable[Staff],
    shifts: Iterable[Shift],
    constraints: OptimizationConstraints,
    time_off_requests: Optional[Iterable[TimeOffRequest]] = None,
) -> OptimizationResult:
    """Conflicts, metrics and score of a schedule as it stands, without assigning anything."""
    validate_constraints(constraints)
    started = time.perf_counter()
    approved = _approved(constraints, time_off_requests)
    return _evaluate(copy_schedule(shifts), list(staff), constraints, approved, [], started)


@dataclass
class OptimizationRun:
    """
    Outcome of one scheduling-service run.

    ``result`` is always the computed schedule. Persistence is reported on
    its own channel: ``commit_error`` holds the failure, if any, so the
    caller can retry the commit without recomputing.
    """

    organization_id: str
    start: datetime
    end: datetime
    result: OptimizationResult
    committed: int = 0
    commit_error: Optional[CommitError] = None
    performance: Dict[str, Any] = field(default_factory=dict)

    @property
    def persisted(self) -> bool:
        return self.commit_error is None and self.committed == len(self.result.assignments)


class Orchestrator:
    """
    Scheduling service: loads a snapshot, optimizes it and commits once.

    Loading failures propagate unchanged (no optimization on partial data)
    after an ``[ERROR]`` line naming the organization and window. Every
    computed result is cached by organization and window start.
    """

    def __init__(self, assigner: Optional[BaseAssigner] = None, cache: Optional[ResultCache] = None):
        self.assigner = assigner or GreedyAssigner()
        self.cache = cache if cache is not None else ResultCache()

    def cached_result(self, organization_id: str, start: datetime) -> Optional[OptimizationResult]:
        """Most recent unexpired result for ``organization_id`` and ``start``, if any."""
        return self.cache.get(organization_id, start)

    def load_snapshot(
        self,
        session: Session,
        organization_id: str,
        start: datetime,
        end: datetime,
        constraints: OptimizationConstraints,
    ) -> Tuple[List[Staff], List[Shift], List[TimeOffRequest]]:
        staff = StaffDirectory.list_eligible_staff(session, organization_id)
        shifts = ShiftStore.list_shifts(session, organization_id, start, end)
        if constraints.time_off_requests is not None:
            time_off = list(constraints.time_off_requests)
        else:
            time_off = TimeOffStore.list_approved(session, organization_id, start, end)
        print(
            f"[INFO] Loaded {len(staff)} staff, {len(shifts)} shifts, "
            f"{len(time_off)} time-off requests for {organization_id}"
        )
        return staff, shifts, time_off

    def run(
        self,
        session: Session,
        organization_id: str,
        start: datetime,
        end: datetime,
        constraints: OptimizationConstraints,
        persist: bool = True,
        time_limit_seconds: Optional[float] = None,
    ) -> OptimizationRun:
        """
        Optimize one organization's shifts between ``start`` and ``end``.

        Args:
            session: Database session
            organization_id: Organization whose roster and shifts are loaded
            start: Window start
            end: Window end
            constraints: Run constraints
            persist: If True, commit the new assignments in one transaction
            time_limit_seconds: Optional deadline for the computation

        Returns:
            OptimizationRun with the result and the commit outcome
        """
        print(f"[INFO] Orchestrator: Optimizing {organization_id} from {start} to {end} ({self.assigner.get_name()})")
        started = time.perf_counter()

        try:
            validate_constraints(constraints)
            staff, shifts, time_off = self.load_snapshot(session, organization_id, start, end, constraints)
            deadline = time.monotonic() + time_limit_seconds if time_limit_seconds is not None else None
            result = optimize_schedule(staff, shifts, constraints, time_off, self.assigner, deadline)
        except Exception as e:
            print(
                f"[ERROR] schedule_optimization failed for {organization_id} "
                f"({start} to {end}, {self.assigner.get_name()}): {type(e).__name__}: {e}"
            )
            raise

        self.cache.set(organization_id, start, result)
        performance = {
            "operation": "schedule_optimization",
            "organization_id": organization_id,
            "duration_ms": (time.perf_counter() - started) * 1000,
            "shifts_count": len(result.schedule),
            "conflicts_count": len(result.conflicts),
        }
        print(
            f"[OK] Assigned {len(result.assignments)} shifts, {result.metrics.unassigned_shifts} left open, "
            f"{len(result.conflicts)} conflicts, score {result.score:.1f}"
        )
        print(
            f"[INFO] schedule_optimization took {performance['duration_ms']:.0f} ms "
            f"({performance['shifts_count']} shifts, {performance['conflicts_count']} conflicts)"
        )

        run = OptimizationRun(
            organization_id=organization_id, start=start, end=end, result=result, performance=performance
        )
        if persist:
            self.commit(session, run)
        return run

    def commit(self, session: Session, run: OptimizationRun) -> OptimizationRun:
        """Commit (or retry committing) a run's assignments; failures land on ``run.commit_error``."""
        try:
            run.committed = ShiftStore.commit_assignments(session, run.result.assignments)
            run.commit_error = None
        except CommitError as e:
            print(f"[ERROR] Commit failed: {e}")
            run.committed = 0
            run.commit_error = e
        return run


def run_optimization(
    session: Session,
    organization_id: str,
    start: datetime,
    end: datetime,
    cfg: SchedulerConfig,
    persist: bool = True,
    cache: Optional[ResultCache] = None,
) -> OptimizationRun:
    """
    Convenience function to run the scheduling service from a loaded config.

    Args:
        session: Database session
        organization_id: Organization to optimize
        start: Window start
        end: Window end
        cfg: SchedulerConfig (solver, time limit, constraints)
        persist: If True, commit assignments to the database
        cache: Optional result cache shared across runs

    Returns:
        OptimizationRun
    """
    orchestrator = Orchestrator(make_assigner(cfg.solver, cfg.time_limit_seconds), cache=cache)
    return orchestrator.run(
        session,
        organization_id,
        start,
        end,
        cfg.constraints,
        persist=persist,
        time_limit_seconds=cfg.time_limit_seconds,
    )


def retry_commit(session: Session, run: OptimizationRun) -> OptimizationRun:
    """Retry persisting an already computed run."""
    return Orchestrator().commit(session, run)
