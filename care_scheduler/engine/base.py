"""Base assigner interface that every assignment strategy implements."""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from care_scheduler.config import OptimizationConstraints
from care_scheduler.domain.entities import Shift, Staff, TimeOffRequest
from care_scheduler.errors import OptimizationTimeout


@dataclass
class AssignmentOutcome:
    """Copied schedule with this run's assignments applied, plus the new (shift_id, staff_id) pairs."""

    schedule: List[Shift]
    assignments: List[Tuple[str, str]] = field(default_factory=list)


class BaseAssigner(ABC):
    """
    Abstract base class for assignment strategies.

    An assigner fills open shifts of a snapshot. It never mutates its inputs:
    the returned schedule holds copies, in input order.
    """

    name: str | None = None  # Override in subclasses (e.g., "greedy", "cp_sat")

    @abstractmethod
    def assign(
        self,
        staff: Iterable[Staff],
        shifts: Iterable[Shift],
        constraints: OptimizationConstraints,
        time_off_requests: Iterable[TimeOffRequest],
        deadline: Optional[float] = None,
    ) -> AssignmentOutcome:
        """
        Assign staff to the open shifts of a snapshot.

        Args:
            staff: Active staff roster with certifications
            shifts: Every shift in the window, assigned and open
            constraints: Validated run constraints
            time_off_requests: Approved time-off requests
            deadline: Optional ``time.monotonic()`` value after which the run aborts

        Returns:
            AssignmentOutcome for the whole window

        Raises:
            OptimizationTimeout: If the deadline passes mid-run
        """
        pass

    def get_name(self) -> str:
        return self.name or "UNKNOWN"


def order_staff(staff: Iterable[Staff]) -> List[Staff]:
    """Canonical enumeration order: staff id ascending. Ties in scoring go to the earliest."""
    return sorted(staff, key=lambda member: member.id)


def order_open_shifts(open_shifts: Iterable[Shift], constraints: OptimizationConstraints) -> List[Shift]:
    """Hardest first: more required certifications earlier, then chronological, then by id."""
    return sorted(
        open_shifts,
        key=lambda s: (-len(constraints.required_certifications(s.shift_type)), s.start_time, s.id),
    )


def copy_schedule(shifts: Iterable[Shift]) -> List[Shift]:
    return [shift.with_staff(shift.staff_id) for shift in shifts]


def check_deadline(deadline: Optional[float]) -> None:
    if deadline is not None and time.monotonic() > deadline:
        raise OptimizationTimeout("Optimization deadline exceeded before all open shifts were processed")
