"""Running per-staff state for one optimization run."""

from __future__ import annotations

from collections import defaultdict
from datetime import date, datetime
from typing import Dict, Iterable, List, Tuple

from care_scheduler.domain.entities import Shift

from .timeplan import week_start_for


class WorkingState:
    """
    Assigned shifts and weekly hour totals per staff member.

    Seeded from every pre-existing assignment in the run window and updated
    incrementally as the engine commits assignments, so later shifts see
    earlier commitments.
    """

    def __init__(self, week_start: str = "sunday"):
        self.week_start = week_start
        self._shifts: Dict[str, List[Shift]] = defaultdict(list)
        self._weekly_hours: Dict[Tuple[str, date], float] = defaultdict(float)

    @classmethod
    def from_schedule(cls, shifts: Iterable[Shift], week_start: str = "sunday") -> "WorkingState":
        state = cls(week_start)
        for shift in shifts:
            if shift.staff_id is not None:
                state.commit(shift.staff_id, shift)
        return state

    def commit(self, staff_id: str, shift: Shift) -> None:
        self._shifts[staff_id].append(shift)
        self._weekly_hours[(staff_id, self.week_of(shift.start_time))] += shift.hours

    def week_of(self, moment: datetime) -> date:
        return week_start_for(moment, self.week_start)

    def shifts_for(self, staff_id: str) -> List[Shift]:
        return list(self._shifts.get(staff_id, []))

    def weekly_hours(self, staff_id: str, moment: datetime) -> float:
        """Hours already held by ``staff_id`` in the week containing ``moment``."""
        return self._weekly_hours.get((staff_id, self.week_of(moment)), 0.0)

    def projected_weekly_hours(self, staff_id: str, shift: Shift) -> float:
        return self.weekly_hours(staff_id, shift.start_time) + shift.hours

    def hours_by_staff_week(self) -> Dict[Tuple[str, date], float]:
        return dict(self._weekly_hours)
