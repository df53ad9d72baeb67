"""Ranking heuristics for eligible staff."""

from __future__ import annotations

from typing import Iterable, Optional

from care_scheduler.config import OptimizationConstraints
from care_scheduler.domain.entities import Shift, Staff

from .state import WorkingState


PREFERRED_SHIFT_BONUS = 10.0
CERTIFICATION_MATCH_BONUS = 5.0


def calculate_staff_score(
    staff: Staff,
    shift: Shift,
    state: WorkingState,
    constraints: OptimizationConstraints,
) -> float:
    """
    Calculate how good a candidate is for a shift.

    Higher score = better candidate. Purely additive, no upper bound:
    preferred shift type bonus, half the hours left under the weekly cap after
    taking this shift, and a bonus per required certification held.

    Args:
        staff: Candidate (assumed already eligible)
        shift: Shift being filled
        state: Current working state
        constraints: Run constraints

    Returns:
        Raw score (higher is better)
    """
    score = 0.0

    if constraints.prefers(staff.id, shift.shift_type):
        score += PREFERRED_SHIFT_BONUS

    # Workload balance
    projected = state.projected_weekly_hours(staff.id, shift)
    score += (constraints.max_hours_per_week - projected) / 2

    # Breadth of certification, tie-breaker for broadly certified staff
    for cert_type in constraints.required_certifications(shift.shift_type):
        if staff.holds(cert_type):
            score += CERTIFICATION_MATCH_BONUS

    return score


def select_best_staff(
    eligible: Iterable[Staff],
    shift: Shift,
    state: WorkingState,
    constraints: OptimizationConstraints,
) -> Optional[Staff]:
    """Highest scoring candidate; the first one seen wins a tie."""
    best: Optional[Staff] = None
    best_score = 0.0
    for candidate in eligible:
        score = calculate_staff_score(candidate, shift, state, constraints)
        if best is None or score > best_score:
            best, best_score = candidate, score
    return best
