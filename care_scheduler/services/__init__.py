"""Services for scheduling logic."""

from .conflicts import identify_conflicts
from .constraints import filter_eligible_staff, is_eligible
from .metrics import calculate_metrics, calculate_optimization_score
from .scoring import calculate_staff_score, select_best_staff
from .state import WorkingState
from .timeplan import week_start_for

__all__ = [
    "identify_conflicts",
    "filter_eligible_staff",
    "is_eligible",
    "calculate_metrics",
    "calculate_optimization_score",
    "calculate_staff_score",
    "select_best_staff",
    "WorkingState",
    "week_start_for",
]
