"""Configuration loading for the optimizer (YAML or JSON, chosen by suffix)."""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Set

import yaml

from care_scheduler.domain.entities import TimeOffRequest
from care_scheduler.errors import ConstraintValidationError


WEEK_STARTS = {"sunday": 6, "monday": 0}  # datetime.weekday() of the first day
SOLVERS = {"greedy", "cp_sat"}
DEFAULT_DB_URL = "sqlite:///care_scheduler.db"
_COLLECTIONS = (list, tuple, set, frozenset)


@dataclass
class OptimizationConstraints:
    """
    Hard and soft rules for one optimization run.

    ``max_hours_per_week`` and ``min_rest_between_shifts`` have no defaults:
    callers must state them. Everything else defaults to "no rule".
    ``time_off_requests`` left as None means the scheduling service fetches
    approved requests from the time-off store.
    """

    max_hours_per_week: float
    min_rest_between_shifts: float
    preferred_shifts: Dict[str, Set[str]] = field(default_factory=dict)
    certification_requirements: Dict[str, List[str]] = field(default_factory=dict)
    time_off_requests: Optional[List[TimeOffRequest]] = None
    week_start: str = "sunday"

    def __post_init__(self):
        # Shift types are stored upper-case, so both lookup maps are keyed the same way
        self.certification_requirements = {
            str(shift_type).upper(): [str(c).upper() for c in certs] if isinstance(certs, _COLLECTIONS) else certs
            for shift_type, certs in (self.certification_requirements or {}).items()
        }
        self.preferred_shifts = {
            str(staff_id): {str(t).upper() for t in types} if isinstance(types, _COLLECTIONS) else types
            for staff_id, types in (self.preferred_shifts or {}).items()
        }
        if isinstance(self.week_start, str):
            self.week_start = self.week_start.lower()

    def required_certifications(self, shift_type: str) -> List[str]:
        return list(self.certification_requirements.get(shift_type.upper(), []))

    def prefers(self, staff_id: str, shift_type: str) -> bool:
        return shift_type.upper() in self.preferred_shifts.get(staff_id, set())


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def validate_constraints(constraints: OptimizationConstraints) -> None:
    """
    Fail fast on a constraints bundle that cannot drive a run.

    Raises:
        ConstraintValidationError: On any invalid option
    """
    if not _is_number(constraints.max_hours_per_week) or constraints.max_hours_per_week <= 0:
        raise ConstraintValidationError(
            f"max_hours_per_week must be a positive finite number, got {constraints.max_hours_per_week}"
        )
    if not _is_number(constraints.min_rest_between_shifts) or constraints.min_rest_between_shifts < 0:
        raise ConstraintValidationError(
            f"min_rest_between_shifts must be a finite number >= 0, got {constraints.min_rest_between_shifts}"
        )
    if constraints.week_start not in WEEK_STARTS:
        raise ConstraintValidationError(
            f"week_start must be one of {sorted(WEEK_STARTS)}, got {constraints.week_start!r}"
        )
    for shift_type, certs in constraints.certification_requirements.items():
        if not isinstance(certs, list):
            raise ConstraintValidationError(
                f"certification_requirements[{shift_type}] must be a list of certification types"
            )
    for staff_id, shift_types in constraints.preferred_shifts.items():
        if not isinstance(shift_types, set):
            raise ConstraintValidationError(
                f"preferred_shifts[{staff_id}] must be a collection of shift types"
            )


def build_constraints(raw: Dict) -> OptimizationConstraints:
    """Build constraints from a plain mapping (config file block or API payload)."""
    if "max_hours_per_week" not in raw or "min_rest_between_shifts" not in raw:
        raise ConstraintValidationError(
            "constraints require max_hours_per_week and min_rest_between_shifts"
        )
    constraints = OptimizationConstraints(
        max_hours_per_week=float(raw["max_hours_per_week"]),
        min_rest_between_shifts=float(raw["min_rest_between_shifts"]),
        preferred_shifts=dict(raw.get("preferred_shifts") or {}),
        certification_requirements=dict(raw.get("certification_requirements") or {}),
        week_start=str(raw.get("week_start", "sunday")),
    )
    validate_constraints(constraints)
    return constraints


@dataclass
class SchedulerConfig:
    constraints: OptimizationConstraints
    db_url: str = DEFAULT_DB_URL
    solver: str = "greedy"
    time_limit_seconds: Optional[float] = None


def load_config(path: str | Path) -> SchedulerConfig:
    """
    Load a scheduler configuration file.

    Args:
        path: ``.yaml``/``.yml`` or ``.json`` file

    Returns:
        SchedulerConfig with validated constraints
    """
    path = Path(path)
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        raw = json.loads(text)
    else:
        raw = yaml.safe_load(text) or {}

    solver = str(raw.get("solver", "greedy")).lower()
    if solver not in SOLVERS:
        raise ConstraintValidationError(f"solver must be one of {sorted(SOLVERS)}, got {solver!r}")

    time_limit = raw.get("time_limit_seconds")
    return SchedulerConfig(
        constraints=build_constraints(raw.get("constraints") or {}),
        db_url=str(raw.get("db_url", DEFAULT_DB_URL)),
        solver=solver,
        time_limit_seconds=float(time_limit) if time_limit is not None else None,
    )
