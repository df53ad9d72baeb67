"""Plain value objects the optimizer works on.

Populated once at load time from the ORM rows (see repositories) or built
directly by callers and tests. Nothing in here touches the database.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import List, Optional, Tuple


SEVERITY_HIGH = "high"
SEVERITY_MEDIUM = "medium"
SEVERITY_LOW = "low"
SEVERITIES = (SEVERITY_HIGH, SEVERITY_MEDIUM, SEVERITY_LOW)

STATUS_ACTIVE = "ACTIVE"
TIME_OFF_APPROVED = "APPROVED"


@dataclass(frozen=True)
class Certification:
    cert_type: str
    is_valid: bool = True
    expiry_date: Optional[date] = None

    def __post_init__(self):
        object.__setattr__(self, "cert_type", str(self.cert_type).upper())

    def is_current(self, on: Optional[datetime] = None) -> bool:
        """Valid flag set and, when an expiry is known, not expired on ``on``."""
        if not self.is_valid:
            return False
        if self.expiry_date is None or on is None:
            return True
        return self.expiry_date >= on.date()


@dataclass
class Staff:
    id: str
    name: str = ""
    certifications: List[Certification] = field(default_factory=list)
    status: str = STATUS_ACTIVE

    def holds(self, cert_type: str) -> bool:
        return any(c.cert_type == cert_type for c in self.certifications)

    def holds_valid(self, cert_type: str, on: Optional[datetime] = None) -> bool:
        return any(c.cert_type == cert_type and c.is_current(on) for c in self.certifications)


@dataclass
class Shift:
    """A bounded interval of a given type, optionally assigned to one staff member."""

    id: str
    start_time: datetime
    end_time: datetime
    shift_type: str
    staff_id: Optional[str] = None
    organization_id: Optional[str] = None

    def __post_init__(self):
        self.shift_type = str(self.shift_type).upper()
        if self.end_time <= self.start_time:
            raise ValueError(
                f"Shift {self.id} must end after it starts: {self.start_time} - {self.end_time}"
            )

    @property
    def is_assigned(self) -> bool:
        return self.staff_id is not None

    @property
    def hours(self) -> float:
        return (self.end_time - self.start_time).total_seconds() / 3600.0

    def with_staff(self, staff_id: Optional[str]) -> "Shift":
        return replace(self, staff_id=staff_id)


@dataclass(frozen=True)
class TimeOffRequest:
    staff_id: str
    start_time: datetime
    end_time: datetime
    status: str = TIME_OFF_APPROVED

    @property
    def is_approved(self) -> bool:
        return self.status.upper() == TIME_OFF_APPROVED


@dataclass(frozen=True)
class Conflict:
    type: str
    description: str
    severity: str
    staff_id: Optional[str] = None
    shift_ids: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ScheduleMetrics:
    utilization_rate: float
    overtime_hours: float
    unassigned_shifts: int
    certification_compliance: float


@dataclass
class OptimizationResult:
    schedule: List[Shift]
    score: float
    conflicts: List[Conflict]
    metrics: ScheduleMetrics
    assignments: List[Tuple[str, str]] = field(default_factory=list)
    duration_ms: float = 0.0

    def as_dict(self) -> dict:
        """JSON-friendly view used by the CLI and exports."""
        return {
            "score": self.score,
            "metrics": {
                "utilization_rate": self.metrics.utilization_rate,
                "overtime_hours": self.metrics.overtime_hours,
                "unassigned_shifts": self.metrics.unassigned_shifts,
                "certification_compliance": self.metrics.certification_compliance,
            },
            "conflicts": [
                {
                    "type": c.type,
                    "description": c.description,
                    "severity": c.severity,
                    "staff_id": c.staff_id,
                    "shift_ids": list(c.shift_ids),
                }
                for c in self.conflicts
            ],
            "assignments": [
                {"shift_id": shift_id, "staff_id": staff_id}
                for shift_id, staff_id in self.assignments
            ],
            "duration_ms": self.duration_ms,
        }
