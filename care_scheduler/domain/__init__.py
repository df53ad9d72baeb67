"""Domain value objects, ORM models and data access layer."""

from .entities import Certification, Conflict, OptimizationResult, ScheduleMetrics, Shift, Staff, TimeOffRequest
from .models import Base, StaffCertification, StaffMember, StaffSchedule, TimeOffEntry
from .repositories import ShiftStore, StaffDirectory, TimeOffStore

__all__ = [
    "Certification",
    "Conflict",
    "OptimizationResult",
    "ScheduleMetrics",
    "Shift",
    "Staff",
    "TimeOffRequest",
    "Base",
    "StaffCertification",
    "StaffMember",
    "StaffSchedule",
    "TimeOffEntry",
    "ShiftStore",
    "StaffDirectory",
    "TimeOffStore",
]
