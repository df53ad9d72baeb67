"""Repository classes for the optimizer's read collaborators and its single write."""

from __future__ import annotations

from datetime import datetime
from typing import List, Sequence, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from care_scheduler.errors import CommitError

from .entities import Certification, Shift, Staff, TimeOffRequest, STATUS_ACTIVE, TIME_OFF_APPROVED
from .models import StaffMember, StaffSchedule, TimeOffEntry


def to_staff(row: StaffMember) -> Staff:
    return Staff(
        id=row.staff_id,
        name=f"{row.first_name} {row.last_name}",
        status=row.status,
        certifications=[
            Certification(cert_type=c.cert_type.upper(), is_valid=bool(c.is_valid), expiry_date=c.expiry_date)
            for c in sorted(row.certifications, key=lambda c: (c.cert_type, c.id))
        ],
    )


def to_shift(row: StaffSchedule) -> Shift:
    return Shift(
        id=row.id,
        start_time=row.start_time,
        end_time=row.end_time,
        shift_type=row.shift_type,
        staff_id=row.staff_id,
        organization_id=row.organization_id,
    )


def to_time_off(row: TimeOffEntry) -> TimeOffRequest:
    return TimeOffRequest(
        staff_id=row.staff_id,
        start_time=row.start_time,
        end_time=row.end_time,
        status=row.status,
    )


class StaffDirectory:
    """Read access to the staff roster."""

    @staticmethod
    def list_eligible_staff(session: Session, organization_id: str) -> List[Staff]:
        """Active staff of an organization with certifications, ordered by id."""
        rows = (
            session.query(StaffMember)
            .options(selectinload(StaffMember.certifications))
            .filter(StaffMember.organization_id == organization_id)
            .filter(StaffMember.status == STATUS_ACTIVE)
            .order_by(StaffMember.staff_id)
            .all()
        )
        return [to_staff(row) for row in rows]


class ShiftStore:
    """Shift storage: windowed reads and the batched assignment commit."""

    @staticmethod
    def list_shifts(session: Session, organization_id: str, start: datetime, end: datetime) -> List[Shift]:
        """Shifts lying entirely inside ``[start, end]``, ordered by start time then id."""
        rows = (
            session.query(StaffSchedule)
            .filter(StaffSchedule.organization_id == organization_id)
            .filter(StaffSchedule.start_time >= start)
            .filter(StaffSchedule.end_time <= end)
            .order_by(StaffSchedule.start_time, StaffSchedule.id)
            .all()
        )
        return [to_shift(row) for row in rows]

    @staticmethod
    def get_by_id(session: Session, shift_id: str) -> StaffSchedule | None:
        return session.query(StaffSchedule).filter(StaffSchedule.id == shift_id).first()

    @staticmethod
    def commit_assignments(session: Session, assignments: Sequence[Tuple[str, str]]) -> int:
        """
        Write computed assignments in one transaction.

        Either every ``(shift_id, staff_id)`` pair is stored or none is. A
        shift that vanished or was filled by someone else since it was loaded
        aborts the whole batch.

        Returns:
            Number of shifts updated

        Raises:
            CommitError: If the batch could not be written; the session is rolled back
        """
        assignments = list(assignments)
        if not assignments:
            return 0
        try:
            for shift_id, staff_id in assignments:
                row = session.get(StaffSchedule, shift_id)
                if row is None:
                    raise CommitError(f"Shift {shift_id} no longer exists", assignments)
                if row.staff_id is not None and row.staff_id != staff_id:
                    raise CommitError(
                        f"Shift {shift_id} was assigned to {row.staff_id} since it was loaded",
                        assignments,
                    )
                row.staff_id = staff_id
            session.commit()
        except CommitError:
            session.rollback()
            raise
        except SQLAlchemyError as e:
            session.rollback()
            raise CommitError(f"Failed to commit {len(assignments)} assignments: {e}", assignments) from e
        print(f"[INFO] Committed {len(assignments)} assignments to shift store")
        return len(assignments)


class TimeOffStore:
    """Read access to time-off requests."""

    @staticmethod
    def list_approved(session: Session, organization_id: str, start: datetime, end: datetime) -> List[TimeOffRequest]:
        """Approved requests overlapping ``[start, end)``."""
        rows = (
            session.query(TimeOffEntry)
            .filter(TimeOffEntry.organization_id == organization_id)
            .filter(TimeOffEntry.status == TIME_OFF_APPROVED)
            .filter(TimeOffEntry.start_time < end)
            .filter(TimeOffEntry.end_time > start)
            .order_by(TimeOffEntry.staff_id, TimeOffEntry.start_time)
            .all()
        )
        return [to_time_off(row) for row in rows]
