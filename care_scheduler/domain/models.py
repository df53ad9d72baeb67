"""SQLAlchemy models for the staff directory, shift store and time-off store."""

from __future__ import annotations

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import DeclarativeBase, relationship


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


class StaffMember(Base):
    """Staff member with certifications."""

    __tablename__ = "staff"

    staff_id = Column(String(64), primary_key=True)
    organization_id = Column(String(64), nullable=False, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    status = Column(String(20), nullable=False, default="ACTIVE")  # ACTIVE, INACTIVE, ON_LEAVE

    # Relationships
    certifications = relationship("StaffCertification", back_populates="staff", cascade="all, delete-orphan")
    schedules = relationship("StaffSchedule", back_populates="staff")
    time_off = relationship("TimeOffEntry", back_populates="staff")

    def __repr__(self) -> str:
        return f"<StaffMember(id={self.staff_id}, name='{self.first_name} {self.last_name}', status='{self.status}')>"


class StaffCertification(Base):
    __tablename__ = "staff_certifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    staff_id = Column(String(64), ForeignKey("staff.staff_id"), nullable=False)
    cert_type = Column(String(50), nullable=False)  # e.g., CPR, FIRST_AID, MEDICATION
    is_valid = Column(Boolean, nullable=False, default=True)
    expiry_date = Column(Date, nullable=True)

    staff = relationship("StaffMember", back_populates="certifications")

    def __repr__(self) -> str:
        return f"<StaffCertification(staff={self.staff_id}, type={self.cert_type}, valid={self.is_valid})>"


class StaffSchedule(Base):
    """One shift; ``staff_id`` is NULL while the shift is open."""

    __tablename__ = "staff_schedules"

    id = Column(String(64), primary_key=True)
    organization_id = Column(String(64), nullable=False, index=True)
    staff_id = Column(String(64), ForeignKey("staff.staff_id"), nullable=True)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    shift_type = Column(String(20), nullable=False)  # MORNING, AFTERNOON, NIGHT

    staff = relationship("StaffMember", back_populates="schedules")

    def __repr__(self) -> str:
        return f"<StaffSchedule(id={self.id}, staff={self.staff_id}, type={self.shift_type}, start={self.start_time})>"


class TimeOffEntry(Base):
    __tablename__ = "time_off_requests"

    id = Column(Integer, primary_key=True, autoincrement=True)
    organization_id = Column(String(64), nullable=False, index=True)
    staff_id = Column(String(64), ForeignKey("staff.staff_id"), nullable=False)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    status = Column(String(20), nullable=False, default="PENDING")  # PENDING, APPROVED, REJECTED

    staff = relationship("StaffMember", back_populates="time_off")

    def __repr__(self) -> str:
        return f"<TimeOffEntry(id={self.id}, staff={self.staff_id}, status={self.status})>"
