"""CSV import utilities to load data into database."""

from __future__ import annotations

from pathlib import Path

import pandas as pd
from sqlalchemy.orm import Session

from care_scheduler.domain.models import StaffCertification, StaffMember, StaffSchedule, TimeOffEntry


TRUE_VALUES = {"TRUE", "T", "1", "YES", "Y"}


def _read(csv_path: str | Path) -> pd.DataFrame:
    df = pd.read_csv(csv_path, dtype=str, keep_default_na=False)
    # Normalize column names
    df.columns = df.columns.str.lower().str.strip()
    return df


def _optional(value) -> str | None:
    value = str(value).strip()
    return value or None


def import_staff_csv(session: Session, csv_path: str | Path) -> int:
    """
    Import staff members from CSV into database.

    Args:
        session: Database session
        csv_path: Path to staff CSV (staff_id, organization_id, first_name, last_name[, status])

    Returns:
        Number of staff members imported
    """
    df = _read(csv_path)

    members = []
    for _, row in df.iterrows():
        members.append(StaffMember(
            staff_id=str(row["staff_id"]).strip(),
            organization_id=str(row["organization_id"]).strip(),
            first_name=str(row["first_name"]),
            last_name=str(row["last_name"]),
            status=(_optional(row.get("status", "")) or "ACTIVE").upper(),
        ))

    session.add_all(members)
    session.commit()

    print(f"[INFO] Imported {len(members)} staff members from {csv_path}")
    return len(members)


def import_certifications_csv(session: Session, csv_path: str | Path) -> int:
    """
    Import staff certifications (staff_id, cert_type[, is_valid][, expiry_date]).

    Returns:
        Number of certifications imported
    """
    df = _read(csv_path)
    if "expiry_date" in df.columns:
        df["expiry_date"] = pd.to_datetime(df["expiry_date"], errors="coerce").dt.date

    certifications = []
    for _, row in df.iterrows():
        expiry = row.get("expiry_date")
        certifications.append(StaffCertification(
            staff_id=str(row["staff_id"]).strip(),
            cert_type=str(row["cert_type"]).strip().upper(),
            is_valid=str(row.get("is_valid", "TRUE") or "TRUE").strip().upper() in TRUE_VALUES,
            expiry_date=expiry if pd.notna(expiry) else None,
        ))

    session.add_all(certifications)
    session.commit()

    print(f"[INFO] Imported {len(certifications)} certifications from {csv_path}")
    return len(certifications)


def import_shifts_csv(session: Session, csv_path: str | Path, organization_id: str | None = None) -> int:
    """
    Import shifts from CSV into database.

    Args:
        session: Database session
        csv_path: Path to shifts CSV (id, organization_id, start_time, end_time, shift_type[, staff_id])
        organization_id: Optional organization to filter

    Returns:
        Number of shifts imported
    """
    df = _read(csv_path)
    df.rename(columns={"shift_id": "id"}, inplace=True)

    if organization_id is not None:
        df = df[df["organization_id"] == organization_id].copy()

    df["start_time"] = pd.to_datetime(df["start_time"])
    df["end_time"] = pd.to_datetime(df["end_time"])

    shifts = []
    for _, row in df.iterrows():
        shifts.append(StaffSchedule(
            id=str(row["id"]).strip(),
            organization_id=str(row["organization_id"]).strip(),
            staff_id=_optional(row.get("staff_id", "")),
            start_time=row["start_time"].to_pydatetime(),
            end_time=row["end_time"].to_pydatetime(),
            shift_type=str(row["shift_type"]).strip().upper(),
        ))

    session.add_all(shifts)
    session.commit()

    print(f"[INFO] Imported {len(shifts)} shifts from {csv_path}")
    return len(shifts)


def import_time_off_csv(session: Session, csv_path: str | Path, organization_id: str | None = None) -> int:
    """
    Import time-off requests (organization_id, staff_id, start_time, end_time[, status]).

    Returns:
        Number of requests imported
    """
    df = _read(csv_path)

    if organization_id is not None:
        df = df[df["organization_id"] == organization_id].copy()

    df["start_time"] = pd.to_datetime(df["start_time"])
    df["end_time"] = pd.to_datetime(df["end_time"])

    entries = []
    for _, row in df.iterrows():
        entries.append(TimeOffEntry(
            organization_id=str(row["organization_id"]).strip(),
            staff_id=str(row["staff_id"]).strip(),
            start_time=row["start_time"].to_pydatetime(),
            end_time=row["end_time"].to_pydatetime(),
            status=(_optional(row.get("status", "")) or "PENDING").upper(),
        ))

    session.add_all(entries)
    session.commit()

    print(f"[INFO] Imported {len(entries)} time-off requests from {csv_path}")
    return len(entries)
