"""Integrity checks and text summaries for optimization results."""

from __future__ import annotations

from typing import Iterable

import pandas as pd

from care_scheduler.domain.entities import SEVERITIES, OptimizationResult, Staff

from .io.export_csv import schedule_frame


def validate_result(result: OptimizationResult, staff: Iterable[Staff]) -> None:
    # Referential integrity
    staff_ids = {member.id for member in staff}
    shift_ids = [shift.id for shift in result.schedule]
    if len(set(shift_ids)) != len(shift_ids):
        raise ValueError("Schedule contains duplicate shift ids")
    assigned_to = {shift.id: shift.staff_id for shift in result.schedule}
    for shift_id, staff_id in result.assignments:
        if shift_id not in assigned_to:
            raise ValueError(f"Assignment references unknown shift id {shift_id}")
        if staff_id not in staff_ids:
            raise ValueError(f"Assignment references unknown staff id {staff_id}")
        if assigned_to[shift_id] != staff_id:
            raise ValueError(f"Shift {shift_id} does not carry its assignment to {staff_id}")

    if not 0.0 <= result.score <= 100.0:
        raise ValueError(f"Score out of range: {result.score}")
    unassigned = sum(1 for shift in result.schedule if shift.staff_id is None)
    if unassigned != result.metrics.unassigned_shifts:
        raise ValueError(
            f"Unassigned count mismatch: schedule has {unassigned}, metrics report {result.metrics.unassigned_shifts}"
        )
    bad = [c for c in result.conflicts if c.severity not in SEVERITIES]
    if bad:
        raise ValueError(f"Unknown conflict severity: {bad[0].severity}")


def summarize_result(result: OptimizationResult) -> str:
    m = result.metrics
    lines = [
        f"Score: {result.score:.1f}",
        f"Utilization: {m.utilization_rate:.1f}%  Unassigned: {m.unassigned_shifts}  "
        f"Overtime: {m.overtime_hours:.1f}h  Certification compliance: {m.certification_compliance:.1f}%",
        f"New assignments: {len(result.assignments)}  Conflicts: {len(result.conflicts)}",
    ]

    df = schedule_frame(result)
    if df.empty:
        lines.append("No shifts.")
        return "\n".join(lines)

    df["status"] = df["staff_id"].notna().map({True: "assigned", False: "open"})
    coverage = df.groupby(["shift_type", "status"]).size().unstack(fill_value=0)
    lines.append("")
    lines.append("Shifts per type:")
    lines.append(coverage.to_string())

    assigned = df[df["staff_id"].notna()]
    if not assigned.empty:
        hours = assigned.groupby("staff_id")["hours"].sum().sort_values(ascending=False)
        lines.append("")
        lines.append("Hours per staff member (window):")
        lines.append(hours.to_string())

    if result.conflicts:
        lines.append("")
        lines.append("Conflicts:")
        for c in result.conflicts:
            lines.append(f"  [{c.severity}] {c.type}: {c.description}")
    return "\n".join(lines)
