"""CSV export of optimization results."""

from __future__ import annotations

from pathlib import Path

import pandas as pd

from care_scheduler.domain.entities import OptimizationResult


SCHEDULE_COLUMNS = ["shift_id", "staff_id", "start_time", "end_time", "shift_type", "hours", "newly_assigned"]
CONFLICT_COLUMNS = ["type", "severity", "staff_id", "shift_ids", "description"]


def schedule_frame(result: OptimizationResult) -> pd.DataFrame:
    new_ids = {shift_id for shift_id, _ in result.assignments}
    rows = [
        {
            "shift_id": shift.id,
            "staff_id": shift.staff_id,
            "start_time": shift.start_time.isoformat(),
            "end_time": shift.end_time.isoformat(),
            "shift_type": shift.shift_type,
            "hours": shift.hours,
            "newly_assigned": shift.id in new_ids,
        }
        for shift in result.schedule
    ]
    return pd.DataFrame(rows, columns=SCHEDULE_COLUMNS)


def export_schedule_csv(result: OptimizationResult, csv_path: str | Path) -> int:
    """
    Write the full post-optimization schedule to CSV.

    Returns:
        Number of shifts written
    """
    df = schedule_frame(result)
    df.to_csv(csv_path, index=False)
    print(f"[INFO] Exported {len(df)} shifts to {csv_path}")
    return len(df)


def export_conflicts_csv(result: OptimizationResult, csv_path: str | Path) -> int:
    rows = [
        {
            "type": c.type,
            "severity": c.severity,
            "staff_id": c.staff_id,
            "shift_ids": ";".join(c.shift_ids),
            "description": c.description,
        }
        for c in result.conflicts
    ]
    df = pd.DataFrame(rows, columns=CONFLICT_COLUMNS)
    df.to_csv(csv_path, index=False)
    print(f"[INFO] Exported {len(df)} conflicts to {csv_path}")
    return len(df)
