"""Command-line interface for the shift scheduling optimizer."""

from __future__ import annotations

import argparse

import pandas as pd

from care_scheduler.config import DEFAULT_DB_URL, load_config
from care_scheduler.domain.db import get_session, init_database
from care_scheduler.domain.repositories import ShiftStore, StaffDirectory, TimeOffStore
from care_scheduler.engine.orchestrator import audit_schedule, run_optimization
from care_scheduler.io.export_csv import export_conflicts_csv, export_schedule_csv
from care_scheduler.io.import_csv import (
    import_certifications_csv,
    import_shifts_csv,
    import_staff_csv,
    import_time_off_csv,
)
from care_scheduler.validator import summarize_result, validate_result


def _window(args: argparse.Namespace):
    return pd.Timestamp(args.start).to_pydatetime(), pd.Timestamp(args.end).to_pydatetime()


def _db_url(args: argparse.Namespace, cfg=None) -> str:
    if args.db:
        return args.db
    if cfg is not None:
        return cfg.db_url
    return DEFAULT_DB_URL


def _cmd_init_db(args: argparse.Namespace) -> None:
    """Initialize the database."""
    db_url = _db_url(args)
    init_database(db_url)
    print(f"[OK] Database initialized: {db_url}")


def _cmd_import_csv(args: argparse.Namespace) -> None:
    """Import CSV data into database."""
    session = get_session(_db_url(args))

    try:
        if args.staff:
            count = import_staff_csv(session, args.staff)
            print(f"[OK] Imported {count} staff members")

        if args.certifications:
            count = import_certifications_csv(session, args.certifications)
            print(f"[OK] Imported {count} certifications")

        if args.shifts:
            count = import_shifts_csv(session, args.shifts, organization_id=args.org)
            print(f"[OK] Imported {count} shifts")

        if args.time_off:
            count = import_time_off_csv(session, args.time_off, organization_id=args.org)
            print(f"[OK] Imported {count} time-off requests")

        session.close()
        print("[OK] CSV import complete")

    except Exception as e:
        session.rollback()
        session.close()
        print(f"[ERROR] Import failed: {e}")
        raise


def _cmd_optimize(args: argparse.Namespace) -> None:
    """Optimize open shifts for an organization and date range."""
    cfg = load_config(args.config)
    if args.solver:
        cfg.solver = args.solver
    start, end = _window(args)
    session = get_session(_db_url(args, cfg))

    try:
        run = run_optimization(session, args.org, start, end, cfg, persist=not args.dry_run)
        staff = StaffDirectory.list_eligible_staff(session, args.org)
        validate_result(run.result, staff)

        if args.out:
            export_schedule_csv(run.result, args.out)
        if args.conflicts_out:
            export_conflicts_csv(run.result, args.conflicts_out)

        session.close()
        print(summarize_result(run.result))

        if run.commit_error is not None:
            raise SystemExit(f"[ERROR] Schedule computed but not committed: {run.commit_error}")
        if args.dry_run:
            print("[INFO] Dry run: no assignments were written")

    except Exception as e:
        session.rollback()
        session.close()
        print(f"[ERROR] Optimization failed: {e}")
        raise


def _cmd_audit(args: argparse.Namespace) -> None:
    """Report conflicts, metrics and score of the stored schedule."""
    cfg = load_config(args.config)
    start, end = _window(args)
    session = get_session(_db_url(args, cfg))

    try:
        staff = StaffDirectory.list_eligible_staff(session, args.org)
        shifts = ShiftStore.list_shifts(session, args.org, start, end)
        time_off = cfg.constraints.time_off_requests
        if time_off is None:
            time_off = TimeOffStore.list_approved(session, args.org, start, end)
        session.close()

        result = audit_schedule(staff, shifts, cfg.constraints, time_off)
        if args.conflicts_out:
            export_conflicts_csv(result, args.conflicts_out)
        print(summarize_result(result))

    except Exception as e:
        session.close()
        print(f"[ERROR] Audit failed: {e}")
        raise


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="care-scheduler",
        description="Staff shift scheduling optimizer for care facilities",
    )

    # Global options
    parser.add_argument("--db", help="Database URL (default: from config, else sqlite:///care_scheduler.db)")

    sub = parser.add_subparsers(dest="command", required=True)

    init = sub.add_parser("init-db", help="Initialize database")
    init.set_defaults(func=_cmd_init_db)

    imp = sub.add_parser("import-csv", help="Import CSV data into database")
    imp.add_argument("--staff", help="Path to staff CSV")
    imp.add_argument("--certifications", help="Path to certifications CSV")
    imp.add_argument("--shifts", help="Path to shifts CSV")
    imp.add_argument("--time-off", dest="time_off", help="Path to time-off CSV")
    imp.add_argument("--org", help="Organization ID to filter shifts/time off (optional)")
    imp.set_defaults(func=_cmd_import_csv)

    opt = sub.add_parser("optimize", help="Assign open shifts in a date range")
    opt.add_argument("--org", required=True, help="Organization ID")
    opt.add_argument("--start", required=True, help="Window start (e.g., 2025-09-07)")
    opt.add_argument("--end", required=True, help="Window end (e.g., 2025-09-14)")
    opt.add_argument("--config", required=True, help="Path to config YAML or JSON")
    opt.add_argument("--solver", choices=["greedy", "cp_sat"], help="Override configured solver")
    opt.add_argument("--dry-run", action="store_true", help="Compute without committing")
    opt.add_argument("--out", help="Optional: export schedule to CSV")
    opt.add_argument("--conflicts-out", help="Optional: export conflicts to CSV")
    opt.set_defaults(func=_cmd_optimize)

    aud = sub.add_parser("audit", help="Score the stored schedule without assigning")
    aud.add_argument("--org", required=True, help="Organization ID")
    aud.add_argument("--start", required=True, help="Window start")
    aud.add_argument("--end", required=True, help="Window end")
    aud.add_argument("--config", required=True, help="Path to config YAML or JSON")
    aud.add_argument("--conflicts-out", help="Optional: export conflicts to CSV")
    aud.set_defaults(func=_cmd_audit)

    args = parser.parse_args(argv)
    args.func(args)


if __name__ == "__main__":
    main()
