"""Tests for the scheduling service - load, optimize, commit."""

import datetime as dt

import pytest

from care_scheduler.config import OptimizationConstraints, SchedulerConfig
from care_scheduler.domain.models import StaffCertification, StaffMember, StaffSchedule, TimeOffEntry
from care_scheduler.domain.repositories import ShiftStore, StaffDirectory, TimeOffStore
from care_scheduler.engine.cache import ResultCache, result_key
from care_scheduler.engine.orchestrator import Orchestrator, retry_commit, run_optimization
from care_scheduler.errors import CommitError, ConstraintValidationError


ORG = "ORG1"
START = dt.datetime(2025, 9, 7)
END = dt.datetime(2025, 9, 14)


def _schedule_row(shift_id, day, start_hour, hours, shift_type, staff_id=None, org=ORG):
    start = dt.datetime(2025, 9, day, start_hour)
    return StaffSchedule(id=shift_id, organization_id=org, staff_id=staff_id, start_time=start,
                         end_time=start + dt.timedelta(hours=hours), shift_type=shift_type)


@pytest.fixture
def sample_data(db_session):
    """Three active staff, one inactive, a week of shifts and some time off."""
    staff = [
        StaffMember(staff_id="S001", organization_id=ORG, first_name="Ada", last_name="Reid"),
        StaffMember(staff_id="S002", organization_id=ORG, first_name="Ben", last_name="Okafor"),
        StaffMember(staff_id="S003", organization_id=ORG, first_name="Cara", last_name="Lind"),
        StaffMember(staff_id="S004", organization_id=ORG, first_name="Dev", last_name="Shah", status="INACTIVE"),
        StaffMember(staff_id="X001", organization_id="ORG2", first_name="Eve", last_name="Moss"),
    ]
    certs = [
        StaffCertification(staff_id="S001", cert_type="CPR"),
        StaffCertification(staff_id="S001", cert_type="FIRST_AID"),
        StaffCertification(staff_id="S002", cert_type="CPR"),
        StaffCertification(staff_id="S004", cert_type="CPR"),
        StaffCertification(staff_id="S004", cert_type="FIRST_AID"),
    ]
    shifts = [
        _schedule_row("m8", 8, 7, 8, "MORNING", staff_id="S003"),
        _schedule_row("m9", 9, 7, 8, "MORNING"),
        _schedule_row("a9", 9, 15, 8, "AFTERNOON"),
        _schedule_row("n9", 9, 23, 8, "NIGHT"),
        _schedule_row("n10", 10, 23, 8, "NIGHT"),
        _schedule_row("late", 13, 20, 8, "NIGHT"),  # ends after the window
        _schedule_row("other", 9, 7, 8, "MORNING", org="ORG2"),
    ]
    time_off = [
        TimeOffEntry(organization_id=ORG, staff_id="S002", start_time=dt.datetime(2025, 9, 9),
                     end_time=dt.datetime(2025, 9, 10), status="APPROVED"),
        TimeOffEntry(organization_id=ORG, staff_id="S003", start_time=dt.datetime(2025, 9, 9),
                     end_time=dt.datetime(2025, 9, 10), status="PENDING"),
    ]
    db_session.add_all(staff)
    db_session.add_all(certs)
    db_session.add_all(shifts)
    db_session.add_all(time_off)
    db_session.commit()
    return db_session


def test_repositories_load_snapshot(sample_data):
    staff = StaffDirectory.list_eligible_staff(sample_data, ORG)
    assert [s.id for s in staff] == ["S001", "S002", "S003"]
    assert {c.cert_type for c in staff[0].certifications} == {"CPR", "FIRST_AID"}

    shifts = ShiftStore.list_shifts(sample_data, ORG, START, END)
    assert [s.id for s in shifts] == ["m8", "m9", "a9", "n9", "n10"]

    time_off = TimeOffStore.list_approved(sample_data, ORG, START, END)
    assert [(t.staff_id, t.status) for t in time_off] == [("S002", "APPROVED")]


def test_run_commits_assignments(sample_data, constraints):
    run = Orchestrator().run(sample_data, ORG, START, END, constraints)

    assert run.commit_error is None
    assert run.persisted
    assert run.committed == len(run.result.assignments)

    stored = {s.id: s.staff_id for s in ShiftStore.list_shifts(sample_data, ORG, START, END)}
    assert stored["m8"] == "S003"
    # Only S001 holds both night certifications
    assert stored["n9"] == "S001"
    assert stored["n10"] == "S001"
    # S002 is on approved time off on the 9th
    assert stored["m9"] != "S002"
    assert stored["a9"] != "S002"
    assert run.result.conflicts == []


def test_dry_run_does_not_persist(sample_data, constraints):
    run = Orchestrator().run(sample_data, ORG, START, END, constraints, persist=False)

    assert run.result.assignments
    assert run.committed == 0
    stored = {s.id: s.staff_id for s in ShiftStore.list_shifts(sample_data, ORG, START, END)}
    assert stored["n9"] is None


def test_commit_failure_reported_separately(sample_data, constraints, monkeypatch):
    """A failed write keeps the computed result and can be retried without recomputing."""
    def failing_commit(session, assignments):
        raise CommitError("store unavailable", assignments)

    with monkeypatch.context() as m:
        m.setattr(ShiftStore, "commit_assignments", staticmethod(failing_commit))
        run = Orchestrator().run(sample_data, ORG, START, END, constraints)

    assert isinstance(run.commit_error, CommitError)
    assert not run.persisted
    assert run.result.score >= 0.0
    assert all(c.type != "COMMIT" for c in run.result.conflicts)

    retried = retry_commit(sample_data, run)
    assert retried.commit_error is None
    assert retried.persisted
    stored = {s.id: s.staff_id for s in ShiftStore.list_shifts(sample_data, ORG, START, END)}
    assert stored["n9"] == "S001"


def test_commit_is_all_or_nothing(sample_data):
    with pytest.raises(CommitError):
        ShiftStore.commit_assignments(sample_data, [("m9", "S001"), ("missing", "S001")])

    assert ShiftStore.get_by_id(sample_data, "m9").staff_id is None


def test_commit_rejects_shift_filled_since_load(sample_data):
    with pytest.raises(CommitError):
        ShiftStore.commit_assignments(sample_data, [("m8", "S001")])
    assert ShiftStore.get_by_id(sample_data, "m8").staff_id == "S003"


def test_loading_failure_propagates(sample_data, constraints, monkeypatch, capsys):
    def broken(session, organization_id):
        raise RuntimeError("directory offline")

    monkeypatch.setattr(StaffDirectory, "list_eligible_staff", staticmethod(broken))
    with pytest.raises(RuntimeError, match="directory offline"):
        Orchestrator().run(sample_data, ORG, START, END, constraints)

    error_lines = [line for line in capsys.readouterr().out.splitlines() if line.startswith("[ERROR]")]
    assert len(error_lines) == 1
    assert ORG in error_lines[0]
    assert str(START) in error_lines[0] and str(END) in error_lines[0]
    assert "directory offline" in error_lines[0]


def test_run_optimization_with_config(sample_data, constraints):
    cfg = SchedulerConfig(constraints=constraints, solver="cp_sat", time_limit_seconds=10)
    run = run_optimization(sample_data, ORG, START, END, cfg)

    assert run.persisted
    # a9 and m9 back onto each other and onto n9, so one of the five stays open
    assert run.result.metrics.unassigned_shifts == 1
    assert run.result.conflicts == []


def test_run_records_performance_and_caches_result(sample_data, constraints):
    orchestrator = Orchestrator()
    run = orchestrator.run(sample_data, ORG, START, END, constraints, persist=False)

    assert run.performance["operation"] == "schedule_optimization"
    assert run.performance["organization_id"] == ORG
    assert run.performance["shifts_count"] == 5
    assert run.performance["conflicts_count"] == len(run.result.conflicts)
    assert run.performance["duration_ms"] >= 0.0

    assert orchestrator.cached_result(ORG, START) is run.result
    assert orchestrator.cached_result(ORG, END) is None
    assert orchestrator.cached_result("ORG2", START) is None


def test_failed_run_is_not_cached(sample_data):
    cache = ResultCache()
    invalid = OptimizationConstraints(max_hours_per_week=0, min_rest_between_shifts=11)

    with pytest.raises(ConstraintValidationError):
        Orchestrator(cache=cache).run(sample_data, ORG, START, END, invalid)
    assert len(cache) == 0


def test_cached_results_expire():
    now = [1000.0]
    cache = ResultCache(ttl_seconds=3600, clock=lambda: now[0])
    result = object()

    cache.set(ORG, START, result)
    now[0] += 3599
    assert cache.get(ORG, START) is result

    now[0] += 1
    assert cache.get(ORG, START) is None
    assert len(cache) == 0


def test_run_optimization_shares_cache(sample_data, constraints):
    cache = ResultCache()
    cfg = SchedulerConfig(constraints=constraints)

    run = run_optimization(sample_data, ORG, START, END, cfg, persist=False, cache=cache)

    assert cache.get(ORG, START) is run.result
    assert result_key(ORG, START) == f"schedule:optimization:{ORG}:{START.isoformat()}"
