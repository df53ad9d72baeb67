"""End-to-end run of the command-line interface against a SQLite file."""

import pandas as pd
import pytest

from care_scheduler.cli import main


CONFIG = """\
solver: greedy
constraints:
  max_hours_per_week: 40
  min_rest_between_shifts: 11
  certification_requirements:
    NIGHT: [CPR, FIRST_AID]
    MORNING: [MEDICATION]
"""


@pytest.fixture
def workspace(tmp_path):
    (tmp_path / "staff.csv").write_text(
        "staff_id,organization_id,first_name,last_name\n"
        "S001,ORG1,Ada,Reid\n"
        "S002,ORG1,Ben,Okafor\n"
    )
    (tmp_path / "certs.csv").write_text(
        "staff_id,cert_type\n"
        "S001,CPR\n"
        "S001,FIRST_AID\n"
        "S002,MEDICATION\n"
    )
    (tmp_path / "shifts.csv").write_text(
        "id,organization_id,staff_id,start_time,end_time,shift_type\n"
        "N1,ORG1,,2025-09-08 22:00,2025-09-09 06:00,NIGHT\n"
        "M1,ORG1,,2025-09-09 07:00,2025-09-09 15:00,MORNING\n"
    )
    (tmp_path / "config.yaml").write_text(CONFIG)
    return tmp_path


@pytest.mark.integration
def test_import_optimize_audit(workspace, capsys):
    db = f"sqlite:///{workspace / 'care.db'}"
    config = str(workspace / "config.yaml")
    out = workspace / "schedule.csv"

    main(["--db", db, "init-db"])
    main([
        "--db", db, "import-csv",
        "--staff", str(workspace / "staff.csv"),
        "--certifications", str(workspace / "certs.csv"),
        "--shifts", str(workspace / "shifts.csv"),
    ])
    main([
        "--db", db, "optimize", "--org", "ORG1",
        "--start", "2025-09-07", "--end", "2025-09-14",
        "--config", config, "--out", str(out),
    ])

    schedule = pd.read_csv(out)
    assert dict(zip(schedule["shift_id"], schedule["staff_id"])) == {"N1": "S001", "M1": "S002"}
    assert "New assignments: 2" in capsys.readouterr().out

    main([
        "--db", db, "audit", "--org", "ORG1",
        "--start", "2025-09-07", "--end", "2025-09-14",
        "--config", config,
    ])
    report = capsys.readouterr().out
    assert "Unassigned: 0" in report
    assert "Conflicts: 0" in report


@pytest.mark.integration
def test_dry_run_leaves_store_untouched(workspace, capsys):
    db = f"sqlite:///{workspace / 'care.db'}"
    config = str(workspace / "config.yaml")

    main(["--db", db, "init-db"])
    main(["--db", db, "import-csv", "--staff", str(workspace / "staff.csv"),
          "--certifications", str(workspace / "certs.csv"), "--shifts", str(workspace / "shifts.csv")])
    main(["--db", db, "optimize", "--org", "ORG1", "--start", "2025-09-07", "--end", "2025-09-14",
          "--config", config, "--dry-run"])
    assert "Dry run" in capsys.readouterr().out

    main(["--db", db, "audit", "--org", "ORG1", "--start", "2025-09-07", "--end", "2025-09-14",
          "--config", config])
    assert "Unassigned: 2" in capsys.readouterr().out


def test_unknown_subcommand_exits():
    with pytest.raises(SystemExit):
        main(["reschedule"])
