"""Tests for configuration loading and constraint validation."""

import json
from pathlib import Path

import pytest

from care_scheduler.config import OptimizationConstraints, build_constraints, load_config, validate_constraints
from care_scheduler.errors import ConstraintValidationError


REPO_CONFIG = Path(__file__).resolve().parent.parent / "scheduler_config.yaml"


def test_load_sample_config():
    cfg = load_config(REPO_CONFIG)

    assert cfg.solver == "greedy"
    assert cfg.constraints.max_hours_per_week == 40.0
    assert cfg.constraints.min_rest_between_shifts == 11.0
    assert cfg.constraints.required_certifications("night") == ["CPR", "FIRST_AID"]
    assert cfg.constraints.prefers("S001", "MORNING")
    assert cfg.constraints.time_off_requests is None


def test_load_json_config(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({
        "solver": "cp_sat",
        "time_limit_seconds": 5,
        "constraints": {
            "max_hours_per_week": 36,
            "min_rest_between_shifts": 8,
            "week_start": "Monday",
            "certification_requirements": {"night": ["cpr"]},
        },
    }))

    cfg = load_config(path)

    assert cfg.solver == "cp_sat"
    assert cfg.time_limit_seconds == 5.0
    assert cfg.constraints.week_start == "monday"
    assert cfg.constraints.certification_requirements == {"NIGHT": ["CPR"]}


def test_missing_required_options(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("constraints:\n  max_hours_per_week: 40\n")
    with pytest.raises(ConstraintValidationError):
        load_config(path)


def test_unknown_solver(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "solver: simulated_annealing\n"
        "constraints:\n  max_hours_per_week: 40\n  min_rest_between_shifts: 11\n"
    )
    with pytest.raises(ConstraintValidationError):
        load_config(path)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"max_hours_per_week": 0, "min_rest_between_shifts": 11},
        {"max_hours_per_week": -5, "min_rest_between_shifts": 11},
        {"max_hours_per_week": 40, "min_rest_between_shifts": -1},
        {"max_hours_per_week": float("nan"), "min_rest_between_shifts": 11},
        {"max_hours_per_week": 40, "min_rest_between_shifts": float("inf")},
        {"max_hours_per_week": 40, "min_rest_between_shifts": 11, "week_start": "wednesday"},
        {"max_hours_per_week": 40, "min_rest_between_shifts": 11, "certification_requirements": {"NIGHT": "CPR"}},
    ],
)
def test_invalid_constraints(kwargs):
    with pytest.raises(ConstraintValidationError):
        validate_constraints(OptimizationConstraints(**kwargs))


def test_constraint_validation_error_is_value_error():
    with pytest.raises(ValueError):
        build_constraints({"max_hours_per_week": 0, "min_rest_between_shifts": 0})
