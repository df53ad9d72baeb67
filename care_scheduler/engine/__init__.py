"""Assignment engines and the optimization orchestrator."""

from .base import AssignmentOutcome, BaseAssigner
from .cache import ResultCache
from .cp_sat import CPSatAssigner
from .greedy import GreedyAssigner
from .orchestrator import (
    OptimizationRun,
    Orchestrator,
    audit_schedule,
    make_assigner,
    optimize_schedule,
    retry_commit,
    run_optimization,
)

__all__ = [
    "AssignmentOutcome",
    "BaseAssigner",
    "CPSatAssigner",
    "GreedyAssigner",
    "OptimizationRun",
    "Orchestrator",
    "ResultCache",
    "audit_schedule",
    "make_assigner",
    "optimize_schedule",
    "retry_commit",
    "run_optimization",
]
