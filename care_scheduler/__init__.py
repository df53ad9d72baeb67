"""Staff shift scheduling optimizer for care facilities.

Modules:
- config: constraints bundle and configuration loading (YAML or JSON)
- domain: value objects, SQLAlchemy models, staff/shift/time-off repositories
- services: constraint predicates, staff scoring, conflicts, metrics and score
- engine: greedy and CP-SAT assigners, orchestrator (load, optimize, commit)
- io: CSV import/export
- validator: result checks and text summary
- cli: command-line interface entrypoints
"""

__all__ = [
    "config",
    "domain",
    "services",
    "engine",
    "io",
    "validator",
    "cli",
]
