"""Exceptions raised by the scheduling optimizer."""

from __future__ import annotations


class ConstraintValidationError(ValueError):
    """Constraints bundle rejected before any assignment is attempted."""
    pass


class OptimizationTimeout(RuntimeError):
    """A run passed its deadline before every open shift was processed."""
    pass


class CommitError(RuntimeError):
    """Batched write of computed assignments to the shift store failed."""

    def __init__(self, message: str, assignments=None):
        super().__init__(message)
        self.assignments = list(assignments or [])
