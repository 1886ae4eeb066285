"""
matplan - Planning Errors
=========================

Structural input errors. These abort a planning run before any netting
happens, so callers never receive a partial record set.

Planning conditions (past-due releases, capacity overloads) are NOT errors:
they are returned as data in the run results.
"""

from __future__ import annotations

from typing import List, Optional


class PlanningInputError(ValueError):
    """Raised when planning inputs are structurally invalid."""

    def __init__(self, message: str, validation_errors: Optional[List[str]] = None):
        super().__init__(message)
        self.validation_errors = list(validation_errors or [message])


class BOMCycleError(PlanningInputError):
    """Raised when the BOM edge set contains a cycle."""

    def __init__(self, cycle: List[str]):
        path = " -> ".join(cycle)
        super().__init__(f"Cycle detected in BOM: {path}", [f"cycle: {path}"])
        self.cycle = list(cycle)


class LotSizingError(PlanningInputError):
    """Raised when a lot sizing rule cannot be applied."""
    pass
