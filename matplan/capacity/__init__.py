"""
matplan - Capacity Planning
===========================

Capacity Requirements Planning (CRP) over MRP planned orders.
"""

from .crp_engine import (
    WorkCenter,
    RoutingStep,
    CRPLoadRow,
    Overload,
    Bottleneck,
    CRPResult,
    run_crp,
)

__all__ = [
    "WorkCenter",
    "RoutingStep",
    "CRPLoadRow",
    "Overload",
    "Bottleneck",
    "CRPResult",
    "run_crp",
]
