"""
matplan - Materials Planning
============================

BOM graph, lot sizing, single-item netting and the full MRP run.
"""

from .bom_engine import (
    BOMEdge,
    BOMGraph,
    CriticalPath,
    ExplodedRequirement,
    cumulative_lead_time,
    explode_bom,
    explode_bom_multi_level,
    validate_edges,
)

from .lot_sizing import (
    LotSizingMethod,
    LotSizingRule,
    apply_lot_sizing,
)

from .netting import (
    MRPPeriodRow,
    MRPRecord,
    PlannedOrder,
    net_requirements,
)

from .mrp_engine import (
    MasterScheduleEntry,
    ScheduledReceipt,
    MRPInputs,
    MRPRunResult,
    run_mrp,
    validate_inputs,
)

__all__ = [
    # BOM
    "BOMEdge",
    "BOMGraph",
    "CriticalPath",
    "ExplodedRequirement",
    "cumulative_lead_time",
    "explode_bom",
    "explode_bom_multi_level",
    "validate_edges",
    # Lot sizing
    "LotSizingMethod",
    "LotSizingRule",
    "apply_lot_sizing",
    # Netting
    "MRPPeriodRow",
    "MRPRecord",
    "PlannedOrder",
    "net_requirements",
    # MRP
    "MasterScheduleEntry",
    "ScheduledReceipt",
    "MRPInputs",
    "MRPRunResult",
    "run_mrp",
    "validate_inputs",
]
