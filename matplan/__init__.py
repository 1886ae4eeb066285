"""
═══════════════════════════════════════════════════════════════════════════════════════════════════════
                    MATPLAN — MRP / CRP PLANNING ENGINE
═══════════════════════════════════════════════════════════════════════════════════════════════════════

Time-phased material and capacity planning over caller-supplied snapshots:
- Material Requirements Planning (BOM explosion, netting, lot sizing, lead time offsetting)
- Capacity Requirements Planning (work center load per period)
- Action messages (expedite, release, overload)

Pure computation: no persistence, no clocks, no randomness.
"""

from .errors import BOMCycleError, LotSizingError, PlanningInputError

from .config import PlanningConfig, get_config, reset_config

from .materials import (
    BOMEdge,
    BOMGraph,
    CriticalPath,
    ExplodedRequirement,
    LotSizingMethod,
    LotSizingRule,
    MasterScheduleEntry,
    MRPInputs,
    MRPPeriodRow,
    MRPRecord,
    MRPRunResult,
    PlannedOrder,
    ScheduledReceipt,
    apply_lot_sizing,
    cumulative_lead_time,
    explode_bom,
    explode_bom_multi_level,
    net_requirements,
    run_mrp,
)

from .capacity import (
    Bottleneck,
    CRPLoadRow,
    CRPResult,
    Overload,
    RoutingStep,
    WorkCenter,
    run_crp,
)

from .actions_engine import ActionMessage, ActionType, generate_action_messages

from .planning_engine import PlanningRunResult, run_planning

__version__ = "1.0.0"

__all__ = [
    # Errors
    "PlanningInputError",
    "BOMCycleError",
    "LotSizingError",
    # Config
    "PlanningConfig",
    "get_config",
    "reset_config",
    # Materials
    "BOMEdge",
    "BOMGraph",
    "CriticalPath",
    "ExplodedRequirement",
    "LotSizingMethod",
    "LotSizingRule",
    "MasterScheduleEntry",
    "MRPInputs",
    "MRPPeriodRow",
    "MRPRecord",
    "MRPRunResult",
    "PlannedOrder",
    "ScheduledReceipt",
    "apply_lot_sizing",
    "cumulative_lead_time",
    "explode_bom",
    "explode_bom_multi_level",
    "net_requirements",
    "run_mrp",
    # Capacity
    "Bottleneck",
    "CRPLoadRow",
    "CRPResult",
    "Overload",
    "RoutingStep",
    "WorkCenter",
    "run_crp",
    # Actions
    "ActionMessage",
    "ActionType",
    "generate_action_messages",
    # Planning
    "PlanningRunResult",
    "run_planning",
]
