"""
═══════════════════════════════════════════════════════════════════════════════════════════════════════
                    PLANNING ENGINE — MRP → CRP → Action Messages
═══════════════════════════════════════════════════════════════════════════════════════════════════════

Single entry point for a full planning run:
1. MRP over the master schedule and BOM
2. CRP over the resulting planned orders
3. Action messages (expedite, release, overload)

═══════════════════════════════════════════════════════════════════════════════════════════════════════
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Tuple

from matplan.actions_engine import ActionMessage, ActionType, generate_action_messages
from matplan.capacity.crp_engine import CRPResult, RoutingStep, WorkCenter, run_crp
from matplan.config import PlanningConfig, get_config
from matplan.materials.mrp_engine import MRPInputs, MRPRunResult, run_mrp

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlanningRunResult:
    """Outcome of a combined MRP + CRP run."""
    mrp: MRPRunResult
    crp: CRPResult
    action_messages: Tuple[ActionMessage, ...]

    def messages_of(self, action_type: ActionType) -> Tuple[ActionMessage, ...]:
        return tuple(m for m in self.action_messages if m.action_type == action_type)

    def summary(self) -> Dict[str, Any]:
        bottleneck = self.crp.bottleneck()
        return {
            "items_planned": len(self.mrp.records),
            "planned_orders": len(self.mrp.planned_orders),
            "expedite": len(self.messages_of(ActionType.EXPEDITE)),
            "release": len(self.messages_of(ActionType.RELEASE)),
            "overloads": len(self.crp.overloads),
            "bottleneck": bottleneck.work_center if bottleneck else None,
            "warnings": len(self.mrp.warnings),
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "summary": self.summary(),
            "mrp": self.mrp.to_dict(),
            "crp": self.crp.to_dict(),
            "action_messages": [m.to_dict() for m in self.action_messages],
        }


def run_planning(
    inputs: MRPInputs,
    routings: Iterable[RoutingStep],
    work_centers: Iterable[WorkCenter],
    config: Optional[PlanningConfig] = None,
) -> PlanningRunResult:
    """
    Run MRP, load its planned orders with CRP and merge all action messages.

    Args:
        inputs: MRP snapshot
        routings: Routing steps per item
        work_centers: Work centers to load
        config: Engine defaults (process-wide config when omitted)

    Returns:
        PlanningRunResult
    """
    config = config or get_config()

    mrp = run_mrp(inputs, config=config)
    crp = run_crp(
        mrp.planned_orders,
        routings,
        work_centers,
        inputs.horizon_periods,
        config=config,
    )
    messages = generate_action_messages(mrp.records, crp)

    result = PlanningRunResult(mrp=mrp, crp=crp, action_messages=tuple(messages))
    logger.info(f"Planning run complete: {result.summary()}")
    return result
