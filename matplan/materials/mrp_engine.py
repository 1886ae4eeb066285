"""
matplan - MRP Engine
====================

Material Requirements Planning (MRP) run over a full BOM.

Features:
- Input validation (all structural errors reported at once)
- Level-by-level processing using low-level codes
- Dependent demand explosion (parent release -> component gross requirement)
- Lead time resolution (override -> BOM edge -> default)
- Expedite / release action messages

Fluxo:
    Master Schedule -> nível 0 -> planned orders -> explosão -> nível 1 -> ...
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

from matplan.config import PlanningConfig, get_config
from matplan.errors import PlanningInputError
from matplan.materials.bom_engine import BOMEdge, BOMGraph, validate_edges
from matplan.materials.lot_sizing import LotSizingRule, resolve_rule
from matplan.materials.netting import (
    QUANTITY_DECIMALS,
    MRPRecord,
    PlannedOrder,
    net_requirements,
)

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# DATA STRUCTURES
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class MasterScheduleEntry:
    """Independent demand for an item in a period."""
    period: int
    item: str
    quantity: float

    def to_dict(self) -> Dict[str, Any]:
        return {"period": self.period, "item": self.item, "quantity": float(self.quantity)}


@dataclass(frozen=True)
class ScheduledReceipt:
    """Open order already in progress, arriving in a period."""
    item: str
    period: int
    quantity: float

    def to_dict(self) -> Dict[str, Any]:
        return {"item": self.item, "period": self.period, "quantity": float(self.quantity)}


@dataclass
class MRPInputs:
    """Snapshot of everything an MRP run needs."""
    master_schedule: List[MasterScheduleEntry]
    bom: List[BOMEdge]
    horizon_periods: int
    inventory: Dict[str, float] = field(default_factory=dict)
    scheduled_receipts: List[ScheduledReceipt] = field(default_factory=list)
    lot_sizing: Dict[str, LotSizingRule] = field(default_factory=dict)
    lead_times: Dict[str, int] = field(default_factory=dict)  # Per-item overrides


@dataclass(frozen=True)
class MRPRunResult:
    """Result of a full MRP run."""
    records: Tuple[MRPRecord, ...]
    action_messages: Tuple[Any, ...]  # ActionMessage
    warnings: Tuple[str, ...] = ()

    def record_for(self, item: str) -> Optional[MRPRecord]:
        for record in self.records:
            if record.item == item:
                return record
        return None

    @property
    def planned_orders(self) -> List[PlannedOrder]:
        return [order for record in self.records for order in record.planned_orders]

    @property
    def levels(self) -> Dict[str, int]:
        return {record.item: record.level for record in self.records}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "records": [r.to_dict() for r in self.records],
            "action_messages": [m.to_dict() for m in self.action_messages],
            "warnings": list(self.warnings),
        }

    def to_dataframe(self) -> pd.DataFrame:
        """All records stacked (item, level, period, ...)."""
        if not self.records:
            return pd.DataFrame()
        return pd.concat([r.to_dataframe() for r in self.records], ignore_index=True)


# ═══════════════════════════════════════════════════════════════════════════════
# VALIDATION
# ═══════════════════════════════════════════════════════════════════════════════

def validate_inputs(inputs: MRPInputs) -> BOMGraph:
    """
    Check every structural rule of an MRP snapshot.

    Collects all problems before raising so callers can fix them in one go.

    Returns:
        The validated (acyclic) BOM graph

    Raises:
        PlanningInputError: with validation_errors listing every problem
        BOMCycleError: if the edges are otherwise valid but cyclic
    """
    errors: List[str] = []

    if not isinstance(inputs.horizon_periods, int) or inputs.horizon_periods < 1:
        errors.append(f"horizon_periods must be an integer >= 1 (got {inputs.horizon_periods!r})")

    for entry in inputs.master_schedule:
        if not entry.item:
            errors.append(f"Master schedule entry in period {entry.period}: item is required")
        if entry.period < 1:
            errors.append(f"Master schedule {entry.item}: period must be >= 1 (got {entry.period})")
        if entry.quantity < 0:
            errors.append(f"Master schedule {entry.item}: quantity must be >= 0 (got {entry.quantity})")

    for item, qty in inputs.inventory.items():
        if qty < 0:
            errors.append(f"Inventory {item}: on-hand must be >= 0 (got {qty})")

    for receipt in inputs.scheduled_receipts:
        if receipt.period < 1:
            errors.append(f"Scheduled receipt {receipt.item}: period must be >= 1 (got {receipt.period})")
        if receipt.quantity < 0:
            errors.append(f"Scheduled receipt {receipt.item}: quantity must be >= 0 (got {receipt.quantity})")

    for item, lead_time in inputs.lead_times.items():
        if lead_time < 0:
            errors.append(f"Lead time {item}: must be >= 0 (got {lead_time})")

    for item, rule in inputs.lot_sizing.items():
        if not isinstance(rule, LotSizingRule):
            errors.append(f"Lot sizing {item}: expected LotSizingRule (got {type(rule).__name__})")

    errors.extend(validate_edges(inputs.bom))

    if errors:
        logger.warning(f"MRP inputs rejected: {len(errors)} validation errors")
        raise PlanningInputError(f"Invalid MRP inputs ({len(errors)} errors)", errors)

    return BOMGraph(inputs.bom)


# ═══════════════════════════════════════════════════════════════════════════════
# MRP RUN
# ═══════════════════════════════════════════════════════════════════════════════

def resolve_lead_time(
    item: str,
    graph: BOMGraph,
    overrides: Dict[str, int],
    config: PlanningConfig,
) -> int:
    """Lead time of an item: override, else BOM edges, else configured default."""
    if item in overrides:
        return int(overrides[item])
    from_bom = graph.lead_time_of(item)
    if from_bom is not None:
        return int(from_bom)
    return int(config.default_lead_time)


def run_mrp(inputs: MRPInputs, config: Optional[PlanningConfig] = None) -> MRPRunResult:
    """
    Run MRP for every item reachable from the master schedule.

    Args:
        inputs: Planning snapshot (not modified)
        config: Engine defaults (process-wide config when omitted)

    Returns:
        MRPRunResult with one record per reachable item, sorted by level then item
    """
    from matplan.actions_engine import generate_action_messages

    config = config or get_config()
    graph = validate_inputs(inputs)
    horizon = inputs.horizon_periods
    warnings: List[str] = []

    # Independent demand
    gross: Dict[str, Dict[int, float]] = defaultdict(lambda: defaultdict(float))
    roots: List[str] = []
    for entry in inputs.master_schedule:
        if entry.item not in roots:
            roots.append(entry.item)
        if entry.period > horizon:
            msg = (
                f"Master schedule {entry.item} period {entry.period} is beyond "
                f"horizon {horizon}; {entry.quantity} units ignored"
            )
            logger.warning(msg)
            warnings.append(msg)
            continue
        gross[entry.item][entry.period] += entry.quantity

    receipts: Dict[str, Dict[int, float]] = defaultdict(lambda: defaultdict(float))
    for receipt in inputs.scheduled_receipts:
        if receipt.period > horizon:
            msg = f"Scheduled receipt {receipt.item} period {receipt.period} is beyond horizon {horizon}; ignored"
            logger.warning(msg)
            warnings.append(msg)
            continue
        receipts[receipt.item][receipt.period] += receipt.quantity

    levels_by_item = graph.low_level_codes(roots)
    ordered = sorted(levels_by_item, key=lambda item: (levels_by_item[item], item))

    logger.info(
        f"Starting MRP run: {len(ordered)} items, {len(inputs.bom)} BOM edges, "
        f"horizon {horizon} periods"
    )

    records: List[MRPRecord] = []
    for item in ordered:
        level = levels_by_item[item]
        lead_time = resolve_lead_time(item, graph, inputs.lead_times, config)
        rule = resolve_rule(inputs.lot_sizing, item, config.default_lot_sizing)

        record = net_requirements(
            item=item,
            gross={p: round(q, QUANTITY_DECIMALS) for p, q in gross.get(item, {}).items()},
            on_hand_start=inputs.inventory.get(item, 0.0),
            scheduled_receipts=dict(receipts.get(item, {})),
            lead_time=lead_time,
            lot_sizing=rule,
            horizon=horizon,
            level=level,
        )
        records.append(record)

        if config.log_item_detail:
            logger.debug(
                f"MRP {item} (level {level}, LT {lead_time}, {rule.method.value}): "
                f"{len(record.planned_orders)} planned orders"
            )

        # Dependent demand lands in the parent's release period (period 1 if past due)
        for order in record.planned_orders:
            period = max(1, order.release_period)
            for edge in graph.children(item):
                gross[edge.component][period] += order.quantity * edge.extended_quantity_per

    messages = generate_action_messages(records)
    logger.info(
        f"MRP run complete: {len(records)} records, "
        f"{sum(len(r.planned_orders) for r in records)} planned orders, "
        f"{len(messages)} action messages"
    )

    return MRPRunResult(
        records=tuple(records),
        action_messages=tuple(messages),
        warnings=tuple(warnings),
    )
