"""
matplan - Net Requirements
==========================

Single-item MRP record: time-phased netting, lot sizing and lead time
offsetting over periods 1..H.

Modelo (por período p):
    disponível   = POH[p-1] + SR[p]
    NR[p]        = max(0, GR[p] - disponível)
    PORc[p]      = lote(NR[p])            (0 quando NR[p] = 0)
    PORl[p - L]  = PORc[p]                (descartado da tabela se p - L < 1)
    POH[p]       = max(0, disponível + PORc[p] - GR[p])
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple

import numpy as np
import pandas as pd

from matplan.materials.lot_sizing import LotSizingRule, apply_lot_sizing

logger = logging.getLogger(__name__)

# Quantities closer than this are the same quantity (float residue from
# quantity_per × scrap_factor products)
QUANTITY_DECIMALS = 9
QUANTITY_TOLERANCE = 10 ** -QUANTITY_DECIMALS


# ═══════════════════════════════════════════════════════════════════════════════
# DATA STRUCTURES
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class MRPPeriodRow:
    """One period of an item's MRP record."""
    period: int
    gross_requirements: float
    scheduled_receipts: float
    projected_on_hand: float
    net_requirements: float
    planned_order_receipt: float
    planned_order_release: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "period": self.period,
            "gross_requirements": float(self.gross_requirements),
            "scheduled_receipts": float(self.scheduled_receipts),
            "projected_on_hand": float(self.projected_on_hand),
            "net_requirements": float(self.net_requirements),
            "planned_order_receipt": float(self.planned_order_receipt),
            "planned_order_release": float(self.planned_order_release),
        }


@dataclass(frozen=True)
class PlannedOrder:
    """MRP planned order (release at release_period, available at receipt_period)."""
    item: str
    release_period: int
    receipt_period: int
    quantity: float

    @property
    def past_due(self) -> bool:
        return self.release_period < 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "item": self.item,
            "release_period": self.release_period,
            "receipt_period": self.receipt_period,
            "quantity": float(self.quantity),
            "past_due": self.past_due,
        }


@dataclass(frozen=True)
class MRPRecord:
    """Complete MRP record for one item."""
    item: str
    level: int
    lead_time: int
    lot_sizing: LotSizingRule
    rows: Tuple[MRPPeriodRow, ...]
    planned_orders: Tuple[PlannedOrder, ...]

    @property
    def horizon(self) -> int:
        return len(self.rows)

    def row(self, period: int) -> MRPPeriodRow:
        """Row for a period (1-based)."""
        if period < 1 or period > len(self.rows):
            raise IndexError(f"Period {period} outside horizon 1..{len(self.rows)}")
        return self.rows[period - 1]

    @property
    def total_gross_requirements(self) -> float:
        return float(sum(r.gross_requirements for r in self.rows))

    @property
    def total_planned_receipts(self) -> float:
        return float(sum(r.planned_order_receipt for r in self.rows))

    @property
    def past_due_orders(self) -> List[PlannedOrder]:
        return [o for o in self.planned_orders if o.past_due]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "item": self.item,
            "level": self.level,
            "lead_time": self.lead_time,
            "lot_sizing": self.lot_sizing.to_dict(),
            "rows": [r.to_dict() for r in self.rows],
            "planned_orders": [o.to_dict() for o in self.planned_orders],
        }

    def to_dataframe(self) -> pd.DataFrame:
        """Export the time-phased record (one row per period)."""
        df = pd.DataFrame(
            [r.to_dict() for r in self.rows],
            columns=[
                "period", "gross_requirements", "scheduled_receipts",
                "projected_on_hand", "net_requirements",
                "planned_order_receipt", "planned_order_release",
            ],
        )
        df.insert(0, "item", self.item)
        df.insert(1, "level", self.level)
        return df


# ═══════════════════════════════════════════════════════════════════════════════
# NETTING
# ═══════════════════════════════════════════════════════════════════════════════

def _as_period_array(values: Any, horizon: int, label: str) -> np.ndarray:
    """Normalise a period series (list indexed from period 1 or {period: qty})."""
    array = np.zeros(horizon, dtype=float)
    if values is None:
        return array
    if isinstance(values, Mapping):
        for period, qty in values.items():
            if 1 <= int(period) <= horizon:
                array[int(period) - 1] += float(qty)
        return array
    values = list(values)
    if len(values) > horizon:
        logger.debug(f"{label}: {len(values) - horizon} periods beyond horizon ignored")
    n = min(len(values), horizon)
    array[:n] = np.asarray(values[:n], dtype=float)
    return array


def net_requirements(
    item: str,
    gross: Any,
    on_hand_start: float,
    scheduled_receipts: Any,
    lead_time: int,
    lot_sizing: Optional[LotSizingRule],
    horizon: int,
    level: int = 0,
) -> MRPRecord:
    """
    Compute the MRP record of a single item.

    Args:
        item: Item id
        gross: Gross requirements, list (index 0 = period 1) or {period: qty}
        on_hand_start: Inventory at the start of period 1 (>= 0)
        scheduled_receipts: Open receipts, list or {period: qty}
        lead_time: Lead time in periods (>= 0)
        lot_sizing: Lot sizing rule (None = Lot-for-Lot)
        horizon: Number of periods
        level: Low-level code, carried into the record

    Returns:
        MRPRecord with one row per period and the planned orders
        (including past-due ones whose release falls before period 1)
    """
    rule = lot_sizing or LotSizingRule.lot_for_lot()
    gr = _as_period_array(gross, horizon, f"{item} gross")
    sr = _as_period_array(scheduled_receipts, horizon, f"{item} receipts")

    receipts = np.zeros(horizon, dtype=float)
    releases = np.zeros(horizon, dtype=float)
    nets = np.zeros(horizon, dtype=float)
    poh = np.zeros(horizon, dtype=float)
    orders: List[PlannedOrder] = []

    on_hand = max(0.0, float(on_hand_start))

    for t in range(horizon):
        period = t + 1
        available = on_hand + sr[t]
        net = gr[t] - available
        if net <= QUANTITY_TOLERANCE * max(1.0, abs(gr[t])):
            net = 0.0
        nets[t] = net

        qty = 0.0
        if net > 0:
            qty = apply_lot_sizing(rule, net)
            receipts[t] = qty
            release_period = period - lead_time
            if release_period >= 1:
                releases[release_period - 1] += qty
            orders.append(PlannedOrder(
                item=item,
                release_period=release_period,
                receipt_period=period,
                quantity=qty,
            ))

        on_hand = max(0.0, available + qty - gr[t])
        poh[t] = on_hand

    rows = tuple(
        MRPPeriodRow(
            period=t + 1,
            gross_requirements=float(gr[t]),
            scheduled_receipts=float(sr[t]),
            projected_on_hand=float(poh[t]),
            net_requirements=float(nets[t]),
            planned_order_receipt=float(receipts[t]),
            planned_order_release=float(releases[t]),
        )
        for t in range(horizon)
    )

    past_due = sum(1 for o in orders if o.past_due)
    if past_due:
        logger.debug(f"{item}: {past_due} planned orders past due (lead time {lead_time})")

    return MRPRecord(
        item=item,
        level=level,
        lead_time=lead_time,
        lot_sizing=rule,
        rows=rows,
        planned_orders=tuple(orders),
    )
