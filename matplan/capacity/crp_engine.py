"""
═══════════════════════════════════════════════════════════════════════════════════════════════════════
                    CRP ENGINE — Capacity Requirements Planning
═══════════════════════════════════════════════════════════════════════════════════════════════════════

Infinite-capacity load of planned orders onto work centers, period by period.

Features:
- Load per work center and period from routings
- Utilization and overload detection
- Bottleneck identification
- Tabular export

Mathematical Model:
─────────────────────────────────────────────────────────────────────────────────────────────────────

Parameters:
    q_o     : Quantity of planned order o
    s_i,w   : Setup hours of item i on work center w
    r_i,w   : Run hours per unit of item i on work center w
    A_w     : Available hours per period of work center w

Load:
    R_w,t = Σ_{o released in t} Σ_{steps of o on w} (s + r × q_o)

Utilization:
    U_w,t = R_w,t / A_w × 100        (0 when A_w = 0)
    Overload if R_w,t > A_w       (both rounded to round_digits)

Bottleneck:
    w* = argmax_w (U_w,t) over overloaded rows

═══════════════════════════════════════════════════════════════════════════════════════════════════════
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

import numpy as np
import pandas as pd

from matplan.config import PlanningConfig, get_config
from matplan.errors import PlanningInputError
from matplan.materials.netting import PlannedOrder

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# DATA STRUCTURES
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class WorkCenter:
    """Production resource with a fixed number of hours per period."""
    id: str
    hours_available_per_period: float
    name: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "hours_available_per_period": float(self.hours_available_per_period),
        }


@dataclass(frozen=True)
class RoutingStep:
    """Operation of an item on a work center."""
    item: str
    work_center: str
    setup_hours: float = 0.0
    run_hours_per_unit: float = 0.0
    sequence: int = 10

    def hours_for(self, quantity: float) -> float:
        return self.setup_hours + self.run_hours_per_unit * quantity

    def to_dict(self) -> Dict[str, Any]:
        return {
            "item": self.item,
            "work_center": self.work_center,
            "setup_hours": float(self.setup_hours),
            "run_hours_per_unit": float(self.run_hours_per_unit),
            "sequence": self.sequence,
        }


@dataclass(frozen=True)
class CRPLoadRow:
    """Load of one work center in one period."""
    work_center: str
    period: int
    required_hours: float
    available_hours: float
    utilization_pct: float
    overloaded: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "work_center": self.work_center,
            "period": self.period,
            "required_hours": self.required_hours,
            "available_hours": self.available_hours,
            "utilization_pct": self.utilization_pct,
            "overloaded": self.overloaded,
        }


@dataclass(frozen=True)
class Overload:
    """Hours above capacity for a work center in a period."""
    work_center: str
    period: int
    overload_hours: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "work_center": self.work_center,
            "period": self.period,
            "overload_hours": self.overload_hours,
        }


@dataclass(frozen=True)
class Bottleneck:
    """Most loaded overloaded work center over the horizon."""
    work_center: str
    peak_period: int
    peak_utilization_pct: float
    overloaded_periods: Tuple[int, ...]
    total_overload_hours: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "work_center": self.work_center,
            "peak_period": self.peak_period,
            "peak_utilization_pct": self.peak_utilization_pct,
            "overloaded_periods": list(self.overloaded_periods),
            "total_overload_hours": self.total_overload_hours,
        }


@dataclass(frozen=True)
class CRPResult:
    """Capacity load for every (work center, period)."""
    loading: Tuple[CRPLoadRow, ...]
    overloads: Tuple[Overload, ...]

    def rows_for(self, work_center: str) -> List[CRPLoadRow]:
        return [row for row in self.loading if row.work_center == work_center]

    def row(self, work_center: str, period: int) -> Optional[CRPLoadRow]:
        for row in self.loading:
            if row.work_center == work_center and row.period == period:
                return row
        return None

    @property
    def has_overloads(self) -> bool:
        return bool(self.overloads)

    def bottleneck(self) -> Optional[Bottleneck]:
        """
        Identify the bottleneck work center.

        Only overloaded rows are candidates; ties on utilization keep the
        first row in loading order. Returns None when nothing is overloaded.
        """
        overloaded = [row for row in self.loading if row.overloaded]
        if not overloaded:
            return None

        peak = overloaded[0]
        for row in overloaded[1:]:
            if row.utilization_pct > peak.utilization_pct:
                peak = row

        own = [o for o in self.overloads if o.work_center == peak.work_center]
        return Bottleneck(
            work_center=peak.work_center,
            peak_period=peak.period,
            peak_utilization_pct=peak.utilization_pct,
            overloaded_periods=tuple(o.period for o in own),
            total_overload_hours=float(sum(o.overload_hours for o in own)),
        )

    def to_dict(self) -> Dict[str, Any]:
        bottleneck = self.bottleneck()
        return {
            "loading": [row.to_dict() for row in self.loading],
            "overloads": [o.to_dict() for o in self.overloads],
            "bottleneck": bottleneck.to_dict() if bottleneck else None,
        }

    def to_dataframe(self) -> pd.DataFrame:
        """Export loading to DataFrame (one row per work center and period)."""
        return pd.DataFrame(
            [row.to_dict() for row in self.loading],
            columns=[
                "work_center", "period", "required_hours",
                "available_hours", "utilization_pct", "overloaded",
            ],
        )

    def utilization_matrix(self) -> pd.DataFrame:
        """Utilization % pivoted as work centers x periods."""
        df = self.to_dataframe()
        if df.empty:
            return df
        return df.pivot(index="work_center", columns="period", values="utilization_pct")


# ═══════════════════════════════════════════════════════════════════════════════
# VALIDATION
# ═══════════════════════════════════════════════════════════════════════════════

def _validate(
    planned_orders: List[PlannedOrder],
    routings: List[RoutingStep],
    work_centers: List[WorkCenter],
    horizon_periods: int,
) -> List[str]:
    errors: List[str] = []

    if not isinstance(horizon_periods, int) or horizon_periods < 1:
        errors.append(f"horizon_periods must be an integer >= 1 (got {horizon_periods!r})")

    seen = set()
    for wc in work_centers:
        if wc.id in seen:
            errors.append(f"Work center {wc.id}: duplicate id")
        seen.add(wc.id)
        if wc.hours_available_per_period < 0:
            errors.append(
                f"Work center {wc.id}: hours_available_per_period must be >= 0 "
                f"(got {wc.hours_available_per_period})"
            )

    for step in routings:
        label = f"Routing {step.item}@{step.work_center}"
        if step.setup_hours < 0:
            errors.append(f"{label}: setup_hours must be >= 0 (got {step.setup_hours})")
        if step.run_hours_per_unit < 0:
            errors.append(f"{label}: run_hours_per_unit must be >= 0 (got {step.run_hours_per_unit})")

    for order in planned_orders:
        if order.quantity < 0:
            errors.append(f"Planned order {order.item}: quantity must be >= 0 (got {order.quantity})")

    return errors


# ═══════════════════════════════════════════════════════════════════════════════
# CRP RUN
# ═══════════════════════════════════════════════════════════════════════════════

def run_crp(
    planned_orders: Iterable[PlannedOrder],
    routings: Iterable[RoutingStep],
    work_centers: Iterable[WorkCenter],
    horizon_periods: int,
    config: Optional[PlanningConfig] = None,
) -> CRPResult:
    """
    Translate planned orders into work center load.

    Args:
        planned_orders: Orders to load (typically MRPRunResult.planned_orders)
        routings: Routing steps per item
        work_centers: Work centers, reported in the given order
        horizon_periods: Number of periods
        config: Engine defaults (process-wide config when omitted)

    Returns:
        CRPResult with one row per (work center, period)
    """
    config = config or get_config()
    planned_orders = list(planned_orders)
    routings = list(routings)
    work_centers = list(work_centers)

    errors = _validate(planned_orders, routings, work_centers, horizon_periods)
    if errors:
        logger.warning(f"CRP inputs rejected: {len(errors)} validation errors")
        raise PlanningInputError(f"Invalid CRP inputs ({len(errors)} errors)", errors)

    known = {wc.id for wc in work_centers}
    steps_by_item: Dict[str, List[RoutingStep]] = defaultdict(list)
    for step in sorted(routings, key=lambda s: s.sequence):
        if step.work_center not in known:
            logger.warning(f"Routing {step.item} references unknown work center {step.work_center}; ignored")
            continue
        steps_by_item[step.item].append(step)

    index = {wc.id: i for i, wc in enumerate(work_centers)}
    required = np.zeros((len(work_centers), horizon_periods), dtype=float)

    for order in planned_orders:
        steps = steps_by_item.get(order.item)
        if not steps:
            continue
        # Past-due orders load into the first period
        period = max(1, order.release_period)
        if period > horizon_periods:
            continue
        for step in steps:
            required[index[step.work_center], period - 1] += step.hours_for(order.quantity)

    digits = config.round_digits
    loading: List[CRPLoadRow] = []
    overloads: List[Overload] = []

    for wc in work_centers:
        # Utilization and overload both use the reported (rounded) hours
        available = round(float(wc.hours_available_per_period), digits)
        for t in range(horizon_periods):
            hours = round(float(required[index[wc.id], t]), digits)
            utilization = hours / available * 100 if available > 0 else 0.0
            overloaded = hours > available
            loading.append(CRPLoadRow(
                work_center=wc.id,
                period=t + 1,
                required_hours=hours,
                available_hours=available,
                utilization_pct=round(utilization, digits),
                overloaded=overloaded,
            ))
            if overloaded:
                overloads.append(Overload(
                    work_center=wc.id,
                    period=t + 1,
                    overload_hours=round(hours - available, digits),
                ))

    logger.info(
        f"CRP run complete: {len(work_centers)} work centers, {horizon_periods} periods, "
        f"{len(overloads)} overloads"
    )

    return CRPResult(loading=tuple(loading), overloads=tuple(overloads))
