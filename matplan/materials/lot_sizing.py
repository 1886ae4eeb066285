"""
matplan - Lot Sizing
====================

Lot sizing rules: map a net requirement to an order quantity.

Métodos:
- LFL: Lot-for-Lot (ordem = necessidade líquida)
- FOQ: Fixed Order Quantity (múltiplos inteiros de Q)
- EOQ: Economic Order Quantity (pelo menos Q)
- POQ: Period Order Quantity (simplificado, igual a LFL)

Modelo:
    LFL(n)    = n
    FOQ(n, Q) = ceil(n / Q) × Q
    EOQ(n, Q) = max(Q, n)
    POQ(n)    = n
    f(0)      = 0 para todos os métodos
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

import numpy as np

from matplan.errors import LotSizingError


class LotSizingMethod(str, Enum):
    """Closed set of lot sizing methods."""
    LOT_FOR_LOT = "LFL"
    FIXED_ORDER_QUANTITY = "FOQ"
    ECONOMIC_ORDER_QUANTITY = "EOQ"
    PERIOD_ORDER_QUANTITY = "POQ"

    @property
    def needs_quantity(self) -> bool:
        return self in (LotSizingMethod.FIXED_ORDER_QUANTITY, LotSizingMethod.ECONOMIC_ORDER_QUANTITY)

    @classmethod
    def parse(cls, value: Any) -> "LotSizingMethod":
        """Accept enum members, short codes ("FOQ") or long names ("fixed_order_quantity")."""
        if isinstance(value, cls):
            return value
        text = str(value).strip()
        for method in cls:
            if text.upper() == method.value or text.upper() == method.name:
                return method
        aliases = {
            "LOT_FOR_LOT": cls.LOT_FOR_LOT,
            "FIXED_ORDER_QTY": cls.FIXED_ORDER_QUANTITY,
            "FIXED": cls.FIXED_ORDER_QUANTITY,
            "ECONOMIC": cls.ECONOMIC_ORDER_QUANTITY,
            "PERIODIC_ORDER_QUANTITY": cls.PERIOD_ORDER_QUANTITY,
            "PERIOD": cls.PERIOD_ORDER_QUANTITY,
        }
        method = aliases.get(text.upper().replace("-", "_").replace(" ", "_"))
        if method is None:
            raise LotSizingError(f"Unknown lot sizing method: {value!r}")
        return method


@dataclass(frozen=True)
class LotSizingRule:
    """Lot sizing configuration for one item."""
    method: LotSizingMethod = LotSizingMethod.LOT_FOR_LOT
    quantity: Optional[float] = None  # Q for FOQ / EOQ

    def __post_init__(self):
        method = LotSizingMethod.parse(self.method)
        object.__setattr__(self, "method", method)
        if method.needs_quantity:
            if self.quantity is None or not self.quantity > 0:
                raise LotSizingError(
                    f"{method.value} requires a lot quantity > 0 (got {self.quantity})"
                )

    @classmethod
    def lot_for_lot(cls) -> "LotSizingRule":
        return cls(LotSizingMethod.LOT_FOR_LOT)

    @classmethod
    def fixed(cls, quantity: float) -> "LotSizingRule":
        return cls(LotSizingMethod.FIXED_ORDER_QUANTITY, quantity)

    @classmethod
    def economic(cls, quantity: float) -> "LotSizingRule":
        return cls(LotSizingMethod.ECONOMIC_ORDER_QUANTITY, quantity)

    @classmethod
    def period(cls) -> "LotSizingRule":
        return cls(LotSizingMethod.PERIOD_ORDER_QUANTITY)

    def apply(self, net_requirement: float) -> float:
        return apply_lot_sizing(self, net_requirement)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "method": self.method.value,
            "quantity": float(self.quantity) if self.quantity is not None else None,
        }


def apply_lot_sizing(rule: LotSizingRule, net_requirement: float) -> float:
    """
    Apply a lot sizing rule to a net requirement.

    Args:
        rule: Lot sizing rule for the item
        net_requirement: Net requirement (>= 0)

    Returns:
        Order quantity (0 when there is no net requirement)
    """
    if net_requirement < 0:
        raise LotSizingError(f"Net requirement must be >= 0 (got {net_requirement})")
    if net_requirement == 0:
        return 0.0

    method = rule.method
    if method == LotSizingMethod.LOT_FOR_LOT:
        return float(net_requirement)
    elif method == LotSizingMethod.FIXED_ORDER_QUANTITY:
        lots = np.ceil(net_requirement / rule.quantity)
        return float(lots * rule.quantity)
    elif method == LotSizingMethod.ECONOMIC_ORDER_QUANTITY:
        return float(max(rule.quantity, net_requirement))
    elif method == LotSizingMethod.PERIOD_ORDER_QUANTITY:
        # True POQ groups several periods of demand into one order;
        # at single-period granularity it behaves as lot-for-lot.
        return float(net_requirement)

    raise LotSizingError(f"Unsupported lot sizing method: {method!r}")


def resolve_rule(
    rules: Dict[str, LotSizingRule],
    item: str,
    default_method: str = "LFL",
) -> LotSizingRule:
    """Rule for an item, falling back to the configured default."""
    rule = rules.get(item)
    if rule is not None:
        return rule
    return LotSizingRule(LotSizingMethod.parse(default_method))
