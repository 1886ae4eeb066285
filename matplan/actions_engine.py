"""
Actions Engine for matplan

Turns planning results into action messages for the planner:
- EXPEDITE: planned order whose release date has already passed
- RELEASE: planned order to release in the current period
- OVERLOAD: work center loaded above its available hours

Messages are proposals only; nothing is executed against ERP or machines.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd


# -------------------------
# Types
# -------------------------

class ActionType(str, Enum):
    EXPEDITE = "EXPEDITE"
    RELEASE = "RELEASE"
    OVERLOAD = "OVERLOAD"


# Sort order for messages sharing a period
_KIND_ORDER = {ActionType.EXPEDITE: 0, ActionType.RELEASE: 1, ActionType.OVERLOAD: 2}


@dataclass(frozen=True)
class ActionMessage:
    """
    Planner-facing message.

    EXPEDITE/RELEASE carry item and quantity; OVERLOAD carries work_center
    and quantity = hours above capacity.
    """
    action_type: ActionType
    period: int
    message: str
    item: Optional[str] = None
    work_center: Optional[str] = None
    quantity: Optional[float] = None

    @property
    def subject(self) -> str:
        return self.item or self.work_center or ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "action_type": self.action_type.value,
            "period": self.period,
            "message": self.message,
            "item": self.item,
            "work_center": self.work_center,
            "quantity": float(self.quantity) if self.quantity is not None else None,
        }


def generate_action_description(action_type: ActionType, payload: Dict[str, Any]) -> str:
    """Generate a human-readable description for an action message."""

    if action_type == ActionType.EXPEDITE:
        item = payload.get("item", "?")
        qty = payload.get("quantity", 0)
        release = payload.get("release_period", "?")
        receipt = payload.get("receipt_period", "?")
        return (
            f"Expedite {qty:g} units of {item}: release was due in period {release}, "
            f"needed in period {receipt}"
        )

    elif action_type == ActionType.RELEASE:
        item = payload.get("item", "?")
        qty = payload.get("quantity", 0)
        receipt = payload.get("receipt_period", "?")
        return f"Release order for {qty:g} units of {item} (due period {receipt})"

    elif action_type == ActionType.OVERLOAD:
        wc = payload.get("work_center", "?")
        period = payload.get("period", "?")
        required = payload.get("required_hours", 0)
        available = payload.get("available_hours", 0)
        utilization = payload.get("utilization_pct", 0)
        return (
            f"Work center {wc} overloaded in period {period}: "
            f"{required:g}h required vs {available:g}h available ({utilization:g}%)"
        )

    return f"{action_type}: {payload}"


# -------------------------
# Generation
# -------------------------

def _order_messages(records: Iterable[Any]) -> List[ActionMessage]:
    messages: List[ActionMessage] = []
    for record in records:
        for order in record.planned_orders:
            payload = order.to_dict()
            if order.release_period <= 0:
                action_type = ActionType.EXPEDITE
            elif order.release_period == 1:
                action_type = ActionType.RELEASE
            else:
                continue
            messages.append(ActionMessage(
                action_type=action_type,
                period=order.release_period,
                message=generate_action_description(action_type, payload),
                item=order.item,
                quantity=order.quantity,
            ))
    return messages


def _overload_messages(crp: Any) -> List[ActionMessage]:
    messages: List[ActionMessage] = []
    excess = {(o.work_center, o.period): o.overload_hours for o in crp.overloads}
    for row in crp.loading:
        if not row.overloaded:
            continue
        messages.append(ActionMessage(
            action_type=ActionType.OVERLOAD,
            period=row.period,
            message=generate_action_description(ActionType.OVERLOAD, row.to_dict()),
            work_center=row.work_center,
            quantity=excess[(row.work_center, row.period)],
        ))
    return messages


def sort_messages(messages: Iterable[ActionMessage]) -> List[ActionMessage]:
    """Order by period, then kind (expedite, release, overload), then subject."""
    return sorted(messages, key=lambda m: (m.period, _KIND_ORDER[m.action_type], m.subject))


def generate_action_messages(records: Iterable[Any], crp: Any = None) -> List[ActionMessage]:
    """
    Build action messages from MRP records and, optionally, a CRP result.

    Args:
        records: MRPRecord list
        crp: CRPResult (OVERLOAD messages are only produced when given)

    Returns:
        Sorted list of ActionMessage
    """
    messages = _order_messages(records)
    if crp is not None:
        messages.extend(_overload_messages(crp))
    return sort_messages(messages)


def messages_to_dataframe(messages: Iterable[ActionMessage]) -> pd.DataFrame:
    return pd.DataFrame(
        [m.to_dict() for m in messages],
        columns=["action_type", "period", "message", "item", "work_center", "quantity"],
    )
