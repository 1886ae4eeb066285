"""
════════════════════════════════════════════════════════════════════════════════
PLANNING SCHEMAS - Pydantic Models para ingestão de snapshots
════════════════════════════════════════════════════════════════════════════════

Converts plain dicts / JSON payloads into engine inputs.

Schemas:
- PlanningSnapshot: master schedule, BOM, inventory, receipts, lot sizing
- CapacitySnapshot: routings and work centers

Keys are accepted in snake_case or in the camelCase used by planner JSON
exports (masterSchedule, quantityPer, scrapFactor, leadTime, ...).

Only shape and types are checked here. Value rules (quantity_per > 0,
no cycles, ...) are enforced by the engine and raise PlanningInputError.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from matplan.capacity.crp_engine import RoutingStep, WorkCenter
from matplan.materials.bom_engine import BOMEdge
from matplan.materials.lot_sizing import LotSizingMethod, LotSizingRule
from matplan.materials.mrp_engine import MasterScheduleEntry, MRPInputs, ScheduledReceipt


# ═══════════════════════════════════════════════════════════════════════════════
# MATERIALS
# ═══════════════════════════════════════════════════════════════════════════════

class BOMEdgeSchema(BaseModel):
    """Linha de BOM (pai -> componente)."""
    model_config = ConfigDict(populate_by_name=True)

    parent: str = Field(..., validation_alias=AliasChoices("parent", "parentId", "parent_item"))
    component: str = Field(..., validation_alias=AliasChoices("component", "componentId", "child"))
    quantity_per: float = Field(
        ..., validation_alias=AliasChoices("quantity_per", "quantityPer", "quantity")
    )
    scrap_factor: float = Field(1.0, validation_alias=AliasChoices("scrap_factor", "scrapFactor"))
    lead_time: int = Field(0, validation_alias=AliasChoices("lead_time", "leadTime"))
    level: int = Field(0, validation_alias=AliasChoices("level", "bomLevel"))

    def to_edge(self) -> BOMEdge:
        return BOMEdge(
            parent=self.parent,
            component=self.component,
            quantity_per=self.quantity_per,
            scrap_factor=self.scrap_factor,
            lead_time=self.lead_time,
            level=self.level,
        )


class MasterScheduleEntrySchema(BaseModel):
    """Procura independente (MPS) num período."""
    model_config = ConfigDict(populate_by_name=True)

    period: int
    item: str = Field(..., validation_alias=AliasChoices("item", "itemId", "item_id"))
    quantity: float

    def to_entry(self) -> MasterScheduleEntry:
        return MasterScheduleEntry(period=self.period, item=self.item, quantity=self.quantity)


class ScheduledReceiptSchema(BaseModel):
    """Receção já lançada."""
    model_config = ConfigDict(populate_by_name=True)

    item: str = Field(..., validation_alias=AliasChoices("item", "itemId", "item_id"))
    period: int
    quantity: float

    def to_receipt(self) -> ScheduledReceipt:
        return ScheduledReceipt(item=self.item, period=self.period, quantity=self.quantity)


class LotSizingSchema(BaseModel):
    """Regra de lote por item."""
    model_config = ConfigDict(populate_by_name=True)

    method: LotSizingMethod = LotSizingMethod.LOT_FOR_LOT
    quantity: Optional[float] = Field(
        None, validation_alias=AliasChoices("quantity", "parameter", "lotSize", "lot_size")
    )

    @field_validator("method", mode="before")
    @classmethod
    def parse_method(cls, v):
        """Parse method from code or long name."""
        if v is None:
            return LotSizingMethod.LOT_FOR_LOT
        return LotSizingMethod.parse(v)

    def to_rule(self) -> LotSizingRule:
        return LotSizingRule(self.method, self.quantity)


class PlanningSnapshot(BaseModel):
    """
    Snapshot completo para uma execução MRP.

    Exemplo:
        snapshot = PlanningSnapshot.model_validate({
            "masterSchedule": [{"period": 5, "itemId": "F", "quantity": 100}],
            "bom": [{"parent": "F", "component": "C", "quantityPer": 2}],
            "inventory": {"F": 20},
            "horizonPeriods": 8,
        })
        result = run_mrp(snapshot.to_inputs())
    """
    model_config = ConfigDict(populate_by_name=True)

    master_schedule: List[MasterScheduleEntrySchema] = Field(
        default_factory=list, validation_alias=AliasChoices("master_schedule", "masterSchedule")
    )
    bom: List[BOMEdgeSchema] = Field(default_factory=list)
    inventory: Dict[str, float] = Field(default_factory=dict)
    scheduled_receipts: List[ScheduledReceiptSchema] = Field(
        default_factory=list, validation_alias=AliasChoices("scheduled_receipts", "scheduledReceipts")
    )
    lot_sizing: Dict[str, LotSizingSchema] = Field(
        default_factory=dict, validation_alias=AliasChoices("lot_sizing", "lotSizing")
    )
    horizon_periods: int = Field(
        ..., validation_alias=AliasChoices("horizon_periods", "horizonPeriods", "horizon")
    )
    lead_times: Dict[str, int] = Field(
        default_factory=dict, validation_alias=AliasChoices("lead_times", "leadTimes")
    )

    def to_inputs(self) -> MRPInputs:
        return MRPInputs(
            master_schedule=[e.to_entry() for e in self.master_schedule],
            bom=[e.to_edge() for e in self.bom],
            horizon_periods=self.horizon_periods,
            inventory=dict(self.inventory),
            scheduled_receipts=[r.to_receipt() for r in self.scheduled_receipts],
            lot_sizing={item: s.to_rule() for item, s in self.lot_sizing.items()},
            lead_times=dict(self.lead_times),
        )


# ═══════════════════════════════════════════════════════════════════════════════
# CAPACITY
# ═══════════════════════════════════════════════════════════════════════════════

class WorkCenterSchema(BaseModel):
    """Centro de trabalho."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., validation_alias=AliasChoices("id", "workCenterId", "work_center_id"))
    hours_available_per_period: float = Field(
        ...,
        validation_alias=AliasChoices(
            "hours_available_per_period", "hoursAvailablePerPeriod", "capacity"
        ),
    )
    name: str = ""

    def to_work_center(self) -> WorkCenter:
        return WorkCenter(
            id=self.id,
            hours_available_per_period=self.hours_available_per_period,
            name=self.name,
        )


class RoutingStepSchema(BaseModel):
    """Operação de um item num centro de trabalho."""
    model_config = ConfigDict(populate_by_name=True)

    item: str = Field(..., validation_alias=AliasChoices("item", "itemId", "item_id"))
    work_center: str = Field(
        ..., validation_alias=AliasChoices("work_center", "workCenter", "workCenterId")
    )
    setup_hours: float = Field(0.0, validation_alias=AliasChoices("setup_hours", "setupHours", "setupTime"))
    run_hours_per_unit: float = Field(
        0.0, validation_alias=AliasChoices("run_hours_per_unit", "runHoursPerUnit", "runTime")
    )
    sequence: int = Field(10, validation_alias=AliasChoices("sequence", "operationSequence"))

    def to_step(self) -> RoutingStep:
        return RoutingStep(
            item=self.item,
            work_center=self.work_center,
            setup_hours=self.setup_hours,
            run_hours_per_unit=self.run_hours_per_unit,
            sequence=self.sequence,
        )


class CapacitySnapshot(BaseModel):
    """Routings e centros de trabalho para CRP."""
    model_config = ConfigDict(populate_by_name=True)

    routings: List[RoutingStepSchema] = Field(default_factory=list)
    work_centers: List[WorkCenterSchema] = Field(
        default_factory=list, validation_alias=AliasChoices("work_centers", "workCenters")
    )

    def to_inputs(self) -> Tuple[List[RoutingStep], List[WorkCenter]]:
        return (
            [r.to_step() for r in self.routings],
            [w.to_work_center() for w in self.work_centers],
        )


def parse_snapshots(payload: Dict[str, Any]) -> Tuple[PlanningSnapshot, CapacitySnapshot]:
    """Split one combined payload into materials and capacity snapshots."""
    return PlanningSnapshot.model_validate(payload), CapacitySnapshot.model_validate(payload)
