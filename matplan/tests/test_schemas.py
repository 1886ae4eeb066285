"""
Testes para ingestão de snapshots (S1)
"""
import pytest
from pydantic import ValidationError

from matplan.errors import LotSizingError, PlanningInputError
from matplan.materials import LotSizingMethod, run_mrp
from matplan.schemas import CapacitySnapshot, PlanningSnapshot, parse_snapshots


CAMEL_PAYLOAD = {
    "masterSchedule": [{"period": 5, "itemId": "F", "quantity": 100}],
    "bom": [
        {"parent": "F", "component": "C", "quantityPer": 2, "scrapFactor": 1.1, "leadTime": 1},
    ],
    "inventory": {"F": 20},
    "scheduledReceipts": [{"itemId": "C", "period": 2, "quantity": 5}],
    "lotSizing": {"C": {"method": "fixed_order_quantity", "parameter": 50}},
    "leadTimes": {"F": 2},
    "horizonPeriods": 6,
    "workCenters": [{"id": "WC1", "hoursAvailablePerPeriod": 40, "name": "Assembly"}],
    "routings": [{"itemId": "F", "workCenter": "WC1", "setupHours": 10, "runHoursPerUnit": 0.5}],
}


class TestS1_Snapshots:
    """S1: Snapshots a partir de dicts."""

    def test_camel_case_payload(self):
        """S1.1: Chaves camelCase convertidas para entradas do motor."""
        inputs = PlanningSnapshot.model_validate(CAMEL_PAYLOAD).to_inputs()

        assert inputs.horizon_periods == 6
        assert inputs.bom[0].quantity_per == 2
        assert inputs.bom[0].scrap_factor == 1.1
        assert inputs.lot_sizing["C"].method is LotSizingMethod.FIXED_ORDER_QUANTITY
        assert inputs.lot_sizing["C"].quantity == 50
        assert inputs.scheduled_receipts[0].item == "C"

        result = run_mrp(inputs)
        assert result.record_for("F").row(3).planned_order_release == 80

    def test_snake_case_payload(self):
        """S1.2: Chaves snake_case também aceites."""
        snapshot = PlanningSnapshot.model_validate({
            "master_schedule": [{"period": 1, "item": "P", "quantity": 3}],
            "horizon_periods": 2,
        })
        assert snapshot.to_inputs().master_schedule[0].item == "P"

    def test_capacity_snapshot(self):
        """S1.3: Routings e centros de trabalho."""
        planning, capacity = parse_snapshots(CAMEL_PAYLOAD)
        routings, work_centers = capacity.to_inputs()

        assert routings[0].setup_hours == 10
        assert work_centers[0].hours_available_per_period == 40
        assert planning.horizon_periods == 6

    def test_wrong_types_rejected_by_schema(self):
        """S1.4: Tipos errados falham na validação pydantic."""
        with pytest.raises(ValidationError):
            PlanningSnapshot.model_validate({"horizonPeriods": "many"})
        with pytest.raises(ValidationError):
            CapacitySnapshot.model_validate({"workCenters": [{"id": "WC1"}]})

    def test_unknown_method_rejected(self):
        """S1.5: Método de lote desconhecido."""
        payload = dict(CAMEL_PAYLOAD, lotSizing={"C": {"method": "XYZ"}})
        with pytest.raises(ValidationError):
            PlanningSnapshot.model_validate(payload)

    def test_value_rules_left_to_engine(self):
        """S1.6: Regras de valor são verificadas pelo motor."""
        payload = dict(CAMEL_PAYLOAD, lotSizing={"C": {"method": "FOQ"}})
        with pytest.raises(LotSizingError):
            PlanningSnapshot.model_validate(payload).to_inputs()

        payload = dict(CAMEL_PAYLOAD, bom=[{"parent": "F", "component": "C", "quantityPer": -1}])
        inputs = PlanningSnapshot.model_validate(payload).to_inputs()
        with pytest.raises(PlanningInputError):
            run_mrp(inputs)
