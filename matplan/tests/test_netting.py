"""
Testes para Net Requirements (N1-N3)
"""
import pytest

from matplan.materials.lot_sizing import LotSizingRule
from matplan.materials.netting import net_requirements


def assert_balanced(record):
    """POH[p] = POH[p-1] + SR[p] + PORc[p] - GR[p], sempre >= 0."""
    previous = None
    for row in record.rows:
        assert row.projected_on_hand >= 0
        if previous is not None:
            expected = (
                previous + row.scheduled_receipts
                + row.planned_order_receipt - row.gross_requirements
            )
            assert row.projected_on_hand == pytest.approx(expected)
        previous = row.projected_on_hand


class TestN1_SingleLevel:
    """N1: Cálculo de necessidades de um item."""

    def test_shortage_with_lead_time_offset(self):
        """N1.1: GR 100 em p5, stock 20, LT 2, LFL -> NR 80 em p5, release 80 em p3."""
        record = net_requirements(
            item="F",
            gross={5: 100},
            on_hand_start=20,
            scheduled_receipts={},
            lead_time=2,
            lot_sizing=LotSizingRule.lot_for_lot(),
            horizon=6,
        )

        assert record.row(5).net_requirements == 80
        assert record.row(5).planned_order_receipt == 80
        assert record.row(3).planned_order_release == 80
        assert record.row(5).projected_on_hand == 0
        assert [r.projected_on_hand for r in record.rows[:4]] == [20, 20, 20, 20]
        assert len(record.planned_orders) == 1
        order = record.planned_orders[0]
        assert (order.release_period, order.receipt_period, order.quantity) == (3, 5, 80)

    def test_no_shortage_no_orders(self):
        """N1.2: Stock suficiente não gera ordens."""
        record = net_requirements("F", [10, 10, 10], 50, None, 1, None, 3)

        assert record.planned_orders == ()
        assert [r.projected_on_hand for r in record.rows] == [40, 30, 20]
        assert all(r.net_requirements == 0 for r in record.rows)

    def test_scheduled_receipts_are_netted(self):
        """N1.3: Receções programadas reduzem a necessidade."""
        record = net_requirements(
            "F", {3: 50}, on_hand_start=10, scheduled_receipts={2: 30},
            lead_time=1, lot_sizing=None, horizon=4,
        )

        assert record.row(2).projected_on_hand == 40
        assert record.row(3).net_requirements == 10
        assert record.row(2).planned_order_release == 10
        assert_balanced(record)

    def test_list_series_index_from_period_one(self):
        """N1.4: Lista com índice 0 = período 1."""
        record = net_requirements("F", [0, 0, 15], 0, [0, 5, 0], 0, None, 3)

        assert record.row(3).gross_requirements == 15
        assert record.row(2).scheduled_receipts == 5
        assert record.row(3).net_requirements == 10
        assert record.row(3).planned_order_release == 10


class TestN2_LotSizingInNetting:
    """N2: Lot sizing dentro do cálculo."""

    def test_fixed_order_quantity_carries_excess(self):
        """N2.1: FOQ gera excesso que transita para períodos seguintes."""
        record = net_requirements(
            "F", {2: 30, 4: 30}, 0, None, 1, LotSizingRule.fixed(50), 5,
        )

        assert record.row(2).planned_order_receipt == 50
        assert record.row(3).projected_on_hand == 20
        assert record.row(4).net_requirements == 10
        assert record.row(4).planned_order_receipt == 50
        assert record.row(5).projected_on_hand == 40
        for row in record.rows:
            assert row.planned_order_receipt % 50 == 0
        assert_balanced(record)

    def test_economic_order_quantity(self):
        """N2.2: EOQ encomenda pelo menos Q."""
        record = net_requirements(
            "F", {2: 30}, 0, None, 1, LotSizingRule.economic(100), 3,
        )

        assert record.row(2).planned_order_receipt == 100
        assert record.row(2).projected_on_hand == 70
        assert record.row(1).planned_order_release == 100


class TestN3_PastDue:
    """N3: Ordens em atraso."""

    def test_past_due_release_kept_as_order_only(self):
        """N3.1: Release antes do período 1 fica só em planned_orders."""
        record = net_requirements("F", {2: 40}, 0, None, 3, None, 4)

        assert len(record.planned_orders) == 1
        order = record.planned_orders[0]
        assert order.release_period == -1
        assert order.past_due
        assert record.past_due_orders == [order]
        assert sum(r.planned_order_release for r in record.rows) == 0
        assert record.row(2).planned_order_receipt == 40

    def test_release_in_first_period_is_not_past_due(self):
        """N3.2: Release em p1 não está em atraso."""
        record = net_requirements("F", {3: 5}, 0, None, 2, None, 3)

        assert record.planned_orders[0].release_period == 1
        assert not record.planned_orders[0].past_due
        assert record.row(1).planned_order_release == 5

    def test_demand_beyond_horizon_ignored(self):
        """N3.3: Procura além do horizonte é ignorada."""
        record = net_requirements("F", {2: 5, 9: 100}, 0, None, 0, None, 3)

        assert record.total_gross_requirements == 5
        assert len(record.rows) == 3

    def test_record_export(self):
        """N3.4: Exportação para DataFrame e dict."""
        record = net_requirements("F", {2: 5}, 0, None, 1, None, 3, level=2)

        df = record.to_dataframe()
        assert list(df["period"]) == [1, 2, 3]
        assert set(df["item"]) == {"F"}
        assert set(df["level"]) == {2}
        data = record.to_dict()
        assert data["lot_sizing"]["method"] == "LFL"
        assert data["planned_orders"][0]["release_period"] == 1


class TestN4_FloatResidue:
    """N4: Resíduo de vírgula flutuante não gera ordens."""

    def test_scrap_residue_does_not_trigger_order(self):
        """N4.1: GR = 3 × 1.1 (3.3000000000000003) contra stock 3.3 -> sem ordem."""
        record = net_requirements("C", {2: 3 * 1.1}, 3.3, None, 1, LotSizingRule.economic(100), 3)

        assert record.planned_orders == ()
        assert all(row.net_requirements == 0 for row in record.rows)
        assert_balanced(record)

    def test_real_shortage_still_ordered(self):
        """N4.2: Falta real (0.001) continua a gerar ordem."""
        record = net_requirements("C", {2: 3.301}, 3.3, None, 1, LotSizingRule.economic(100), 3)

        assert [(o.release_period, o.quantity) for o in record.planned_orders] == [(1, 100)]
        assert record.rows[1].net_requirements == pytest.approx(0.001)
