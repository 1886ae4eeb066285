"""
Testes para Action Messages (A1-A2)
"""
from matplan.actions_engine import (
    ActionMessage,
    ActionType,
    generate_action_messages,
    messages_to_dataframe,
    sort_messages,
)
from matplan.capacity import RoutingStep, WorkCenter, run_crp
from matplan.materials import PlannedOrder, net_requirements


class TestA1_OrderMessages:
    """A1: Mensagens a partir das ordens planeadas."""

    def test_expedite_for_past_due_release(self):
        """A1.1: Release <= 0 -> EXPEDITE."""
        record = net_requirements("F", {1: 10}, 0, None, 2, None, 3)
        messages = generate_action_messages([record])

        assert len(messages) == 1
        msg = messages[0]
        assert msg.action_type == ActionType.EXPEDITE
        assert msg.item == "F"
        assert msg.quantity == 10
        assert msg.period == -1
        assert "Expedite" in msg.message

    def test_release_for_first_period(self):
        """A1.2: Release em p1 -> RELEASE."""
        record = net_requirements("F", {2: 10}, 0, None, 1, None, 3)
        messages = generate_action_messages([record])

        assert [(m.action_type, m.period) for m in messages] == [(ActionType.RELEASE, 1)]

    def test_future_releases_produce_no_message(self):
        """A1.3: Releases futuras não geram mensagem."""
        record = net_requirements("F", {5: 10}, 0, None, 1, None, 5)
        assert generate_action_messages([record]) == []


class TestA2_OverloadAndOrdering:
    """A2: Sobrecargas e ordenação."""

    def test_overload_message_per_overloaded_row(self):
        """A2.1: Uma mensagem OVERLOAD por linha em sobrecarga."""
        crp = run_crp(
            [PlannedOrder("F", 1, 2, 100)],
            [RoutingStep("F", "WC1", setup_hours=10, run_hours_per_unit=0.5)],
            [WorkCenter("WC1", 40)],
            horizon_periods=2,
        )
        messages = generate_action_messages([], crp)

        assert len(messages) == 1
        assert messages[0].action_type == ActionType.OVERLOAD
        assert messages[0].work_center == "WC1"
        assert messages[0].quantity == 20
        assert "150" in messages[0].message

    def test_overload_quantity_matches_crp_overload(self):
        """A2.4: Quantidade da mensagem = overload_hours do CRP."""
        crp = run_crp(
            [PlannedOrder("F", 1, 1, 121)],
            [RoutingStep("F", "WC1", run_hours_per_unit=1 / 3)],
            [WorkCenter("WC1", 40)],
            horizon_periods=1,
        )
        messages = generate_action_messages([], crp)

        assert len(messages) == 1
        assert messages[0].quantity == crp.overloads[0].overload_hours == 0.33
        assert "40.33h required vs 40h available" in messages[0].message

    def test_sorted_by_period_kind_subject(self):
        """A2.2: Ordenação por período, tipo e sujeito."""
        messages = sort_messages([
            ActionMessage(ActionType.OVERLOAD, 1, "o", work_center="WC1"),
            ActionMessage(ActionType.RELEASE, 1, "r", item="B"),
            ActionMessage(ActionType.RELEASE, 1, "r", item="A"),
            ActionMessage(ActionType.EXPEDITE, 0, "e", item="Z"),
        ])

        assert [(m.action_type, m.subject) for m in messages] == [
            (ActionType.EXPEDITE, "Z"),
            (ActionType.RELEASE, "A"),
            (ActionType.RELEASE, "B"),
            (ActionType.OVERLOAD, "WC1"),
        ]

    def test_dataframe_export(self):
        """A2.3: Exportação para DataFrame."""
        record = net_requirements("F", {2: 10}, 0, None, 1, None, 3)
        df = messages_to_dataframe(generate_action_messages([record]))

        assert list(df["action_type"]) == ["RELEASE"]
        assert df.iloc[0]["quantity"] == 10
