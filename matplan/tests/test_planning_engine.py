"""
Testes para Planning Engine (P1)
"""
from matplan.actions_engine import ActionType
from matplan.materials import MasterScheduleEntry
from matplan.planning_engine import run_planning


class TestP1_CombinedRun:
    """P1: MRP -> CRP -> mensagens."""

    def test_planned_orders_loaded_in_release_period(
        self, sample_inputs, sample_routings, sample_work_centers
    ):
        """P1.1: Ordens do MRP carregam os centros no período de release."""
        result = run_planning(sample_inputs, sample_routings, sample_work_centers)

        # F: 10 un released in p5 -> 2 + 1.5 × 10 = 17 h on ASM
        assert result.crp.row("ASM", 5).required_hours == 17
        # C: 22 un in p4 -> 1 + 0.5 × 22 = 12 h; S: 10 un in p3 -> 0.5 + 2.5 = 3 h
        assert result.crp.row("CNC", 4).required_hours == 12
        assert result.crp.row("CNC", 3).required_hours == 3
        assert result.crp.overloads == ()

    def test_all_message_kinds_merged(self, sample_inputs, sample_routings, sample_work_centers):
        """P1.2: Mensagens de MRP e CRP juntas e ordenadas."""
        sample_inputs.master_schedule = [MasterScheduleEntry(period=6, item="F", quantity=30)]
        result = run_planning(sample_inputs, sample_routings, sample_work_centers)

        # F: 2 + 1.5 × 30 = 47 h > 40 h on ASM in p5; C: 1 + 0.5 × 66 = 34 h > 16 h on CNC in p4
        overloads = result.messages_of(ActionType.OVERLOAD)
        assert [(m.work_center, m.period) for m in overloads] == [("CNC", 4), ("ASM", 5)]
        assert result.messages_of(ActionType.EXPEDITE)
        periods = [m.period for m in result.action_messages]
        assert periods == sorted(periods)

    def test_summary(self, sample_inputs, sample_routings, sample_work_centers):
        """P1.3: Resumo da execução."""
        summary = run_planning(sample_inputs, sample_routings, sample_work_centers).summary()

        assert summary["items_planned"] == 4
        assert summary["planned_orders"] == 5
        assert summary["expedite"] == 1
        assert summary["release"] == 1
        assert summary["bottleneck"] is None
