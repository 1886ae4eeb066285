"""
Fixtures comuns para os testes do matplan.
"""
import pytest

from matplan.capacity import RoutingStep, WorkCenter
from matplan.config import reset_config
from matplan.materials import BOMEdge, MasterScheduleEntry, MRPInputs


MATPLAN_ENV_VARS = [
    "MATPLAN_DEFAULT_LEAD_TIME",
    "MATPLAN_DEFAULT_LOT_SIZING",
    "MATPLAN_ROUND_DIGITS",
    "MATPLAN_MAX_EXPLOSION_LEVELS",
    "MATPLAN_LOG_ITEM_DETAIL",
]


@pytest.fixture(autouse=True)
def clean_config(monkeypatch):
    """Cada teste começa com a configuração default."""
    for var in MATPLAN_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def sample_bom():
    """
    BOM de dois níveis com componente partilhado.

        F ─┬─ C (2 un, refugo 10%, LT 1) ── R (3 un, LT 1)
           └─ S (1 un, LT 2)             ── R (1 un, LT 3)
    """
    return [
        BOMEdge(parent="F", component="C", quantity_per=2, scrap_factor=1.1, lead_time=1),
        BOMEdge(parent="F", component="S", quantity_per=1, lead_time=2),
        BOMEdge(parent="C", component="R", quantity_per=3, lead_time=1),
        BOMEdge(parent="S", component="R", quantity_per=1, lead_time=3),
    ]


@pytest.fixture
def sample_inputs(sample_bom):
    """10 unidades de F no período 6, horizonte de 6 períodos, sem stock."""
    return MRPInputs(
        master_schedule=[MasterScheduleEntry(period=6, item="F", quantity=10)],
        bom=sample_bom,
        horizon_periods=6,
    )


@pytest.fixture
def sample_work_centers():
    """Centros de trabalho de exemplo."""
    return [
        WorkCenter(id="ASM", hours_available_per_period=40, name="Assembly"),
        WorkCenter(id="CNC", hours_available_per_period=16, name="CNC Machining"),
    ]


@pytest.fixture
def sample_routings():
    """Routings de exemplo."""
    return [
        RoutingStep(item="F", work_center="ASM", setup_hours=2, run_hours_per_unit=1.5, sequence=10),
        RoutingStep(item="C", work_center="CNC", setup_hours=1, run_hours_per_unit=0.5, sequence=10),
        RoutingStep(item="S", work_center="CNC", setup_hours=0.5, run_hours_per_unit=0.25, sequence=10),
    ]
