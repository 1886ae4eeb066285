"""
matplan - Planning Configuration
================================

Engine-wide defaults for planning runs.

Uso:
    from matplan.config import get_config

    config = get_config()
    config.default_lead_time  # periods

Configuração via variáveis de ambiente:
    MATPLAN_DEFAULT_LEAD_TIME=2
    MATPLAN_DEFAULT_LOT_SIZING=POQ
    MATPLAN_ROUND_DIGITS=3
    MATPLAN_MAX_EXPLOSION_LEVELS=15
    MATPLAN_LOG_ITEM_DETAIL=true
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# CONFIG
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass
class PlanningConfig:
    """
    Defaults applied when a planning input does not say otherwise.

    Valores default reproduzem o comportamento clássico (LFL, 1 período).
    """
    # Lead time for items that are never a BOM component and have no override
    default_lead_time: int = 1

    # Lot sizing for items without an explicit rule (FOQ/EOQ need a quantity,
    # so only LFL and POQ are accepted here)
    default_lot_sizing: str = "LFL"

    # Reporting precision for CRP hours and utilization
    round_digits: int = 2

    # Depth cut for recursive multi-level explosion
    max_explosion_levels: int = 10

    # Per-item debug logging during runs
    log_item_detail: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# ═══════════════════════════════════════════════════════════════════════════════
# ENVIRONMENT LOADING
# ═══════════════════════════════════════════════════════════════════════════════

_INT_SETTINGS = {
    "MATPLAN_DEFAULT_LEAD_TIME": "default_lead_time",
    "MATPLAN_ROUND_DIGITS": "round_digits",
    "MATPLAN_MAX_EXPLOSION_LEVELS": "max_explosion_levels",
}

_BOOL_SETTINGS = {
    "MATPLAN_LOG_ITEM_DETAIL": "log_item_detail",
}


def load_config_from_env(environ: Optional[Dict[str, str]] = None) -> PlanningConfig:
    """Build a PlanningConfig from MATPLAN_* environment variables."""
    environ = os.environ if environ is None else environ
    config = PlanningConfig()

    for env_var, attr_name in _INT_SETTINGS.items():
        value = environ.get(env_var)
        if not value:
            continue
        try:
            parsed = int(value)
        except ValueError:
            logger.warning(f"Invalid value for {env_var}: {value}")
            continue
        if parsed < 0:
            logger.warning(f"Invalid value for {env_var}: {value}")
            continue
        setattr(config, attr_name, parsed)
        logger.info(f"Planning config {attr_name} = {parsed}")

    value = environ.get("MATPLAN_DEFAULT_LOT_SIZING")
    if value:
        from matplan.materials.lot_sizing import LotSizingMethod

        try:
            method = LotSizingMethod.parse(value)
        except ValueError:
            logger.warning(f"Invalid value for MATPLAN_DEFAULT_LOT_SIZING: {value}")
        else:
            if method.needs_quantity:
                logger.warning(
                    f"MATPLAN_DEFAULT_LOT_SIZING={value} needs a lot quantity; keeping "
                    f"{config.default_lot_sizing}"
                )
            else:
                config.default_lot_sizing = method.value
                logger.info(f"Planning config default_lot_sizing = {method.value}")

    for env_var, attr_name in _BOOL_SETTINGS.items():
        value = environ.get(env_var)
        if value:
            setattr(config, attr_name, value.lower() in ("1", "true", "yes", "on"))

    return config


_config_instance: Optional[PlanningConfig] = None


def get_config() -> PlanningConfig:
    """Get the process-wide planning config (loaded from env on first use)."""
    global _config_instance
    if _config_instance is None:
        _config_instance = load_config_from_env()
    return _config_instance


def reset_config() -> None:
    """Reset singleton."""
    global _config_instance
    _config_instance = None
