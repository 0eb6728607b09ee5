from quizwheel.settlement.daily_floor import DailyFloorResult, apply_daily_floor
from quizwheel.settlement.engine import (
    DEFAULT_MULTIPLIERS,
    SettlementEngine,
    parse_multipliers,
    settle,
)

__all__ = [
    "DEFAULT_MULTIPLIERS",
    "DailyFloorResult",
    "SettlementEngine",
    "apply_daily_floor",
    "parse_multipliers",
    "settle",
]
