"""Once-per-day balance floor."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class DailyFloorResult:
    balance: int
    last_reset: date
    raised: bool  # balance was lifted to the floor
    stamped: bool  # reset date moved to today


def apply_daily_floor(balance: int, last_reset: date | None, today: date, floor: int) -> DailyFloorResult:
    """Raise balance to floor if below it, at most once per calendar day. Never lowers a balance."""
    if last_reset == today:
        return DailyFloorResult(balance=balance, last_reset=today, raised=False, stamped=False)
    if balance < floor:
        return DailyFloorResult(balance=floor, last_reset=today, raised=True, stamped=True)
    return DailyFloorResult(balance=balance, last_reset=today, raised=False, stamped=True)
