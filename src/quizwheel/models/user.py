"""UserProfile - account row with balance and play statistics."""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, Field


class UserProfile(BaseModel):
    """Player account. `balance` is the single source of truth for spendable tokens."""

    id: str
    username: str
    balance: int = Field(..., ge=0)
    highest_balance: int = 0
    last_daily_reset: date | None = None
    total_winnings: int = 0
    games_played: int = 0
    current_streak: int = 0  # consecutive rounds with net_result > 0
    best_streak: int = 0
    created_at: int | None = None  # ms epoch
    updated_at: int | None = None


class BalanceEvent(BaseModel):
    """Balance change made outside a spin, e.g. the daily floor top-up."""

    event_id: str
    user_id: str
    kind: str
    amount: int
    balance_before: int = Field(..., ge=0)
    balance_after: int = Field(..., ge=0)
    created_at: int  # ms epoch
