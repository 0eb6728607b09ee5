"""Modifier and SettlementRecord - result of one settled round."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Modifier(str, Enum):
    """Trivia result applied to gross winnings."""

    CORRECT = "correct"
    INCORRECT = "incorrect"
    ABSENT = "absent"  # no question asked this round


class SettlementRecord(BaseModel):
    """Immutable audit record of one round. Written once, never updated."""

    model_config = ConfigDict(frozen=True)

    round_id: str
    user_id: str
    outcome_id: str
    wagers: dict[str, int] = Field(default_factory=dict)  # snapshot at settlement time
    total_stake: int = Field(..., ge=0)
    stake_on_winner: int = Field(..., ge=0)
    gross_winnings: int = Field(..., ge=0)
    modifier: Modifier
    actual_payout: int = Field(..., ge=0)
    net_result: int
    balance_before: int = Field(..., ge=0)
    balance_after: int = Field(..., ge=0)
    timestamp: int  # ms epoch
    # Trivia audit: which question set the modifier and what was answered
    question_id: str | None = None
    answer: str | None = None
    time_taken_ms: int | None = Field(None, ge=0)
