"""Pydantic schemas for API request/response consistency and OpenAPI docs."""

from __future__ import annotations

from datetime import date
from typing import Any

from pydantic import BaseModel, Field


# --- Health ---
class HealthResponse(BaseModel):
    status: str = "ok"


# --- Error (consistent shape for 4xx/5xx) ---
class ErrorResponse(BaseModel):
    detail: str = Field(..., description="Human-readable message")
    code: str | None = Field(None, description="Machine-readable code, e.g. insufficient_balance, user_not_found")


# --- Wheel ---
class OutcomeItem(BaseModel):
    id: str
    label: str | None = None
    color: str | None = None
    payout_ratio: str = Field(..., description="Profit multiple as an exact decimal string, e.g. '35'")
    weight: float


class WheelResponse(BaseModel):
    type: str
    selection: str
    outcomes: list[OutcomeItem]


# --- Users ---
class CreateUserRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=64, pattern=r"^[A-Za-z0-9_.-]+$")


class DailyResetResponse(BaseModel):
    username: str
    balance: int
    last_daily_reset: date
    raised: bool = Field(..., description="True if the balance was lifted to the daily floor")


class LeaderboardItem(BaseModel):
    rank: int
    username: str
    balance: int
    highest_balance: int
    total_winnings: int
    games_played: int
    best_streak: int


# --- Bets ---
class PlaceBetRequest(BaseModel):
    outcome_id: str
    delta: int = Field(..., description="Tokens to add (negative to remove)")


class BetsResponse(BaseModel):
    state: str
    round_id: str | None = None
    wagers: dict[str, int] = Field(default_factory=dict)
    total_stake: int
    balance: int
    pending_round_id: str | None = Field(None, description="Settled round awaiting persistence retry")


# --- Trivia ---
class QuestionResponse(BaseModel):
    """Question as shown to the player (accepted answers withheld)."""

    question_id: str
    topic: str
    prompt: str
    difficulty: int
    time_limit_sec: int | None = None


class SpinRequest(BaseModel):
    question_id: str | None = Field(None, description="Question answered this round; omit to spin without trivia")
    answer: str | None = None


# --- Settlements ---
class SettlementStatsResponse(BaseModel):
    rounds: int
    total_staked: int
    total_paid: int
    net_result: int
    first_ts: int | None
    last_ts: int | None
    by_modifier: list[dict[str, Any]]
