"""Pending wagers for one user's round - place/remove chips, enforce the balance cap."""

from __future__ import annotations

import uuid
from enum import Enum
from threading import Lock
from typing import Mapping

import structlog

from quizwheel.errors import InsufficientBalance, InvalidRoundState
from quizwheel.models.outcome import OutcomeSet

log = structlog.get_logger(__name__)


def total_stake(wagers: Mapping[str, int]) -> int:
    """Sum of all stakes. Shared by ledger, engine, API and CLI so displayed and settled totals agree."""
    return sum(wagers.values())


class RoundState(str, Enum):
    ACCEPTING = "accepting"
    LOCKED = "locked"


class BetLedger:
    """In-progress wager map for one round. ACCEPTING -> LOCKED -> ACCEPTING, repeated per round."""

    __slots__ = ("outcomes", "_wagers", "_state", "_round_id", "_lock")

    def __init__(self, outcomes: OutcomeSet) -> None:
        self.outcomes = outcomes
        self._wagers: dict[str, int] = {}
        self._state = RoundState.ACCEPTING
        self._round_id: str | None = None
        self._lock = Lock()

    @property
    def state(self) -> RoundState:
        return self._state

    @property
    def round_id(self) -> str | None:
        """Id of the locked round, None while accepting."""
        return self._round_id

    @property
    def wagers(self) -> dict[str, int]:
        return dict(self._wagers)

    @property
    def total_stake(self) -> int:
        return total_stake(self._wagers)

    def place_bet(self, outcome_id: str, delta: int, current_balance: int) -> dict[str, int]:
        """Add delta (may be negative) to the stake on outcome_id. Returns the new map.

        The stake on one outcome never goes below zero. Raises InsufficientBalance,
        leaving the map unchanged, if the new total would exceed current_balance.
        A delta that is not a whole number of tokens raises TypeError.
        """
        if isinstance(delta, bool) or not isinstance(delta, int):
            raise TypeError(f"Bet delta must be an integer number of tokens, got {delta!r}")
        self.outcomes.get(outcome_id)
        with self._lock:
            if self._state is not RoundState.ACCEPTING:
                raise InvalidRoundState("Bets cannot change while a spin is in progress")
            old = self._wagers.get(outcome_id, 0)
            new = max(0, old + delta)
            new_total = total_stake(self._wagers) - old + new
            if new_total > current_balance:
                log.info(
                    "bet_rejected",
                    outcome_id=outcome_id,
                    delta=delta,
                    requested=new_total,
                    balance=current_balance,
                )
                raise InsufficientBalance(new_total, current_balance)
            if new:
                self._wagers[outcome_id] = new
            else:
                self._wagers.pop(outcome_id, None)
            return dict(self._wagers)

    def clear_bets(self) -> dict[str, int]:
        """Empty all stakes. Only while accepting."""
        with self._lock:
            if self._state is not RoundState.ACCEPTING:
                raise InvalidRoundState("Bets cannot be cleared while a spin is in progress")
            self._wagers = {}
            return {}

    def lock(self, round_id: str | None = None) -> tuple[str, dict[str, int]]:
        """Freeze the map for settlement. Returns (round_id, wager snapshot)."""
        with self._lock:
            if self._state is not RoundState.ACCEPTING:
                raise InvalidRoundState(f"Round {self._round_id} is already locked")
            self._state = RoundState.LOCKED
            self._round_id = round_id or uuid.uuid4().hex
            return self._round_id, dict(self._wagers)

    def unlock(self) -> None:
        """Reopen a locked round with its wagers intact. For a spin that failed before settling."""
        with self._lock:
            if self._state is not RoundState.LOCKED:
                raise InvalidRoundState("Only a locked round can be unlocked")
            self._state = RoundState.ACCEPTING
            self._round_id = None

    def reset(self) -> None:
        """Discard the settled map and reopen for the next round."""
        with self._lock:
            if self._state is not RoundState.LOCKED:
                raise InvalidRoundState("Only a locked round can be reset")
            self._wagers = {}
            self._state = RoundState.ACCEPTING
            self._round_id = None
