"""Deterministic settlement of one round: wagers + drawn outcome + balance + modifier -> SettlementRecord.

Arithmetic is exact (Fraction). Fractional tokens are truncated toward zero:
    gross   = floor(stake_on_winner * (payout_ratio + 1))
    payout  = floor(gross * multiplier[modifier])
    net     = payout - total_stake
"""

from __future__ import annotations

import math
import time
from decimal import Decimal
from fractions import Fraction
from typing import Callable, Mapping

import structlog

from quizwheel.errors import InsufficientBalance, InvalidOutcome
from quizwheel.ledger.bet_ledger import total_stake as _total_stake
from quizwheel.models.settlement import Modifier, SettlementRecord

log = structlog.get_logger(__name__)

Rational = int | Decimal | Fraction | str
MultiplierTable = dict[Modifier, Fraction]


def _to_fraction(value: Rational | float) -> Fraction:
    if isinstance(value, float):
        # repr round-trips the literal the user wrote (0.3 -> 3/10, not the binary float)
        return Fraction(repr(value))
    return Fraction(value)


def parse_multipliers(raw: Mapping[str, Rational | float]) -> MultiplierTable:
    """Build a modifier -> multiplier table. Requires correct >= absent >= incorrect >= 0."""
    table: MultiplierTable = {}
    for modifier in Modifier:
        if modifier.value not in raw:
            raise ValueError(f"Missing multiplier for {modifier.value!r}")
        value = _to_fraction(raw[modifier.value])
        if value < 0:
            raise ValueError(f"Multiplier for {modifier.value!r} must be >= 0, got {value}")
        table[modifier] = value
    if not (table[Modifier.CORRECT] >= table[Modifier.ABSENT] >= table[Modifier.INCORRECT]):
        raise ValueError("Multipliers must satisfy correct >= absent >= incorrect")
    return table


DEFAULT_MULTIPLIERS = parse_multipliers({"correct": "1", "absent": "0.5", "incorrect": "0.3"})


def gross_winnings(stake_on_winner: int, payout_ratio: Rational | float) -> int:
    """Stake returned plus stake * ratio of profit."""
    return math.floor(stake_on_winner * (_to_fraction(payout_ratio) + 1))


def apply_modifier(gross: int, modifier: Modifier, multipliers: MultiplierTable = DEFAULT_MULTIPLIERS) -> int:
    return math.floor(gross * multipliers[Modifier(modifier)])


def settle(
    wagers: Mapping[str, int],
    drawn_outcome_id: str,
    payout_ratios: Mapping[str, Rational | float],
    balance: int,
    modifier: Modifier,
    *,
    round_id: str,
    user_id: str,
    timestamp: int,
    multipliers: MultiplierTable = DEFAULT_MULTIPLIERS,
) -> SettlementRecord:
    """Compute the financial result of one round. Pure: equal inputs give equal records."""
    if drawn_outcome_id not in payout_ratios:
        raise InvalidOutcome(drawn_outcome_id)
    for outcome_id, stake in wagers.items():
        if outcome_id not in payout_ratios:
            raise InvalidOutcome(outcome_id)
        if stake < 0:
            raise ValueError(f"Negative stake on {outcome_id!r}: {stake}")
    if balance < 0:
        raise ValueError(f"Balance must be >= 0, got {balance}")

    stake = _total_stake(wagers)
    if stake > balance:
        raise InsufficientBalance(stake, balance)

    stake_on_winner = wagers.get(drawn_outcome_id, 0)
    gross = gross_winnings(stake_on_winner, payout_ratios[drawn_outcome_id]) if stake_on_winner else 0
    payout = apply_modifier(gross, modifier, multipliers)
    net = payout - stake
    balance_after = balance + net
    if balance_after < 0:
        # unreachable while stake <= balance and payout >= 0
        raise ValueError(f"Settlement would leave negative balance: {balance_after}")

    return SettlementRecord(
        round_id=round_id,
        user_id=user_id,
        outcome_id=drawn_outcome_id,
        wagers=dict(wagers),
        total_stake=stake,
        stake_on_winner=stake_on_winner,
        gross_winnings=gross,
        modifier=Modifier(modifier),
        actual_payout=payout,
        net_result=net,
        balance_before=balance,
        balance_after=balance_after,
        timestamp=timestamp,
    )


def _now_ms() -> int:
    return int(time.time() * 1000)


class SettlementEngine:
    """Binds a multiplier table and a clock to settle(). Holds no per-round state."""

    def __init__(
        self,
        multipliers: MultiplierTable | None = None,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        self.multipliers = multipliers or DEFAULT_MULTIPLIERS
        self.clock = clock

    @classmethod
    def from_settings(cls, settings) -> SettlementEngine:
        return cls(parse_multipliers(settings.modifier_multipliers))

    def settle(
        self,
        wagers: Mapping[str, int],
        drawn_outcome_id: str,
        payout_ratios: Mapping[str, Rational | float],
        balance: int,
        modifier: Modifier = Modifier.ABSENT,
        *,
        round_id: str,
        user_id: str,
        timestamp: int | None = None,
    ) -> SettlementRecord:
        record = settle(
            wagers,
            drawn_outcome_id,
            payout_ratios,
            balance,
            modifier,
            round_id=round_id,
            user_id=user_id,
            timestamp=self.clock() if timestamp is None else timestamp,
            multipliers=self.multipliers,
        )
        log.info(
            "round_settled",
            round_id=record.round_id,
            user_id=record.user_id,
            outcome_id=record.outcome_id,
            total_stake=record.total_stake,
            actual_payout=record.actual_payout,
            net_result=record.net_result,
            modifier=record.modifier.value,
        )
        return record
