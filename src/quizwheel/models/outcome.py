"""Outcome, OutcomeSet - wheel pockets/segments with payout ratios."""

from __future__ import annotations

from decimal import Decimal
from typing import Iterator

from pydantic import BaseModel, ConfigDict, Field

from quizwheel.errors import InvalidOutcome


class Outcome(BaseModel):
    """Single wheel outcome. A winning stake returns stake * (payout_ratio + 1)."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    payout_ratio: Decimal = Field(..., ge=0, description="Profit multiple, e.g. 35 for 35:1")
    label: str | None = None
    color: str | None = None  # display only
    weight: float = Field(1.0, ge=0, description="Relative draw weight (weighted selection only)")


class OutcomeSet:
    """Ordered, immutable set of outcomes keyed by id."""

    __slots__ = ("_outcomes", "_by_id")

    def __init__(self, outcomes: list[Outcome] | tuple[Outcome, ...]) -> None:
        if not outcomes:
            raise ValueError("Outcome set must not be empty")
        by_id: dict[str, Outcome] = {}
        for o in outcomes:
            if o.id in by_id:
                raise ValueError(f"Duplicate outcome id: {o.id!r}")
            by_id[o.id] = o
        self._outcomes = tuple(outcomes)
        self._by_id = by_id

    def __contains__(self, outcome_id: object) -> bool:
        return outcome_id in self._by_id

    def __iter__(self) -> Iterator[Outcome]:
        return iter(self._outcomes)

    def __len__(self) -> int:
        return len(self._outcomes)

    def get(self, outcome_id: str) -> Outcome:
        """Return the outcome or raise InvalidOutcome."""
        try:
            return self._by_id[outcome_id]
        except KeyError:
            raise InvalidOutcome(outcome_id) from None

    @property
    def ids(self) -> list[str]:
        return [o.id for o in self._outcomes]

    def payout_ratios(self) -> dict[str, Decimal]:
        return {o.id: o.payout_ratio for o in self._outcomes}
