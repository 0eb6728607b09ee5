"""Outcome sources - draw one outcome id per spin. Uniform or weighted, one policy per deployment."""

from __future__ import annotations

import random
from abc import ABC, abstractmethod
from typing import Protocol

from quizwheel.models.outcome import OutcomeSet
from quizwheel.wheel.layouts import build_outcomes


class OutcomeSourceProtocol(Protocol):
    """What the game needs from a wheel."""

    @property
    def outcomes(self) -> OutcomeSet: ...
    def draw(self) -> str: ...


class OutcomeSource(ABC):
    """Base for wheels. The draw is the only source of randomness in a round."""

    policy: str = ""

    def __init__(self, outcomes: OutcomeSet, rng: random.Random | None = None) -> None:
        self._outcomes = outcomes
        self._rng = rng or random.Random()

    @property
    def outcomes(self) -> OutcomeSet:
        return self._outcomes

    @abstractmethod
    def draw(self) -> str:
        """Return the id of the drawn outcome."""
        ...


class UniformOutcomeSource(OutcomeSource):
    """Every pocket equally likely; segment weights are ignored."""

    policy = "uniform"

    def draw(self) -> str:
        return self._rng.choice(self._outcomes.ids)


class WeightedOutcomeSource(OutcomeSource):
    """Draw proportionally to each outcome's weight."""

    policy = "weighted"

    def __init__(self, outcomes: OutcomeSet, rng: random.Random | None = None) -> None:
        super().__init__(outcomes, rng)
        self._weights = [o.weight for o in outcomes]
        if sum(self._weights) <= 0:
            raise ValueError("Weighted wheel needs at least one outcome with weight > 0")

    def draw(self) -> str:
        return self._rng.choices(self._outcomes.ids, weights=self._weights, k=1)[0]


class FixedOutcomeSource(OutcomeSource):
    """Replays a scripted sequence of outcome ids (demos and tests)."""

    policy = "fixed"

    def __init__(self, outcomes: OutcomeSet, sequence: list[str]) -> None:
        super().__init__(outcomes)
        for outcome_id in sequence:
            outcomes.get(outcome_id)
        self._sequence = list(sequence)
        self._pos = 0

    def draw(self) -> str:
        outcome_id = self._sequence[self._pos % len(self._sequence)]
        self._pos += 1
        return outcome_id


SOURCES: dict[str, type[OutcomeSource]] = {
    "uniform": UniformOutcomeSource,
    "weighted": WeightedOutcomeSource,
}


def build_source(settings, outcomes: OutcomeSet | None = None) -> OutcomeSource:
    """Outcome source for settings.wheel_selection, seeded from settings.wheel_seed."""
    selection = settings.wheel_selection
    if selection not in SOURCES:
        raise ValueError(f"Unknown wheel selection: {selection}. Choose from: {list(SOURCES)}")
    outcomes = outcomes or build_outcomes(settings)
    return SOURCES[selection](outcomes, random.Random(settings.wheel_seed))
