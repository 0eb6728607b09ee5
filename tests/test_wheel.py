"""Outcome sets and outcome sources."""

import random
from collections import Counter
from decimal import Decimal

import pytest

from quizwheel.config import Settings
from quizwheel.errors import InvalidOutcome
from quizwheel.models.outcome import Outcome, OutcomeSet
from quizwheel.wheel.layouts import (
    american_roulette,
    build_outcomes,
    european_roulette,
    pocket_color,
    segments_from_config,
)
from quizwheel.wheel.source import (
    FixedOutcomeSource,
    UniformOutcomeSource,
    WeightedOutcomeSource,
    build_source,
)

SEGMENTS = [
    {"id": "gold", "payout_ratio": 9, "weight": 0.0},
    {"id": "blue", "payout_ratio": 2, "weight": 1.0},
]


def test_american_layout():
    wheel = american_roulette()
    assert len(wheel) == 38
    assert wheel.ids[:3] == ["0", "00", "1"]
    assert all(r == Decimal(35) for r in wheel.payout_ratios().values())
    assert "00" in wheel and "37" not in wheel


def test_european_layout():
    wheel = european_roulette()
    assert len(wheel) == 37
    assert "00" not in wheel


def test_pocket_colors():
    assert pocket_color("0") == "green"
    assert pocket_color("00") == "green"
    assert pocket_color("1") == "red"
    assert pocket_color("2") == "black"


def test_outcome_set_validation():
    with pytest.raises(ValueError):
        OutcomeSet([])
    o = Outcome(id="a", payout_ratio=Decimal(1))
    with pytest.raises(ValueError):
        OutcomeSet([o, o])
    with pytest.raises(InvalidOutcome):
        OutcomeSet([o]).get("b")


def test_segments_from_config():
    wheel = segments_from_config(SEGMENTS)
    assert wheel.ids == ["gold", "blue"]
    assert wheel.get("gold").payout_ratio == Decimal(9)
    assert wheel.get("gold").label == "gold"


def test_build_outcomes_by_type():
    assert len(build_outcomes(Settings())) == 38
    assert len(build_outcomes(Settings(wheel={"type": "european"}))) == 37
    segs = build_outcomes(Settings(wheel={"type": "segments", "segments": SEGMENTS}))
    assert segs.ids == ["gold", "blue"]
    with pytest.raises(ValueError):
        build_outcomes(Settings(wheel={"type": "craps"}))


def test_uniform_draws_only_known_ids():
    wheel = american_roulette()
    source = UniformOutcomeSource(wheel, random.Random(7))
    for _ in range(200):
        assert source.draw() in wheel


def test_seeded_sources_repeat():
    wheel = american_roulette()
    a = UniformOutcomeSource(wheel, random.Random(42))
    b = UniformOutcomeSource(wheel, random.Random(42))
    assert [a.draw() for _ in range(20)] == [b.draw() for _ in range(20)]


def test_weighted_skips_zero_weight():
    source = WeightedOutcomeSource(segments_from_config(SEGMENTS), random.Random(1))
    counts = Counter(source.draw() for _ in range(200))
    assert counts == {"blue": 200}


def test_weighted_requires_positive_weight():
    with pytest.raises(ValueError):
        WeightedOutcomeSource(segments_from_config([{"id": "x", "payout_ratio": 1, "weight": 0}]))


def test_fixed_source_cycles():
    source = FixedOutcomeSource(american_roulette(), ["17", "0"])
    assert [source.draw() for _ in range(3)] == ["17", "0", "17"]
    with pytest.raises(InvalidOutcome):
        FixedOutcomeSource(american_roulette(), ["99"])


def test_build_source_from_settings():
    settings = Settings(wheel={"type": "segments", "selection": "weighted", "seed": 3, "segments": SEGMENTS})
    source = build_source(settings)
    assert isinstance(source, WeightedOutcomeSource)
    assert source.draw() == "blue"
    with pytest.raises(ValueError):
        build_source(Settings(wheel={"selection": "loaded"}))
