from quizwheel.wheel.layouts import american_roulette, build_outcomes, european_roulette, segments_from_config
from quizwheel.wheel.source import (
    FixedOutcomeSource,
    OutcomeSource,
    UniformOutcomeSource,
    WeightedOutcomeSource,
    build_source,
)

__all__ = [
    "FixedOutcomeSource",
    "OutcomeSource",
    "UniformOutcomeSource",
    "WeightedOutcomeSource",
    "american_roulette",
    "build_outcomes",
    "build_source",
    "european_roulette",
    "segments_from_config",
]
