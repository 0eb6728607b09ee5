"""Outcome sets for the supported wheels: American/European roulette and token segments."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from quizwheel.models.outcome import Outcome, OutcomeSet

RED_NUMBERS = frozenset({1, 3, 5, 7, 9, 12, 14, 16, 18, 19, 21, 23, 25, 27, 30, 32, 34, 36})
STRAIGHT_UP_RATIO = Decimal(35)


def pocket_color(pocket: str) -> str:
    if pocket in ("0", "00"):
        return "green"
    return "red" if int(pocket) in RED_NUMBERS else "black"


def _pockets(zeros: list[str]) -> OutcomeSet:
    ids = zeros + [str(n) for n in range(1, 37)]
    return OutcomeSet(
        [Outcome(id=p, label=p, payout_ratio=STRAIGHT_UP_RATIO, color=pocket_color(p)) for p in ids]
    )


def american_roulette() -> OutcomeSet:
    """38 pockets: 0, 00, 1-36, straight-up 35:1."""
    return _pockets(["0", "00"])


def european_roulette() -> OutcomeSet:
    """37 pockets: 0, 1-36, straight-up 35:1."""
    return _pockets(["0"])


def segments_from_config(segments: list[dict[str, Any]]) -> OutcomeSet:
    """Labeled token segments, e.g. [[wheel.segments]] tables from config."""
    outcomes = []
    for seg in segments:
        outcomes.append(
            Outcome(
                id=str(seg["id"]),
                label=seg.get("label") or str(seg["id"]),
                payout_ratio=Decimal(str(seg["payout_ratio"])),
                color=seg.get("color"),
                weight=float(seg.get("weight", 1.0)),
            )
        )
    return OutcomeSet(outcomes)


WHEELS = {"american": american_roulette, "european": european_roulette}


def build_outcomes(settings) -> OutcomeSet:
    """Outcome set for settings.wheel_type."""
    wheel_type = settings.wheel_type
    if wheel_type == "segments":
        return segments_from_config(settings.segments)
    if wheel_type not in WHEELS:
        raise ValueError(f"Unknown wheel type: {wheel_type}. Choose from: {[*WHEELS, 'segments']}")
    return WHEELS[wheel_type]()
