"""Canonical schema (Pydantic) - Outcome, SettlementRecord, UserProfile, Question."""

from quizwheel.models.outcome import Outcome, OutcomeSet
from quizwheel.models.question import Question
from quizwheel.models.settlement import Modifier, SettlementRecord
from quizwheel.models.user import BalanceEvent, UserProfile

__all__ = [
    "Outcome",
    "OutcomeSet",
    "Modifier",
    "SettlementRecord",
    "UserProfile",
    "Question",
    "BalanceEvent",
]
