"""Trivia gate - turn a player's free-text answer into a settlement Modifier."""

from __future__ import annotations

import structlog

from quizwheel.models.question import Question
from quizwheel.models.settlement import Modifier

log = structlog.get_logger(__name__)


def normalize_answer(text: str | None) -> str:
    """Lowercase and collapse whitespace."""
    return " ".join((text or "").lower().split())


def is_correct(question: Question, answer: str | None) -> bool:
    """True if any accepted answer appears (case-insensitive) inside the response."""
    response = normalize_answer(answer)
    if not response:
        return False
    for accepted in question.answers:
        accepted = normalize_answer(accepted)
        if accepted and accepted in response:
            return True
    return False


class TriviaGate:
    """Per-round correctness signal. No question asked -> ABSENT."""

    def __init__(self, enabled: bool = True) -> None:
        self.enabled = enabled

    def evaluate(
        self,
        question: Question | None,
        answer: str | None,
        time_taken_ms: int | None = None,
    ) -> Modifier:
        if not self.enabled or question is None:
            return Modifier.ABSENT
        if (
            question.time_limit_sec is not None
            and time_taken_ms is not None
            and time_taken_ms > question.time_limit_sec * 1000
        ):
            log.info("answer_timed_out", question_id=question.question_id, time_taken_ms=time_taken_ms)
            return Modifier.INCORRECT
        correct = is_correct(question, answer)
        log.debug("answer_evaluated", question_id=question.question_id, correct=correct)
        return Modifier.CORRECT if correct else Modifier.INCORRECT
