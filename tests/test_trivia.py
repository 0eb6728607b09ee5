"""Trivia gate: answer matching and modifier selection."""

from quizwheel.models.question import Question
from quizwheel.models.settlement import Modifier
from quizwheel.trivia.gate import TriviaGate, is_correct, normalize_answer

QUESTION = Question(question_id="q1", prompt="Capital of France?", answers=["Paris"], time_limit_sec=10)


def test_normalize_answer():
    assert normalize_answer("  The   CITY of Paris ") == "the city of paris"
    assert normalize_answer(None) == ""


def test_is_correct_case_insensitive_substring():
    assert is_correct(QUESTION, "paris")
    assert is_correct(QUESTION, "It's PARIS, obviously")
    assert not is_correct(QUESTION, "Lyon")
    assert not is_correct(QUESTION, "")
    assert not is_correct(QUESTION, None)


def test_gate_modifiers():
    gate = TriviaGate()
    assert gate.evaluate(QUESTION, "Paris") is Modifier.CORRECT
    assert gate.evaluate(QUESTION, "Rome") is Modifier.INCORRECT
    assert gate.evaluate(None, None) is Modifier.ABSENT


def test_gate_timeout_is_incorrect():
    gate = TriviaGate()
    assert gate.evaluate(QUESTION, "Paris", time_taken_ms=10_000) is Modifier.CORRECT
    assert gate.evaluate(QUESTION, "Paris", time_taken_ms=10_001) is Modifier.INCORRECT


def test_disabled_gate_is_always_absent():
    gate = TriviaGate(enabled=False)
    assert gate.evaluate(QUESTION, "Paris") is Modifier.ABSENT
