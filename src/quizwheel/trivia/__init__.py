from quizwheel.trivia.gate import TriviaGate, is_correct, normalize_answer

__all__ = ["TriviaGate", "is_correct", "normalize_answer"]
