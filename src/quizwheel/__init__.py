"""QuizWheel - roulette betting with trivia-gated payouts."""

__version__ = "0.1.0"
