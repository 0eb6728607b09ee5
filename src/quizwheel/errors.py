"""Exception taxonomy for betting, settlement and persistence."""

from __future__ import annotations


class QuizWheelError(Exception):
    """Base exception. `code` is the machine-readable name used in API error bodies."""

    code = "error"


class InvalidOutcome(QuizWheelError):
    """Wager or settlement references an outcome id not in the active outcome set."""

    code = "invalid_outcome"

    def __init__(self, outcome_id: str):
        super().__init__(f"Unknown outcome: {outcome_id!r}")
        self.outcome_id = outcome_id


class InsufficientBalance(QuizWheelError):
    """Total stake would exceed the current balance."""

    code = "insufficient_balance"

    def __init__(self, requested: int, available: int):
        super().__init__(f"Total stake {requested} exceeds balance {available}")
        self.requested = requested
        self.available = available


class InvalidRoundState(QuizWheelError):
    """Mutation while locked, or settlement while not locked."""

    code = "invalid_round_state"


class DuplicateSettlement(QuizWheelError):
    """A settlement with this round id was already recorded."""

    code = "duplicate_settlement"

    def __init__(self, round_id: str):
        super().__init__(f"Round already settled: {round_id}")
        self.round_id = round_id


class PersistenceError(QuizWheelError):
    """Store read/write failed. The computed settlement is kept for retry."""

    code = "persistence_failed"


class UserNotFound(QuizWheelError):
    code = "user_not_found"

    def __init__(self, user: str):
        super().__init__(f"User not found: {user}")
        self.user = user


class UserExists(QuizWheelError):
    code = "user_exists"

    def __init__(self, username: str):
        super().__init__(f"Username already taken: {username}")
        self.username = username


class QuestionNotFound(QuizWheelError):
    code = "question_not_found"

    def __init__(self, question_id: str):
        super().__init__(f"Question not found: {question_id}")
        self.question_id = question_id
