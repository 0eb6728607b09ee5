"""Game session: one user's betting rounds, wired to a store, a wheel and a trivia gate."""

from __future__ import annotations

import time
from threading import Lock
from typing import Callable

import structlog

from quizwheel.errors import DuplicateSettlement, InsufficientBalance, InvalidRoundState, PersistenceError
from quizwheel.ledger.bet_ledger import BetLedger, RoundState
from quizwheel.models.question import Question
from quizwheel.models.settlement import Modifier, SettlementRecord
from quizwheel.settlement.engine import SettlementEngine
from quizwheel.storage.store import DuckDBStore, GameStore
from quizwheel.trivia.gate import TriviaGate
from quizwheel.wheel.source import OutcomeSourceProtocol, build_source

log = structlog.get_logger(__name__)


class GameSession:
    """Round driver for one user: bet, spin, settle, persist, reset.

    A settled round whose commit failed stays pending (and the ledger stays
    locked) until retry_persist() stores the same record. A spin that fails
    before settling reopens the round with its wagers intact.
    """

    def __init__(
        self,
        user_id: str,
        store: GameStore,
        source: OutcomeSourceProtocol,
        engine: SettlementEngine | None = None,
        gate: TriviaGate | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.user_id = user_id
        self.store = store
        self.source = source
        self.engine = engine or SettlementEngine()
        self.gate = gate or TriviaGate(enabled=False)
        self.ledger = BetLedger(source.outcomes)
        self.last_record: SettlementRecord | None = None
        self._pending: SettlementRecord | None = None
        self._issued: tuple[str, float] | None = None
        self._clock = clock
        self._spin_lock = Lock()

    @property
    def state(self) -> RoundState:
        return self.ledger.state

    @property
    def wagers(self) -> dict[str, int]:
        return self.ledger.wagers

    @property
    def total_stake(self) -> int:
        return self.ledger.total_stake

    @property
    def pending(self) -> SettlementRecord | None:
        return self._pending

    def place_bet(self, outcome_id: str, delta: int) -> dict[str, int]:
        """Change the stake on one outcome, checked against the stored balance.

        The balance read and the ledger update happen under the spin lock, so no
        round of this session can settle between them.
        """
        with self._spin_lock:
            balance = self.store.get_balance(self.user_id)
            return self.ledger.place_bet(outcome_id, delta, balance)

    def clear_bets(self) -> dict[str, int]:
        with self._spin_lock:
            return self.ledger.clear_bets()

    def issue_question(self, question: Question) -> Question:
        """Start the answer clock for question. Replaces any unanswered one."""
        with self._spin_lock:
            self._issued = (question.question_id, self._clock())
        return question

    def answer_time_ms(self, question_id: str) -> int:
        """Milliseconds since question_id was issued. Raises InvalidRoundState if it was not."""
        with self._spin_lock:
            issued = self._issued
            if issued is None or issued[0] != question_id:
                raise InvalidRoundState(f"Question {question_id} was not issued for this round")
            return int((self._clock() - issued[1]) * 1000)

    def spin(
        self,
        modifier: Modifier = Modifier.ABSENT,
        *,
        question: Question | None = None,
        answer: str | None = None,
        time_taken_ms: int | None = None,
    ) -> SettlementRecord:
        """Lock the bets, draw an outcome, settle and persist. Returns the record.

        question, answer and time_taken_ms are stored on the record as the trivia audit trail.
        """
        with self._spin_lock:
            if self._pending is not None:
                raise InvalidRoundState(
                    f"Round {self._pending.round_id} is not persisted yet; retry it before spinning again"
                )
            if self.ledger.state is not RoundState.ACCEPTING:
                raise InvalidRoundState("A spin is already in progress")
            if self.ledger.total_stake == 0:
                raise InvalidRoundState("Place a bet before spinning")
            balance = self.store.get_balance(self.user_id)
            if self.ledger.total_stake > balance:
                raise InsufficientBalance(self.ledger.total_stake, balance)

            round_id, wagers = self.ledger.lock()
            try:
                drawn = self.source.draw()
                log.info("spin_drawn", round_id=round_id, user_id=self.user_id, outcome_id=drawn)
                record = self.engine.settle(
                    wagers,
                    drawn,
                    self.source.outcomes.payout_ratios(),
                    balance,
                    modifier,
                    round_id=round_id,
                    user_id=self.user_id,
                )
            except Exception as e:
                self.ledger.unlock()
                log.error("spin_failed", round_id=round_id, user_id=self.user_id, error=str(e))
                raise
            if question is not None:
                record = record.model_copy(
                    update={
                        "question_id": question.question_id,
                        "answer": answer,
                        "time_taken_ms": time_taken_ms,
                    }
                )
            self._issued = None
            self._pending = record
            return self._persist()

    def spin_with_answer(
        self,
        question: Question | None,
        answer: str | None,
        time_taken_ms: int | None = None,
    ) -> SettlementRecord:
        """Spin with the modifier from the trivia gate."""
        modifier = self.gate.evaluate(question, answer, time_taken_ms)
        return self.spin(modifier, question=question, answer=answer, time_taken_ms=time_taken_ms)

    def retry_persist(self) -> SettlementRecord:
        """Commit the pending record again without recomputing it."""
        with self._spin_lock:
            if self._pending is None:
                raise InvalidRoundState("No settlement is waiting to be persisted")
            return self._persist()

    def _persist(self) -> SettlementRecord:
        record = self._pending
        try:
            balance = self.store.commit_settlement(record)
            log.info("settlement_persisted", round_id=record.round_id, user_id=self.user_id, balance=balance)
        except DuplicateSettlement:
            log.warning("settlement_already_recorded", round_id=record.round_id, user_id=self.user_id)
        except PersistenceError:
            log.error("settlement_pending", round_id=record.round_id, user_id=self.user_id)
            raise
        self._pending = None
        self.last_record = record
        self.ledger.reset()
        return record


class SessionRegistry:
    """One GameSession per user id, created on first use."""

    def __init__(
        self,
        store: GameStore,
        source: OutcomeSourceProtocol,
        engine: SettlementEngine | None = None,
        gate: TriviaGate | None = None,
    ) -> None:
        self.store = store
        self.source = source
        self.engine = engine or SettlementEngine()
        self.gate = gate or TriviaGate(enabled=False)
        self._sessions: dict[str, GameSession] = {}
        self._lock = Lock()

    @classmethod
    def from_settings(cls, settings) -> SessionRegistry:
        return cls(
            store=DuckDBStore(settings.db_path),
            source=build_source(settings),
            engine=SettlementEngine.from_settings(settings),
            gate=TriviaGate(enabled=settings.trivia_enabled),
        )

    def get(self, user_id: str) -> GameSession:
        with self._lock:
            session = self._sessions.get(user_id)
            if session is None:
                session = GameSession(user_id, self.store, self.source, self.engine, self.gate)
                self._sessions[user_id] = session
            return session

    def sessions(self) -> dict[str, GameSession]:
        with self._lock:
            return dict(self._sessions)
