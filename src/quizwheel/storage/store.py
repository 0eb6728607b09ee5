"""Store used by game sessions: balance reads and atomic settlement commits.

Each call opens its own short-lived connection, so one store may be shared by
request threads.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

import duckdb
import structlog

from quizwheel.errors import PersistenceError
from quizwheel.models.question import Question
from quizwheel.models.settlement import SettlementRecord
from quizwheel.storage import questions, settlements, users
from quizwheel.storage.db import get_connection, init_schema

log = structlog.get_logger(__name__)


class GameStore(Protocol):
    """Balance store + settlement log, as seen by a game session."""

    def get_balance(self, user_id: str) -> int: ...
    def set_balance(self, user_id: str, balance: int) -> None: ...
    def commit_settlement(self, record: SettlementRecord) -> int: ...


class DuckDBStore:
    """GameStore on a DuckDB file. duckdb.Error surfaces as PersistenceError."""

    def __init__(self, db_path: str | Path) -> None:
        self.db_path = db_path
        conn = get_connection(db_path)
        try:
            init_schema(conn)
        finally:
            conn.close()

    def _connect(self):
        try:
            return get_connection(self.db_path)
        except duckdb.Error as e:
            raise PersistenceError(f"Cannot open {self.db_path}: {e}") from e

    def get_balance(self, user_id: str) -> int:
        conn = self._connect()
        try:
            return users.get_balance(conn, user_id)
        except duckdb.Error as e:
            raise PersistenceError(f"Balance read failed: {e}") from e
        finally:
            conn.close()

    def set_balance(self, user_id: str, balance: int) -> None:
        conn = self._connect()
        try:
            users.set_balance(conn, user_id, balance)
        except duckdb.Error as e:
            raise PersistenceError(f"Balance write failed: {e}") from e
        finally:
            conn.close()

    def commit_settlement(self, record: SettlementRecord) -> int:
        conn = self._connect()
        try:
            balance = settlements.commit_settlement(conn, record)
        except duckdb.Error as e:
            log.error("settlement_commit_failed", round_id=record.round_id, error=str(e))
            raise PersistenceError(f"Settlement commit failed: {e}") from e
        finally:
            conn.close()
        return balance

    def random_question(self, topic: str | None = None) -> Question | None:
        conn = self._connect()
        try:
            return questions.random_question(conn, topic=topic)
        finally:
            conn.close()

    def get_question(self, question_id: str) -> Question | None:
        conn = self._connect()
        try:
            return questions.get_question(conn, question_id)
        finally:
            conn.close()
