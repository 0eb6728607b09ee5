"""DuckDB connection and schema init."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import duckdb

if TYPE_CHECKING:
    from duckdb import DuckDBPyConnection

SCHEMA_SQL = """
-- Player accounts (balance is the single source of truth for spendable tokens)
CREATE TABLE IF NOT EXISTS users (
    id                  VARCHAR PRIMARY KEY,
    username            VARCHAR NOT NULL UNIQUE,
    balance             BIGINT NOT NULL,
    highest_balance     BIGINT NOT NULL,
    last_daily_reset    DATE,
    total_winnings      BIGINT NOT NULL DEFAULT 0,
    games_played        INTEGER NOT NULL DEFAULT 0,
    current_streak      INTEGER NOT NULL DEFAULT 0,
    best_streak         INTEGER NOT NULL DEFAULT 0,
    created_at          BIGINT NOT NULL,
    updated_at          BIGINT NOT NULL
);

-- Settled rounds (append-only audit trail, one row per round_id)
CREATE TABLE IF NOT EXISTS settlements (
    round_id            VARCHAR PRIMARY KEY,
    user_id             VARCHAR NOT NULL,
    outcome_id          VARCHAR NOT NULL,
    wagers              JSON NOT NULL,
    total_stake         BIGINT NOT NULL,
    stake_on_winner     BIGINT NOT NULL,
    gross_winnings      BIGINT NOT NULL,
    modifier            VARCHAR NOT NULL,
    actual_payout       BIGINT NOT NULL,
    net_result          BIGINT NOT NULL,
    balance_before      BIGINT NOT NULL,
    balance_after       BIGINT NOT NULL,
    created_at          BIGINT NOT NULL,
    question_id         VARCHAR,
    answer              VARCHAR,
    time_taken_ms       BIGINT
);

-- Trivia audit columns for files created before they existed
ALTER TABLE settlements ADD COLUMN IF NOT EXISTS question_id VARCHAR;
ALTER TABLE settlements ADD COLUMN IF NOT EXISTS answer VARCHAR;
ALTER TABLE settlements ADD COLUMN IF NOT EXISTS time_taken_ms BIGINT;

-- Balance changes made outside a spin (daily floor)
CREATE TABLE IF NOT EXISTS balance_events (
    event_id            VARCHAR PRIMARY KEY,
    user_id             VARCHAR NOT NULL,
    kind                VARCHAR NOT NULL,
    amount              BIGINT NOT NULL,
    balance_before      BIGINT NOT NULL,
    balance_after       BIGINT NOT NULL,
    created_at          BIGINT NOT NULL
);

-- Trivia questions with accepted answers
CREATE TABLE IF NOT EXISTS questions (
    question_id         VARCHAR PRIMARY KEY,
    topic               VARCHAR NOT NULL,
    prompt              VARCHAR NOT NULL,
    answers             JSON NOT NULL,
    difficulty          INTEGER NOT NULL DEFAULT 1,
    time_limit_sec      INTEGER,
    active              BOOLEAN NOT NULL DEFAULT TRUE,
    created_at          BIGINT NOT NULL
);
"""


def get_connection(db_path: str | Path, read_only: bool = False) -> DuckDBPyConnection:
    """Return a DuckDB connection. Caller must close or use as context manager."""
    path = Path(db_path)
    if not read_only:
        path.parent.mkdir(parents=True, exist_ok=True)
    return duckdb.connect(str(path), read_only=read_only)


def init_schema(conn: DuckDBPyConnection) -> None:
    """Create tables if they do not exist."""
    for stmt in SCHEMA_SQL.split(";"):
        stmt = stmt.strip()
        if stmt:
            try:
                conn.execute(stmt)
            except duckdb.Error as e:
                if "already exists" not in str(e).lower():
                    raise
