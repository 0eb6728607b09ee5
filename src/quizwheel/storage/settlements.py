"""Settlement log - append-only, keyed by round_id."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from quizwheel.errors import DuplicateSettlement, UserNotFound
from quizwheel.models.settlement import Modifier, SettlementRecord

if TYPE_CHECKING:
    from duckdb import DuckDBPyConnection

SETTLEMENT_COLUMNS = [
    "round_id",
    "user_id",
    "outcome_id",
    "wagers",
    "total_stake",
    "stake_on_winner",
    "gross_winnings",
    "modifier",
    "actual_payout",
    "net_result",
    "balance_before",
    "balance_after",
    "created_at",
    "question_id",
    "answer",
    "time_taken_ms",
]
_SELECT_SETTLEMENT = f"SELECT {', '.join(SETTLEMENT_COLUMNS)} FROM settlements"


def _row_to_record(row: tuple[Any, ...]) -> SettlementRecord:
    d = dict(zip(SETTLEMENT_COLUMNS, row))
    wagers = d.pop("wagers")
    d["wagers"] = json.loads(wagers) if isinstance(wagers, str) else (wagers or {})
    d["modifier"] = Modifier(d["modifier"])
    d["timestamp"] = d.pop("created_at")
    return SettlementRecord(**d)


def settlement_exists(conn: DuckDBPyConnection, round_id: str) -> bool:
    row = conn.execute("SELECT 1 FROM settlements WHERE round_id = ?", [round_id]).fetchone()
    return row is not None


def append_settlement(conn: DuckDBPyConnection, record: SettlementRecord) -> None:
    """Append one record. Raises DuplicateSettlement if the round was already logged."""
    if settlement_exists(conn, record.round_id):
        raise DuplicateSettlement(record.round_id)
    conn.execute(
        f"INSERT INTO settlements ({', '.join(SETTLEMENT_COLUMNS)}) VALUES ({', '.join('?' for _ in SETTLEMENT_COLUMNS)})",
        [
            record.round_id,
            record.user_id,
            record.outcome_id,
            json.dumps(record.wagers, sort_keys=True),
            record.total_stake,
            record.stake_on_winner,
            record.gross_winnings,
            record.modifier.value,
            record.actual_payout,
            record.net_result,
            record.balance_before,
            record.balance_after,
            record.timestamp,
            record.question_id,
            record.answer,
            record.time_taken_ms,
        ],
    )


def commit_settlement(conn: DuckDBPyConnection, record: SettlementRecord) -> int:
    """Append the record and apply net_result to the user's balance in one transaction.

    Returns the stored balance afterwards. A round_id seen before raises
    DuplicateSettlement and changes nothing.
    """
    conn.execute("BEGIN TRANSACTION")
    try:
        append_settlement(conn, record)
        won = record.net_result > 0
        row = conn.execute(
            """
            UPDATE users SET
                balance = balance + ?,
                highest_balance = GREATEST(highest_balance, balance + ?),
                total_winnings = total_winnings + ?,
                games_played = games_played + 1,
                current_streak = CASE WHEN ? THEN current_streak + 1 ELSE 0 END,
                best_streak = CASE WHEN ? THEN GREATEST(best_streak, current_streak + 1) ELSE best_streak END,
                updated_at = ?
            WHERE id = ?
            RETURNING balance
            """,
            [
                record.net_result,
                record.net_result,
                record.actual_payout,
                won,
                won,
                record.timestamp,
                record.user_id,
            ],
        ).fetchone()
        if row is None:
            raise UserNotFound(record.user_id)
        if row[0] < 0:
            raise ValueError(f"Settlement {record.round_id} would leave negative balance {row[0]}")
        conn.execute("COMMIT")
    except Exception:
        conn.execute("ROLLBACK")
        raise
    return int(row[0])


def get_settlement(conn: DuckDBPyConnection, round_id: str) -> SettlementRecord | None:
    row = conn.execute(f"{_SELECT_SETTLEMENT} WHERE round_id = ?", [round_id]).fetchone()
    return _row_to_record(row) if row else None


def list_settlements(
    conn: DuckDBPyConnection,
    user_id: str | None = None,
    limit: int = 50,
) -> list[SettlementRecord]:
    """Most recent first."""
    if user_id:
        rows = conn.execute(
            f"{_SELECT_SETTLEMENT} WHERE user_id = ? ORDER BY created_at DESC, round_id LIMIT ?",
            [user_id, limit],
        ).fetchall()
    else:
        rows = conn.execute(
            f"{_SELECT_SETTLEMENT} ORDER BY created_at DESC, round_id LIMIT ?",
            [limit],
        ).fetchall()
    return [_row_to_record(r) for r in rows]


def settlement_stats(conn: DuckDBPyConnection, user_id: str | None = None) -> dict[str, Any]:
    """Round count, total staked/paid, net and counts by modifier."""
    where = "WHERE user_id = ?" if user_id else ""
    params = [user_id] if user_id else []
    row = conn.execute(
        f"""
        SELECT COUNT(*), COALESCE(SUM(total_stake), 0), COALESCE(SUM(actual_payout), 0),
               COALESCE(SUM(net_result), 0), MIN(created_at), MAX(created_at)
        FROM settlements {where}
        """,
        params,
    ).fetchone()
    by_modifier = conn.execute(
        f"SELECT modifier, COUNT(*) AS cnt FROM settlements {where} GROUP BY modifier ORDER BY cnt DESC",
        params,
    ).fetchall()
    return {
        "rounds": row[0],
        "total_staked": int(row[1]),
        "total_paid": int(row[2]),
        "net_result": int(row[3]),
        "first_ts": row[4],
        "last_ts": row[5],
        "by_modifier": [{"modifier": r[0], "count": r[1]} for r in by_modifier],
    }
