"""User accounts, balances, daily floor and leaderboard persistence."""

from __future__ import annotations

import time
import uuid
from datetime import date
from typing import TYPE_CHECKING, Any

from quizwheel.errors import UserExists, UserNotFound
from quizwheel.models.user import BalanceEvent, UserProfile
from quizwheel.settlement.daily_floor import DailyFloorResult, apply_daily_floor

if TYPE_CHECKING:
    from duckdb import DuckDBPyConnection

USER_COLUMNS = [
    "id",
    "username",
    "balance",
    "highest_balance",
    "last_daily_reset",
    "total_winnings",
    "games_played",
    "current_streak",
    "best_streak",
    "created_at",
    "updated_at",
]
_SELECT_USER = f"SELECT {', '.join(USER_COLUMNS)} FROM users"

LEADERBOARD_ORDER = {
    "balance": "balance DESC, highest_balance DESC",
    "winnings": "total_winnings DESC, balance DESC",
    "highest": "highest_balance DESC, balance DESC",
}


def _now_ms() -> int:
    return int(time.time() * 1000)


def _row_to_user(row: tuple[Any, ...]) -> UserProfile:
    return UserProfile(**dict(zip(USER_COLUMNS, row)))


def create_user(
    conn: DuckDBPyConnection,
    username: str,
    starting_balance: int = 100,
    today: date | None = None,
) -> UserProfile:
    """Insert a new account. Raises UserExists if the username is taken."""
    username = (username or "").strip()
    if not username:
        raise ValueError("Username must not be empty")
    if get_user_by_username(conn, username) is not None:
        raise UserExists(username)
    now_ms = _now_ms()
    user = UserProfile(
        id=str(uuid.uuid4()),
        username=username,
        balance=starting_balance,
        highest_balance=starting_balance,
        last_daily_reset=today or date.today(),
        created_at=now_ms,
        updated_at=now_ms,
    )
    conn.execute(
        f"INSERT INTO users ({', '.join(USER_COLUMNS)}) VALUES ({', '.join('?' for _ in USER_COLUMNS)})",
        [getattr(user, c) for c in USER_COLUMNS],
    )
    return user


def get_user(conn: DuckDBPyConnection, user_id: str) -> UserProfile | None:
    row = conn.execute(f"{_SELECT_USER} WHERE id = ?", [user_id]).fetchone()
    return _row_to_user(row) if row else None


def get_user_by_username(conn: DuckDBPyConnection, username: str) -> UserProfile | None:
    row = conn.execute(f"{_SELECT_USER} WHERE username = ?", [(username or "").strip()]).fetchone()
    return _row_to_user(row) if row else None


def require_user(conn: DuckDBPyConnection, username: str) -> UserProfile:
    """Look up by username. Raises UserNotFound."""
    user = get_user_by_username(conn, username)
    if user is None:
        raise UserNotFound(username)
    return user


def get_balance(conn: DuckDBPyConnection, user_id: str) -> int:
    row = conn.execute("SELECT balance FROM users WHERE id = ?", [user_id]).fetchone()
    if not row:
        raise UserNotFound(user_id)
    return int(row[0])


def set_balance(conn: DuckDBPyConnection, user_id: str, balance: int) -> None:
    """Overwrite balance (and raise highest_balance if exceeded)."""
    if balance < 0:
        raise ValueError(f"Balance must be >= 0, got {balance}")
    updated = conn.execute(
        """
        UPDATE users
        SET balance = ?, highest_balance = GREATEST(highest_balance, ?), updated_at = ?
        WHERE id = ?
        RETURNING id
        """,
        [balance, balance, _now_ms(), user_id],
    ).fetchall()
    if not updated:
        raise UserNotFound(user_id)


def apply_daily_floor_for_user(
    conn: DuckDBPyConnection,
    user_id: str,
    floor: int,
    today: date | None = None,
) -> DailyFloorResult:
    """Apply the once-per-day floor to a stored user. Same-day repeats write nothing."""
    today = today or date.today()
    conn.execute("BEGIN TRANSACTION")
    try:
        row = conn.execute(
            "SELECT balance, last_daily_reset FROM users WHERE id = ?", [user_id]
        ).fetchone()
        if not row:
            raise UserNotFound(user_id)
        result = apply_daily_floor(int(row[0]), row[1], today, floor)
        if result.stamped:
            conn.execute(
                """
                UPDATE users
                SET balance = ?, highest_balance = GREATEST(highest_balance, ?),
                    last_daily_reset = ?, updated_at = ?
                WHERE id = ?
                """,
                [result.balance, result.balance, result.last_reset, _now_ms(), user_id],
            )
        if result.raised:
            record_balance_event(conn, user_id, "daily_floor", int(row[0]), result.balance)
        conn.execute("COMMIT")
    except Exception:
        conn.execute("ROLLBACK")
        raise
    return result


def leaderboard(conn: DuckDBPyConnection, limit: int = 10, order_by: str = "balance") -> list[UserProfile]:
    """Top users, descending by balance (or winnings / highest balance)."""
    if order_by not in LEADERBOARD_ORDER:
        raise ValueError(f"Unknown leaderboard order: {order_by}. Choose from: {list(LEADERBOARD_ORDER)}")
    rows = conn.execute(
        f"{_SELECT_USER} ORDER BY {LEADERBOARD_ORDER[order_by]}, username LIMIT ?",
        [limit],
    ).fetchall()
    return [_row_to_user(r) for r in rows]


BALANCE_EVENT_COLUMNS = ["event_id", "user_id", "kind", "amount", "balance_before", "balance_after", "created_at"]


def record_balance_event(
    conn: DuckDBPyConnection,
    user_id: str,
    kind: str,
    balance_before: int,
    balance_after: int,
) -> BalanceEvent:
    """Append an audit row for a balance change that is not a settlement. Runs in the caller's transaction."""
    event = BalanceEvent(
        event_id=uuid.uuid4().hex,
        user_id=user_id,
        kind=kind,
        amount=balance_after - balance_before,
        balance_before=balance_before,
        balance_after=balance_after,
        created_at=_now_ms(),
    )
    conn.execute(
        f"INSERT INTO balance_events ({', '.join(BALANCE_EVENT_COLUMNS)}) VALUES ({', '.join('?' for _ in BALANCE_EVENT_COLUMNS)})",
        [getattr(event, c) for c in BALANCE_EVENT_COLUMNS],
    )
    return event


def list_balance_events(conn: DuckDBPyConnection, user_id: str, limit: int = 50) -> list[BalanceEvent]:
    """Most recent first."""
    rows = conn.execute(
        f"SELECT {', '.join(BALANCE_EVENT_COLUMNS)} FROM balance_events WHERE user_id = ? "
        "ORDER BY created_at DESC, event_id LIMIT ?",
        [user_id, limit],
    ).fetchall()
    return [BalanceEvent(**dict(zip(BALANCE_EVENT_COLUMNS, r))) for r in rows]
