"""Export the settlement log to Parquet."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from duckdb import DuckDBPyConnection


def export_settlements_to_parquet(
    conn: DuckDBPyConnection,
    output_path: str | Path,
    user_id: str | None = None,
) -> int:
    """Export settlements to a Parquet file. Optional filter by user_id. Returns row count."""
    path = Path(output_path).resolve()
    path.parent.mkdir(parents=True, exist_ok=True)
    path_str = str(path).replace("\\", "\\\\").replace("'", "''")
    if user_id:
        conn.execute(
            f"COPY (SELECT * FROM settlements WHERE user_id = ? ORDER BY created_at) TO '{path_str}' (FORMAT PARQUET)",
            [user_id],
        )
        count = conn.execute("SELECT COUNT(*) FROM settlements WHERE user_id = ?", [user_id]).fetchone()[0]
    else:
        conn.execute(
            f"COPY (SELECT * FROM settlements ORDER BY created_at) TO '{path_str}' (FORMAT PARQUET)",
        )
        count = conn.execute("SELECT COUNT(*) FROM settlements").fetchone()[0]
    return count
