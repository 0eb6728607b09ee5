"""Log subcommand: settlement history, stats, export."""

from __future__ import annotations

import typer

from quizwheel.errors import UserNotFound
from quizwheel.storage.db import get_connection, init_schema
from quizwheel.storage.export import export_settlements_to_parquet
from quizwheel.storage.settlements import list_settlements, settlement_stats
from quizwheel.storage.users import require_user

app = typer.Typer(help="Settlement log history, statistics and export")


def _user_id(conn, username: str | None) -> str | None:
    if not username:
        return None
    try:
        return require_user(conn, username).id
    except UserNotFound as e:
        typer.echo(str(e))
        raise typer.Exit(1)


@app.command("history")
def history(
    ctx: typer.Context,
    user: str | None = typer.Option(None, "--user", "-u", help="Filter by username"),
    limit: int = typer.Option(20, "--limit", "-n"),
) -> None:
    """Most recent settled rounds."""
    settings = ctx.obj["settings"]
    conn = get_connection(settings.db_path)
    init_schema(conn)
    try:
        for r in list_settlements(conn, user_id=_user_id(conn, user), limit=limit):
            typer.echo(
                f"  {r.round_id[:12]}  {r.outcome_id:>4}  stake {r.total_stake:>6}  "
                f"paid {r.actual_payout:>6} ({r.modifier.value})  net {r.net_result:+d}  "
                f"{r.balance_before} -> {r.balance_after}"
            )
    finally:
        conn.close()


@app.command("stats")
def stats(
    ctx: typer.Context,
    user: str | None = typer.Option(None, "--user", "-u", help="Filter by username"),
) -> None:
    """Totals across settled rounds."""
    settings = ctx.obj["settings"]
    conn = get_connection(settings.db_path)
    init_schema(conn)
    try:
        s = settlement_stats(conn, user_id=_user_id(conn, user))
        typer.echo(f"Rounds: {s['rounds']}")
        typer.echo(f"Staked: {s['total_staked']}  Paid: {s['total_paid']}  Net: {s['net_result']:+d}")
        typer.echo(f"First ts: {s.get('first_ts')}  Last ts: {s.get('last_ts')}")
        for row in s["by_modifier"]:
            typer.echo(f"  {row['modifier']:<10} {row['count']}")
    finally:
        conn.close()


@app.command("export")
def export(
    ctx: typer.Context,
    user: str | None = typer.Option(None, "--user", "-u", help="Filter by username"),
    output: str = typer.Option("settlements.parquet", "--output", "-o", help="Output path"),
) -> None:
    """Export settlements to Parquet."""
    settings = ctx.obj["settings"]
    conn = get_connection(settings.db_path)
    init_schema(conn)
    try:
        count = export_settlements_to_parquet(conn, output, user_id=_user_id(conn, user))
        typer.echo(f"Exported {count} settlements to {output}")
    finally:
        conn.close()
