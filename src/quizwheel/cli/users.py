"""Users subcommand: create, show, daily-reset."""

from __future__ import annotations

import typer

from quizwheel.errors import UserExists, UserNotFound
from quizwheel.storage.db import get_connection, init_schema
from quizwheel.storage.users import apply_daily_floor_for_user, create_user, list_balance_events, require_user

app = typer.Typer(help="Player accounts")


@app.command("create")
def create(ctx: typer.Context, username: str = typer.Argument(..., help="New username")) -> None:
    """Create an account with the configured starting balance."""
    settings = ctx.obj["settings"]
    conn = get_connection(settings.db_path)
    init_schema(conn)
    try:
        user = create_user(conn, username, starting_balance=settings.starting_balance)
        typer.echo(f"Created {user.username} ({user.id}) with {user.balance} tokens")
    except (UserExists, ValueError) as e:
        typer.echo(str(e))
        raise typer.Exit(1)
    finally:
        conn.close()


@app.command("show")
def show(ctx: typer.Context, username: str = typer.Argument(...)) -> None:
    """Show balance and statistics."""
    settings = ctx.obj["settings"]
    conn = get_connection(settings.db_path)
    init_schema(conn)
    try:
        user = require_user(conn, username)
        events = list_balance_events(conn, user.id, limit=5)
    except UserNotFound as e:
        typer.echo(str(e))
        raise typer.Exit(1)
    finally:
        conn.close()
    typer.echo(f"User: {user.username}  id: {user.id}")
    typer.echo(f"Balance: {user.balance}  Highest: {user.highest_balance}")
    typer.echo(f"Games: {user.games_played}  Total winnings: {user.total_winnings}")
    typer.echo(f"Streak: {user.current_streak}  Best streak: {user.best_streak}")
    typer.echo(f"Last daily reset: {user.last_daily_reset}")
    for ev in events:
        typer.echo(f"  {ev.kind}: {ev.balance_before} -> {ev.balance_after} ({ev.amount:+d})")


@app.command("daily-reset")
def daily_reset(ctx: typer.Context, username: str = typer.Argument(...)) -> None:
    """Apply the daily floor (no-op if already applied today)."""
    settings = ctx.obj["settings"]
    conn = get_connection(settings.db_path)
    init_schema(conn)
    try:
        user = require_user(conn, username)
        result = apply_daily_floor_for_user(conn, user.id, settings.daily_floor)
    except UserNotFound as e:
        typer.echo(str(e))
        raise typer.Exit(1)
    finally:
        conn.close()
    if result.raised:
        typer.echo(f"Balance raised to {result.balance}")
    elif result.stamped:
        typer.echo(f"Balance {result.balance} is at or above the floor; reset date stamped")
    else:
        typer.echo(f"Already reset today. Balance: {result.balance}")
