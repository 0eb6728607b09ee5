"""Root CLI app - entry point and command registration."""

from pathlib import Path

import typer

from quizwheel.config import get_settings
from quizwheel.config.settings import configure_logging
from quizwheel.storage.db import get_connection, init_schema
from quizwheel.storage.users import leaderboard as storage_leaderboard

app = typer.Typer(
    name="qwheel",
    help="QuizWheel - roulette betting with trivia-gated payouts, accounts and a leaderboard.",
    no_args_is_help=True,
)


@app.callback()
def main(
    ctx: typer.Context,
    config_dir: Path | None = typer.Option(
        None, "--config-dir", "-C", help="Config directory (default: ./config or package config)"
    ),
    profile: str | None = typer.Option(
        None, "--profile", "-p", help="Config profile (e.g. classic) to overlay on default.toml"
    ),
) -> None:
    """Configure logging and store options in context."""
    settings = get_settings(profile, config_dir)
    configure_logging(settings)
    ctx.obj = {"settings": settings, "config_dir": config_dir, "profile": profile}


@app.command("leaderboard")
def leaderboard(
    ctx: typer.Context,
    limit: int = typer.Option(None, "--limit", "-n", help="Rows to show (default from config)"),
    order_by: str = typer.Option("balance", "--by", help="balance, winnings or highest"),
) -> None:
    """Top players."""
    settings = ctx.obj["settings"]
    conn = get_connection(settings.db_path)
    init_schema(conn)
    try:
        try:
            users = storage_leaderboard(conn, limit=limit or settings.leaderboard_limit, order_by=order_by)
        except ValueError as e:
            typer.echo(str(e))
            raise typer.Exit(1)
        for rank, u in enumerate(users, start=1):
            typer.echo(f"  {rank:>3}. {u.username:<20} {u.balance:>10}  won {u.total_winnings}  games {u.games_played}")
        typer.echo(f"Total: {len(users)} players")
    finally:
        conn.close()


# Subcommands registered from other modules
from quizwheel.cli import api_cmd, log, play, questions, users, wheel  # noqa: E402

app.add_typer(users.app, name="users")
app.add_typer(play.app, name="play")
app.add_typer(questions.app, name="questions")
app.add_typer(log.app, name="log")
app.add_typer(wheel.app, name="wheel")
app.add_typer(api_cmd.app, name="api")


def run() -> None:
    app()


if __name__ == "__main__":
    run()
