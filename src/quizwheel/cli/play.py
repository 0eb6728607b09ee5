"""Play subcommand: one betting round from the terminal."""

from __future__ import annotations

import typer

from quizwheel.errors import InsufficientBalance, InvalidOutcome, InvalidRoundState, PersistenceError, UserNotFound
from quizwheel.game.session import SessionRegistry
from quizwheel.storage.db import get_connection, init_schema
from quizwheel.storage.users import require_user

app = typer.Typer(help="Place bets and spin")


def parse_bet(text: str) -> tuple[str, int]:
    """'17=10' -> ('17', 10)."""
    outcome_id, sep, amount = text.partition("=")
    if not sep or not outcome_id.strip():
        raise typer.BadParameter(f"Expected OUTCOME=AMOUNT, got {text!r}")
    try:
        return outcome_id.strip(), int(amount)
    except ValueError:
        raise typer.BadParameter(f"Amount must be an integer in {text!r}") from None


@app.callback(invoke_without_command=True)
def play(
    ctx: typer.Context,
    user: str = typer.Option(..., "--user", "-u", help="Username"),
    bets: list[str] = typer.Option(..., "--bet", "-b", help="OUTCOME=AMOUNT, repeatable (e.g. -b 17=10 -b 00=5)"),
    ask: bool = typer.Option(False, "--ask", help="Answer a trivia question for full payout"),
    topic: str | None = typer.Option(None, "--topic", help="Question topic (with --ask)"),
    retries: int = typer.Option(2, "--retries", help="Extra attempts to persist the result if the store fails"),
) -> None:
    """Place bets, optionally answer a question, spin once and settle."""
    if ctx.invoked_subcommand is not None:
        return
    settings = ctx.obj["settings"]
    parsed = [parse_bet(b) for b in bets]
    conn = get_connection(settings.db_path)
    init_schema(conn)
    try:
        profile = require_user(conn, user)
    except UserNotFound as e:
        typer.echo(str(e))
        raise typer.Exit(1)
    finally:
        conn.close()

    registry = SessionRegistry.from_settings(settings)
    session = registry.get(profile.id)
    try:
        for outcome_id, amount in parsed:
            session.place_bet(outcome_id, amount)
    except (InvalidOutcome, InsufficientBalance) as e:
        typer.echo(f"Bet rejected: {e}")
        raise typer.Exit(1)
    typer.echo(f"Bets: {session.wagers}  Total: {session.total_stake}  Balance: {profile.balance}")

    question = answer = time_taken_ms = None
    if ask:
        if not settings.trivia_enabled:
            typer.echo("Trivia is disabled in this profile; spinning without a question.")
        else:
            question = registry.store.random_question(topic or settings.trivia_topic)
            if question is None:
                typer.echo("No questions available; spinning without a question.")
            else:
                limit = f" ({question.time_limit_sec}s)" if question.time_limit_sec else ""
                session.issue_question(question)
                answer = typer.prompt(f"[{question.topic}] {question.prompt}{limit}")
                time_taken_ms = session.answer_time_ms(question.question_id)

    try:
        record = session.spin_with_answer(question, answer, time_taken_ms)
    except InvalidRoundState as e:
        typer.echo(str(e))
        raise typer.Exit(1)
    except PersistenceError as e:
        if session.pending is None:
            typer.echo(f"Store unavailable, nothing was settled: {e}")
            raise typer.Exit(1)
        record = None
        for attempt in range(retries):
            typer.echo(f"Persist failed ({e}); retry {attempt + 1}/{retries}")
            try:
                record = session.retry_persist()
                break
            except PersistenceError as retry_error:
                e = retry_error
        if record is None:
            typer.echo("Could not save the round. Settlement record:")
            typer.echo(session.pending.model_dump_json(indent=2))
            raise typer.Exit(2)

    outcome = registry.source.outcomes.get(record.outcome_id)
    typer.echo(f"Landed on: {record.outcome_id} ({outcome.color or outcome.label})")
    typer.echo(f"Trivia: {record.modifier.value}")
    typer.echo(f"Gross: {record.gross_winnings}  Paid: {record.actual_payout}  Net: {record.net_result:+d}")
    typer.echo(f"Balance: {record.balance_before} -> {record.balance_after}")
