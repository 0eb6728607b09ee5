"""Questions subcommand: add, list, disable."""

from __future__ import annotations

import typer

from quizwheel.storage.db import get_connection, init_schema
from quizwheel.storage.questions import add_question, list_questions, set_question_active

app = typer.Typer(help="Trivia question bank")


@app.command("add")
def add(
    ctx: typer.Context,
    prompt: str = typer.Argument(..., help="Question text"),
    answers: list[str] = typer.Option(..., "--answer", "-a", help="Accepted answer (repeatable)"),
    topic: str = typer.Option("general", "--topic", "-t"),
    difficulty: int = typer.Option(1, "--difficulty", "-d", min=1, max=5),
    time_limit: int | None = typer.Option(None, "--time-limit", help="Seconds allowed to answer"),
) -> None:
    """Add a question with its accepted answers."""
    settings = ctx.obj["settings"]
    conn = get_connection(settings.db_path)
    init_schema(conn)
    try:
        q = add_question(conn, prompt, answers, topic=topic, difficulty=difficulty, time_limit_sec=time_limit)
        typer.echo(f"Added question {q.question_id} [{q.topic}]")
    finally:
        conn.close()


@app.command("list")
def list_cmd(
    ctx: typer.Context,
    topic: str | None = typer.Option(None, "--topic", "-t"),
    include_inactive: bool = typer.Option(False, "--all", help="Include disabled questions"),
) -> None:
    """List questions in the bank."""
    settings = ctx.obj["settings"]
    conn = get_connection(settings.db_path)
    init_schema(conn)
    try:
        rows = list_questions(conn, topic=topic, active_only=not include_inactive)
        for q in rows:
            flag = "" if q.active else " (disabled)"
            typer.echo(f"  {q.question_id}  [{q.topic}/{q.difficulty}]  {q.prompt[:60]}{flag}")
        typer.echo(f"Total: {len(rows)} questions")
    finally:
        conn.close()


@app.command("disable")
def disable(ctx: typer.Context, question_id: str = typer.Argument(...)) -> None:
    """Stop asking a question."""
    settings = ctx.obj["settings"]
    conn = get_connection(settings.db_path)
    init_schema(conn)
    try:
        if not set_question_active(conn, question_id, False):
            typer.echo(f"Question not found: {question_id}")
            raise typer.Exit(1)
        typer.echo(f"Disabled {question_id}")
    finally:
        conn.close()
