"""Trivia question bank persistence."""

from __future__ import annotations

import json
import time
import uuid
from typing import TYPE_CHECKING, Any

from quizwheel.models.question import Question

if TYPE_CHECKING:
    from duckdb import DuckDBPyConnection

QUESTION_COLUMNS = ["question_id", "topic", "prompt", "answers", "difficulty", "time_limit_sec", "active"]
_SELECT_QUESTION = f"SELECT {', '.join(QUESTION_COLUMNS)} FROM questions"


def _row_to_question(row: tuple[Any, ...]) -> Question:
    d = dict(zip(QUESTION_COLUMNS, row))
    answers = d["answers"]
    d["answers"] = json.loads(answers) if isinstance(answers, str) else list(answers)
    return Question(**d)


def add_question(
    conn: DuckDBPyConnection,
    prompt: str,
    answers: list[str],
    topic: str = "general",
    difficulty: int = 1,
    time_limit_sec: int | None = None,
) -> Question:
    """Insert a question. Accepted answers are matched case-insensitively."""
    question = Question(
        question_id=uuid.uuid4().hex[:12],
        topic=topic.strip().lower() or "general",
        prompt=prompt.strip(),
        answers=[a.strip() for a in answers if a.strip()],
        difficulty=difficulty,
        time_limit_sec=time_limit_sec,
    )
    conn.execute(
        """
        INSERT INTO questions (question_id, topic, prompt, answers, difficulty, time_limit_sec, active, created_at)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """,
        [
            question.question_id,
            question.topic,
            question.prompt,
            json.dumps(question.answers),
            question.difficulty,
            question.time_limit_sec,
            question.active,
            int(time.time() * 1000),
        ],
    )
    return question


def get_question(conn: DuckDBPyConnection, question_id: str) -> Question | None:
    row = conn.execute(f"{_SELECT_QUESTION} WHERE question_id = ?", [question_id]).fetchone()
    return _row_to_question(row) if row else None


def list_questions(
    conn: DuckDBPyConnection,
    topic: str | None = None,
    active_only: bool = True,
) -> list[Question]:
    conditions = ["1=1"]
    params: list[Any] = []
    if topic:
        conditions.append("topic = LOWER(TRIM(?))")
        params.append(topic)
    if active_only:
        conditions.append("active")
    rows = conn.execute(
        f"{_SELECT_QUESTION} WHERE {' AND '.join(conditions)} ORDER BY topic, difficulty, created_at",
        params,
    ).fetchall()
    return [_row_to_question(r) for r in rows]


def random_question(conn: DuckDBPyConnection, topic: str | None = None) -> Question | None:
    """One active question at random (optionally within a topic), or None if the bank is empty."""
    if topic:
        row = conn.execute(
            f"{_SELECT_QUESTION} WHERE active AND topic = LOWER(TRIM(?)) ORDER BY random() LIMIT 1",
            [topic],
        ).fetchone()
    else:
        row = conn.execute(f"{_SELECT_QUESTION} WHERE active ORDER BY random() LIMIT 1").fetchone()
    return _row_to_question(row) if row else None


def set_question_active(conn: DuckDBPyConnection, question_id: str, active: bool) -> bool:
    """Enable/disable a question. Returns False if it does not exist."""
    rows = conn.execute(
        "UPDATE questions SET active = ? WHERE question_id = ? RETURNING question_id",
        [active, question_id],
    ).fetchall()
    return bool(rows)
