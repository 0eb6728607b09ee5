"""Question - trivia prompt with accepted answers."""

from __future__ import annotations

from pydantic import BaseModel, Field


class Question(BaseModel):
    question_id: str
    topic: str = "general"
    prompt: str
    answers: list[str] = Field(..., min_length=1)
    difficulty: int = Field(1, ge=1, le=5)
    time_limit_sec: int | None = Field(None, gt=0)
    active: bool = True
