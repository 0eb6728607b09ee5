"""FastAPI routes against a temporary DuckDB file."""

import pytest
from fastapi.testclient import TestClient

from quizwheel.api.main import create_app
from quizwheel.config import Settings
from quizwheel.storage.db import get_connection, init_schema
from quizwheel.storage.questions import add_question


@pytest.fixture
def settings(db_path):
    return Settings(
        storage={"db_path": str(db_path)},
        accounts={"starting_balance": 100, "daily_floor": 100},
        wheel={"type": "segments", "selection": "weighted", "segments": [
            {"id": "win", "payout_ratio": 1, "weight": 1.0},
            {"id": "lose", "payout_ratio": 1, "weight": 0.0},
        ]},
    )


@pytest.fixture
def client(settings):
    with TestClient(create_app(settings)) as c:
        yield c


def _question(settings, **kw):
    conn = get_connection(settings.db_path)
    init_schema(conn)
    try:
        return add_question(conn, "2+2?", ["4", "four"], **kw)
    finally:
        conn.close()


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_wheel(client):
    body = client.get("/wheel").json()
    assert body["type"] == "segments"
    assert [o["id"] for o in body["outcomes"]] == ["win", "lose"]
    assert body["outcomes"][0]["payout_ratio"] == "1"


def test_create_and_get_user(client):
    r = client.post("/users", json={"username": "ana"})
    assert r.status_code == 201
    assert r.json()["balance"] == 100
    assert client.get("/users/ana").json()["username"] == "ana"

    dup = client.post("/users", json={"username": "ana"})
    assert dup.status_code == 409
    assert dup.json()["code"] == "user_exists"

    missing = client.get("/users/nobody")
    assert missing.status_code == 404
    assert missing.json()["code"] == "user_not_found"


def test_invalid_username(client):
    assert client.post("/users", json={"username": "no spaces"}).status_code == 422


def test_bet_and_spin(client):
    client.post("/users", json={"username": "ben"})
    r = client.post("/users/ben/bets", json={"outcome_id": "win", "delta": 20})
    assert r.status_code == 200
    assert r.json()["wagers"] == {"win": 20}
    assert r.json()["state"] == "accepting"

    over = client.post("/users/ben/bets", json={"outcome_id": "lose", "delta": 90})
    assert over.status_code == 409
    assert over.json()["code"] == "insufficient_balance"

    bad = client.post("/users/ben/bets", json={"outcome_id": "jackpot", "delta": 1})
    assert bad.status_code == 400
    assert bad.json()["code"] == "invalid_outcome"

    spin = client.post("/users/ben/spin")
    assert spin.status_code == 200
    rec = spin.json()
    # absent: floor(20 * 2 * 0.5) = 20, net 0
    assert rec["outcome_id"] == "win"
    assert rec["modifier"] == "absent"
    assert rec["actual_payout"] == 20
    assert client.get("/users/ben").json()["balance"] == rec["balance_after"] == 100
    assert client.get("/users/ben/bets").json()["wagers"] == {}

    history = client.get("/users/ben/settlements").json()
    assert [h["round_id"] for h in history] == [rec["round_id"]]
    stats = client.get("/users/ben/settlements/stats").json()
    assert stats["rounds"] == 1


def test_spin_without_bets(client):
    client.post("/users", json={"username": "cy"})
    r = client.post("/users/cy/spin")
    assert r.status_code == 409
    assert r.json()["code"] == "invalid_round_state"


def test_clear_bets(client):
    client.post("/users", json={"username": "di"})
    client.post("/users/di/bets", json={"outcome_id": "win", "delta": 5})
    r = client.delete("/users/di/bets")
    assert r.json()["total_stake"] == 0


def test_spin_with_correct_answer(client, settings):
    q = _question(settings)
    client.post("/users", json={"username": "ed"})
    asked = client.get("/users/ed/question").json()
    assert asked["question_id"] == q.question_id
    assert "answers" not in asked
    client.post("/users/ed/bets", json={"outcome_id": "win", "delta": 10})
    rec = client.post("/users/ed/spin", json={"question_id": q.question_id, "answer": "Four"}).json()
    assert rec["modifier"] == "correct"
    assert rec["actual_payout"] == 20
    assert rec["balance_after"] == 110


def test_spin_with_unknown_question(client):
    client.post("/users", json={"username": "flo"})
    client.post("/users/flo/bets", json={"outcome_id": "win", "delta": 10})
    r = client.post("/users/flo/spin", json={"question_id": "missing", "answer": "x"})
    assert r.status_code == 404
    assert r.json()["code"] == "question_not_found"


def test_no_questions(client):
    client.post("/users", json={"username": "gil"})
    r = client.get("/users/gil/question")
    assert r.status_code == 404
    assert r.json()["code"] == "no_questions"


def test_retry_without_pending(client):
    client.post("/users", json={"username": "hal"})
    assert client.post("/users/hal/spin/retry").status_code == 409


def test_daily_reset_and_leaderboard(client):
    client.post("/users", json={"username": "ivy"})
    client.post("/users", json={"username": "jo"})
    r = client.post("/users/ivy/daily-reset")
    assert r.status_code == 200
    # created today, so the floor was already applied
    assert r.json()["raised"] is False
    client.post("/users/jo/bets", json={"outcome_id": "win", "delta": 50})
    _question(client.app.state.settings)
    asked = client.get("/users/jo/question").json()
    client.post("/users/jo/spin", json={"question_id": asked["question_id"], "answer": "4"})
    board = client.get("/leaderboard").json()
    assert [row["username"] for row in board] == ["jo", "ivy"]
    assert board[0]["rank"] == 1
    assert client.get("/leaderboard", params={"order_by": "luck"}).status_code == 422


def test_spin_with_unissued_question_is_rejected(client, settings):
    q = _question(settings)
    client.post("/users", json={"username": "kai"})
    client.post("/users/kai/bets", json={"outcome_id": "win", "delta": 10})
    r = client.post("/users/kai/spin", json={"question_id": q.question_id, "answer": "4"})
    assert r.status_code == 409
    assert r.json()["code"] == "invalid_round_state"
    assert client.get("/users/kai/bets").json()["wagers"] == {"win": 10}


def test_spin_records_answer_audit(client, settings):
    q = _question(settings)
    client.post("/users", json={"username": "lou"})
    client.get("/users/lou/question")
    client.post("/users/lou/bets", json={"outcome_id": "win", "delta": 10})
    # a client-sent time is ignored, the server measures from the GET
    rec = client.post("/users/lou/spin", json={"question_id": q.question_id, "answer": "four", "time_taken_ms": 0}).json()
    assert rec["question_id"] == q.question_id
    assert rec["answer"] == "four"
    assert rec["time_taken_ms"] >= 0
    stored = client.get("/users/lou/settlements").json()[0]
    assert stored["question_id"] == q.question_id


def test_balance_events_empty_for_new_user(client):
    client.post("/users", json={"username": "mo"})
    r = client.get("/users/mo/balance-events")
    assert r.status_code == 200
    assert r.json() == []
    assert client.get("/users/nobody/balance-events").status_code == 404
