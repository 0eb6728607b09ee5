"""CLI smoke tests via typer's runner."""

import pytest
from typer.testing import CliRunner

from quizwheel.cli.app import app
from quizwheel.cli.play import parse_bet

runner = CliRunner()

DEFAULT_TOML = """
[storage]
db_path = "{db_path}"

[wheel]
type = "segments"
selection = "weighted"

[[wheel.segments]]
id = "win"
payout_ratio = 1
weight = 1.0

[[wheel.segments]]
id = "lose"
payout_ratio = 1
weight = 0.0

[trivia]
enabled = false
"""


@pytest.fixture
def config_dir(tmp_path):
    db_path = (tmp_path / "cli.duckdb").as_posix()
    (tmp_path / "default.toml").write_text(DEFAULT_TOML.format(db_path=db_path))
    return tmp_path


def _invoke(config_dir, *args):
    return runner.invoke(app, ["--config-dir", str(config_dir), *args])


def test_parse_bet():
    assert parse_bet("17=10") == ("17", 10)
    assert parse_bet(" 00 = 5") == ("00", 5)


def test_users_create_show(config_dir):
    result = _invoke(config_dir, "users", "create", "kim")
    assert result.exit_code == 0, result.output
    shown = _invoke(config_dir, "users", "show", "kim")
    assert shown.exit_code == 0
    assert "kim" in shown.output
    assert _invoke(config_dir, "users", "create", "kim").exit_code == 1


def test_play_round(config_dir):
    _invoke(config_dir, "users", "create", "lee")
    result = _invoke(config_dir, "play", "--user", "lee", "--bet", "win=10")
    assert result.exit_code == 0, result.output
    assert "Landed on: win" in result.output
    assert "Balance: 100 -> 100" in result.output
    board = _invoke(config_dir, "leaderboard")
    assert "lee" in board.output


def test_play_rejects_overbet(config_dir):
    _invoke(config_dir, "users", "create", "max")
    result = _invoke(config_dir, "play", "--user", "max", "--bet", "win=500")
    assert result.exit_code == 1
    assert "Bet rejected" in result.output


def test_wheel_show(config_dir):
    result = _invoke(config_dir, "wheel", "show")
    assert result.exit_code == 0
    assert "win" in result.output
