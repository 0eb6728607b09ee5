"""TOML config loading and profiles."""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any

# Default config search path (project root or cwd)
_CONFIG_DIR = Path(__file__).resolve().parent.parent.parent.parent / "config"
_CWD_CONFIG = Path.cwd() / "config"

DEFAULT_MULTIPLIERS = {"correct": "1", "absent": "0.5", "incorrect": "0.3"}


def _load_toml(path: Path) -> dict[str, Any]:
    with open(path, "rb") as f:
        return tomllib.load(f)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override into base. Override values take precedence."""
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _find_config_dir(config_dir: Path | None = None) -> Path:
    if config_dir is not None:
        return config_dir
    if _CWD_CONFIG.exists():
        return _CWD_CONFIG
    return _CONFIG_DIR


def load_config(profile: str | None = None, config_dir: Path | None = None) -> dict[str, Any]:
    """Load merged config from default.toml and optional profile overlay."""
    config_dir = _find_config_dir(config_dir)
    default_path = config_dir / "default.toml"
    if not default_path.exists():
        return {}
    base = _load_toml(default_path)
    if profile:
        profile_path = config_dir / f"{profile}.toml"
        if profile_path.exists():
            overlay = _load_toml(profile_path)
            base = _deep_merge(base, overlay)
    return base


def get_settings(profile: str | None = None, config_dir: Path | None = None) -> Settings:
    """Return Settings instance from merged config."""
    raw = load_config(profile, config_dir)
    return Settings.from_dict(raw)


class Settings:
    """Application settings from TOML config."""

    def __init__(
        self,
        *,
        storage: dict[str, Any] | None = None,
        accounts: dict[str, Any] | None = None,
        wheel: dict[str, Any] | None = None,
        settlement: dict[str, Any] | None = None,
        trivia: dict[str, Any] | None = None,
        leaderboard: dict[str, Any] | None = None,
        logging: dict[str, Any] | None = None,
    ):
        self.storage = storage or {}
        self.accounts = accounts or {}
        self.wheel = wheel or {}
        self.settlement = settlement or {}
        self.trivia = trivia or {}
        self.leaderboard = leaderboard or {}
        self.logging = logging or {}

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Settings:
        return cls(
            storage=raw.get("storage"),
            accounts=raw.get("accounts"),
            wheel=raw.get("wheel"),
            settlement=raw.get("settlement"),
            trivia=raw.get("trivia"),
            leaderboard=raw.get("leaderboard"),
            logging=raw.get("logging"),
        )

    # Convenience accessors with defaults
    @property
    def db_path(self) -> str:
        return self.storage.get("db_path", "data/quizwheel.duckdb")

    @property
    def starting_balance(self) -> int:
        return int(self.accounts.get("starting_balance", 100))

    @property
    def daily_floor(self) -> int:
        return int(self.accounts.get("daily_floor", 100))

    @property
    def wheel_type(self) -> str:
        return str(self.wheel.get("type", "american")).lower()

    @property
    def wheel_selection(self) -> str:
        return str(self.wheel.get("selection", "uniform")).lower()

    @property
    def wheel_seed(self) -> int | None:
        seed = self.wheel.get("seed")
        return int(seed) if seed is not None else None

    @property
    def segments(self) -> list[dict[str, Any]]:
        return list(self.wheel.get("segments") or [])

    @property
    def modifier_multipliers(self) -> dict[str, str]:
        """Modifier name -> multiplier as a decimal string (kept exact for Fraction)."""
        configured = self.settlement.get("multipliers") or {}
        merged = dict(DEFAULT_MULTIPLIERS)
        for key, value in configured.items():
            merged[str(key).lower()] = str(value)
        return merged

    @property
    def trivia_enabled(self) -> bool:
        return bool(self.trivia.get("enabled", True))

    @property
    def trivia_topic(self) -> str | None:
        return self.trivia.get("topic") or None

    @property
    def leaderboard_limit(self) -> int:
        return int(self.leaderboard.get("limit", 10))

    @property
    def logging_level(self) -> str:
        return self.logging.get("level", "INFO").upper()

    @property
    def logging_format(self) -> str:
        return self.logging.get("format", "console")

    @property
    def logging_level_num(self) -> int:
        return getattr(logging, self.logging_level, logging.INFO)


def configure_logging(settings: Settings) -> None:
    """Configure structlog with settings. Call once at application entry."""
    import structlog

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    if settings.logging_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(settings.logging_level_num),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
