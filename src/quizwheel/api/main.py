"""FastAPI backend for the wheel game."""

from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from quizwheel.api.schemas import (
    BetsResponse,
    CreateUserRequest,
    DailyResetResponse,
    ErrorResponse,
    HealthResponse,
    LeaderboardItem,
    OutcomeItem,
    PlaceBetRequest,
    QuestionResponse,
    SettlementStatsResponse,
    SpinRequest,
    WheelResponse,
)
from quizwheel.config import Settings, get_settings
from quizwheel.errors import (
    DuplicateSettlement,
    InsufficientBalance,
    InvalidOutcome,
    InvalidRoundState,
    PersistenceError,
    QuestionNotFound,
    QuizWheelError,
    UserExists,
    UserNotFound,
)
from quizwheel.game.session import GameSession, SessionRegistry
from quizwheel.models.settlement import SettlementRecord
from quizwheel.models.user import BalanceEvent, UserProfile
from quizwheel.storage.db import get_connection
from quizwheel.storage.settlements import list_settlements, settlement_stats
from quizwheel.storage.users import (
    apply_daily_floor_for_user,
    create_user,
    leaderboard,
    list_balance_events,
    require_user,
)

# Set by run_api() so lifespan picks the right config.
_config_profile: str | None = None
_config_dir: Path | None = None

_STATUS_BY_ERROR: dict[type[QuizWheelError], int] = {
    InvalidOutcome: 400,
    UserNotFound: 404,
    QuestionNotFound: 404,
    UserExists: 409,
    InsufficientBalance: 409,
    InvalidRoundState: 409,
    DuplicateSettlement: 409,
    PersistenceError: 503,
}

_ERROR_RESPONSES = {
    400: {"description": "Unknown outcome", "model": ErrorResponse},
    404: {"description": "User or question not found", "model": ErrorResponse},
    409: {"description": "Insufficient balance or spin in progress", "model": ErrorResponse},
    503: {"description": "Store unavailable; settlement kept for retry", "model": ErrorResponse},
}


def _error_json(code: str, message: str, status_code: int = 404) -> JSONResponse:
    """Return consistent error JSON: { detail, code }."""
    return JSONResponse(
        status_code=status_code,
        content={"detail": message, "code": code},
    )


async def _handle_game_error(request: Request, exc: QuizWheelError) -> JSONResponse:
    status = next((s for cls, s in _STATUS_BY_ERROR.items() if isinstance(exc, cls)), 400)
    return _error_json(exc.code, str(exc), status)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the app. Settings default to the config profile chosen by run_api()."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        resolved = settings or get_settings(_config_profile, _config_dir)
        app.state.settings = resolved
        app.state.registry = SessionRegistry.from_settings(resolved)
        yield

    app = FastAPI(title="QuizWheel API", version="0.1.0", lifespan=lifespan)
    app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])
    app.add_exception_handler(QuizWheelError, _handle_game_error)
    _register_routes(app)
    return app


def _get_conn(request: Request):
    return get_connection(request.app.state.settings.db_path)


def _user(request: Request, username: str) -> UserProfile:
    conn = _get_conn(request)
    try:
        return require_user(conn, username)
    finally:
        conn.close()


def _session(request: Request, user: UserProfile) -> GameSession:
    return request.app.state.registry.get(user.id)


def _bets_response(session: GameSession, balance: int) -> BetsResponse:
    pending = session.pending
    return BetsResponse(
        state=session.state.value,
        round_id=session.ledger.round_id,
        wagers=session.wagers,
        total_stake=session.total_stake,
        balance=balance,
        pending_round_id=pending.round_id if pending else None,
    )


def _register_routes(app: FastAPI) -> None:
    @app.get("/health", response_model=HealthResponse)
    def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.get("/wheel", response_model=WheelResponse)
    def wheel(request: Request) -> WheelResponse:
        settings = request.app.state.settings
        source = request.app.state.registry.source
        return WheelResponse(
            type=settings.wheel_type,
            selection=settings.wheel_selection,
            outcomes=[
                OutcomeItem(id=o.id, label=o.label, color=o.color, payout_ratio=str(o.payout_ratio), weight=o.weight)
                for o in source.outcomes
            ],
        )

    @app.post("/users", response_model=UserProfile, status_code=201, responses=_ERROR_RESPONSES)
    def users_create(request: Request, body: CreateUserRequest) -> UserProfile:
        settings = request.app.state.settings
        conn = _get_conn(request)
        try:
            return create_user(conn, body.username, starting_balance=settings.starting_balance)
        finally:
            conn.close()

    @app.get("/users/{username}", response_model=UserProfile, responses=_ERROR_RESPONSES)
    def users_get(request: Request, username: str) -> UserProfile:
        return _user(request, username)

    @app.post("/users/{username}/daily-reset", response_model=DailyResetResponse, responses=_ERROR_RESPONSES)
    def users_daily_reset(request: Request, username: str) -> DailyResetResponse:
        """Apply the daily floor. Repeated calls on the same day change nothing."""
        settings = request.app.state.settings
        conn = _get_conn(request)
        try:
            user = require_user(conn, username)
            result = apply_daily_floor_for_user(conn, user.id, settings.daily_floor)
        finally:
            conn.close()
        return DailyResetResponse(
            username=user.username,
            balance=result.balance,
            last_daily_reset=result.last_reset,
            raised=result.raised,
        )

    @app.get("/users/{username}/balance-events", response_model=list[BalanceEvent], responses=_ERROR_RESPONSES)
    def balance_events(
        request: Request,
        username: str,
        limit: int = Query(50, ge=1, le=500),
    ) -> list[BalanceEvent]:
        """Balance changes made outside spins (daily floor top-ups), most recent first."""
        conn = _get_conn(request)
        try:
            user = require_user(conn, username)
            return list_balance_events(conn, user.id, limit=limit)
        finally:
            conn.close()

    @app.get("/users/{username}/bets", response_model=BetsResponse, responses=_ERROR_RESPONSES)
    def bets_get(request: Request, username: str) -> BetsResponse:
        user = _user(request, username)
        return _bets_response(_session(request, user), user.balance)

    @app.post("/users/{username}/bets", response_model=BetsResponse, responses=_ERROR_RESPONSES)
    def bets_place(request: Request, username: str, body: PlaceBetRequest) -> BetsResponse:
        user = _user(request, username)
        session = _session(request, user)
        session.place_bet(body.outcome_id, body.delta)
        return _bets_response(session, user.balance)

    @app.delete("/users/{username}/bets", response_model=BetsResponse, responses=_ERROR_RESPONSES)
    def bets_clear(request: Request, username: str) -> BetsResponse:
        user = _user(request, username)
        session = _session(request, user)
        session.clear_bets()
        return _bets_response(session, user.balance)

    @app.get("/users/{username}/question", response_model=QuestionResponse, responses=_ERROR_RESPONSES)
    def question_next(
        request: Request,
        username: str,
        topic: str | None = Query(None, description="Restrict to one topic"),
    ):
        """Random active question for this round. 404 if the bank has none."""
        user = _user(request, username)
        settings = request.app.state.settings
        question = request.app.state.registry.store.random_question(topic or settings.trivia_topic)
        if question is None:
            return _error_json("no_questions", "No active questions available")
        _session(request, user).issue_question(question)
        return QuestionResponse(
            question_id=question.question_id,
            topic=question.topic,
            prompt=question.prompt,
            difficulty=question.difficulty,
            time_limit_sec=question.time_limit_sec,
        )

    @app.post("/users/{username}/spin", response_model=SettlementRecord, responses=_ERROR_RESPONSES)
    def spin(request: Request, username: str, body: SpinRequest | None = None) -> SettlementRecord:
        """Spin with the current bets. Include question_id + answer to apply the trivia modifier.

        The question must come from GET /question for this round. Answer time is measured on the server.
        """
        user = _user(request, username)
        session = _session(request, user)
        body = body or SpinRequest()
        question = time_taken_ms = None
        if body.question_id:
            question = request.app.state.registry.store.get_question(body.question_id)
            if question is None:
                raise QuestionNotFound(body.question_id)
            time_taken_ms = session.answer_time_ms(question.question_id)
        return session.spin_with_answer(question, body.answer, time_taken_ms)

    @app.post("/users/{username}/spin/retry", response_model=SettlementRecord, responses=_ERROR_RESPONSES)
    def spin_retry(request: Request, username: str) -> SettlementRecord:
        """Persist a settled round whose first commit failed."""
        user = _user(request, username)
        return _session(request, user).retry_persist()

    @app.get("/users/{username}/settlements", response_model=list[SettlementRecord], responses=_ERROR_RESPONSES)
    def settlements_list(
        request: Request,
        username: str,
        limit: int = Query(50, ge=1, le=500),
    ) -> list[SettlementRecord]:
        conn = _get_conn(request)
        try:
            user = require_user(conn, username)
            return list_settlements(conn, user_id=user.id, limit=limit)
        finally:
            conn.close()

    @app.get("/users/{username}/settlements/stats", response_model=SettlementStatsResponse, responses=_ERROR_RESPONSES)
    def settlements_stats(request: Request, username: str) -> SettlementStatsResponse:
        conn = _get_conn(request)
        try:
            user = require_user(conn, username)
            return SettlementStatsResponse(**settlement_stats(conn, user_id=user.id))
        finally:
            conn.close()

    @app.get("/leaderboard", response_model=list[LeaderboardItem])
    def leaderboard_list(
        request: Request,
        limit: int | None = Query(None, ge=1, le=100),
        order_by: str = Query("balance", pattern="^(balance|winnings|highest)$"),
    ) -> list[LeaderboardItem]:
        settings = request.app.state.settings
        conn = _get_conn(request)
        try:
            users = leaderboard(conn, limit=limit or settings.leaderboard_limit, order_by=order_by)
        finally:
            conn.close()
        return [
            LeaderboardItem(
                rank=i,
                username=u.username,
                balance=u.balance,
                highest_balance=u.highest_balance,
                total_winnings=u.total_winnings,
                games_played=u.games_played,
                best_streak=u.best_streak,
            )
            for i, u in enumerate(users, start=1)
        ]


app = create_app()


def run_api(
    host: str = "127.0.0.1",
    port: int = 8000,
    profile: str | None = None,
    config_dir: Path | None = None,
) -> None:
    global _config_profile, _config_dir
    _config_profile = profile
    _config_dir = config_dir
    import uvicorn
    uvicorn.run("quizwheel.api.main:app", host=host, port=port, reload=False)
