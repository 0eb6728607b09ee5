from quizwheel.game.session import GameSession, SessionRegistry

__all__ = ["GameSession", "SessionRegistry"]
