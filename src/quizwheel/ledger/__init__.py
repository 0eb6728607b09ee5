from quizwheel.ledger.bet_ledger import BetLedger, RoundState, total_stake

__all__ = ["BetLedger", "RoundState", "total_stake"]
