"""BetLedger unit tests."""

import threading

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from quizwheel.errors import InsufficientBalance, InvalidOutcome, InvalidRoundState
from quizwheel.ledger.bet_ledger import BetLedger, RoundState, total_stake
from quizwheel.wheel.layouts import american_roulette


@pytest.fixture
def ledger():
    return BetLedger(american_roulette())


def test_place_bet_accumulates(ledger):
    ledger.place_bet("17", 10, current_balance=100)
    ledger.place_bet("17", 5, current_balance=100)
    ledger.place_bet("00", 20, current_balance=100)
    assert ledger.wagers == {"17": 15, "00": 20}
    assert ledger.total_stake == 35


def test_bet_over_balance_is_rejected_and_map_unchanged(ledger):
    ledger.place_bet("1", 10, current_balance=40)
    with pytest.raises(InsufficientBalance) as exc:
        ledger.place_bet("5", 50, current_balance=40)
    assert exc.value.requested == 60
    assert exc.value.available == 40
    assert ledger.wagers == {"1": 10}


def test_single_bet_over_balance_on_empty_map(ledger):
    with pytest.raises(InsufficientBalance):
        ledger.place_bet("5", 50, current_balance=40)
    assert ledger.wagers == {}
    assert ledger.total_stake == 0


def test_total_may_equal_balance(ledger):
    ledger.place_bet("5", 40, current_balance=40)
    assert ledger.total_stake == 40


def test_negative_delta_clamps_at_zero_and_drops_entry(ledger):
    ledger.place_bet("5", 10, current_balance=100)
    ledger.place_bet("5", -25, current_balance=100)
    assert "5" not in ledger.wagers
    assert ledger.total_stake == 0


def test_removing_stake_always_allowed_when_balance_dropped(ledger):
    ledger.place_bet("5", 30, current_balance=100)
    # balance fell below the stake elsewhere; lowering the stake to within it is fine
    ledger.place_bet("5", -10, current_balance=20)
    assert ledger.wagers == {"5": 20}


def test_unknown_outcome(ledger):
    with pytest.raises(InvalidOutcome):
        ledger.place_bet("37", 1, current_balance=100)
    assert ledger.wagers == {}


def test_clear_bets(ledger):
    ledger.place_bet("3", 3, current_balance=10)
    assert ledger.clear_bets() == {}
    assert ledger.total_stake == 0


def test_lock_freezes_map(ledger):
    ledger.place_bet("3", 3, current_balance=10)
    round_id, snapshot = ledger.lock()
    assert ledger.state is RoundState.LOCKED
    assert ledger.round_id == round_id
    assert snapshot == {"3": 3}
    with pytest.raises(InvalidRoundState):
        ledger.place_bet("3", 1, current_balance=10)
    with pytest.raises(InvalidRoundState):
        ledger.clear_bets()
    with pytest.raises(InvalidRoundState):
        ledger.lock()
    assert ledger.wagers == {"3": 3}


def test_lock_uses_given_round_id(ledger):
    round_id, _ = ledger.lock("r-1")
    assert round_id == "r-1"


def test_reset_reopens_empty(ledger):
    ledger.place_bet("3", 3, current_balance=10)
    ledger.lock()
    ledger.reset()
    assert ledger.state is RoundState.ACCEPTING
    assert ledger.round_id is None
    assert ledger.wagers == {}


def test_reset_requires_lock(ledger):
    with pytest.raises(InvalidRoundState):
        ledger.reset()


def test_wagers_property_is_a_copy(ledger):
    ledger.place_bet("3", 3, current_balance=10)
    ledger.wagers["3"] = 999
    assert ledger.wagers == {"3": 3}


def test_total_stake_helper():
    assert total_stake({}) == 0
    assert total_stake({"a": 2, "b": 3}) == 5


def test_non_integer_delta_rejected(ledger):
    with pytest.raises(TypeError):
        ledger.place_bet("5", 2.9, current_balance=100)
    with pytest.raises(TypeError):
        ledger.place_bet("5", True, current_balance=100)
    assert ledger.wagers == {}


def test_unlock_keeps_wagers(ledger):
    ledger.place_bet("3", 3, current_balance=10)
    ledger.lock()
    ledger.unlock()
    assert ledger.state is RoundState.ACCEPTING
    assert ledger.round_id is None
    assert ledger.wagers == {"3": 3}
    with pytest.raises(InvalidRoundState):
        ledger.unlock()


BET_STEP = st.tuples(st.sampled_from(["0", "00", "1", "17", "36"]), st.integers(min_value=-50, max_value=80))


@settings(max_examples=200)
@given(balance=st.integers(min_value=0, max_value=300), steps=st.lists(BET_STEP, max_size=40))
def test_solvency_holds_for_any_bet_sequence(balance, steps):
    ledger = BetLedger(american_roulette())
    for outcome_id, delta in steps:
        before = ledger.wagers
        try:
            ledger.place_bet(outcome_id, delta, current_balance=balance)
        except InsufficientBalance:
            assert ledger.wagers == before
        assert ledger.total_stake <= balance
        assert all(stake > 0 for stake in ledger.wagers.values())


def test_concurrent_bets_never_exceed_balance():
    ledger = BetLedger(american_roulette())
    barrier = threading.Barrier(8)

    def worker(n):
        barrier.wait()
        for _ in range(50):
            try:
                ledger.place_bet(str(n + 1), 1, current_balance=100)
            except InsufficientBalance:
                pass

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert ledger.total_stake == 100
