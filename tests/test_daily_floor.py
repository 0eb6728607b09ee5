"""Daily balance floor, pure and stored."""

from datetime import date

from quizwheel.settlement.daily_floor import apply_daily_floor
from quizwheel.storage.users import apply_daily_floor_for_user, create_user, get_user, list_balance_events

DAY1 = date(2024, 1, 1)
DAY2 = date(2024, 1, 2)


def test_raises_low_balance_once_per_day():
    first = apply_daily_floor(30, DAY1, DAY2, 100)
    assert first.balance == 100
    assert first.raised and first.stamped
    assert first.last_reset == DAY2
    second = apply_daily_floor(first.balance, first.last_reset, DAY2, 100)
    assert second.balance == 100
    assert not second.raised and not second.stamped


def test_same_day_is_noop_even_when_low():
    res = apply_daily_floor(10, DAY2, DAY2, 100)
    assert res.balance == 10
    assert not res.stamped


def test_never_lowers_balance_but_stamps_date():
    res = apply_daily_floor(250, DAY1, DAY2, 100)
    assert res.balance == 250
    assert not res.raised
    assert res.stamped
    assert res.last_reset == DAY2


def test_never_reset_before():
    res = apply_daily_floor(0, None, DAY1, 100)
    assert res.balance == 100
    assert res.raised


def test_stored_daily_floor(temp_db):
    user = create_user(temp_db, "alice", starting_balance=30, today=DAY1)
    res = apply_daily_floor_for_user(temp_db, user.id, 100, today=DAY2)
    assert res.raised
    stored = get_user(temp_db, user.id)
    assert stored.balance == 100
    assert stored.highest_balance == 100
    assert stored.last_daily_reset == DAY2

    again = apply_daily_floor_for_user(temp_db, user.id, 100, today=DAY2)
    assert not again.stamped
    assert get_user(temp_db, user.id).balance == 100


def test_raise_writes_balance_event(temp_db):
    user = create_user(temp_db, "bea", starting_balance=30, today=DAY1)
    apply_daily_floor_for_user(temp_db, user.id, 100, today=DAY2)
    apply_daily_floor_for_user(temp_db, user.id, 100, today=DAY2)
    events = list_balance_events(temp_db, user.id)
    assert len(events) == 1
    assert events[0].kind == "daily_floor"
    assert (events[0].balance_before, events[0].balance_after, events[0].amount) == (30, 100, 70)


def test_stamp_without_raise_writes_no_event(temp_db):
    user = create_user(temp_db, "cal", starting_balance=500, today=DAY1)
    apply_daily_floor_for_user(temp_db, user.id, 100, today=DAY2)
    assert list_balance_events(temp_db, user.id) == []
