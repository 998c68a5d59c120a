import pytest

from token_locking.schedule import (
    LockSchedule,
    cliff_end,
    elapsed_periods,
    next_unlock_time,
    vested_amount,
    vesting_end,
)

START = 1_000_000
PERIOD = 100_000


def make_schedule(**overrides) -> LockSchedule:
    terms = dict(
        administrator="0xadmin",
        beneficiary="0xuser",
        starting_time=START,
        lock_period_count=3,
        withdraw_period_count=5,
        period_duration=PERIOD,
        total_deposit=100_000,
    )
    terms.update(overrides)
    return LockSchedule(**terms)


def at_period(periods: int, offset: int = 0) -> int:
    return START + periods * PERIOD + offset


def test_nothing_vests_before_start():
    schedule = make_schedule()
    assert vested_amount(schedule, START - 1) == 0
    assert vested_amount(schedule, 0) == 0
    assert elapsed_periods(schedule, START - 1) == 0


def test_nothing_vests_during_cliff():
    schedule = make_schedule()
    for now in (START, at_period(1), at_period(2), at_period(3, -1)):
        assert vested_amount(schedule, now) == 0


def test_unlocks_one_step_per_period_after_cliff():
    schedule = make_schedule()
    assert vested_amount(schedule, at_period(3)) == 0
    assert vested_amount(schedule, at_period(4)) == 20_000
    assert vested_amount(schedule, at_period(4, PERIOD - 1)) == 20_000
    assert vested_amount(schedule, at_period(5)) == 40_000
    assert vested_amount(schedule, at_period(7)) == 80_000


def test_fully_vested_after_window():
    schedule = make_schedule()
    assert vested_amount(schedule, at_period(8)) == 100_000
    assert vested_amount(schedule, at_period(10, 10)) == 100_000
    assert vested_amount(schedule, at_period(1_000)) == 100_000


def test_floor_division_steps():
    schedule = make_schedule(total_deposit=10, withdraw_period_count=3)
    assert vested_amount(schedule, at_period(4)) == 3
    assert vested_amount(schedule, at_period(5)) == 6
    assert vested_amount(schedule, at_period(6)) == 10


def test_zero_lock_periods_unlocks_first_step_after_one_period():
    schedule = make_schedule(lock_period_count=0)
    assert vested_amount(schedule, START) == 0
    assert vested_amount(schedule, at_period(1)) == 20_000


def test_vested_amount_ignores_withdrawn_amount():
    schedule = make_schedule()
    drained = schedule.with_withdrawn(20_000)
    assert vested_amount(drained, at_period(4)) == vested_amount(schedule, at_period(4))


def test_boundaries():
    schedule = make_schedule()
    assert cliff_end(schedule) == at_period(3)
    assert vesting_end(schedule) == at_period(8)


def test_next_unlock_time():
    schedule = make_schedule()
    assert next_unlock_time(schedule, START - 50) == at_period(4)
    assert next_unlock_time(schedule, at_period(1)) == at_period(4)
    assert next_unlock_time(schedule, at_period(3)) == at_period(4)
    assert next_unlock_time(schedule, at_period(4, 5)) == at_period(5)
    assert next_unlock_time(schedule, at_period(7, 1)) == at_period(8)
    assert next_unlock_time(schedule, at_period(8)) is None


def test_next_unlock_time_skips_steps_that_floor_to_same_amount():
    schedule = make_schedule(total_deposit=2, withdraw_period_count=5)
    # 2 * steps // 5 stays at 0 for the first two steps past the cliff
    assert next_unlock_time(schedule, at_period(4)) == at_period(6)


def test_schedule_is_immutable():
    schedule = make_schedule()
    with pytest.raises(AttributeError):
        schedule.total_deposit = 5  # type: ignore[misc]


def test_with_withdrawn_rejects_invalid_totals():
    schedule = make_schedule().with_withdrawn(100)
    with pytest.raises(ValueError):
        schedule.with_withdrawn(50)
    with pytest.raises(ValueError):
        schedule.with_withdrawn(100_001)
    assert schedule.remaining_amount == 99_900
    assert schedule.to_dict()["withdrawn_amount"] == 100


def test_next_unlock_time_with_tiny_deposit_over_many_periods():
    schedule = make_schedule(
        lock_period_count=1, withdraw_period_count=10**9, period_duration=1, total_deposit=1
    )
    # The single unit only vests at the very end of the window.
    assert next_unlock_time(schedule, START) == vesting_end(schedule)
    assert vested_amount(schedule, vesting_end(schedule) - 1) == 0

    schedule = make_schedule(
        lock_period_count=1, withdraw_period_count=10**9, period_duration=1, total_deposit=3
    )
    first_step = next_unlock_time(schedule, START)
    assert first_step == cliff_end(schedule) + 333_333_334
    assert vested_amount(schedule, first_step - 1) == 0
    assert vested_amount(schedule, first_step) == 1
