"""
Property-based tests for the vesting calculator and withdrawal executor.

Checks the schedule invariants over random terms:
- nothing vests before the cliff ends
- everything vests once the unlock window has passed
- vesting is monotone in time
- withdrawals never exceed the vested amount and are capped at what is available

Uses Hypothesis for property-based testing with random inputs.
"""

from hypothesis import given, settings, strategies as st

from token_locking import Locking, ManualClock, StillLockedError, Token
from token_locking.schedule import LockSchedule, next_unlock_time, vested_amount

ADMIN = "0xadmin00000000000000000000000000000000001"
USER = "0xuser000000000000000000000000000000000002"
START = 1_700_000_000

schedules = st.builds(
    LockSchedule,
    administrator=st.just(ADMIN),
    beneficiary=st.just(USER),
    starting_time=st.just(START),
    lock_period_count=st.integers(min_value=0, max_value=50),
    withdraw_period_count=st.integers(min_value=1, max_value=50),
    period_duration=st.integers(min_value=1, max_value=1_000_000),
    total_deposit=st.integers(min_value=1, max_value=10**30),
)


@given(schedule=schedules, offset=st.integers(min_value=-10**9, max_value=10**9))
@settings(max_examples=200)
def test_nothing_vests_before_cliff_end(schedule, offset):
    cliff = START + schedule.lock_period_count * schedule.period_duration
    now = min(START + offset, cliff - 1)
    assert vested_amount(schedule, now) == 0


@given(schedule=schedules, extra=st.integers(min_value=0, max_value=10**9))
@settings(max_examples=200)
def test_everything_vests_after_window(schedule, extra):
    total_periods = schedule.lock_period_count + schedule.withdraw_period_count
    now = START + total_periods * schedule.period_duration + extra
    assert vested_amount(schedule, now) == schedule.total_deposit


@given(
    schedule=schedules,
    first=st.integers(min_value=-10**6, max_value=10**9),
    delta=st.integers(min_value=0, max_value=10**9),
)
@settings(max_examples=200)
def test_vesting_is_monotone_and_bounded(schedule, first, delta):
    earlier = vested_amount(schedule, START + first)
    later = vested_amount(schedule, START + first + delta)
    assert 0 <= earlier <= later <= schedule.total_deposit


@given(
    lock_periods=st.integers(min_value=0, max_value=5),
    withdraw_periods=st.integers(min_value=1, max_value=8),
    deposit=st.integers(min_value=1, max_value=10**9),
    steps=st.lists(
        st.tuples(
            st.integers(min_value=0, max_value=3),  # whole periods to advance
            st.integers(min_value=0, max_value=2 * 10**9),  # requested amount
        ),
        min_size=1,
        max_size=20,
    ),
)
@settings(max_examples=100, deadline=None)
def test_withdrawals_never_exceed_vested(lock_periods, withdraw_periods, deposit, steps):
    period = 1_000
    clock = ManualClock(START)
    token = Token(name="Prop", symbol="PRP", owner=ADMIN)
    locking = Locking(ADMIN, token, lock_periods, withdraw_periods, period, time_provider=clock.now)
    token.mint(ADMIN, locking.address, deposit)
    locking.arm(ADMIN, START + 1, USER)

    for periods, requested in steps:
        clock.advance(periods * period + 1)
        vested = locking.vested_amount()
        before = locking.withdrawn_amount
        try:
            released = locking.withdraw(USER, requested)
        except StillLockedError:
            assert vested <= before
            assert locking.withdrawn_amount == before
            continue

        assert released == min(requested, vested - before)
        assert locking.withdrawn_amount == before + released
        assert locking.withdrawn_amount <= vested
        assert token.balance_of(USER) == locking.withdrawn_amount
        assert token.balance_of(locking.address) == deposit - locking.withdrawn_amount


@given(
    lock_periods=st.integers(min_value=0, max_value=5),
    withdraw_periods=st.integers(min_value=1, max_value=40),
    period=st.integers(min_value=1, max_value=20),
    deposit=st.integers(min_value=1, max_value=100),
    offset=st.integers(min_value=-50, max_value=1_500),
)
@settings(max_examples=200)
def test_next_unlock_time_is_first_boundary_with_more_vested(
    lock_periods, withdraw_periods, period, deposit, offset
):
    schedule = LockSchedule(
        administrator=ADMIN,
        beneficiary=USER,
        starting_time=START,
        lock_period_count=lock_periods,
        withdraw_period_count=withdraw_periods,
        period_duration=period,
        total_deposit=deposit,
    )
    now = START + offset
    end = START + (lock_periods + withdraw_periods) * period
    unlock = next_unlock_time(schedule, now)
    if now >= end:
        assert unlock is None
        return

    current = vested_amount(schedule, now)
    assert now < unlock <= end
    assert (unlock - START) % period == 0
    assert vested_amount(schedule, unlock) > current
    assert vested_amount(schedule, unlock - 1) == current
