"""
Lock schedule record and vesting calculator.

A schedule releases nothing until ``lock_period_count`` whole periods have
elapsed after ``starting_time`` (the cliff), then unlocks the deposit in
``withdraw_period_count`` equal integer steps, one at the start of each
period past the cliff. Unlocking is stepped per period, never continuous.

Every function here is pure: results depend only on the immutable schedule
terms and the timestamp passed in, never on ``withdrawn_amount``.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class LockSchedule:
    """Armed schedule terms plus the cumulative withdrawn total.

    Instances are immutable; the contract swaps in a new record via
    ``with_withdrawn`` when a withdrawal commits.
    """

    administrator: str
    beneficiary: str
    starting_time: int
    lock_period_count: int
    withdraw_period_count: int
    period_duration: int
    total_deposit: int
    withdrawn_amount: int = 0

    def with_withdrawn(self, withdrawn_amount: int) -> "LockSchedule":
        if withdrawn_amount < self.withdrawn_amount:
            raise ValueError("withdrawn_amount cannot decrease")
        if withdrawn_amount > self.total_deposit:
            raise ValueError("withdrawn_amount cannot exceed total_deposit")
        return LockSchedule(
            administrator=self.administrator,
            beneficiary=self.beneficiary,
            starting_time=self.starting_time,
            lock_period_count=self.lock_period_count,
            withdraw_period_count=self.withdraw_period_count,
            period_duration=self.period_duration,
            total_deposit=self.total_deposit,
            withdrawn_amount=withdrawn_amount,
        )

    @property
    def remaining_amount(self) -> int:
        return self.total_deposit - self.withdrawn_amount

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def elapsed_periods(schedule: LockSchedule, now: int) -> int:
    """Whole periods elapsed since ``starting_time``; 0 before the start."""
    if now < schedule.starting_time:
        return 0
    return (now - schedule.starting_time) // schedule.period_duration


def cliff_end(schedule: LockSchedule) -> int:
    """Timestamp at which the cliff ends; the first non-zero step is one period later."""
    return schedule.starting_time + schedule.lock_period_count * schedule.period_duration


def vesting_end(schedule: LockSchedule) -> int:
    """Timestamp from which the whole deposit is unlocked."""
    total_periods = schedule.lock_period_count + schedule.withdraw_period_count
    return schedule.starting_time + total_periods * schedule.period_duration


def vested_amount(schedule: LockSchedule, now: int) -> int:
    """
    Amount unlocked at ``now``, regardless of what was already withdrawn.

    Args:
        schedule: Armed schedule
        now: Current timestamp

    Returns:
        0 before the cliff ends, ``total_deposit`` once the unlock window has
        passed, otherwise ``total_deposit * periods_past_cliff // withdraw_period_count``
    """
    if now < schedule.starting_time:
        return 0

    elapsed = elapsed_periods(schedule, now)
    if elapsed < schedule.lock_period_count:
        return 0

    periods_past_cliff = elapsed - schedule.lock_period_count
    if periods_past_cliff >= schedule.withdraw_period_count:
        return schedule.total_deposit

    return schedule.total_deposit * periods_past_cliff // schedule.withdraw_period_count


def next_unlock_time(schedule: LockSchedule, now: int) -> Optional[int]:
    """Next period boundary at which more becomes vested, or None once fully vested."""
    end = vesting_end(schedule)
    if now >= end:
        return None

    current = vested_amount(schedule, now)
    # Smallest step k past the cliff with total_deposit * k // withdraw_period_count > current.
    steps = -(-(current + 1) * schedule.withdraw_period_count // schedule.total_deposit)
    return min(cliff_end(schedule) + steps * schedule.period_duration, end)
