"""
Single-beneficiary lock-and-vest custody contract.

The contract holds a balance in an asset ledger on behalf of one
beneficiary. The administrator arms the schedule once, after the deposit
has been made; from then on the beneficiary withdraws whatever has unlocked.

Lifecycle:
    unarmed --arm()--> armed (terminal; draining to zero keeps it armed)

Guarantees:
- ``arm`` and ``withdraw`` run their check, mutate and transfer steps under
  one exclusive lock, so concurrent callers are serialized
- vesting is computed against the deposit snapshotted at arming, never the
  live custody balance
- a failed ledger transfer rolls the withdrawn total back
"""

from __future__ import annotations

import hashlib
import logging
import threading
from typing import Any, Dict, Optional

from .clock import TimeProvider, read_time, system_time
from .config import LockingConfig
from .exceptions import (
    AlreadyArmedError,
    InvalidAmountError,
    InvalidBeneficiaryError,
    InvalidScheduleError,
    LedgerError,
    LockingError,
    NoDepositError,
    NotArmedError,
    NotAuthorizedError,
    NotBeneficiaryError,
    StartInPastError,
    StillLockedError,
    TransferFailedError,
)
from .identity import is_null_address, normalize_address, same_address, short_address
from .ledger import AssetLedger
from .metrics import LockingMetrics
from .schedule import (
    LockSchedule,
    cliff_end,
    elapsed_periods,
    next_unlock_time,
    vested_amount,
    vesting_end,
)

logger = logging.getLogger(__name__)


def _require_int(value: Any, name: str, minimum: int) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise InvalidScheduleError(f"{name} must be an integer", details={name: value})
    if value < minimum:
        raise InvalidScheduleError(f"{name} must be >= {minimum}", details={name: value})
    return value


class Locking:
    """
    Custody contract releasing a deposit after a cliff, in per-period steps.

    Usage:
        token = Token(name="Gen", symbol="GEN", owner=admin)
        locking = Locking(admin, token, lock_period_count=3,
                          withdraw_period_count=5, period_duration=100000)
        token.mint(admin, locking.address, 100000)
        locking.arm(admin, requested_start=now + 10000, beneficiary=user)
        ...
        locking.withdraw(user, 20000)
    """

    def __init__(
        self,
        administrator: str,
        ledger: AssetLedger,
        lock_period_count: int,
        withdraw_period_count: int,
        period_duration: int,
        address: Optional[str] = None,
        time_provider: Optional[TimeProvider] = None,
        metrics: Optional[LockingMetrics] = None,
    ):
        if is_null_address(administrator):
            raise InvalidScheduleError("Administrator cannot be the zero address.")
        if ledger is None:
            raise InvalidScheduleError("A ledger is required.")

        self._administrator = normalize_address(administrator)
        self._ledger = ledger
        self._lock_period_count = _require_int(lock_period_count, "lock_period_count", 0)
        self._withdraw_period_count = _require_int(withdraw_period_count, "withdraw_period_count", 1)
        self._period_duration = _require_int(period_duration, "period_duration", 1)
        self._time_provider = time_provider or system_time
        self.metrics = metrics or LockingMetrics()

        if address is None:
            address = self._derive_address()
        elif is_null_address(address):
            raise InvalidScheduleError("Custody address cannot be the zero address.")
        self.address = normalize_address(address)

        self._schedule: Optional[LockSchedule] = None
        self._lock = threading.RLock()

        logger.info(
            "Locking contract created",
            extra={
                "event": "locking.created",
                "address": self.address,
                "administrator": short_address(self._administrator),
                "lock_period_count": self._lock_period_count,
                "withdraw_period_count": self._withdraw_period_count,
                "period_duration": self._period_duration,
                "deterministic_time": time_provider is not None,
            }
        )

    @classmethod
    def from_config(
        cls,
        administrator: str,
        ledger: AssetLedger,
        config: Optional[LockingConfig] = None,
        **kwargs: Any,
    ) -> "Locking":
        """Create a contract with terms taken from ``config`` (environment by default)."""
        config = config or LockingConfig.from_env()
        return cls(
            administrator,
            ledger,
            lock_period_count=config.lock_period_count,
            withdraw_period_count=config.withdraw_period_count,
            period_duration=config.period_duration,
            **kwargs,
        )

    # ==================== View Functions ====================

    @property
    def administrator(self) -> str:
        return self._administrator

    @property
    def ledger(self) -> AssetLedger:
        return self._ledger

    @property
    def lock_period_count(self) -> int:
        return self._lock_period_count

    @property
    def withdraw_period_count(self) -> int:
        return self._withdraw_period_count

    @property
    def period_duration(self) -> int:
        return self._period_duration

    @property
    def schedule(self) -> Optional[LockSchedule]:
        return self._schedule

    @property
    def is_armed(self) -> bool:
        return self._schedule is not None

    @property
    def beneficiary(self) -> Optional[str]:
        return self._schedule.beneficiary if self._schedule else None

    @property
    def starting_time(self) -> Optional[int]:
        return self._schedule.starting_time if self._schedule else None

    @property
    def total_deposit(self) -> int:
        return self._schedule.total_deposit if self._schedule else 0

    @property
    def withdrawn_amount(self) -> int:
        return self._schedule.withdrawn_amount if self._schedule else 0

    def current_time(self) -> int:
        return read_time(self._time_provider)

    def custody_balance(self) -> int:
        return self._ledger.balance_of(self.address)

    def vested_amount(self, now: Optional[int] = None) -> int:
        """Amount unlocked at ``now`` (current time by default); 0 when unarmed."""
        schedule = self._schedule
        if schedule is None:
            return 0
        if now is None:
            now = self.current_time()
        return vested_amount(schedule, now)

    def available_amount(self, now: Optional[int] = None) -> int:
        """Amount the beneficiary could withdraw at ``now``."""
        schedule = self._schedule
        if schedule is None:
            return 0
        if now is None:
            now = self.current_time()
        return max(0, vested_amount(schedule, now) - schedule.withdrawn_amount)

    def get_status(self, now: Optional[int] = None) -> Dict[str, Any]:
        """Snapshot of the contract for dashboards and tests."""
        if now is None:
            now = self.current_time()
        with self._lock:
            schedule = self._schedule
            status: Dict[str, Any] = {
                "address": self.address,
                "administrator": self._administrator,
                "armed": schedule is not None,
                "lock_period_count": self._lock_period_count,
                "withdraw_period_count": self._withdraw_period_count,
                "period_duration": self._period_duration,
                "custody_balance": self.custody_balance(),
                "timestamp": now,
            }
            if schedule is None:
                return status
            vested = vested_amount(schedule, now)
            status.update(
                {
                    "beneficiary": schedule.beneficiary,
                    "starting_time": schedule.starting_time,
                    "total_deposit": schedule.total_deposit,
                    "withdrawn_amount": schedule.withdrawn_amount,
                    "vested_amount": vested,
                    "available_amount": max(0, vested - schedule.withdrawn_amount),
                    "elapsed_periods": elapsed_periods(schedule, now),
                    "cliff_end": cliff_end(schedule),
                    "vesting_end": vesting_end(schedule),
                    "next_unlock_time": next_unlock_time(schedule, now),
                }
            )
            return status

    # ==================== State-Changing Functions ====================

    def arm(self, caller: str, requested_start: int, beneficiary: str) -> LockSchedule:
        """
        Arm the schedule once the deposit is in custody (administrator only).

        Args:
            caller: Address making the call
            requested_start: Timestamp at which the cliff starts counting
            beneficiary: Address allowed to withdraw

        Returns:
            The armed schedule

        Raises:
            NotAuthorizedError: caller is not the administrator
            AlreadyArmedError: the schedule was armed before
            InvalidBeneficiaryError: beneficiary is the null address
            StartInPastError: requested_start is not after the current time
            NoDepositError: custody balance is zero
            InvalidScheduleError: requested_start is not an integer timestamp
        """
        with self._lock:
            try:
                schedule = self._arm_locked(caller, requested_start, beneficiary)
            except LockingError as exc:
                self._reject("arm", caller, exc)
                raise
            self.metrics.record_armed(schedule.total_deposit)

        logger.info(
            "Locking schedule armed",
            extra={
                "event": "locking.armed",
                "address": self.address,
                "beneficiary": short_address(schedule.beneficiary),
                "starting_time": schedule.starting_time,
                "total_deposit": schedule.total_deposit,
                "cliff_end": cliff_end(schedule),
                "vesting_end": vesting_end(schedule),
            }
        )
        return schedule

    def _arm_locked(self, caller: str, requested_start: int, beneficiary: str) -> LockSchedule:
        if not same_address(caller, self._administrator):
            raise NotAuthorizedError(
                "Locking: only administrator",
                details={"caller": short_address(caller)},
            )
        if self._schedule is not None:
            raise AlreadyArmedError(
                "Locking: schedule already armed",
                details={"starting_time": self._schedule.starting_time},
            )
        if is_null_address(beneficiary):
            raise InvalidBeneficiaryError("Locking: beneficiary cannot be 0x0")

        now = self.current_time()
        if not isinstance(requested_start, int) or isinstance(requested_start, bool):
            raise InvalidScheduleError(
                "Locking: start time must be an integer timestamp",
                details={"requested_start": requested_start},
            )
        if requested_start <= now:
            raise StartInPastError(
                "Locking: timer can't start at the past",
                details={"requested_start": requested_start, "now": now},
            )

        deposit = self.custody_balance()
        if deposit <= 0:
            raise NoDepositError("Locking: no deposit yet for the beneficiary")

        self._schedule = LockSchedule(
            administrator=self._administrator,
            beneficiary=normalize_address(beneficiary),
            starting_time=requested_start,
            lock_period_count=self._lock_period_count,
            withdraw_period_count=self._withdraw_period_count,
            period_duration=self._period_duration,
            total_deposit=deposit,
        )
        return self._schedule

    def withdraw(self, caller: str, requested_amount: int) -> int:
        """
        Release up to ``requested_amount`` of the unlocked balance to the beneficiary.

        Requests above the currently available amount are capped rather than
        rejected. A zero request is a no-op.

        Args:
            caller: Address making the call (must be the beneficiary)
            requested_amount: Maximum amount to release

        Returns:
            Amount actually released

        Raises:
            NotArmedError: schedule has not been armed
            NotBeneficiaryError: caller is not the beneficiary
            StillLockedError: nothing has unlocked since the last withdrawal
            InvalidAmountError: requested_amount is negative or not an integer
            TransferFailedError: the ledger refused the transfer (state rolled back)
        """
        with self._lock:
            try:
                released, schedule, now = self._withdraw_locked(caller, requested_amount)
            except LockingError as exc:
                self._reject("withdraw", caller, exc)
                raise
            custody = self.custody_balance()
            self.metrics.record_withdrawal(released, schedule.withdrawn_amount, custody)

        if released:
            logger.info(
                "Locking withdrawal",
                extra={
                    "event": "locking.withdrawn",
                    "address": self.address,
                    "beneficiary": short_address(schedule.beneficiary),
                    "requested": requested_amount,
                    "released": released,
                    "withdrawn_amount": schedule.withdrawn_amount,
                    "custody_balance": custody,
                    "timestamp": now,
                }
            )
        else:
            logger.debug(
                "Locking withdrawal released nothing",
                extra={"event": "locking.withdraw_noop", "address": self.address},
            )
        return released

    def _withdraw_locked(self, caller: str, requested_amount: int):
        schedule = self._schedule
        if schedule is None:
            raise NotArmedError("Locking: schedule not armed")
        if not same_address(caller, schedule.beneficiary):
            raise NotBeneficiaryError(
                "Locking: only beneficiary",
                details={"caller": short_address(caller)},
            )

        now = self.current_time()
        vested = vested_amount(schedule, now)
        if vested <= schedule.withdrawn_amount:
            raise StillLockedError(
                "Locking: cannot withdraw yet",
                details={
                    "vested": vested,
                    "withdrawn": schedule.withdrawn_amount,
                    "next_unlock_time": next_unlock_time(schedule, now),
                },
            )

        if not isinstance(requested_amount, int) or isinstance(requested_amount, bool):
            raise InvalidAmountError(
                "Locking: amount must be an integer",
                details={"requested": requested_amount},
            )
        if requested_amount < 0:
            raise InvalidAmountError(
                "Locking: amount cannot be negative",
                details={"requested": requested_amount},
            )

        available = vested - schedule.withdrawn_amount
        release = min(requested_amount, available)
        if release == 0:
            return 0, schedule, now

        self._schedule = schedule.with_withdrawn(schedule.withdrawn_amount + release)
        try:
            transferred = self._ledger.transfer(self.address, schedule.beneficiary, release)
        except LedgerError as exc:
            self._schedule = schedule
            raise TransferFailedError(
                f"Locking: transfer failed: {exc}",
                details={"amount": release},
            ) from exc
        except Exception:
            self._schedule = schedule
            raise
        if not transferred:
            self._schedule = schedule
            raise TransferFailedError(
                "Locking: transfer failed",
                details={"amount": release},
            )
        return release, self._schedule, now

    # ==================== Helpers ====================

    def _reject(self, operation: str, caller: str, exc: LockingError) -> None:
        self.metrics.record_rejection(operation, exc.reason)
        logger.warning(
            "Locking %s rejected: %s",
            operation,
            exc.message,
            extra={
                "event": f"locking.{operation}_rejected",
                "address": self.address,
                "caller": short_address(caller),
                "reason": exc.reason,
                "recoverable": exc.recoverable,
            }
        )

    def _derive_address(self) -> str:
        addr_input = (
            f"{self._administrator}:{id(self._ledger)}:{self._lock_period_count}:"
            f"{self._withdraw_period_count}:{self._period_duration}:{id(self)}"
        ).encode()
        addr_hash = hashlib.sha3_256(addr_input).digest()
        return f"0x{addr_hash[-20:].hex()}"

    def __repr__(self) -> str:
        return (
            f"Locking(address='{self.address[:10]}...', armed={self.is_armed}, "
            f"total_deposit={self.total_deposit}, withdrawn={self.withdrawn_amount})"
        )
