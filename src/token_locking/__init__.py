"""
Token Locking.

Single-beneficiary lock-and-vest custody contract:
- Schedule: immutable schedule record and the pure vesting calculator
- Locking: arming and withdrawal under one exclusive lock
- Ledger: asset ledger protocol and an in-memory reference token
"""

from .clock import ManualClock, system_time
from .config import LockingConfig
from .exceptions import (
    AlreadyArmedError,
    AuthorizationError,
    ConfigurationError,
    InvalidAmountError,
    InvalidBeneficiaryError,
    InvalidScheduleError,
    LedgerError,
    LockingError,
    NoDepositError,
    NotArmedError,
    NotAuthorizedError,
    NotBeneficiaryError,
    ScheduleStateError,
    ScheduleValidationError,
    StartInPastError,
    StillLockedError,
    TransferFailedError,
)
from .identity import ZERO_ADDRESS
from .ledger import AssetLedger, Token, TokenEvent
from .locking import Locking
from .metrics import LockingMetrics
from .schedule import LockSchedule, cliff_end, next_unlock_time, vested_amount, vesting_end

__version__ = "0.1.0"

__all__ = [
    # Contract
    "Locking",
    "LockSchedule",
    "vested_amount",
    "cliff_end",
    "vesting_end",
    "next_unlock_time",
    # Collaborators
    "AssetLedger",
    "Token",
    "TokenEvent",
    "ManualClock",
    "system_time",
    "ZERO_ADDRESS",
    # Ambient
    "LockingConfig",
    "LockingMetrics",
    # Exceptions
    "LockingError",
    "AuthorizationError",
    "NotAuthorizedError",
    "NotBeneficiaryError",
    "ScheduleValidationError",
    "InvalidBeneficiaryError",
    "StartInPastError",
    "NoDepositError",
    "InvalidAmountError",
    "InvalidScheduleError",
    "ScheduleStateError",
    "NotArmedError",
    "AlreadyArmedError",
    "StillLockedError",
    "TransferFailedError",
    "LedgerError",
    "ConfigurationError",
]
