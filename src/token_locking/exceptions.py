"""
Exception hierarchy for the token locking contract.

Every rejection raised by the contract is a caller-correctable precondition
violation. Exceptions carry a human-readable message, a ``details`` dict with
the values that caused the rejection, and a ``recoverable`` flag telling the
caller whether the same call may succeed later without changing arguments.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class LockingError(Exception):
    """Base exception for all locking contract errors.

    Attributes:
        message: Human-readable error description
        details: Additional context about the error
        recoverable: Whether the operation can be retried
    """

    recoverable = False

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        recoverable: Optional[bool] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        if recoverable is not None:
            self.recoverable = recoverable

    @property
    def reason(self) -> str:
        """Short snake_case reason used for metrics labels."""
        name = type(self).__name__
        if name.endswith("Error"):
            name = name[: -len("Error")]
        chars = []
        for i, ch in enumerate(name):
            if ch.isupper() and i:
                chars.append("_")
            chars.append(ch.lower())
        return "".join(chars)


# ==================== Authorization Errors ====================


class AuthorizationError(LockingError):
    """Raised when the caller identity is not allowed to perform an operation."""
    pass


class NotAuthorizedError(AuthorizationError):
    """Raised when someone other than the administrator tries to arm the schedule."""
    pass


class NotBeneficiaryError(AuthorizationError):
    """Raised when someone other than the beneficiary tries to withdraw."""
    pass


# ==================== Validation Errors ====================


class ScheduleValidationError(LockingError):
    """Raised when arguments to a locking operation are invalid."""
    pass


class InvalidBeneficiaryError(ScheduleValidationError):
    """Raised when the beneficiary is the null or empty address."""
    pass


class StartInPastError(ScheduleValidationError):
    """Raised when the requested start is not strictly after the current time."""
    pass


class NoDepositError(ScheduleValidationError):
    """Raised when arming while the custody balance is still zero."""
    recoverable = True


class InvalidAmountError(ScheduleValidationError):
    """Raised when a withdrawal amount is negative or not an integer."""
    pass


class InvalidScheduleError(ScheduleValidationError):
    """Raised when the contract is constructed with invalid schedule terms."""
    pass


# ==================== State Errors ====================


class ScheduleStateError(LockingError):
    """Raised when an operation is not allowed in the current schedule state."""
    pass


class NotArmedError(ScheduleStateError):
    """Raised when withdrawing before the schedule has been armed."""
    pass


class AlreadyArmedError(ScheduleStateError):
    """Raised when arming a schedule that is already armed."""
    pass


class StillLockedError(ScheduleStateError):
    """Raised when nothing new has unlocked since the last withdrawal.

    Covers the whole cliff period as well as any point where the withdrawn
    total has caught up with the vested amount.
    """
    recoverable = True


class TransferFailedError(LockingError):
    """Raised when the ledger refuses the release transfer.

    The withdrawal is rolled back before this is raised.
    """
    recoverable = True


# ==================== Collaborator Errors ====================


class LedgerError(Exception):
    """Raised by the reference ledger when a balance operation fails."""
    pass


class ConfigurationError(Exception):
    """Raised when required configuration is missing or invalid."""
    pass
