"""
Fungible asset ledger used as the custody backend.

The locking contract only needs two primitives from a ledger:

- ``balance_of(account)`` to snapshot the deposit at arming time
- ``transfer(sender, recipient, amount)`` to release vested funds

``Token`` is an in-memory ERC20-style reference ledger implementing both,
plus minting so deposits can be made before the schedule is armed.

Security features:
- Zero address checks on recipients
- Balance underflow prevention
- Owner-only minting and pausing
"""

from __future__ import annotations

import hashlib
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Protocol, runtime_checkable

from .exceptions import LedgerError
from .identity import ZERO_ADDRESS, is_null_address, normalize_address, short_address

logger = logging.getLogger(__name__)


@runtime_checkable
class AssetLedger(Protocol):
    """Balance and transfer primitive consumed by the locking contract."""

    def balance_of(self, account: str) -> int:
        ...

    def transfer(self, sender: str, recipient: str, amount: int) -> bool:
        ...


@dataclass
class TokenEvent:
    """Represents a ledger event."""

    event_type: str  # "Transfer"
    from_address: str
    to_address: str
    value: int
    timestamp: float = field(default_factory=time.time)


@dataclass
class Token:
    """
    In-memory fungible token ledger.

    All balances are integers in the token's smallest unit. Every balance
    change appends a ``Transfer`` event, with mints coming from the zero
    address.
    """

    name: str
    symbol: str
    decimals: int = 18
    total_supply: int = 0

    # Contract address
    address: str = ""

    # Owner (for minting permissions)
    owner: str = ""

    balances: Dict[str, int] = field(default_factory=dict)
    events: List[TokenEvent] = field(default_factory=list)
    paused: bool = False

    UINT256_MAX: int = 2**256 - 1

    def __post_init__(self) -> None:
        if not self.address:
            addr_input = f"{self.name}{self.symbol}{time.time()}".encode()
            addr_hash = hashlib.sha3_256(addr_input).digest()
            self.address = f"0x{addr_hash[-20:].hex()}"
        self.owner = normalize_address(self.owner)

    # ==================== View Functions ====================

    def balance_of(self, account: str) -> int:
        """
        Get the token balance of an account.

        Args:
            account: Address to check

        Returns:
            Token balance
        """
        return self.balances.get(normalize_address(account), 0)

    # ==================== State-Changing Functions ====================

    def transfer(self, sender: str, recipient: str, amount: int) -> bool:
        """
        Transfer tokens from sender to recipient.

        Args:
            sender: Address sending tokens
            recipient: Address receiving tokens
            amount: Amount to transfer

        Returns:
            True if successful

        Raises:
            LedgerError: If transfer fails
        """
        self._require_not_paused()
        sender_norm = normalize_address(sender)
        recipient_norm = normalize_address(recipient)

        self._validate_address(recipient_norm, "recipient")
        self._validate_amount(amount)

        sender_balance = self.balances.get(sender_norm, 0)
        if sender_balance < amount:
            raise LedgerError(
                f"{self.symbol}: transfer amount exceeds balance "
                f"({amount} > {sender_balance})"
            )

        self.balances[sender_norm] = sender_balance - amount
        self.balances[recipient_norm] = self.balances.get(recipient_norm, 0) + amount

        self._emit_transfer(sender_norm, recipient_norm, amount)

        logger.debug(
            "Token transfer",
            extra={
                "event": "ledger.transfer",
                "token": self.symbol,
                "from": short_address(sender_norm),
                "to": short_address(recipient_norm),
                "amount": amount,
            }
        )

        return True

    def mint(self, minter: str, to: str, amount: int) -> bool:
        """
        Mint new tokens (owner only).

        Args:
            minter: Address calling mint (must be owner)
            to: Recipient of minted tokens
            amount: Amount to mint

        Raises:
            LedgerError: If minting fails
        """
        self._require_not_paused()
        self._require_owner(minter)

        to_norm = normalize_address(to)
        self._validate_address(to_norm, "recipient")
        self._validate_amount(amount)

        self.total_supply += amount
        self.balances[to_norm] = self.balances.get(to_norm, 0) + amount

        self._emit_transfer(ZERO_ADDRESS, to_norm, amount)

        logger.info(
            "Token mint",
            extra={
                "event": "ledger.mint",
                "token": self.symbol,
                "to": short_address(to_norm),
                "amount": amount,
                "new_supply": self.total_supply,
            }
        )

        return True

    def burn(self, holder: str, amount: int) -> bool:
        """Burn tokens from holder's balance."""
        self._require_not_paused()
        holder_norm = normalize_address(holder)
        self._validate_amount(amount)

        balance = self.balances.get(holder_norm, 0)
        if balance < amount:
            raise LedgerError(
                f"{self.symbol}: burn amount exceeds balance ({amount} > {balance})"
            )

        self.balances[holder_norm] = balance - amount
        self.total_supply -= amount
        self._emit_transfer(holder_norm, ZERO_ADDRESS, amount)
        return True

    # ==================== Admin Functions ====================

    def pause(self, caller: str) -> bool:
        """Pause token transfers (owner only)."""
        self._require_owner(caller)
        self.paused = True
        return True

    def unpause(self, caller: str) -> bool:
        """Unpause token transfers (owner only)."""
        self._require_owner(caller)
        self.paused = False
        return True

    # ==================== Helpers ====================

    def _validate_address(self, address: str, field_name: str) -> None:
        if is_null_address(address):
            raise LedgerError(f"{self.symbol}: {field_name} is zero address")

    def _validate_amount(self, amount: int) -> None:
        if not isinstance(amount, int) or isinstance(amount, bool):
            raise LedgerError(f"{self.symbol}: amount must be an integer")
        if amount < 0:
            raise LedgerError(f"{self.symbol}: amount cannot be negative")
        if amount > self.UINT256_MAX:
            raise LedgerError(f"{self.symbol}: amount exceeds uint256")

    def _require_owner(self, caller: str) -> None:
        if not self.owner or normalize_address(caller) != self.owner:
            raise LedgerError(f"{self.symbol}: caller is not owner")

    def _require_not_paused(self) -> None:
        if self.paused:
            raise LedgerError(f"{self.symbol}: token is paused")

    def _emit_transfer(self, from_addr: str, to_addr: str, amount: int) -> None:
        self.events.append(
            TokenEvent(
                event_type="Transfer",
                from_address=from_addr,
                to_address=to_addr,
                value=amount,
            )
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize token state to dictionary."""
        return {
            "name": self.name,
            "symbol": self.symbol,
            "decimals": self.decimals,
            "total_supply": self.total_supply,
            "address": self.address,
            "owner": self.owner,
            "balances": dict(self.balances),
            "paused": self.paused,
        }
