"""Address helpers shared by the ledger and the locking contract."""

from __future__ import annotations

from typing import Optional

ZERO_ADDRESS = "0x" + "0" * 40


def normalize_address(address: Optional[str]) -> str:
    """Normalize address to lowercase, treating ``None`` as empty."""
    if not address:
        return ""
    return address.strip().lower()


def is_null_address(address: Optional[str]) -> bool:
    """True for empty identities and the zero address."""
    normalized = normalize_address(address)
    return not normalized or normalized == ZERO_ADDRESS


def same_address(left: Optional[str], right: Optional[str]) -> bool:
    """Case-insensitive identity comparison; null identities never match."""
    if is_null_address(left) or is_null_address(right):
        return False
    return normalize_address(left) == normalize_address(right)


def short_address(address: Optional[str]) -> str:
    """Truncated form used in log records."""
    return normalize_address(address)[:10]
